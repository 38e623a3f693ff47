"""
Job Lifecycle Test Suite.

- State transition tests (direct edits and saga-only edges)
- Appointment scheduling and overlap detection
- Invoice totals, numbering and the DONE -> INVOICED saga
- Payment reconciliation and the INVOICED -> PAID saga
- Storage constraint and concurrency tests
"""
