"""
API Routers package.
"""

from . import customers, technicians, jobs, invoices, payments

__all__ = ["customers", "technicians", "jobs", "invoices", "payments"]
