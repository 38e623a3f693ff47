"""
jobflow - service job lifecycle core.
"""

__version__ = "1.0.0"
