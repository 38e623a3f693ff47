"""
HTTP request layer for jobflow.
"""
