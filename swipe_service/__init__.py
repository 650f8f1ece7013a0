"""
JobSwipe HTTP service (FastAPI).
"""

__version__ = "1.0.0"
