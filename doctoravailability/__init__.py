"""
Doctor availability - free appointment slots from a doctor's calendar.
"""

__version__ = "0.1.0"
