"""
HypoStream
Client for streaming hypothesis validation jobs with offline fallback
"""

__version__ = "0.1.0"
