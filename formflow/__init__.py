"""
formflow - stepped form sessions with validation gates, draft persistence
and a pluggable submission gateway.
"""

__version__ = "1.0.0"
