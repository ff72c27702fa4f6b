"""
Time value of money calculator engine.
"""

__version__ = "0.1.0"
