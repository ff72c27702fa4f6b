"""
TVM Calculation Engine

Closed-form and iterative solvers for the five time-value-of-money
quantities. All functions are pure and return Ok/Err results.
"""

from tvmcalc.calculations import conversions, rate, result, tvm

__all__ = ["conversions", "rate", "result", "tvm"]
