"""
Validation module for HypoStream
Result records, payload normalization and the offline fallback simulator
"""

from hypostream.validators.result import (
    STRENGTH_MODERATE,
    STRENGTH_STRONG,
    STRENGTH_WEAK,
    Evidence,
    Figure,
    Method,
    Source,
    StatisticalFinding,
    ValidationRequest,
    ValidationResult,
)

__all__ = [
    "Evidence",
    "Figure",
    "Method",
    "Source",
    "StatisticalFinding",
    "ValidationRequest",
    "ValidationResult",
    "STRENGTH_STRONG",
    "STRENGTH_MODERATE",
    "STRENGTH_WEAK",
]
