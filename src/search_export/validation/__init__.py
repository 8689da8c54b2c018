"""
Connection validation for search services.
"""

from .connection_validator import (
    ConnectionValidator,
    DiagnosisCategory,
    Probe,
    ProbeAttempt,
    ProbeOutcome,
    ProbeResult,
    ValidationResult,
    evaluate_response,
)

__all__ = [
    "ConnectionValidator",
    "DiagnosisCategory",
    "Probe",
    "ProbeAttempt",
    "ProbeOutcome",
    "ProbeResult",
    "ValidationResult",
    "evaluate_response",
]
