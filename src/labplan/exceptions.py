"""
Compiler errors.

Every failure in labplan is synchronous and aborts the current operation.
None of these are caught inside the package: an unresolved reference or an
oversized batch is a defect in the input document, and a decision protocol
error is a defect in the wrapped computation. Fix the cause, don't retry.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class LabPlanError(RuntimeError):
    """Base class for all labplan failures."""
    pass


@dataclass
class UnresolvedReferenceError(LabPlanError):
    """Raised when a required reference is null, missing, or unknown.

    ``trace`` is the dot-joined path of steps at which resolution failed,
    e.g. ``plates.*.wells.3.model``.
    """
    trace: str
    reason: str = "it is null/undefined"

    def __post_init__(self) -> None:
        super().__init__(f"Could not resolve reference at/past {self.trace} ({self.reason})")


@dataclass
class UnsupportedInputError(LabPlanError):
    """Raised for input the compiler deliberately does not handle yet."""
    reason: str
    details: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        super().__init__(self.reason)


@dataclass
class DecisionProtocolError(LabPlanError):
    """Raised when a computation under enumeration is not a pure function
    of its earlier decisions (mismatched or skipped decision points)."""
    reason: str

    def __post_init__(self) -> None:
        super().__init__(self.reason)


@dataclass
class ExperimentValidationError(LabPlanError):
    """Raised by strict validation; carries every issue found, not just the first."""
    issues: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        lines = "\n".join(f"  - {issue}" for issue in self.issues)
        super().__init__(f"Experiment failed validation ({len(self.issues)} issues):\n{lines}")
