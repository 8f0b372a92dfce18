"""Exception types raised by placectl."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .constraints.predicates import Violation


class PlacectlError(Exception):
    """Base class for every error placectl reports to an operator."""


class RuleDocumentError(PlacectlError):
    """The rules document could not be read or does not map to rules."""


class PolicyError(PlacectlError):
    """The policy file is unreadable or carries invalid values."""


class RuleViolationError(PlacectlError):
    """A rule breaks the group or exclusion-constraint invariant."""

    def __init__(self, violation: "Violation"):
        super().__init__(str(violation))
        self.violation = violation
