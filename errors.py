from __future__ import annotations


class CalculationError(Exception):
    """Base for every failure that aborts a calculation request."""


class InvalidInput(CalculationError):
    pass


class HashMismatch(CalculationError):
    pass


class UnknownRuleset(CalculationError):
    pass


class UnknownModeName(UnknownRuleset):
    pass


class CollaboratorError(CalculationError):
    """A remote difficulty/performance service or download failed."""
