"""Exceptions raised by the target engine."""
from __future__ import annotations


class TargetEngineError(Exception):
    """Base class for target engine failures."""


class DecodingFailure(TargetEngineError):
    """No candidate encoding produced enough printable text."""


class RuleGenerationError(TargetEngineError, ValueError):
    """Invalid operator input for rule generation."""


class EmptySelectionError(RuleGenerationError):
    pass


class UnknownStrategyError(RuleGenerationError):
    pass


class EmptyNameError(RuleGenerationError):
    pass


class TargetUpdateError(TargetEngineError, ValueError):
    """A manual change to a detected target was rejected."""


class InvalidSpanError(TargetUpdateError):
    pass


class OverlappingSpanError(TargetUpdateError):
    pass


class UnknownFieldTypeError(TargetUpdateError):
    pass
