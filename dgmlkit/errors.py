"""Exception types raised while assembling, encoding or configuring graphs."""

from __future__ import annotations

from typing import Any


class DgmlError(Exception):
    """Base class for all dgmlkit failures."""


class AssemblyError(DgmlError):
    """Assembly aborted. No partial graph is returned."""


class RuleInvocationError(AssemblyError):
    """A builder rule failed (or misbehaved) while processing one element."""

    def __init__(self, rule: Any, source: Any, message: str):
        super().__init__(message)
        self.rule = rule
        self.source = source


class AnalysisError(AssemblyError):
    """An analysis failed while mutating the assembled graph."""

    def __init__(self, analysis: Any, message: str):
        super().__init__(message)
        self.analysis = analysis


class EncodingError(DgmlError):
    """A graph could not be encoded as a DGML document."""


class ConfigError(DgmlError):
    """Configuration file is missing required values or malformed."""
