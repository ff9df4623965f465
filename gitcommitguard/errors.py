"""Fatal errors for git-commit-guard.

Rule violations are never raised; they are collected into a
ValidationReport. The exceptions here abort the whole run.
"""
from typing import Optional


class GuardError(Exception):
    """Base class for errors that abort a validation run."""


class ConfigurationError(GuardError):
    """Raised when the rule configuration cannot be built."""


class RetrievalError(GuardError):
    """Raised when commits or event data cannot be retrieved."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MessageParseError(GuardError):
    """Raised when a commit message does not match the split pattern."""

    def __init__(self, sha: str, pattern: str):
        super().__init__(
            f"Commit message does not match split regex '{pattern}' ({sha[:7]})"
        )
        self.sha = sha
        self.pattern = pattern
