"""Exceptions raised at the engine boundary.

Expected business outcomes are values, not exceptions: an unpayable loan
comes back as ``NotComputable`` and a malformed definition in a bulk run
lands in that run's error list. What remains is rejected input and
misconfiguration, all under ``MonetaError``.
"""

from typing import Any, Optional


class MonetaError(Exception):
    """Base class for engine errors.

    ``details`` carries structured context for logging; ``recoverable`` says
    whether corrected input could succeed.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        self.recoverable = recoverable

    def _add_context(self, **context: Any) -> None:
        # None means "not supplied"; falsy values such as 0 are still recorded
        self.details.update({k: v for k, v in context.items() if v is not None})

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(MonetaError):
    """Input the engine cannot work with, such as a partial year of aggregates."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint
        self._add_context(field=field, value=value, constraint=constraint)


class RecurrenceError(MonetaError):
    """A recurring definition that cannot be expanded into occurrences.

    The bulk orchestrator catches this per definition and records it in the
    run's error list.
    """

    def __init__(
        self,
        message: str,
        *,
        definition_id: Optional[str] = None,
        frequency: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.definition_id = definition_id
        self.frequency = frequency
        self._add_context(definition_id=definition_id, frequency=frequency)


class ConfigurationError(MonetaError):
    """Settings or collaborators the engine cannot run with.

    Raised for an invalid seasonal table or a calculator asked to persist
    without a repository. Not recoverable by default.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual
        self._add_context(config_key=config_key, expected=expected, actual=actual)


__all__ = [
    "MonetaError",
    "ValidationError",
    "RecurrenceError",
    "ConfigurationError",
]
