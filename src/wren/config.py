"""Dispatcher configuration.

DispatcherConfig is a frozen dataclass, immutable after creation,
IDE-autocompletable, no string-key dict lookups. Values that may change
while serving (separator, reuse, timeout) are copied into the
dispatcher's lock-guarded state at construction.
"""

from dataclasses import dataclass

from wren.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class DispatcherConfig:
    """Dispatcher configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = DispatcherConfig(separator=";", timeout=600)
    """

    # Binding
    separator: str = ","  # Splits values for array-typed action parameters
    ignore_param_case: bool = False  # Fall back to case-insensitive parameter names

    # Instances
    reuse_controllers: bool = True
    timeout: float = 0  # Idle lifetime in seconds; 0 disables eviction

    # Resolution
    controller_suffix: str = "Controller"  # Callers may omit it from the path

    def __post_init__(self) -> None:
        validate_separator(self.separator)
        validate_timeout(self.timeout)


def validate_separator(separator: str) -> None:
    """Raise ``ConfigurationError`` unless *separator* is a non-empty string."""
    if not isinstance(separator, str) or not separator:
        msg = f"Array separator must be a non-empty string, got {separator!r}."
        raise ConfigurationError(msg)


def validate_timeout(timeout: float) -> None:
    """Raise ``ConfigurationError`` if *timeout* is negative."""
    if timeout < 0:
        msg = f"Controller timeout must be >= 0 seconds, got {timeout!r}."
        raise ConfigurationError(msg)
