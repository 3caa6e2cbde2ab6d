"""Settings provider protocol."""

from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class SettingsProvider(Protocol):
    """Protocol for named configuration values managed at runtime."""

    def get_value(self, key: str, default: T) -> T:
        """Resolve a setting, converted to the type of ``default``.

        Implementations never raise: a missing key, a storage failure or a
        value that cannot be converted all yield ``default``.
        """
        ...
