"""Local in-memory implementation of SettingsProvider."""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, TypeVar

from ..domain.interfaces.settings_provider import SettingsProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def convert_setting(raw: Any, default: T) -> T:
    """Convert a stored setting to the type of ``default``.

    Raises:
        ValueError: If the value cannot be converted.
        TypeError: If the value has an unusable type.
    """
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        normalized = str(raw).strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ValueError(f"Not a boolean: {raw!r}")
    if isinstance(default, int):
        if isinstance(raw, bool):
            raise TypeError(f"Not an integer: {raw!r}")
        if isinstance(raw, Decimal):
            if raw != raw.to_integral_value():
                raise ValueError(f"Not an integer: {raw!r}")
            return int(raw)
        return int(str(raw).strip())
    if default is None or isinstance(raw, type(default)):
        return raw
    return type(default)(raw)


class LocalSettingsProvider(SettingsProvider):
    """Settings held in a dictionary, for testing and development purposes."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    def get_value(self, key: str, default: T) -> T:
        if key not in self._values:
            return default
        try:
            return convert_setting(self._values[key], default)
        except (ValueError, TypeError):
            logger.warning(f"Setting {key} has unusable value {self._values[key]!r}; using default {default!r}")
            return default

    def set_value(self, key: str, value: Any) -> None:
        self._values[key] = value

    def clear(self) -> None:
        self._values.clear()
