"""Parameter validation for callers of the encoder.

The encoder formats whatever it is given; these helpers clamp CLI and
API input to the ranges the device accepts before encoding.
"""

from typing import Any, Optional

from .constants import EpilogConstants


def safe_int(value: Any, field: str, min_value: Optional[int] = None, max_value: Optional[int] = None, default: Optional[int] = None) -> int:
    """Parse and validate integer with optional bounds.

    Args:
        value: Value to parse
        field: Field name for error messages
        min_value: Minimum allowed value (clamps if exceeded)
        max_value: Maximum allowed value (clamps if exceeded)
        default: Default value if None (raises if not provided)

    Returns:
        Validated integer

    Raises:
        ValueError: If value cannot be parsed and no default provided
    """
    if value is None:
        if default is not None:
            return default
        raise ValueError(f"{field} is required")

    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field} must be an integer") from exc

    if min_value is not None and parsed < min_value:
        parsed = min_value
    if max_value is not None and parsed > max_value:
        parsed = max_value
    return parsed


def parse_bool(value: Any, default: bool = False) -> bool:
    """Parse bool-like values from environment variables."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def vector_params(frequency: Any, power: Any, speed: Any) -> tuple:
    """Clamp (frequency, power, speed) to the device ranges."""
    c = EpilogConstants
    return (
        safe_int(frequency, "frequency", c.MIN_FREQUENCY, c.MAX_FREQUENCY, c.DEFAULT_FREQUENCY),
        safe_int(power, "power", c.MIN_POWER, c.MAX_POWER, c.DEFAULT_POWER),
        safe_int(speed, "speed", c.MIN_SPEED, c.MAX_SPEED, c.DEFAULT_SPEED),
    )
