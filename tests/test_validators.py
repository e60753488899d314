import pytest
from epilog.validators import parse_bool, safe_int, vector_params


def test_safe_int_clamps():
    assert safe_int("150", "power", 0, 100) == 100
    assert safe_int(-3, "power", 0, 100) == 0


def test_safe_int_default_and_required():
    assert safe_int(None, "speed", default=5) == 5
    with pytest.raises(ValueError, match="speed is required"):
        safe_int(None, "speed")
    with pytest.raises(ValueError, match="must be an integer"):
        safe_int("fast", "speed")


def test_vector_params_clamped_to_device_ranges():
    assert vector_params(9999, 150, 0) == (5000, 100, 1)
    assert vector_params(None, None, None) == (5000, 100, 5)


def test_parse_bool():
    assert parse_bool("yes") is True
    assert parse_bool("0") is False
    assert parse_bool(None, default=True) is True
