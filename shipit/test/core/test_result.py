"""Tests for shipit.core.result."""

from __future__ import annotations

import pytest

from shipit.core.result import Err, Ok, Result, is_err, is_ok


def _half(n: int) -> Result[int, str]:
    if n % 2:
        return Err("odd")
    return Ok(n // 2)


def test_ok() -> None:
    result = _half(4)
    assert is_ok(result)
    assert not is_err(result)
    assert result.unwrap() == 2
    assert result.unwrap_or(0) == 2


def test_err() -> None:
    result = _half(3)
    assert is_err(result)
    assert result.unwrap_or(0) == 0
    with pytest.raises(ValueError, match="odd"):
        result.unwrap()


def test_pattern_matching() -> None:
    match _half(3):
        case Ok(value):
            pytest.fail(f"unexpected value {value}")
        case Err(error):
            assert error == "odd"
