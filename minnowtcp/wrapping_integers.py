"""32-bit wrapping sequence numbers relative to an arbitrary zero point."""

from __future__ import annotations

_MOD32 = 1 << 32
_MASK32 = _MOD32 - 1
_MASK64 = (1 << 64) - 1


class Wrap32:
    """A 32-bit unsigned integer that wraps back to zero after 2**32 - 1."""

    __slots__ = ("_raw",)

    def __init__(self, raw_value: int) -> None:
        self._raw = raw_value & _MASK32

    @property
    def raw_value(self) -> int:
        return self._raw

    @staticmethod
    def wrap(n: int, zero_point: Wrap32) -> Wrap32:
        """Wrap the absolute sequence number ``n`` relative to ``zero_point``."""
        return Wrap32(zero_point._raw + n)

    def unwrap(self, zero_point: Wrap32, checkpoint: int) -> int:
        """Return the absolute sequence number closest to ``checkpoint`` that wraps to this value."""
        wrapped_checkpoint = Wrap32.wrap(checkpoint, zero_point)
        diff = (self._raw - wrapped_checkpoint._raw) & _MASK32
        candidate = (checkpoint + diff) & _MASK64
        if diff <= (_MOD32 >> 1) or candidate < _MOD32:
            return candidate
        return (candidate - _MOD32) & _MASK64

    def __add__(self, n: int) -> Wrap32:
        if not isinstance(n, int):
            return NotImplemented
        return Wrap32(self._raw + n)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Wrap32):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"Wrap32({self._raw})"

    def __str__(self) -> str:
        return f"Wrap32<{self._raw}>"