from typing import Iterable, Iterator


class BitVector:
    """A set of small non-negative integers (tile ids) stored as the bits
    of a Python int. Bit ``i`` is set when ``i`` is a member.
    """

    __slots__ = ("_mask",)

    def __init__(self, members: Iterable[int] = ()) -> None:
        mask = 0
        for member in members:
            if member < 0:
                raise ValueError(f"BitVector members must be >= 0, got {member}")
            mask |= 1 << member
        self._mask = mask

    @classmethod
    def from_mask(cls, mask: int) -> "BitVector":
        if mask < 0:
            raise ValueError("mask must be non-negative")
        bits = cls()
        bits._mask = mask
        return bits

    @classmethod
    def full(cls, size: int) -> "BitVector":
        """{0 .. size - 1}"""
        return cls.from_mask((1 << size) - 1)

    @property
    def mask(self) -> int:
        return self._mask

    def copy(self) -> "BitVector":
        return BitVector.from_mask(self._mask)

    def insert(self, member: int) -> None:
        if member < 0:
            raise ValueError(f"BitVector members must be >= 0, got {member}")
        self._mask |= 1 << member

    def discard(self, member: int) -> None:
        if member >= 0:
            self._mask &= ~(1 << member)

    def clear(self) -> None:
        self._mask = 0

    def union(self, other: "BitVector") -> "BitVector":
        return BitVector.from_mask(self._mask | other._mask)

    def intersection(self, other: "BitVector") -> "BitVector":
        return BitVector.from_mask(self._mask & other._mask)

    def issubset(self, other: "BitVector") -> bool:
        return self._mask & ~other._mask == 0

    def is_strict_subset(self, other: "BitVector") -> bool:
        return self._mask != other._mask and self.issubset(other)

    __or__ = union
    __and__ = intersection
    __le__ = issubset
    __lt__ = is_strict_subset

    def __contains__(self, member: object) -> bool:
        if not isinstance(member, int) or member < 0:
            return False
        return bool(self._mask >> member & 1)

    def __len__(self) -> int:
        return self._mask.bit_count()

    def __bool__(self) -> bool:
        return self._mask != 0

    def __iter__(self) -> Iterator[int]:
        mask = self._mask
        while mask:
            lowest = mask & -mask
            yield lowest.bit_length() - 1
            mask ^= lowest

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitVector):
            return NotImplemented
        return self._mask == other._mask

    def __repr__(self) -> str:
        return f"BitVector({list(self)})"
