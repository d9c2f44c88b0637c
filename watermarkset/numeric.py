from dataclasses import dataclass
from typing import Dict, Optional
import sys

from watermarkset.errors import AddressingOverflow, ArithmeticOverflow, ElementRangeError

# Largest offset above the watermark a window index may hold.
MAX_INDEX = sys.maxsize


@dataclass(frozen=True)
class IntegerKind:
    """
    Integer element type a WatermarkSet is parameterized over.

    bits=None means arbitrary precision (plain Python int). Fixed-width kinds
    behave like the matching machine integers: arithmetic that leaves the range
    raises instead of wrapping.
    """
    name: str
    bits: Optional[int] = None
    signed: bool = False

    @property
    def min_value(self) -> Optional[int]:
        if self.bits is None:
            return None
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> Optional[int]:
        if self.bits is None:
            return None
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def in_range(self, value: int) -> bool:
        lo, hi = self.min_value, self.max_value
        if lo is not None and value < lo:
            return False
        if hi is not None and value > hi:
            return False
        return True

    def validate(self, value) -> int:
        # bool is an int subclass but never a meaningful id
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{self.name} element must be an int, got {type(value).__name__}")
        if not self.in_range(value):
            raise ElementRangeError(
                f"{value} outside {self.name} range [{self.min_value}, {self.max_value}]"
            )
        return int(value)

    def checked_add(self, a: int, b: int) -> int:
        out = a + b
        if not self.in_range(out):
            raise ArithmeticOverflow(f"{a} + {b} overflows {self.name}")
        return out

    def checked_sub(self, a: int, b: int) -> int:
        out = a - b
        if not self.in_range(out):
            raise ArithmeticOverflow(f"{a} - {b} overflows {self.name}")
        return out

    def to_index(self, value: int, limit: int = MAX_INDEX) -> int:
        """Convert a non-negative difference into a window index or raise AddressingOverflow."""
        if value < 0 or value > limit:
            raise AddressingOverflow(value, limit)
        return value


U8 = IntegerKind("u8", 8)
U16 = IntegerKind("u16", 16)
U32 = IntegerKind("u32", 32)
U64 = IntegerKind("u64", 64)
I8 = IntegerKind("i8", 8, signed=True)
I16 = IntegerKind("i16", 16, signed=True)
I32 = IntegerKind("i32", 32, signed=True)
I64 = IntegerKind("i64", 64, signed=True)
USIZE = IntegerKind("usize", MAX_INDEX.bit_length() + 1)
UNBOUNDED = IntegerKind("int")

KINDS: Dict[str, IntegerKind] = {
    k.name: k for k in (U8, U16, U32, U64, I8, I16, I32, I64, USIZE, UNBOUNDED)
}


def kind_by_name(name: str) -> IntegerKind:
    try:
        return KINDS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown integer kind {name!r}; choose from {', '.join(sorted(KINDS))}") from None
