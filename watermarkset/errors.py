class WatermarkError(Exception):
    """Base class for everything a WatermarkSet raises on purpose."""


class ArithmeticOverflow(WatermarkError, OverflowError):
    """checked_add / checked_sub left the range of the element kind."""


class WatermarkOverflow(ArithmeticOverflow):
    """Raising the watermark by one bucket would exceed the element kind's max."""

    def __init__(self, watermark: int, kind_name: str):
        super().__init__(f"watermark {watermark} cannot advance further for kind {kind_name}")
        self.watermark = watermark
        self.kind_name = kind_name


class AddressingOverflow(WatermarkError, OverflowError):
    """Gap between an element and the watermark does not fit a window index."""

    def __init__(self, diff: int, limit: int):
        super().__init__(f"offset {diff} above watermark exceeds addressable limit {limit}")
        self.diff = diff
        self.limit = limit


class ElementRangeError(WatermarkError, ValueError):
    """Element is outside the range of the set's integer kind."""
