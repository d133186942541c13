"""
Tape memory model: a growable numpy array of fixed-width unsigned cells
plus a data pointer.
"""

import logging
from enum import IntEnum
from typing import Optional, Union

import numpy as np

from bfvm.errors import ConfigError, TapeOverflow, TapeUnderflow

logger = logging.getLogger(__name__)

_DTYPES = {
    8: np.uint8,
    16: np.uint16,
    32: np.uint32,
    64: np.uint64,
}


class CellWidth(IntEnum):
    """Supported cell widths, in bits."""
    W8 = 8
    W16 = 16
    W32 = 32
    W64 = 64

    @property
    def dtype(self):
        return _DTYPES[int(self)]

    @property
    def mask(self) -> int:
        return (1 << int(self)) - 1

    @classmethod
    def parse(cls, value: Union[int, str, "CellWidth"]) -> "CellWidth":
        """Accept 8, "16", "u32" and the like."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text.startswith("u"):
            text = text[1:]
        try:
            return cls(int(text))
        except ValueError:
            choices = ", ".join(str(int(w)) for w in cls)
            raise ConfigError(f"unsupported cell width {value!r} (choose from {choices})") from None


class Tape:
    """Cells of one width, all zero to start, with the pointer at cell 0.

    Storage doubles when the pointer walks off the right end. With
    `max_cells` set the tape never holds more than that many cells and
    walking past the last one raises TapeOverflow.
    """

    def __init__(self, width: Union[int, str, CellWidth] = CellWidth.W8, *,
                 initial_cells: int = 1, max_cells: Optional[int] = None):
        self._width = CellWidth.parse(width)
        self._mask = self._width.mask
        self._dtype = self._width.dtype
        if max_cells is not None and max_cells < 1:
            raise ConfigError(f"max_cells must be at least 1, got {max_cells}")
        if initial_cells < 0:
            raise ConfigError(f"initial_cells must not be negative, got {initial_cells}")
        capacity = max(1, initial_cells)
        if max_cells is not None:
            capacity = min(capacity, max_cells)
        self._max_cells = max_cells
        self._cells = np.zeros(capacity, dtype=self._dtype)
        self._used = 1
        self._pointer = 0

    @property
    def width(self) -> CellWidth:
        return self._width

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def max_cells(self) -> Optional[int]:
        return self._max_cells

    @property
    def capacity(self) -> int:
        return len(self._cells)

    @property
    def cells(self) -> np.ndarray:
        """Copy of every cell the pointer has visited so far."""
        return self._cells[:self._used].copy()

    def __len__(self) -> int:
        return self._used

    def __repr__(self) -> str:
        return f"Tape(width={int(self._width)}, pointer={self._pointer}, cells={self._used})"

    def current(self) -> int:
        return int(self._cells[self._pointer])

    def set(self, value: int) -> None:
        self._cells[self._pointer] = int(value) & self._mask

    def increment(self) -> None:
        p = self._pointer
        self._cells[p] = (int(self._cells[p]) + 1) & self._mask

    def decrement(self) -> None:
        p = self._pointer
        self._cells[p] = (int(self._cells[p]) - 1) & self._mask

    def move_right(self) -> None:
        target = self._pointer + 1
        if self._max_cells is not None and target >= self._max_cells:
            raise TapeOverflow(self._max_cells)
        if target >= len(self._cells):
            self._grow(target + 1)
        self._pointer = target
        if target >= self._used:
            self._used = target + 1

    def move_left(self) -> None:
        if self._pointer == 0:
            raise TapeUnderflow()
        self._pointer -= 1

    def _grow(self, minimum: int) -> None:
        capacity = max(minimum, len(self._cells) * 2)
        if self._max_cells is not None:
            capacity = min(capacity, self._max_cells)
        extra = np.zeros(capacity - len(self._cells), dtype=self._dtype)
        self._cells = np.concatenate((self._cells, extra))
        logger.debug("Tape grown to %d cells", capacity)
