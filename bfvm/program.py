"""
Program loader.

The tape language has eight commands:
    >   Move the pointer to the right
    <   Move the pointer to the left
    +   Increment the memory cell at the pointer
    -   Decrement the memory cell at the pointer
    .   Output the byte signified by the cell at the pointer
    ,   Input a byte and store it in the cell at the pointer
    [   Jump past the matching ] if the cell at the pointer is 0
    ]   Jump back to the matching [ if the cell at the pointer is nonzero

All other characters are treated as comments and ignored.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Tuple

from bfvm.errors import UnbalancedLoop

logger = logging.getLogger(__name__)

NO_JUMP = -1


class Instruction(Enum):
    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    INCREMENT = "+"
    DECREMENT = "-"
    OUTPUT = "."
    INPUT = ","
    LOOP_START = "["
    LOOP_END = "]"

    @property
    def symbol(self) -> str:
        return self.value


SYMBOLS: Dict[str, Instruction] = {ins.value: ins for ins in Instruction}


@dataclass(frozen=True)
class Program:
    """A loaded program: instructions plus precomputed bracket partners.

    `jumps[i]` is the index of the matching bracket when instruction i is a
    '[' or ']', and NO_JUMP otherwise. `offsets[i]` is the character offset
    of instruction i in the original source.
    """
    instructions: Tuple[Instruction, ...]
    jumps: Tuple[int, ...]
    offsets: Tuple[int, ...] = ()
    source: str = ""

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def partner(self, index: int) -> int:
        """Index of the bracket matching the one at `index`."""
        target = self.jumps[index]
        if target == NO_JUMP:
            raise ValueError(f"instruction {index} ({self.instructions[index].symbol}) is not a bracket")
        return target

    def location(self, index: int) -> Tuple[int, int]:
        """(line, col) of instruction `index` in the source, both 1-based."""
        if not self.offsets or not self.source:
            return 1, index + 1
        return line_col(self.source, self.offsets[index])

    def to_source(self) -> str:
        """Canonical source text with comments stripped."""
        return "".join(ins.symbol for ins in self.instructions)


def line_col(source: str, offset: int) -> Tuple[int, int]:
    line = source.count("\n", 0, offset) + 1
    col = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, col


def load(source: str) -> Program:
    """Scan `source` into a Program, matching brackets in a single pass.

    Raises UnbalancedLoop naming a stray ']' or the earliest unclosed '['.
    """
    instructions: List[Instruction] = []
    offsets: List[int] = []
    jumps: List[int] = []
    stack: List[int] = []

    for offset, ch in enumerate(source):
        ins = SYMBOLS.get(ch)
        if ins is None:
            continue
        index = len(instructions)
        instructions.append(ins)
        offsets.append(offset)
        jumps.append(NO_JUMP)

        if ins is Instruction.LOOP_START:
            stack.append(index)
        elif ins is Instruction.LOOP_END:
            if not stack:
                line, col = line_col(source, offset)
                raise UnbalancedLoop(index, "]", offset=offset, line=line, col=col)
            start = stack.pop()
            jumps[start] = index
            jumps[index] = start

    if stack:
        first = stack[0]
        line, col = line_col(source, offsets[first])
        raise UnbalancedLoop(first, "[", offset=offsets[first], line=line, col=col)

    logger.debug("Loaded %d instructions from %d characters", len(instructions), len(source))
    return Program(
        instructions=tuple(instructions),
        jumps=tuple(jumps),
        offsets=tuple(offsets),
        source=source,
    )
