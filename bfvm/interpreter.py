"""
Tape VM interpreter.

Executes a loaded Program against a fresh Tape, reading from a ByteSource
and writing to a ByteSink. Bracket jumps come from the Program's
precomputed partner table, so no instruction ever rescans the program.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from bfvm.config import EofPolicy, VMConfig
from bfvm.errors import IoError, RuntimeFault
from bfvm.io import ByteSink, ByteSource
from bfvm.program import Instruction, Program
from bfvm.tape import Tape

logger = logging.getLogger(__name__)

__all__ = ["EofPolicy", "Interpreter", "RunResult", "RunStatus"]

MOVE_RIGHT = Instruction.MOVE_RIGHT
MOVE_LEFT = Instruction.MOVE_LEFT
INCREMENT = Instruction.INCREMENT
DECREMENT = Instruction.DECREMENT
OUTPUT = Instruction.OUTPUT
INPUT = Instruction.INPUT
LOOP_START = Instruction.LOOP_START
LOOP_END = Instruction.LOOP_END


class RunStatus(Enum):
    OK = "ok"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RunResult:
    """Outcome of one run.

    `position` is the cursor where execution stopped: one past the last
    instruction on success, the faulting instruction on failure, the next
    undispatched instruction on cancellation.
    """
    status: RunStatus
    steps: int
    position: int
    error: Optional[RuntimeFault] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.OK

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def describe(self) -> str:
        if self.status is RunStatus.OK:
            return f"ok after {self.steps} steps"
        if self.status is RunStatus.CANCELLED:
            return f"cancelled ({self.reason}) at instruction {self.position} after {self.steps} steps"
        return f"{self.error.kind}: {self.error}"


class Interpreter:
    def __init__(self, config: Optional[VMConfig] = None):
        self.config = config or VMConfig()
        self.last_tape: Optional[Tape] = None
        logger.info("Interpreter configured with %s", self.config.to_dict())

    def new_tape(self) -> Tape:
        return Tape(
            self.config.cell_width,
            initial_cells=self.config.initial_cells,
            max_cells=self.config.max_cells,
        )

    def run(self, program: Program, source: ByteSource, sink: ByteSink, *,
            should_continue: Optional[Callable[[], bool]] = None) -> RunResult:
        """Run `program` to completion, failure or cancellation.

        `should_continue` is polled before every instruction; returning a
        false value cancels the run. The tape used is kept on `last_tape`
        whatever the outcome.
        """
        tape = self.new_tape()
        self.last_tape = tape
        logger.info("Running program of %d instructions", len(program))

        result = self._dispatch(program, tape, source, sink, should_continue)

        try:
            sink.flush()
        except (OSError, ValueError) as e:
            if result.error is None:
                result = RunResult(RunStatus.FAILED, result.steps, result.position,
                                   error=IoError(e, position=result.position))

        if result.ok:
            logger.info("Program finished after %d steps", result.steps)
        else:
            logger.info("Program stopped: %s", result.describe())
        return result

    def _dispatch(self, program: Program, tape: Tape, source: ByteSource, sink: ByteSink,
                  should_continue: Optional[Callable[[], bool]]) -> RunResult:
        instructions = program.instructions
        jumps = program.jumps
        end = len(instructions)
        max_steps = self.config.max_steps
        zero_on_eof = self.config.eof is EofPolicy.ZERO
        trace = logger.isEnabledFor(logging.DEBUG)

        cursor = 0
        steps = 0
        try:
            while cursor < end:
                if max_steps is not None and steps >= max_steps:
                    return RunResult(RunStatus.CANCELLED, steps, cursor, reason="step limit")
                if should_continue is not None and not should_continue():
                    return RunResult(RunStatus.CANCELLED, steps, cursor, reason="cancelled by host")

                ins = instructions[cursor]
                if trace:
                    logger.debug("Step %d: IP=%d CMD='%s' PTR=%d CELL=%d",
                                 steps, cursor, ins.symbol, tape.pointer, tape.current())
                steps += 1

                if ins is INCREMENT:
                    tape.increment()
                elif ins is DECREMENT:
                    tape.decrement()
                elif ins is MOVE_RIGHT:
                    tape.move_right()
                elif ins is MOVE_LEFT:
                    tape.move_left()
                elif ins is LOOP_START:
                    if tape.current() == 0:
                        cursor = jumps[cursor] + 1
                        continue
                elif ins is LOOP_END:
                    if tape.current() != 0:
                        cursor = jumps[cursor] + 1
                        continue
                elif ins is OUTPUT:
                    try:
                        sink.write_byte(tape.current() & 0xFF)
                    except (OSError, ValueError) as e:
                        raise IoError(e) from e
                elif ins is INPUT:
                    try:
                        value = source.read_byte()
                    except (OSError, ValueError) as e:
                        raise IoError(e) from e
                    if value is not None:
                        tape.set(value)
                    elif zero_on_eof:
                        tape.set(0)
                    elif trace:
                        logger.debug("End of input at instruction %d, cell left unchanged", cursor)

                cursor += 1
        except RuntimeFault as fault:
            fault.position = cursor
            return RunResult(RunStatus.FAILED, steps, cursor, error=fault)

        return RunResult(RunStatus.OK, steps, cursor)
