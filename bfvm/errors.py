"""
Error taxonomy for the tape VM.

Load errors are raised by the loader before anything runs. Runtime faults are
raised by the tape and I/O adapters, tagged with the instruction position by
the interpreter, and handed back inside a RunResult.
"""

from typing import Optional


class VMError(Exception):
    """Base class for everything the VM reports."""

    kind = "vm-error"


class ConfigError(VMError):
    kind = "config-error"


class LoadError(VMError):
    """Malformed program source, detected before execution."""

    kind = "load-error"


class UnbalancedLoop(LoadError):
    """A '[' or ']' without a partner."""

    kind = "unbalanced-loop"

    def __init__(self, position: int, bracket: str, *, offset: int = 0, line: int = 1, col: int = 1):
        self.position = position
        self.bracket = bracket
        self.offset = offset
        self.line = line
        self.col = col
        super().__init__(
            f"unmatched '{bracket}' at instruction {position} (line {line}, col {col})"
        )


class RuntimeFault(VMError):
    """A fault that aborts a run. `position` is the instruction index."""

    kind = "runtime-fault"

    def __init__(self, message: str, position: Optional[int] = None):
        self.message = message
        self.position = position
        super().__init__(message)

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} at instruction {self.position}"


class TapeUnderflow(RuntimeFault):
    kind = "tape-underflow"

    def __init__(self, position: Optional[int] = None):
        super().__init__("data pointer moved left of cell 0", position)


class TapeOverflow(RuntimeFault):
    kind = "tape-overflow"

    def __init__(self, capacity: int, position: Optional[int] = None):
        self.capacity = capacity
        super().__init__(f"data pointer moved past the last of {capacity} cells", position)


class IoError(RuntimeFault):
    """The byte source or sink failed. The original exception is `cause`."""

    kind = "io-error"

    def __init__(self, cause: BaseException, position: Optional[int] = None):
        self.cause = cause
        super().__init__(f"I/O error: {cause}", position)
