from typing import Optional, TextIO, Tuple, Union
import logging
import os

from bfvm.config import VMConfig
from bfvm.interpreter import Interpreter, RunResult
from bfvm.io import BufferSink, BufferSource, ByteSink, ByteSource
from bfvm.program import load

logger = logging.getLogger(__name__)


def run_string(code: str, input_data: Union[bytes, str] = b"",
               config: Optional[VMConfig] = None) -> Tuple[RunResult, bytes]:
    """Execute source text against in-memory input, return (result, output bytes).
    A fresh tape is used each time. UnbalancedLoop propagates from loading.
    Without `config` the defaults apply; BFVM_* variables are only read by the CLI.
    """
    program = load(code)
    sink = BufferSink()
    result = Interpreter(config or VMConfig()).run(program, BufferSource(input_data), sink)
    return result, sink.getvalue()


def run_file(f: TextIO, source: ByteSource, sink: ByteSink,
             config: Optional[VMConfig] = None) -> RunResult:
    """Read program text from an open file and run it."""
    code = f.read()
    logger.info("Running file of %d characters", len(code))
    program = load(code)
    return Interpreter(config or VMConfig()).run(program, source, sink)


def read_source(path: Union[str, os.PathLike]) -> str:
    """Program text at `path`. OSError propagates if it can't be read."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def run_path(path: Union[str, os.PathLike], source: ByteSource, sink: ByteSink,
             config: Optional[VMConfig] = None) -> RunResult:
    """Load the program at `path` and run it."""
    logger.info("Running program at path %s", path)
    program = load(read_source(path))
    return Interpreter(config or VMConfig()).run(program, source, sink)
