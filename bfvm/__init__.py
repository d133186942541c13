"""
bfvm: an interpreter for the eight-instruction tape language.

    from bfvm import load, Interpreter, BufferSource, BufferSink

    program = load("++++++++[>++++++++<-]>+.")
    sink = BufferSink()
    result = Interpreter().run(program, BufferSource(), sink)
    assert result.ok and sink.getvalue() == b"A"
"""

__version__ = "0.1.0"

from bfvm.config import EofPolicy, VMConfig, config_from_env, load_config
from bfvm.errors import (
    ConfigError,
    IoError,
    LoadError,
    RuntimeFault,
    TapeOverflow,
    TapeUnderflow,
    UnbalancedLoop,
    VMError,
)
from bfvm.interpreter import Interpreter, RunResult, RunStatus
from bfvm.io import BufferSink, BufferSource, ByteSink, ByteSource, StreamSink, StreamSource
from bfvm.program import Instruction, Program, load
from bfvm.runner import run_file, run_path, run_string
from bfvm.tape import CellWidth, Tape

__all__ = [
    "BufferSink",
    "BufferSource",
    "ByteSink",
    "ByteSource",
    "CellWidth",
    "ConfigError",
    "EofPolicy",
    "Instruction",
    "Interpreter",
    "IoError",
    "LoadError",
    "Program",
    "RunResult",
    "RunStatus",
    "RuntimeFault",
    "StreamSink",
    "StreamSource",
    "Tape",
    "TapeOverflow",
    "TapeUnderflow",
    "UnbalancedLoop",
    "VMConfig",
    "VMError",
    "config_from_env",
    "load",
    "load_config",
    "run_file",
    "run_path",
    "run_string",
]
