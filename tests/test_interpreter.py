import io

import pytest

from bfvm.config import EofPolicy, VMConfig
from bfvm.errors import IoError, TapeOverflow, TapeUnderflow
from bfvm.interpreter import Interpreter, RunStatus
from bfvm.io import BufferSink, BufferSource, StreamSink
from bfvm.program import load

HELLO_WORLD = "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."


def _run(code, data=b"", config=None):
    itp = Interpreter(config)
    sink = BufferSink()
    result = itp.run(load(code), BufferSource(data), sink)
    return itp, result, sink.getvalue()


def test_increment_and_output():
    _, result, out = _run("+++.")
    assert result.ok
    assert result.status is RunStatus.OK
    assert out == b"\x03"


def test_echo_one_byte():
    _, result, out = _run(",.", b"\x41")
    assert result.ok
    assert out == b"\x41"


def test_echo_reproduces_every_byte_value():
    program = load(",.")
    itp = Interpreter()
    for value in range(256):
        sink = BufferSink()
        assert itp.run(program, BufferSource(bytes([value])), sink).ok
        assert sink.getvalue() == bytes([value])


def test_loop_runs_once_and_clears_cell():
    itp, result, out = _run("+[-]")
    assert result.ok
    assert result.steps == 4
    assert result.position == 4
    assert itp.last_tape.current() == 0
    assert out == b""


def test_comment_only_program_is_a_no_op():
    itp, result, out = _run("this is just prose\n")
    assert result.ok
    assert result.steps == 0
    assert out == b""
    assert itp.last_tape.cells.tolist() == [0]
    assert itp.last_tape.pointer == 0


@pytest.mark.parametrize("width", [8, 16, 32, 64])
def test_hello_world_on_every_width(width):
    _, result, out = _run(HELLO_WORLD, config=VMConfig(cell_width=width))
    assert result.ok
    assert out == b"Hello World!\n"


def test_nested_loops_multiply():
    _, result, out = _run("++[>+++[>++<-]<-]>>.")
    assert result.ok
    assert out == b"\x0c"


def test_skips_loop_when_cell_is_zero():
    _, result, out = _run("[+++.]+.")
    assert result.ok
    assert out == b"\x01"


def test_wraparound_is_not_an_error():
    itp, result, out = _run("-.")
    assert result.ok
    assert out == b"\xff"
    assert itp.last_tape.current() == 0xFF


def test_output_uses_low_byte_on_wide_cells():
    itp, result, out = _run("-." + "+" * 258 + ".", config=VMConfig(cell_width=16))
    assert result.ok
    assert out == b"\xff\x01"
    assert itp.last_tape.current() == 0x101


def test_input_is_zero_extended():
    itp, result, _ = _run(",", b"\xff", config=VMConfig(cell_width=32))
    assert result.ok
    assert itp.last_tape.current() == 0xFF


def test_end_of_input_leaves_cell_unchanged_by_default():
    _, result, out = _run("+++,.")
    assert result.ok
    assert out == b"\x03"


def test_end_of_input_can_zero_the_cell():
    _, result, out = _run("+++,.", config=VMConfig(eof=EofPolicy.ZERO))
    assert result.ok
    assert out == b"\x00"


def test_move_left_from_start_fails_at_position_zero():
    itp, result, _ = _run("<")
    assert result.status is RunStatus.FAILED
    assert isinstance(result.error, TapeUnderflow)
    assert result.error.position == 0
    assert result.position == 0
    assert itp.last_tape.pointer == 0


def test_failure_keeps_tape_state():
    itp, result, out = _run("+++.>++<<")
    assert isinstance(result.error, TapeUnderflow)
    assert result.error.position == 8
    assert out == b"\x03"
    assert itp.last_tape.cells.tolist() == [3, 2]
    assert itp.last_tape.pointer == 0


def test_tape_cap_overflows():
    _, result, _ = _run(">>", config=VMConfig(max_cells=2))
    assert isinstance(result.error, TapeOverflow)
    assert result.error.position == 1
    assert result.error.capacity == 2


def test_raise_for_error():
    _, result, _ = _run("<")
    with pytest.raises(TapeUnderflow):
        result.raise_for_error()
    _, ok, _ = _run("+")
    ok.raise_for_error()


class _FullDisk:
    def write_byte(self, value):
        raise OSError(28, "No space left on device")

    def flush(self):
        pass


def test_failing_sink_reports_io_error():
    result = Interpreter().run(load("+."), BufferSource(), _FullDisk())
    assert isinstance(result.error, IoError)
    assert result.error.position == 1
    assert isinstance(result.error.cause, OSError)
    assert "io-error" == result.error.kind


def test_closed_stream_reports_io_error():
    stream = io.BytesIO()
    stream.close()
    result = Interpreter().run(load("."), BufferSource(), StreamSink(stream))
    assert isinstance(result.error, IoError)
    assert result.error.position == 0


class _BrokenSource:
    def read_byte(self):
        raise OSError(5, "Input/output error")


def test_failing_source_reports_io_error():
    result = Interpreter().run(load("+,"), _BrokenSource(), BufferSink())
    assert isinstance(result.error, IoError)
    assert result.error.position == 1


def test_step_limit_cancels_infinite_loop():
    _, result, _ = _run("+[]", config=VMConfig(max_steps=100))
    assert result.cancelled
    assert result.reason == "step limit"
    assert result.steps == 100
    assert result.error is None


def test_step_limit_is_not_hit_by_short_programs():
    _, result, _ = _run("+++", config=VMConfig(max_steps=3))
    assert result.ok


def test_host_can_cancel_between_instructions():
    budget = iter(range(5))

    def should_continue():
        return next(budget, None) is not None

    result = Interpreter().run(load("+[]"), BufferSource(), BufferSink(), should_continue=should_continue)
    assert result.cancelled
    assert result.reason == "cancelled by host"
    assert result.steps == 5


def test_program_is_reusable_across_runs():
    program = load(",+.")
    outputs = []
    for data in (b"\x01", b"\x09"):
        sink = BufferSink()
        Interpreter().run(program, BufferSource(data), sink)
        outputs.append(sink.getvalue())
    assert outputs == [b"\x02", b"\x0a"]
