"""
Byte I/O boundary between the interpreter and the outside world.

The interpreter only needs a ByteSource (one byte per request, None at end
of stream) and a ByteSink (one byte at a time). Adapters wrap in-memory
buffers for tests and binary file objects for the CLI.
"""

from typing import BinaryIO, Optional, Protocol, Union


class ByteSource(Protocol):
    def read_byte(self) -> Optional[int]:
        ...


class ByteSink(Protocol):
    def write_byte(self, value: int) -> None:
        ...

    def flush(self) -> None:
        ...


class BufferSource:
    """Serve bytes from memory, then report end of stream.

    Text is accepted when every character fits in one byte (latin-1).
    """

    def __init__(self, data: Union[bytes, str] = b""):
        if isinstance(data, str):
            try:
                data = data.encode("latin-1")
            except UnicodeEncodeError as e:
                raise ValueError(
                    f"input text has a character above U+00FF at index {e.start}; pass bytes instead"
                ) from e
        self._data = bytes(data)
        self._index = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._index

    def read_byte(self) -> Optional[int]:
        if self._index >= len(self._data):
            return None
        value = self._data[self._index]
        self._index += 1
        return value


class BufferSink:
    """Collect written bytes in memory."""

    def __init__(self):
        self.data = bytearray()

    def write_byte(self, value: int) -> None:
        self.data.append(value & 0xFF)

    def flush(self) -> None:
        pass

    def getvalue(self) -> bytes:
        return bytes(self.data)


class StreamSource:
    """Read single bytes from a binary stream such as sys.stdin.buffer."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def read_byte(self) -> Optional[int]:
        chunk = self._stream.read(1)
        if not chunk:
            return None
        return chunk[0]


class StreamSink:
    """Write single bytes to a binary stream such as sys.stdout.buffer."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def write_byte(self, value: int) -> None:
        self._stream.write(bytes((value & 0xFF,)))

    def flush(self) -> None:
        self._stream.flush()
