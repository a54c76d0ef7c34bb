"""Reading typed values out of another process's memory."""

from __future__ import annotations

import abc
import struct
import sys
import threading
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import IO, Protocol, Sequence

MAX_STRING_LENGTH = 4096
MAX_ARRAY_LENGTH = 65536


class MemoryError_(Exception):
    """Base class for memory access errors."""

    default_message = "memory access failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NoProcessError(MemoryError_):
    default_message = "no process matching the criteria was found"


class PatternNotFoundError(MemoryError_):
    default_message = "no memory matched the pattern"


class StringTooLongError(MemoryError_):
    default_message = "read failed, string too long"


class ArrayTooLongError(MemoryError_):
    default_message = "read failed, array too long"


class InvalidStringLengthError(MemoryError_):
    default_message = "read failed, string length < 0"


class InvalidArrayLengthError(MemoryError_):
    default_message = "read failed, array length < 0"


class Reader(Protocol):
    def read_at(self, size: int, offset: int) -> bytes: ...


@dataclass(frozen=True)
class Region:
    """A mapped address range [start, end)."""

    start: int
    end: int

    def size(self) -> int:
        return self.end - self.start


class Process(abc.ABC):
    """A running process whose memory can be read."""

    pid: int

    @abc.abstractmethod
    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes at ``offset``."""

    @abc.abstractmethod
    def maps(self) -> list[Region]:
        """Return the mapped memory regions."""

    @abc.abstractmethod
    def executable_path(self) -> str:
        """Return the absolute path of the process executable."""

    def close(self) -> None:
        """Release any resources held for the process."""

    def __enter__(self) -> "Process":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ValueKind(Enum):
    """Primitive value types, stored little-endian."""

    INT8 = "b"
    INT16 = "h"
    INT32 = "i"
    INT64 = "q"
    UINT8 = "B"
    UINT16 = "H"
    UINT32 = "I"
    UINT64 = "Q"
    FLOAT32 = "f"
    FLOAT64 = "d"

    @property
    def size(self) -> int:
        return struct.calcsize("<" + self.value)

    def decode(self, data: bytes) -> int | float:
        return struct.unpack("<" + self.value, data)[0]

    def decode_many(self, data: bytes, count: int) -> list[int | float]:
        return list(struct.unpack(f"<{count}{self.value}", data))


class DebugLog:
    """Indented trace output for memory reads."""

    def __init__(self, enabled: bool = False, stream: IO[str] | None = None) -> None:
        self.enabled = enabled
        self.stream = stream
        self._level = 0
        self._lock = threading.Lock()

    @property
    def level(self) -> int:
        return self._level

    def begin(self) -> None:
        """Log the caller's stack, outermost first, indenting after each frame."""
        if not self.enabled:
            return
        frames = traceback.extract_stack()[:-1][-8:]
        for frame in frames:
            self.log(f"{frame.name}:{frame.lineno}")
            with self._lock:
                self._level += 1

    def push(self) -> int:
        if not self.enabled:
            return 0
        with self._lock:
            previous = self._level
            self._level += 1
        return previous

    def pop(self, level: int) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._level = level

    def end(self) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._level = 0

    def log(self, message: str) -> None:
        if not self.enabled:
            return
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(" " * (self._level * 4) + message + "\n")

    def log_read(self, data: bytes, offset: int, error: BaseException | None) -> None:
        if not self.enabled:
            return
        count = len(data)
        address = offset & 0xFFFFFFFFFFFFFFFF
        if error is None:
            shown = "[" + " ".join(str(b) for b in data) + "]" if count < 16 else "[...]"
            self.log(f"Read(0x{address:x}, {count}): {shown}")
        else:
            self.log(f"Read(0x{address:x}, {count}): {error}")


debug = DebugLog()


def set_debug(enabled: bool) -> None:
    """Turn verbose memory tracing on or off."""
    debug.enabled = enabled


def read_full_at(reader: Reader, size: int, offset: int) -> bytes:
    """Read exactly ``size`` bytes, raising EOFError if the reader runs dry."""
    chunks: list[bytes] = []
    got = 0
    while got < size:
        chunk = reader.read_at(size - got, offset + got)
        if not chunk:
            if got:
                raise EOFError("unexpected EOF")
            raise EOFError("EOF")
        chunks.append(chunk)
        got += len(chunk)
    return b"".join(chunks)[:size]


def follow_offsets(reader: Reader, addr: int, *offsets: int) -> int:
    """Dereference a pointer chain; the last offset is added without a read."""
    if not offsets:
        return addr
    *through, last = offsets
    for offset in through:
        addr = read_ptr(reader, addr + offset, 0)
    return addr + last


def read_value(reader: Reader, kind: ValueKind, addr: int, *offsets: int) -> int | float:
    """Read one primitive value at the end of a pointer chain."""
    addr = follow_offsets(reader, addr, *offsets)
    return kind.decode(read_full_at(reader, kind.size, addr))


def read_array(reader: Reader, kind: ValueKind, addr: int, *offsets: int) -> list[int | float]:
    """Read a managed array: data pointer at +4, length at +12, items at data+8."""
    base = follow_offsets(reader, addr, *offsets)
    length = read_value(reader, ValueKind.INT32, base, 12)
    if length < 0:
        raise InvalidArrayLengthError()
    if length > MAX_ARRAY_LENGTH:
        raise ArrayTooLongError()
    data = read_ptr(reader, base, 4)
    buf = read_full_at(reader, length * kind.size, data + 8)
    return kind.decode_many(buf, length)


def read_string(reader: Reader, addr: int, *offsets: int) -> str:
    """Read a managed UTF-16 string: length at +4, characters at +8."""
    base = follow_offsets(reader, addr, *offsets)
    length = read_value(reader, ValueKind.UINT32, base, 4)
    if length < 0:
        raise InvalidStringLengthError()
    if length > MAX_STRING_LENGTH:
        raise StringTooLongError()
    buf = read_full_at(reader, length * 2, base + 8)
    return buf.decode("utf-16-le", errors="replace")


def read_ptr(reader: Reader, addr: int, *offsets: int) -> int:
    """Read a 32-bit pointer."""
    return int(read_value(reader, ValueKind.UINT32, addr, *offsets))


def _as_sequence(offsets: Sequence[int]) -> tuple[int, ...]:
    return tuple(offsets)