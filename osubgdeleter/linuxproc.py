"""Process discovery and memory access through /proc."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import BinaryIO, Iterable

from osubgdeleter.mem import NoProcessError, Process, Region, debug

_PROC = Path("/proc")


class LinuxProcess(Process):
    """A process read through its /proc entries."""

    def __init__(self, pid: int) -> None:
        self.pid = pid
        self._mem: BinaryIO | None = None

    def __repr__(self) -> str:
        return f"LinuxProcess(pid={self.pid})"

    def read_at(self, size: int, offset: int) -> bytes:
        try:
            if self._mem is None:
                self._mem = open(_PROC / str(self.pid) / "mem", "rb", buffering=0)
            data = os.pread(self._mem.fileno(), size, offset)
        except OSError as exc:
            debug.log_read(b"", offset, exc)
            raise
        debug.log_read(data, offset, None)
        return data

    def maps(self) -> list[Region]:
        with open(_PROC / str(self.pid) / "maps", encoding="utf-8", errors="replace") as f:
            return parse_maps(f)

    def executable_path(self) -> str:
        return os.path.abspath(os.path.realpath(_PROC / str(self.pid) / "exe"))

    def close(self) -> None:
        if self._mem is not None:
            self._mem.close()
            self._mem = None


_RANGE = re.compile(r"([0-9a-fA-F]+)-([0-9a-fA-F]+)")


def parse_maps(lines: Iterable[str]) -> list[Region]:
    """Parse the address ranges of a maps listing; blank lines are skipped."""
    regions = []
    for line in lines:
        if not line.strip():
            continue
        match = _RANGE.match(line)
        if match is None:
            raise ValueError(f"malformed maps line: {line!r}")
        regions.append(Region(int(match.group(1), 16), int(match.group(2), 16)))
    return regions


def find_process(regex: str | re.Pattern[str], *blacklisted_titles: str) -> list[LinuxProcess]:
    """Return processes whose program name matches ``regex``.

    Window titles cannot be checked here, so ``blacklisted_titles`` is ignored.
    """
    pattern = re.compile(regex)
    found = []
    try:
        entries = sorted(int(p.name) for p in _PROC.iterdir() if p.name.isdigit())
    except OSError as exc:
        raise NoProcessError(str(exc)) from exc
    for pid in entries:
        try:
            content = (_PROC / str(pid) / "cmdline").read_bytes()
        except OSError:
            continue
        program = content.split(b"\x00", 1)[0].decode("utf-8", errors="surrogateescape")
        if pattern.search(program):
            found.append(LinuxProcess(pid))
    if not found:
        raise NoProcessError()
    return found