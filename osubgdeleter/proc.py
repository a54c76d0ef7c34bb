"""Detecting whether another instance of the program is already running."""

from __future__ import annotations

import subprocess
import sys

CREATE_NO_WINDOW = 0x08000000


def count_exe_lines(output: str) -> int:
    """Count the lines of a process listing that mention an ``.exe``."""
    return sum(1 for line in output.split("\n") if ".exe" in line)


def check_if_process_running(name: str) -> bool:
    """True if more than one process command line matches ``name``.

    The listing comes from PowerShell; if it cannot be run the answer is False.
    """
    command = [
        "powershell",
        "-Command",
        'Get-WmiObject Win32_Process | select commandline | Select-String -Pattern "'
        + name + '"',
    ]
    flags = CREATE_NO_WINDOW if sys.platform == "win32" else 0
    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            creationflags=flags,
            check=False,
        )
    except OSError:
        return False
    output = result.stdout or b""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    return count_exe_lines(output) > 1