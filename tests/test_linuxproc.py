import os
import re

import pytest

from osubgdeleter.linuxproc import LinuxProcess, find_process, parse_maps
from osubgdeleter.mem import NoProcessError, Region


def test_parse_maps_ranges():
    lines = [
        "00400000-00452000 r-xp 00000000 08:02 173521 /usr/bin/dbus-daemon\n",
        "\n",
        "7fff0000-7fff1000 rw-p 00000000 00:00 0 [stack]\n",
    ]
    regions = parse_maps(lines)
    assert regions == [Region(0x400000, 0x452000), Region(0x7FFF0000, 0x7FFF1000)]
    assert regions[0].size() == 0x52000


def test_parse_maps_rejects_garbage():
    with pytest.raises(ValueError):
        parse_maps(["not a map line"])


def test_find_process_no_match():
    with pytest.raises(NoProcessError):
        find_process(r"^definitely-no-such-program-\d{40}$")


def test_find_process_finds_self():
    with open("/proc/self/cmdline", "rb") as f:
        argv0 = f.read().split(b"\x00", 1)[0].decode()
    procs = find_process("^" + re.escape(argv0) + "$")
    assert os.getpid() in [p.pid for p in procs]


def test_own_process_paths_and_maps():
    with LinuxProcess(os.getpid()) as proc:
        assert proc.executable_path() == os.path.realpath("/proc/self/exe")
        regions = proc.maps()
        assert len(regions) > 0
        assert all(r.size() > 0 for r in regions)