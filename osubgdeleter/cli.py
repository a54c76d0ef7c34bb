"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from typing import Mapping, Sequence

from osubgdeleter.config import load_config, to_bool, to_int
from osubgdeleter.gui import run_gui
from osubgdeleter.mem import set_debug
from osubgdeleter.proc import check_if_process_running
from osubgdeleter.tracker import MemoryTracker

APP_NAME = "osu! Background Deleter"


def _flag_bool(value: str) -> bool:
    if value in {"1", "t", "T", "TRUE", "true", "True"}:
        return True
    if value in {"0", "f", "F", "FALSE", "false", "False"}:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {value!r}")


def parse_args(argv: Sequence[str] | None, config: Mapping[str, str]) -> argparse.Namespace:
    """Parse options, taking defaults from ``config``."""
    parser = argparse.ArgumentParser(prog="osubgdeleter", allow_abbrev=False)
    parser.add_argument(
        "-update", "--update", type=int, default=to_int(config.get("update")),
        help="How fast should we update the values? (in milliseconds)")
    parser.add_argument(
        "-wine", "--wine", type=_flag_bool, nargs="?", const=True,
        default=to_bool(config.get("wine")), help="Running under WINE?")
    parser.add_argument(
        "-path", "--path", default=config.get("path", ""),
        help="Path to osu! Songs directory ex: /mnt/ps3drive/osu\\!/Songs")
    parser.add_argument(
        "-memdebug", "--memdebug", type=_flag_bool, nargs="?", const=True,
        default=to_bool(config.get("memdebug")), help="Enable verbose memory debugging?")
    parser.add_argument(
        "-memcycletest", "--memcycletest", type=_flag_bool, nargs="?", const=True,
        default=to_bool(config.get("memcycletest")), help="Enable memory cycle time measure?")
    return parser.parse_args(argv)


def validate_songs_path(path: str, platform: str = sys.platform) -> str:
    """Check the Songs path setting and return it unchanged."""
    if platform != "win32" and path == "auto":
        raise ValueError("Please specify path to osu!Songs (see --help)")
    if path != "auto" and not os.path.exists(path):
        raise FileNotFoundError(
            'Specified Songs directory does not exist on the system! (try setting to "auto" '
            "if you are on Windows or make sure that the path is correct)")
    return path


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    if check_if_process_running(APP_NAME):
        run_gui(None, {}, True)
        return 0

    config = load_config()
    args = parse_args(argv, config)
    set_debug(args.memdebug)
    try:
        validate_songs_path(args.path)
    except (ValueError, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1

    tracker = MemoryTracker(
        songs_folder_path=args.path,
        update_time=args.update,
        under_wine=args.wine,
        mem_cycle=args.memcycletest,
    )
    stop = threading.Event()
    worker = threading.Thread(target=tracker.run, args=(stop,), daemon=True)
    worker.start()
    try:
        run_gui(tracker, config, False)
    finally:
        stop.set()
    return 0


if __name__ == "__main__":
    sys.exit(main())