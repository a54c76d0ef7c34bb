"""Polls the game's memory and keeps the exposed values up to date."""

from __future__ import annotations

import logging
import ntpath
import os
import re
import sys
import threading
import time
from typing import Callable, Sequence

from osubgdeleter.layout import MenuData, SongsFolderData, StaticAddresses
from osubgdeleter.linuxproc import find_process
from osubgdeleter.mem import MemoryError_, Process
from osubgdeleter.scan import read, resolve_patterns
from osubgdeleter.values import BeatmapPath, MenuValues, SettingsValues

log = logging.getLogger(__name__)

OSU_PROCESS_REGEX = re.compile(r".*osu!\.exe.*")
BLACKLISTED_TITLES = ("osu!lazer", "osu!framework")
_ERRORS = (MemoryError_, OSError, EOFError, ValueError)


class MemoryTracker:
    """Finds the game process and reads the current beatmap from it."""

    def __init__(
        self,
        songs_folder_path: str = "auto",
        update_time: int = 100,
        under_wine: bool = False,
        mem_cycle: bool = False,
        find: Callable[..., Sequence[Process]] = find_process,
        platform: str = sys.platform,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.songs_folder_path = songs_folder_path
        self.update_time = update_time
        self.under_wine = under_wine
        self.mem_cycle = mem_cycle
        self._find = find
        self._platform = platform
        self._sleep = sleep
        self.process: Process | None = None
        self.is_ready = False
        self.patterns = StaticAddresses()
        self.menu_data = MenuData()
        self.songs_folder_data = SongsFolderData()
        self.menu_values = MenuValues()
        self.settings_values = SettingsValues()
        self._last_beatmap = ""
        self._last_game_mode = 5

    def _require_process(self) -> Process:
        if self.process is None:
            raise MemoryError_("no process attached")
        return self.process

    def resolve_songs_folder(self) -> str:
        """Work out the Songs folder from the executable path and settings."""
        exe = self._require_process().executable_path()
        if ":\\" not in exe:
            log.warning(
                "Automatic executable path finder has failed. Please try again or "
                "manually specify it. (see --help) GOT: %s", exe)
            self._sleep(5)
            raise MemoryError_("osu! executable was not found")
        root = exe[: -len("osu!.exe")] if exe.endswith("osu!.exe") else exe
        songs = ntpath.join(root, "Songs")
        if self.songs_folder_data.songs_folder in ("Songs", "CompatibilityContext"):
            return songs
        return self.songs_folder_data.songs_folder

    def init_base(self) -> None:
        """Attach to the process and resolve every address signature."""
        procs = self._find(OSU_PROCESS_REGEX, *BLACKLISTED_TITLES)
        self.process = procs[0]
        process = self.process
        pre = self.patterns.pre_song_select
        resolve_patterns(process, pre)
        read(process, pre, self.menu_data.pre_song_select)
        log.info("[MEMORY] Got osu!status addr...")
        if self._platform == "win32" and self.songs_folder_path == "auto":
            read(process, pre, self.songs_folder_data)
            self.songs_folder_path = self.resolve_songs_folder()
        log.info("[MEMORY] Songs folder: %s", self.songs_folder_path)
        exe = process.executable_path()
        self.settings_values.folders.game = (
            ntpath.dirname(exe) if ":\\" in exe else os.path.dirname(exe))
        log.info("[MEMORY] Resolving patterns...")
        resolve_patterns(process, self.patterns)
        self.settings_values.folders.songs = self.songs_folder_path
        self.is_ready = True

    def _read_menu(self) -> None:
        try:
            read(self._require_process(), self.patterns, self.menu_data)
        except _ERRORS:
            pass

    def update_beatmap(self) -> None:
        """Refresh beatmap values when the map or game mode changed."""
        self._read_menu()
        data = self.menu_data
        current = data.path
        if not current.endswith(".osu"):
            return
        if current == self._last_beatmap and data.menu_game_mode == self._last_game_mode:
            return
        for _ in range(50):
            if data.background_filename:
                break
            self._sleep(0.025)
            self._read_menu()
        self._last_game_mode = data.menu_game_mode
        self._last_beatmap = current
        bm = self.menu_values.bm
        bm.beatmap_id = data.map_id
        bm.beatmap_set_id = data.set_id
        self.menu_values.game_mode = data.menu_game_mode
        bm.ranked_status = data.ranked_status
        bm.md5 = data.md5
        songs = self.songs_folder_path
        bm.path = BeatmapPath(
            inner_bg_path=os.path.join(data.folder, data.background_filename),
            beatmap_folder=data.folder,
            beatmap_osu_file=data.path,
            bg_path=data.background_filename,
            audio_path=data.audio_filename,
            full_mp3_path=os.path.join(songs, data.folder, data.audio_filename),
            full_dot_osu=os.path.join(songs, data.folder, current),
        )

    def _init_until_ready(self) -> None:
        while True:
            try:
                self.init_base()
                return
            except _ERRORS as exc:
                log.warning("Failure mid getting offsets, retrying! ERROR: %s", exc)
                self._sleep(1)

    def cycle(self) -> None:
        """Run one update: attach if needed, otherwise read the current state."""
        if not self.is_ready:
            self._init_until_ready()
            return
        try:
            read(self._require_process(), self.patterns.pre_song_select,
                 self.menu_data.pre_song_select)
        except _ERRORS as exc:
            self.is_ready = False
            log.warning("It appears that we lost the process, retrying! ERROR: %s", exc)
            return
        self.menu_values.osu_status = self.menu_data.status
        self.update_beatmap()

    def run(self, stop_event: threading.Event) -> None:
        """Cycle every ``update_time`` milliseconds until ``stop_event`` is set."""
        while not stop_event.is_set():
            start = time.monotonic()
            self.cycle()
            elapsed = time.monotonic() - start
            if self.mem_cycle:
                log.info("Cycle took %.3fs", elapsed)
            remaining = self.update_time / 1000 - elapsed
            if remaining > 0:
                stop_event.wait(remaining)