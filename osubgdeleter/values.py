"""Values exposed to the user interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class BeatmapPath:
    inner_bg_path: str = ""
    beatmap_folder: str = ""
    beatmap_osu_file: str = ""
    bg_path: str = ""
    audio_path: str = ""
    full_mp3_path: str = ""
    full_dot_osu: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "full": self.inner_bg_path,
            "folder": self.beatmap_folder,
            "file": self.beatmap_osu_file,
            "bg": self.bg_path,
            "audio": self.audio_path,
        }


@dataclass
class Beatmap:
    beatmap_id: int = 0
    beatmap_set_id: int = 0
    md5: str = ""
    ranked_status: int = 0
    path: BeatmapPath = field(default_factory=BeatmapPath)
    hit_object_stats: str = ""
    beatmap_string: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.beatmap_id,
            "set": self.beatmap_set_id,
            "md5": self.md5,
            "rankedStatus": self.ranked_status,
            "path": self.path.to_dict(),
        }


@dataclass
class MenuValues:
    bass_density: float = 0.0
    osu_status: int = 0
    game_mode: int = 0
    bm: Beatmap = field(default_factory=Beatmap)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mainMenu": {"bassDensity": self.bass_density},
            "state": self.osu_status,
            "gameMode": self.game_mode,
            "bm": self.bm.to_dict(),
        }


@dataclass
class Folders:
    game: str = ""
    songs: str = ""


@dataclass
class SettingsValues:
    show_interface: bool = False
    folders: Folders = field(default_factory=Folders)

    def to_dict(self) -> dict[str, Any]:
        return {
            "showInterface": self.show_interface,
            "folders": {"game": self.folders.game, "songs": self.folders.songs},
        }