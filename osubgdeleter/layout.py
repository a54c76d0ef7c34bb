"""Signatures and address expressions describing the game's memory layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from osubgdeleter.mem import ValueKind


def _sig(signature: str) -> Any:
    return field(default=0, metadata={"sig": signature})


def _mem(tag: str, kind: Any) -> Any:
    if kind is str:
        default: Any = ""
    elif kind in (ValueKind.FLOAT32, ValueKind.FLOAT64):
        default = 0.0
    else:
        default = 0
    return field(default=default, metadata={"mem": tag, "kind": kind})


@dataclass
class PreSongSelectAddresses:
    Status: int = _sig("48 83 F8 04 73 1E")
    SettingsClass: int = _sig("83 E0 20 85 C0 7E 2F")

    def Settings(self) -> str:
        return "[SettingsClass + 0x8]"


@dataclass
class StaticAddresses:
    pre_song_select: PreSongSelectAddresses = field(default_factory=PreSongSelectAddresses)
    Base: int = _sig("F8 01 74 04 83 65")
    PlayTime: int = _sig("5E 5F 5D C3 A1 ?? ?? ?? ?? 89 ?? 04")
    SkinData: int = _sig("75 21 8B 1D")
    Rulesets: int = _sig("7D 15 A1 ?? ?? ?? ?? 85 C0")

    def Ruleset(self) -> str:
        return "[[Rulesets - 0xB] + 0x4]"

    def Beatmap(self) -> str:
        return "[Base - 0xC]"


@dataclass
class SongsFolderData:
    songs_folder: str = _mem("[[Settings + 0xB8] + 0x4]", str)


@dataclass
class PreSongSelectData:
    status: int = _mem("[Status - 0x4]", ValueKind.UINT32)


_B = "[Beatmap]"


@dataclass
class MenuData:
    pre_song_select: PreSongSelectData = field(default_factory=PreSongSelectData)
    menu_game_mode: int = _mem("[Base - 0x33]", ValueKind.INT32)
    plays: int = _mem("[Base - 0x33] + 0xC", ValueKind.INT32)
    artist: str = _mem("[[Beatmap] + 0x18]", str)
    artist_original: str = _mem("[[Beatmap] + 0x1C]", str)
    title: str = _mem("[[Beatmap] + 0x24]", str)
    title_original: str = _mem("[[Beatmap] + 0x28]", str)
    ar: float = _mem(_B + " + 0x2C", ValueKind.FLOAT32)
    cs: float = _mem(_B + " + 0x30", ValueKind.FLOAT32)
    hp: float = _mem(_B + " + 0x34", ValueKind.FLOAT32)
    od: float = _mem(_B + " + 0x38", ValueKind.FLOAT32)
    star_rating_struct: int = _mem(_B + " + 0x8C", ValueKind.UINT32)
    audio_filename: str = _mem("[[Beatmap] + 0x64]", str)
    background_filename: str = _mem("[[Beatmap] + 0x68]", str)
    folder: str = _mem("[[Beatmap] + 0x78]", str)
    creator: str = _mem("[[Beatmap] + 0x7C]", str)
    name: str = _mem("[[Beatmap] + 0x80]", str)
    path: str = _mem("[[Beatmap] + 0x90]", str)
    difficulty: str = _mem("[[Beatmap] + 0xAC]", str)
    map_id: int = _mem(_B + " + 0xC8", ValueKind.INT32)
    set_id: int = _mem(_B + " + 0xCC", ValueKind.INT32)
    ranked_status: int = _mem(_B + " + 0x12C", ValueKind.INT32)
    md5: str = _mem("[[Beatmap] + 0x6C]", str)
    object_count: int = _mem(_B + " + 0xFC", ValueKind.INT32)

    @property
    def status(self) -> int:
        return self.pre_song_select.status