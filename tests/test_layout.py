import struct
from dataclasses import fields

from osubgdeleter.layout import (
    MenuData,
    PreSongSelectAddresses,
    SongsFolderData,
    StaticAddresses,
)
from osubgdeleter.scan import Pattern, read


class Memory:
    def __init__(self, size=0x10000):
        self.buf = bytearray(size)

    def u32(self, addr, value):
        self.buf[addr:addr + 4] = struct.pack("<I", value)

    def string(self, addr, text):
        data = text.encode("utf-16-le")
        self.u32(addr + 4, len(text))
        self.buf[addr + 8:addr + 8 + len(data)] = data

    def read_at(self, size, offset):
        return bytes(self.buf[offset:offset + size])


def test_expressions_from_source():
    assert PreSongSelectAddresses().Settings() == "[SettingsClass + 0x8]"
    assert StaticAddresses().Beatmap() == "[Base - 0xC]"
    assert StaticAddresses().Ruleset() == "[[Rulesets - 0xB] + 0x4]"


def test_all_signatures_parse():
    for obj in (PreSongSelectAddresses(), StaticAddresses()):
        for f in fields(obj):
            if "sig" in f.metadata:
                assert Pattern.parse(f.metadata["sig"]).words


def test_read_songs_folder_through_settings():
    m = Memory()
    m.u32(0x1008, 0x2000)
    m.u32(0x20B8, 0x3000)
    m.u32(0x3004, 0x4000)
    m.string(0x4000, "Songs")
    data = SongsFolderData()
    read(m, PreSongSelectAddresses(SettingsClass=0x1000), data)
    assert data.songs_folder == "Songs"


def test_read_menu_data_beatmap():
    m = Memory()
    m.u32(0x1000 - 0xC, 0x2000)
    m.u32(0x2000 + 0x68, 0x3000)
    m.string(0x3000, "bg.png")
    m.u32(0x2000 + 0xC8, 123)
    data = MenuData()
    read(m, StaticAddresses(Base=0x1000), data)
    assert data.background_filename == "bg.png"
    assert data.map_id == 123
    assert data.status == 0