import pytest

from osubgdeleter.config import CONFIG_NAME, DEFAULT_CONFIG, load_config, to_bool, to_int


def test_missing_config_is_created_with_defaults(tmp_path):
    values = load_config(tmp_path)
    assert (tmp_path / CONFIG_NAME).read_text(encoding="utf-8") == DEFAULT_CONFIG
    assert values["update"] == "100"
    assert values["path"] == "auto"
    assert values["wine"] == "false"
    assert values["minimize_to_tray"] == "true"


def test_existing_config_is_read_and_not_overwritten(tmp_path):
    content = "[Main]\nupdate = 250\npath = /games/Songs\n"
    (tmp_path / CONFIG_NAME).write_text(content, encoding="utf-8")
    values = load_config(tmp_path)
    assert values == {"update": "250", "path": "/games/Songs"}
    assert (tmp_path / CONFIG_NAME).read_text(encoding="utf-8") == content


def test_config_without_section_header(tmp_path):
    (tmp_path / CONFIG_NAME).write_text("wine = true\n", encoding="utf-8")
    assert load_config(tmp_path) == {"wine": "true"}


def test_default_values_convert():
    values = {}
    for line in DEFAULT_CONFIG.splitlines()[1:]:
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip()
    assert to_int(values["update"]) == 100
    assert to_bool(values["minimize_to_tray"]) is True
    assert to_bool(values["memdebug"]) is False


@pytest.mark.parametrize(
    "value, expected",
    [("true", True), ("1", True), ("T", True), ("false", False),
     ("garbage", False), (None, False), (True, True)],
)
def test_to_bool(value, expected):
    assert to_bool(value) is expected


@pytest.mark.parametrize("value, expected", [("100", 100), ("abc", 0), ("", 0), (None, 0), (42, 42)])
def test_to_int(value, expected):
    assert to_int(value) == expected


def test_to_int_hex_prefix():
    assert to_int("0x10") == 16