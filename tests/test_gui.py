from types import SimpleNamespace

from PIL import Image

from osubgdeleter.background import BackgroundManager
from osubgdeleter.gui import BackgroundView, load_image
from osubgdeleter.values import BeatmapPath, MenuValues, SettingsValues


def _tracker():
    settings = SettingsValues()
    settings.folders.songs = "S"
    menu = MenuValues()
    menu.bm.beatmap_id = 99
    menu.bm.path = BeatmapPath(beatmap_folder="F", bg_path="bg.png")
    return SimpleNamespace(settings_values=settings, menu_values=menu)


class _Recorder:
    def __init__(self, result="image"):
        self.texts = []
        self.images = []
        self.loaded = []
        self.result = result

    def loader(self, path):
        self.loaded.append(path)
        return self.result


def _view(recorder, manager=None):
    return BackgroundView(
        _tracker(),
        manager or BackgroundManager(),
        recorder.texts.append,
        recorder.images.append,
        recorder.loader,
    )


def test_first_poll_updates_text_and_image():
    rec = _Recorder()
    view = _view(rec)
    assert view.poll() is True
    assert rec.texts == ["Background file: S\\F\\bg.png"]
    assert rec.loaded == ["S\\F\\bg.png"]
    assert rec.images == ["image"]
    assert view.last_image == "S\\F\\bg.png"
    assert view.last_image_beatmap_id == "99"
    assert view.last_image_filename == "bg.png"


def test_unchanged_poll_does_nothing():
    rec = _Recorder()
    view = _view(rec)
    view.poll()
    assert view.poll() is False
    assert len(rec.loaded) == 1


def test_pending_update_reloads_image():
    rec = _Recorder()
    manager = BackgroundManager()
    view = _view(rec, manager)
    view.poll()
    manager.update_pending = True
    assert view.poll() is True
    assert len(rec.loaded) == 2
    assert len(rec.texts) == 1
    assert manager.update_pending is False


def test_failed_load_keeps_previous_image():
    rec = _Recorder(result=None)
    view = _view(rec)
    assert view.poll() is True
    assert rec.images == []
    assert view.last_image == ""
    view.poll()
    assert len(rec.loaded) == 2


def test_load_image_rejects_empty_path():
    assert load_image("\\\\") is None


def test_load_image_missing_file(tmp_path):
    assert load_image(tmp_path / "nope.png") is None


def test_load_image_not_an_image(tmp_path):
    path = tmp_path / "bad.png"
    path.write_bytes(b"not image data")
    assert load_image(path) is None


def test_load_image_decodes(tmp_path):
    path = tmp_path / "bg.png"
    Image.new("RGB", (12, 8), (1, 2, 3)).save(path)
    img = load_image(path)
    assert img.size == (12, 8)
    assert img.getpixel((0, 0)) == (1, 2, 3)