"""Backing up a beatmap background and blacking it out, with one-step undo."""

from __future__ import annotations

import logging
import os
import shutil
from typing import Any

from PIL import Image

log = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")
DELETED_DIR = "./deleted_backgrounds"


def copy_file(source: str | os.PathLike, dest: str | os.PathLike) -> None:
    """Copy ``source`` to ``dest``, replacing ``dest`` if it exists."""
    try:
        src = open(source, "rb")
    except OSError as exc:
        raise OSError(f"Couldn't open source file: {exc}") from exc
    with src:
        try:
            dst = open(dest, "wb")
        except OSError as exc:
            raise OSError(f"Couldn't open dest file: {exc}") from exc
        with dst:
            try:
                shutil.copyfileobj(src, dst)
            except OSError as exc:
                raise OSError(f"Couldn't copy to dest from source: {exc}") from exc


def replace_with_black_image(path: str | os.PathLike) -> None:
    """Overwrite an image with an opaque black one of the same dimensions."""
    with Image.open(path) as original:
        size = original.size
        log.debug("image format: %s", original.format)
    black = Image.new("RGB", size, (0, 0, 0))
    ext = os.path.splitext(os.fspath(path))[1].lower()
    if ext == ".png":
        black.save(path, format="PNG")
    else:
        black.save(path, format="JPEG", quality=90)


def is_image_path(path: str | os.PathLike) -> bool:
    """True if the path ends in a PNG or JPEG extension (any case)."""
    return os.fspath(path).lower().endswith(IMAGE_SUFFIXES)


def clamp(value: int, low: int, high: int) -> int:
    if value < low:
        return low
    if value > high:
        return high
    return value


class BackgroundManager:
    """Deletes backgrounds into a backup directory and restores the last one."""

    def __init__(self, deleted_dir: str | os.PathLike = DELETED_DIR) -> None:
        self.deleted_dir = os.fspath(deleted_dir)
        self.last_original = ""
        self.last_output = ""
        self.update_pending = False

    def delete(self, image_path: str, beatmap_id: Any, filename: str) -> bool:
        """Back up ``image_path`` and black it out; returns False if it is not an image."""
        if not is_image_path(image_path):
            return False
        out_dir = os.path.join(self.deleted_dir, str(beatmap_id))
        out_file = os.path.join(out_dir, filename)
        try:
            os.makedirs(out_dir, exist_ok=True)
        except OSError as exc:
            log.warning("could not create %s: %s", out_dir, exc)
        try:
            copy_file(image_path, out_file)
        except OSError as exc:
            log.warning("%s", exc)
        try:
            replace_with_black_image(image_path)
        except OSError as exc:
            log.warning("could not replace %s: %s", image_path, exc)
        self.last_original = image_path
        self.last_output = out_file
        self.update_pending = True
        return True

    def undo(self) -> bool:
        """Restore the last deleted background; returns False if there is nothing to restore."""
        if not (is_image_path(self.last_original) and is_image_path(self.last_output)):
            return False
        try:
            copy_file(self.last_output, self.last_original)
        except OSError as exc:
            log.warning("%s", exc)
        try:
            os.remove(self.last_output)
        except OSError as exc:
            log.warning("could not remove %s: %s", self.last_output, exc)
        self.update_pending = True
        return True


def background_path(settings: Any, menu: Any) -> str:
    """Full Windows-style path of the current background from exposed values."""
    return "\\".join((settings.folders.songs, menu.bm.path.beatmap_folder, menu.bm.path.bg_path))