"""Window showing the current beatmap background with delete and undo buttons."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Mapping

from PIL import Image

from osubgdeleter.background import BackgroundManager, background_path
from osubgdeleter.config import to_bool

log = logging.getLogger(__name__)

WINDOW_TITLE = "osu! Map Background Deleter"
ALREADY_RUNNING_MESSAGE = "The app is already running! Please check your system tray."
WAITING_TEXT = "Waiting for data..."
IMAGE_SIZE = (600, 350)
POLL_INTERVAL_MS = 100


def load_image(path: str | os.PathLike) -> Image.Image | None:
    """Decode an image fully, or return None if it cannot be opened or decoded."""
    if os.fspath(path) == "\\\\":
        return None
    try:
        with Image.open(path) as img:
            img.load()
            return img.copy()
    except (OSError, ValueError):
        return None


class BackgroundView:
    """Tracks the displayed background and pushes changes to the UI callbacks."""

    def __init__(
        self,
        tracker: Any,
        manager: BackgroundManager,
        set_text: Callable[[str], None],
        set_image: Callable[[Any], None],
        loader: Callable[[str], Any] = load_image,
    ) -> None:
        self.tracker = tracker
        self.manager = manager
        self._set_text = set_text
        self._set_image = set_image
        self._loader = loader
        self.last_text = ""
        self.last_image = ""
        self.last_image_beatmap_id = ""
        self.last_image_filename = ""

    def poll(self) -> bool:
        """Refresh text and image from the tracker; returns False if nothing changed."""
        settings = self.tracker.settings_values
        menu = self.tracker.menu_values
        self.last_image_beatmap_id = str(menu.bm.beatmap_id)
        self.last_image_filename = menu.bm.path.bg_path
        bg = background_path(settings, menu)
        display_text = "Background file: " + bg

        if bg == self.last_image and not self.manager.update_pending:
            return False

        if display_text != self.last_text:
            self._set_text(display_text)
            self.last_text = display_text

        if (bg != self.last_image or self.manager.update_pending) and bg:
            image = self._loader(bg)
            if image is not None:
                self._set_image(image)
                self.last_image = bg
        self.manager.update_pending = False
        return True


def run_gui(tracker: Any, config: Mapping[str, str], already_running: bool) -> None:
    """Open the window and poll ``tracker`` until it is closed."""
    import tkinter as tk
    from tkinter import messagebox

    from PIL import ImageOps, ImageTk

    root = tk.Tk()
    root.title(WINDOW_TITLE)
    root.geometry("600x400")
    root.resizable(True, True)

    if already_running:
        root.withdraw()
        messagebox.showinfo(WINDOW_TITLE, ALREADY_RUNNING_MESSAGE, parent=root)
        root.destroy()
        return
    if tracker is None:
        raise ValueError("a tracker is required unless another instance is running")

    text_var = tk.StringVar(value=WAITING_TEXT)
    tk.Label(root, textvariable=text_var, anchor="w", justify="left",
             wraplength=480).pack(fill="x")

    frame = tk.Frame(root, width=IMAGE_SIZE[0], height=IMAGE_SIZE[1])
    frame.pack(fill="both", expand=True)
    frame.pack_propagate(False)
    image_label = tk.Label(frame)
    image_label.pack(fill="both", expand=True)

    def show_image(img: Image.Image) -> None:
        photo = ImageTk.PhotoImage(ImageOps.contain(img, IMAGE_SIZE))
        image_label.configure(image=photo)
        image_label.image = photo  # keep a reference alive

    manager = BackgroundManager()
    view = BackgroundView(tracker, manager, text_var.set, show_image)

    def on_delete() -> None:
        log.info("Deleting %s", view.last_image)
        manager.delete(view.last_image, view.last_image_beatmap_id, view.last_image_filename)

    def on_undo() -> None:
        log.info("Undoing deletion of %s", view.last_image)
        manager.undo()

    buttons = tk.Frame(root)
    buttons.pack(anchor="w")
    tk.Button(buttons, text="Delete", command=on_delete).pack(side="left")
    tk.Button(buttons, text="Undo", command=on_undo).pack(side="left")

    if to_bool(config.get("minimize_to_tray")):
        root.protocol("WM_DELETE_WINDOW", root.iconify)
    else:
        root.protocol("WM_DELETE_WINDOW", root.destroy)

    def tick() -> None:
        view.poll()
        root.after(POLL_INTERVAL_MS, tick)

    root.after(POLL_INTERVAL_MS, tick)
    root.mainloop()