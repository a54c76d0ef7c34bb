"""Follow the osu! client and blank out beatmap background images, with undo."""

__version__ = "0.1.0"