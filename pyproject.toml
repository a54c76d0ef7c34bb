[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "osubgdeleter"
version = "0.1.0"
description = "Follow the running osu! client and blank out the background image of the selected beatmap, with undo."
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["osu", "beatmap", "background", "memory-reader", "tkinter"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
osubgdeleter = "osubgdeleter.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["osubgdeleter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
