# osubgdeleter

A small desktop tool that follows the osu! stable client while it runs. It
shows the background image of the beatmap you have selected, and with one
click it replaces that image with a plain black picture of the same size.

Before a background is blanked, the original is copied to
`./deleted_backgrounds/<beatmap id>/<file name>` (relative to the directory
you start the tool from), and **Undo** puts the last deleted background back.
Only files ending in `.png`, `.jpg` or `.jpeg` are ever touched. A PNG is
rewritten as PNG; anything else is written as JPEG at quality 90.

## Installing

```
pip install .
```

The window uses Tkinter from the standard library; image handling uses
Pillow. For the tests: `pip install .[test]` and run `pytest`.

## Running

Start osu!, then:

```
osubgdeleter
```

The window shows `Background file: <path>` and a preview of that image. Press
**Delete** to back it up and blank it, **Undo** to restore the last one.

### Options

Each option may be written with one or two dashes.

```
osubgdeleter --path "/mnt/games/osu!/Songs"
osubgdeleter --update 100
osubgdeleter --wine
osubgdeleter --memdebug
osubgdeleter --memcycletest
```

- `--path`: the osu! `Songs` folder. `auto` asks the running client for it,
  and is accepted only on Windows; elsewhere give the path explicitly. A
  given path must exist, otherwise the tool prints an error and exits with
  status 1.
- `--update`: how often memory is read, in milliseconds.
- `--wine`, `--memdebug`, `--memcycletest`: on/off switches. Given alone they
  turn the setting on; they also take a value such as `true` or `false`.
  - `--wine`: the client runs under WINE.
  - `--memdebug`: print every memory read and address step.
  - `--memcycletest`: log how long each read cycle took.

## Configuration

On first start a `config.ini` is written next to the program:

```
[Main]
update = 100
path = auto
cgodisable = false
memdebug = false
memcycletest = false
wine = false
minimize_to_tray = true
```

Its values are the defaults for the options above; `cgodisable` is read but
not used. With `minimize_to_tray = true`, closing the window minimises it
instead of quitting.

If another instance is already running (checked through PowerShell's process
listing), a second start only shows a notice and exits. Where PowerShell
cannot be run, this check always answers "not running".

## Using it as a library

- `osubgdeleter.mem`: typed reads (`read_value`, `read_array`, `read_string`,
  `read_ptr`) over anything with a `read_at(size, offset)` method, and the
  `Process` base class.
- `osubgdeleter.scan`: byte-signature search (`Pattern`, `scan`,
  `resolve_patterns`) and address expressions such as
  `[[Base - 0xC] + 0x18]` (`parse_mem`, `read`).
- `osubgdeleter.linuxproc`: `find_process` and `LinuxProcess`, reading
  memory through `/proc`.
- `osubgdeleter.tracker`: `MemoryTracker`, which attaches to the client and
  keeps the current beatmap values up to date.
- `osubgdeleter.background`: `BackgroundManager` with `delete` and `undo`,
  plus `copy_file` and `replace_with_black_image`.

## What it does not do

- Process discovery and memory reading go through `/proc`, so the tool can
  only attach to the client on Linux (for example osu! running under WINE).
  There is no Windows process access, so on Windows the tracker keeps
  retrying without ever finding the client.
- There is no system-tray icon; "minimise to tray" only minimises the window.
- Only the beatmap's background file is changed; cached thumbnails kept by
  the client are left alone.