"""Signature scanning and address-expression evaluation over process memory."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Callable, Iterator

from osubgdeleter.mem import (
    MemoryError_,
    PatternNotFoundError,
    Process,
    Reader,
    Region,
    ValueKind,
    debug,
    read_array,
    read_ptr,
    read_string,
    read_value,
)

_BUFSIZE = 65536
_HEX_BYTE = re.compile(r"[0-9a-fA-F]+")
_SCAN_ERRORS = (MemoryError_, OSError, EOFError)


@dataclass(frozen=True)
class Pattern:
    """A byte signature packed into little-endian 32-bit words with a mask."""

    words: tuple[int, ...]
    masks: tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> "Pattern":
        """Parse space-separated hex bytes; ``??`` matches any byte."""
        values: list[int] = []
        mask: list[int] = []
        for item in text.split(" "):
            if item == "??":
                values.append(0x00)
                mask.append(0x00)
                continue
            if not _HEX_BYTE.fullmatch(item):
                raise ValueError(f"invalid pattern byte {item!r}")
            value = int(item, 16)
            if value > 0xFF:
                raise ValueError(f"pattern byte {item!r} out of range")
            values.append(value)
            mask.append(0xFF)

        padding = -len(values) % 4
        values.extend([0] * padding)
        mask.extend([0] * padding)
        words = tuple(
            int.from_bytes(bytes(values[i:i + 4]), "little") for i in range(0, len(values), 4)
        )
        masks = tuple(
            int.from_bytes(bytes(mask[i:i + 4]), "little") for i in range(0, len(mask), 4)
        )
        return cls(words, masks)

    @property
    def byte_length(self) -> int:
        return len(self.words) * 4

    def anchor(self) -> tuple[int, int]:
        """Return the first definite non-zero byte of the first word and its offset."""
        needle, mask = self.words[0], self.masks[0]
        for offset in range(4):
            mask_byte = (mask >> (offset * 8)) & 0xFF
            needle_byte = (needle >> (offset * 8)) & 0xFF
            if mask_byte and needle_byte:
                return needle_byte, offset
        raise ValueError("empty mask (bad pattern)")

    def matches_at(self, buf: bytes, begin: int) -> bool:
        for j, (needle, mask) in enumerate(zip(self.words, self.masks)):
            start = begin + j * 4
            haystack = int.from_bytes(buf[start:start + 4], "little")
            if needle ^ (haystack & mask):
                return False
        return True


def search(buf: bytes, pattern: Pattern) -> int | None:
    """Return the index of the first match of ``pattern`` in ``buf``, or None."""
    anchor_byte, byte_offset = pattern.anchor()
    start = 0
    while True:
        pos = buf.find(anchor_byte, start)
        if pos == -1:
            return None
        begin = pos - byte_offset
        end = begin + pattern.byte_length
        if begin >= start and end <= len(buf) and pattern.matches_at(buf, begin):
            return begin
        start = pos + 1


def find(process: Process, pattern: Pattern, region: Region) -> int:
    """Search one region in chunks and return the absolute address of a match."""
    total = region.size()
    i = 0
    while i < total:
        to_read = total - i
        if to_read >= _BUFSIZE:
            to_read = _BUFSIZE - 1
        data = process.read_at(to_read, region.start + i)
        at = search(data, pattern)
        if at is not None:
            return region.start + i + at
        step = len(data) - len(pattern.words) * 8
        i += max(step, 1)
    raise PatternNotFoundError()


def scan(process: Process, pattern: str) -> int:
    """Find the first address in any mapped region that matches ``pattern``."""
    regions = process.maps()
    parsed = Pattern.parse(pattern)
    for region in regions:
        try:
            return find(process, parsed, region)
        except _SCAN_ERRORS:
            continue
    raise PatternNotFoundError(f"no memory matched the pattern: {pattern}")


def resolve_patterns(process: Process, offsets: Any) -> None:
    """Fill every field of a dataclass whose metadata has a ``sig`` with its address.

    Fields that cannot be resolved keep their value; the last failure is raised
    after all fields have been tried.
    """
    if not is_dataclass(offsets) or isinstance(offsets, type):
        raise TypeError("offsets must be a dataclass instance")
    last_error: Exception | None = None
    for field_info in fields(offsets):
        signature = field_info.metadata.get("sig")
        if signature is None:
            continue
        try:
            address = scan(process, signature)
        except (*_SCAN_ERRORS, ValueError) as exc:
            last_error = exc
            continue
        setattr(offsets, field_info.name, address)
    if last_error is not None:
        raise last_error


class ReadError(MemoryError_):
    """Several fields failed to read."""

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        super().__init__(", ".join(str(err) for err in self.errors))


@dataclass
class MemExpr:
    """An address expression: an optional dereferenced child plus an offset."""

    child: MemExpr | None = None
    offset: int = 0

    def __str__(self) -> str:
        parts = []
        if self.child is not None:
            parts.append(f"[{self.child}]")
        if self.child is not None and self.offset != 0:
            parts.append(" + ")
        if self.offset != 0:
            parts.append(f"0x{self.offset:x}")
        return "".join(parts)

    def evaluate(self, deref: Callable[[int], int]) -> int:
        """Compute the address, calling ``deref`` for each bracketed level."""
        if self.child is None:
            return self.offset
        child_addr = self.child.evaluate(deref)
        dereferenced = deref(child_addr)
        if self.offset == 0:
            debug.log(f"[0x{child_addr:x}] = 0x{dereferenced:x}")
        else:
            debug.log(
                f"[0x{child_addr:x}] + 0x{self.offset:x} = 0x{dereferenced + self.offset:x}"
            )
        return dereferenced + self.offset


_LEXEME_RE = re.compile(
    r"\s*(?:(?P<ident>[^\W\d]\w*)"
    r"|(?P<int>0[xX][0-9a-fA-F_]*|0[bB][01_]*|0[oO][0-7_]*|\d[\d_]*)"
    r"|(?P<char>\S))"
)


class _Lexer:
    def __init__(self, text: str) -> None:
        self._iter = self._generate(text)

    @staticmethod
    def _generate(text: str) -> Iterator[tuple[str, str]]:
        pos = 0
        while True:
            match = _LEXEME_RE.match(text, pos)
            if match is None or match.end() == pos:
                break
            pos = match.end()
            kind = match.lastgroup
            if kind is None:
                break
            yield kind, match.group(kind)
        while True:
            yield "eof", ""

    def next(self) -> tuple[str, str]:
        return next(self._iter)


def _parse_int(text: str) -> int:
    if len(text) > 1 and text[0] == "0" and text[1] not in "xXbBoO":
        text = "0o" + text[1:]
    value = int(text, 0)
    if value > 0x7FFFFFFFFFFFFFFF:
        raise ValueError(f"value out of range: {text}")
    return value


def _parse_expr(lexer: _Lexer, var_func: Callable[[str], int], in_brackets: bool) -> MemExpr:
    expr = MemExpr()
    kind, text = lexer.next()
    if kind == "char" and text == "[":
        expr.child = _parse_expr(lexer, var_func, True)
    elif kind == "ident":
        expr.offset = var_func(text)
    elif kind == "int":
        expr.offset = _parse_int(text)
    else:
        raise ValueError(f"unexpected input {text!r}")

    kind, text = lexer.next()
    if kind == "char" and text in ("+", "-"):
        rest = _parse_expr(lexer, var_func, in_brackets)
        if text == "+":
            expr.offset += rest.offset
        else:
            expr.offset -= rest.offset
        return expr
    if kind == "eof" or (kind == "char" and text == "]"):
        if text == "]" and not in_brackets:
            raise ValueError(f"unexpected input {text!r}")
        return expr
    raise ValueError(f"unexpected input {text!r}")


def parse_mem(tag: str, var_func: Callable[[str], int]) -> MemExpr:
    """Parse an address expression such as ``[[Base - 0xC] + 0x18]``.

    Identifiers are resolved through ``var_func`` while parsing.
    """
    return _parse_expr(_Lexer(tag), var_func, False)


_MISSING = object()


def _lookup(obj: Any, name: str) -> Any:
    value = getattr(obj, name, _MISSING)
    if value is not _MISSING:
        return value
    if is_dataclass(obj) and not isinstance(obj, type):
        for field_info in fields(obj):
            inner = getattr(obj, field_info.name)
            if is_dataclass(inner) and not isinstance(inner, type):
                found = _lookup(inner, name)
                if found is not _MISSING:
                    return found
    return _MISSING


def _zero_value(spec: Any) -> Any:
    kind = spec.get("kind")
    if spec.get("array"):
        return []
    if kind is str:
        return ""
    if kind in (ValueKind.FLOAT32, ValueKind.FLOAT64):
        return 0.0
    return 0


def _read_field(reader: Reader, spec: Any, addr: int) -> Any:
    kind = spec.get("kind")
    if kind is str:
        return read_string(reader, addr, 0)
    if isinstance(kind, ValueKind):
        if spec.get("array"):
            return read_array(reader, kind, addr, 0)
        return read_value(reader, kind, addr, 0)
    raise TypeError(f"unknown type {kind!r}")


def read(reader: Reader, addresses: Any, target: Any) -> None:
    """Fill the fields of ``target`` whose metadata holds a ``mem`` expression.

    A field's metadata gives ``mem`` (the address expression), ``kind`` (a
    ValueKind, or ``str`` for strings) and optionally ``array=True``.
    Identifiers in expressions name integer attributes of ``addresses``, or
    methods of it returning further expressions; nested dataclasses are searched
    too. Fields that fail to read are reset to their zero value and reported
    together in a ReadError.
    """
    if not is_dataclass(addresses) or isinstance(addresses, type):
        raise TypeError("addresses must be a dataclass instance")
    if not is_dataclass(target) or isinstance(target, type):
        raise TypeError("target must be a dataclass instance")

    type_name = type(target).__name__

    def deref(addr: int) -> int:
        return read_ptr(reader, addr, 0)

    def var_func(name: str) -> int:
        value = _lookup(addresses, name)
        if isinstance(value, int) and not isinstance(value, bool):
            debug.log(f"{name}: 0x{value:x}")
            return value
        if callable(value):
            expr_text = value()
            try:
                expr = parse_mem(expr_text, var_func)
            except Exception as exc:
                debug.log(f"Failed to parse variable {name}: {exc}")
                raise
            debug.log(f"{name}(): {expr_text!r}")
            try:
                result = expr.evaluate(deref)
            except Exception as exc:
                debug.log(f"Failed to resolve variable {name}: {exc}")
                raise
            debug.log(f"{name}() = 0x{result:x}")
            return result
        raise MemoryError_(f"undefined variable {name}")

    debug.begin()
    try:
        errors: list[Exception] = []
        for field_info in fields(target):
            tag = field_info.metadata.get("mem")
            if tag is None:
                continue
            debug.log(f"{field_info.name}: {tag!r}")
            level = debug.push()
            try:
                expr = parse_mem(tag, var_func)
            except Exception as exc:
                raise MemoryError_(
                    f"failed to parse mem tag for {type_name}.{field_info.name}: {exc}"
                ) from exc
            try:
                addr = expr.evaluate(deref)
            except Exception as exc:
                raise MemoryError_(
                    f"failed to read {type_name}.{field_info.name}: {exc}"
                ) from exc
            try:
                value = _read_field(reader, field_info.metadata, addr)
            except TypeError as exc:
                errors.append(
                    MemoryError_(f"failed to read {type_name}.{field_info.name}: {exc}")
                )
            except (*_SCAN_ERRORS, ValueError) as exc:
                setattr(target, field_info.name, _zero_value(field_info.metadata))
                errors.append(
                    MemoryError_(f"failed to read {type_name}.{field_info.name}: {exc}")
                )
            else:
                setattr(target, field_info.name, value)
            debug.pop(level)
        if errors:
            raise ReadError(errors)
    finally:
        debug.end()