"""A persistent mapping from function names to the colours they were drawn with."""

from __future__ import annotations

import logging
import os
import re
from typing import Callable, Dict, Iterable, Iterator, Optional, TextIO, Tuple, Union

from .color import Color

__all__ = ["PaletteMap", "parse_line", "parse_rgb_string"]

_log = logging.getLogger(__name__)

_U8 = re.compile(r"\+?[0-9]+")

PathLike = Union[str, "os.PathLike[str]"]


class PaletteMap:
    """Association between function names and the colour used to draw them."""

    def __init__(self, entries: Optional[Dict[str, Color]] = None) -> None:
        self._colors: Dict[str, Color] = dict(entries or {})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PaletteMap):
            return NotImplemented
        return self._colors == other._colors

    def __repr__(self) -> str:
        return f"PaletteMap({self._colors!r})"

    def __len__(self) -> int:
        return len(self._colors)

    def get(self, func: str) -> Optional[Color]:
        """Return the colour stored for ``func``, or ``None``."""
        return self._colors.get(func)

    def insert(self, func: str, color: Color) -> Optional[Color]:
        """Store ``color`` for ``func`` and return the colour it replaced, if any."""
        previous = self._colors.get(str(func))
        self._colors[str(func)] = color
        return previous

    def __iter__(self) -> Iterator[Tuple[str, Color]]:
        return iter(self._colors.items())

    @classmethod
    def from_reader(cls, reader: Iterable[str]) -> "PaletteMap":
        """Read ``NAME->rgb(R, G, B)`` lines; malformed lines are skipped."""
        colors: Dict[str, Color] = {}
        ignored = 0
        for raw in reader:
            line = raw.removesuffix("\n").removesuffix("\r")
            try:
                name, color = parse_line(line)
            except ValueError:
                ignored += 1
                continue
            colors[name] = color
        if ignored:
            _log.warning("Ignored %d lines with invalid format", ignored)
        return cls(colors)

    def to_writer(self, writer: TextIO) -> None:
        """Write the map as ``NAME->rgb(R,G,B)`` lines, sorted by name."""
        for name, color in sorted(self._colors.items()):
            writer.write(f"{name}->rgb({color.r},{color.g},{color.b})\n")

    @classmethod
    def load_from_file_or_empty(cls, path: PathLike) -> "PaletteMap":
        """Load a map from ``path``; a missing file gives an empty map."""
        if not os.path.exists(path):
            return cls()
        with open(path, encoding="utf-8") as handle:
            return cls.from_reader(handle)

    def save_to_file(self, path: PathLike) -> None:
        """Write the map to ``path``, creating the file if needed (without truncating)."""
        fd = os.open(path, os.O_WRONLY | os.O_CREAT, 0o666)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            self.to_writer(handle)

    def find_color_for(self, name: str, compute_color: Callable[[str], Color]) -> Color:
        """Return the stored colour for ``name``, computing and storing one if absent."""
        existing = self.get(name)
        if existing is not None:
            return existing
        color = compute_color(name)
        self.insert(name, color)
        return color


def parse_line(line: str) -> Tuple[str, Color]:
    """Parse ``NAME->rgb(R, G, B)``; raise :class:`ValueError` if malformed."""
    parts = line.split("->")
    if len(parts) != 2:
        raise ValueError(f"invalid palette map line: {line!r}")
    name, color_text = parts
    color = parse_rgb_string(color_text)
    if color is None:
        raise ValueError(f"invalid colour in palette map line: {line!r}")
    return name, color


def _parse_u8(text: str) -> Optional[int]:
    if not _U8.fullmatch(text):
        return None
    value = int(text)
    return value if value <= 255 else None


def parse_rgb_string(s: str) -> Optional[Color]:
    """Parse ``rgb(R, G, B)`` into a :class:`Color`, or return ``None``."""
    s = s.strip()
    if not s.startswith("rgb(") or not s.endswith(")"):
        return None
    inner = s[len("rgb(") : -1]
    parts = inner.split(",", 2)
    if len(parts) != 3:
        return None
    components = [_parse_u8(part.strip()) for part in parts]
    if any(c is None for c in components):
        return None
    r, g, b = components
    return Color(r, g, b)