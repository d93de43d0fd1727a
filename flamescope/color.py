"""Colour selection for flame graph frames and backgrounds."""

from __future__ import annotations

import string
import struct
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import Callable, Iterable, NamedTuple, Optional, Tuple, Union

from .palettes import BasicPalette, MultiPalette

__all__ = [
    "Color",
    "BackgroundColor",
    "SearchColor",
    "Palette",
    "DEFAULT_PALETTE",
    "DEFAULT_SEARCH_COLOR",
    "VDGREY",
    "DGREY",
    "parse_flat_bgcolor",
    "parse_background_color",
    "parse_search_color",
    "parse_palette",
    "namehash",
    "color",
    "color_scale",
    "default_bg_color_for",
    "bgcolor_for",
]


class Color(NamedTuple):
    """An 8-bit RGB colour."""

    r: int
    g: int
    b: int


VDGREY = Color(160, 160, 160)
DGREY = Color(200, 200, 200)

Palette = Union[BasicPalette, MultiPalette]
DEFAULT_PALETTE: Palette = BasicPalette.HOT


class BackgroundColor(Enum):
    """A named background gradient; a flat background is given as a :class:`Color`."""

    YELLOW = ("#eeeeee", "#eeeeb0")
    BLUE = ("#eeeeee", "#e0e0ff")
    GREEN = ("#eef2ee", "#e0ffe0")
    GREY = ("#f8f8f8", "#e8e8e8")


@dataclass(frozen=True)
class SearchColor:
    """The colour used to highlight search matches."""

    color: Color

    def __str__(self) -> str:
        return f"rgb({self.color.r},{self.color.g},{self.color.b})"


_HEX = frozenset(string.hexdigits)


def parse_flat_bgcolor(s: str) -> Optional[Color]:
    """Parse ``#rrggbb`` into a :class:`Color`, or return ``None`` if malformed."""
    if not s.startswith("#") or len(s.encode("utf-8")) != 7:
        return None
    digits = s[1:]
    if len(digits) != 6 or not all(ch in _HEX for ch in digits):
        return None
    return Color(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


_NAMED_BACKGROUNDS = {
    "yellow": BackgroundColor.YELLOW,
    "blue": BackgroundColor.BLUE,
    "green": BackgroundColor.GREEN,
    "grey": BackgroundColor.GREY,
}


def parse_background_color(s: str) -> Union[BackgroundColor, Color]:
    """Parse a background name or a flat ``#rrggbb`` colour."""
    named = _NAMED_BACKGROUNDS.get(s)
    if named is not None:
        return named
    flat = parse_flat_bgcolor(s)
    if flat is None:
        raise ValueError(f"unknown background color: {s}")
    return flat


def parse_search_color(s: str) -> SearchColor:
    """Parse a ``#rrggbb`` search colour."""
    flat = parse_flat_bgcolor(s)
    if flat is None:
        raise ValueError(f"unknown color: {s}")
    return SearchColor(flat)


DEFAULT_SEARCH_COLOR = parse_search_color("#e600e6")

_PALETTES = {
    "hot": BasicPalette.HOT,
    "mem": BasicPalette.MEM,
    "io": BasicPalette.IO,
    "wakeup": MultiPalette.WAKEUP,
    "java": MultiPalette.JAVA,
    "js": MultiPalette.JS,
    "perl": MultiPalette.PERL,
    "red": BasicPalette.RED,
    "green": BasicPalette.GREEN,
    "blue": BasicPalette.BLUE,
    "aqua": BasicPalette.AQUA,
    "yellow": BasicPalette.YELLOW,
    "purple": BasicPalette.PURPLE,
    "orange": BasicPalette.ORANGE,
}


def parse_palette(s: str) -> Palette:
    """Parse a palette name."""
    try:
        return _PALETTES[s]
    except KeyError:
        raise ValueError(f"unknown color palette: {s}") from None


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


_WEIGHT_DECAY = _f32(0.70)


class _NameHash:
    def __init__(self) -> None:
        self.vector = 0.0
        self.weight = 1.0
        self.max = 1.0
        self.modulo = 10

    def update(self, character: int) -> None:
        i = float(character % self.modulo)
        share = _f32(_f32(i / (self.modulo - 1)) * self.weight)
        self.vector = _f32(self.vector + share)
        self.modulo += 1
        self.max = _f32(self.max + self.weight)
        self.weight = _f32(self.weight * _WEIGHT_DECAY)

    def result(self) -> float:
        return _f32(1.0 - _f32(self.vector / self.max))


def namehash(name: Union[str, bytes, Iterable[int]]) -> float:
    """Hash a name into ``[0, 1]``, weighting its first characters most.

    Any module prefix up to the first backtick (past the first character) is skipped.
    """
    if isinstance(name, str):
        name = name.encode("utf-8")
    it = iter(name)
    state = _NameHash()

    first = next(it, None)
    if first is None:
        return state.result()
    state.update(first)

    module_name_found = False
    for character in islice(it, 2):
        if character == ord("`"):
            module_name_found = True
            break
        state.update(character)

    module_name_found = module_name_found or any(c == ord("`") for c in it)

    if module_name_found:
        state = _NameHash()
        for character in islice(it, 3):
            state.update(character)

    return state.result()


def _t(base: int, amount: float, x: float) -> int:
    scaled = _f32(amount * x)
    return (base + min(255, max(0, int(scaled)))) & 0xFF


def _rgb_for_palette(palette: Palette, name: str, v1: float, v2: float, v3: float) -> Color:
    basic = palette.resolve(name) if isinstance(palette, MultiPalette) else palette

    if basic is BasicPalette.HOT:
        return Color(_t(205, 50, v3), _t(0, 230, v1), _t(0, 55, v2))
    if basic is BasicPalette.MEM:
        return Color(_t(0, 0, v3), _t(190, 50, v2), _t(0, 210, v1))
    if basic is BasicPalette.IO:
        return Color(_t(80, 60, v1), _t(80, 60, v1), _t(190, 55, v2))
    if basic is BasicPalette.RED:
        return Color(_t(200, 55, v1), _t(50, 80, v1), _t(50, 80, v1))
    if basic is BasicPalette.GREEN:
        return Color(_t(50, 60, v1), _t(200, 55, v1), _t(50, 60, v1))
    if basic is BasicPalette.BLUE:
        return Color(_t(80, 60, v1), _t(80, 60, v1), _t(205, 50, v1))
    if basic is BasicPalette.YELLOW:
        return Color(_t(175, 55, v1), _t(175, 55, v1), _t(50, 20, v1))
    if basic is BasicPalette.PURPLE:
        return Color(_t(190, 65, v1), _t(80, 60, v1), _t(190, 65, v1))
    if basic is BasicPalette.AQUA:
        return Color(_t(50, 60, v1), _t(165, 55, v1), _t(165, 55, v1))
    return Color(_t(190, 65, v1), _t(90, 65, v1), _t(0, 0, v1))


def color(palette: Palette, hash: bool, name: str, rng: Callable[[], float]) -> Color:
    """Pick a colour for a frame, either from a name hash or from ``rng``."""
    if hash:
        data = name.encode("utf-8")
        v1 = namehash(data)
        v2 = v3 = namehash(reversed(data))
    else:
        v1, v2, v3 = rng(), rng(), rng()
    return _rgb_for_palette(palette, name, v1, v2, v3)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def color_scale(value: int, maximum: int) -> Color:
    """Colour a differential: red for more samples, blue for fewer, white for none."""
    if value == 0:
        return Color(255, 255, 255)
    if value > 0:
        c = _trunc_div(210 * (maximum - value), maximum) & 0xFF
        return Color(255, c, c)
    c = _trunc_div(210 * (maximum + value), maximum) & 0xFF
    return Color(c, c, 255)


def default_bg_color_for(palette: Palette) -> BackgroundColor:
    """Return the background gradient that goes with ``palette`` by default."""
    if palette is BasicPalette.MEM:
        return BackgroundColor.GREEN
    if palette in (BasicPalette.IO, MultiPalette.WAKEUP):
        return BackgroundColor.BLUE
    if palette in (
        BasicPalette.RED,
        BasicPalette.GREEN,
        BasicPalette.BLUE,
        BasicPalette.AQUA,
        BasicPalette.YELLOW,
        BasicPalette.PURPLE,
        BasicPalette.ORANGE,
    ):
        return BackgroundColor.GREY
    return BackgroundColor.YELLOW


def bgcolor_for(
    bgcolor: Union[BackgroundColor, Color, None], palette: Palette
) -> Tuple[str, str]:
    """Return the two gradient stop colours for the background."""
    if bgcolor is None:
        bgcolor = default_bg_color_for(palette)
    if isinstance(bgcolor, BackgroundColor):
        return bgcolor.value
    flat = f"#{bgcolor.r:02x}{bgcolor.g:02x}{bgcolor.b:02x}"
    return flat, flat