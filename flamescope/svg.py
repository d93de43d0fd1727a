"""Low-level SVG writing: an XML event writer and the flame graph header and prelude."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, TextIO, Tuple, Union

from .options import DEFAULT_IMAGE_WIDTH, XPAD, Direction, Options

__all__ = [
    "SvgWriter",
    "Pixels",
    "Percent",
    "TextItem",
    "write_header",
    "write_prelude",
    "write_text",
    "enquote",
]

Attrs = Iterable[Tuple[str, str]]

_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", "'": "&apos;", '"': "&quot;"}
)
_INDENT = 4


def _escape(s: str) -> str:
    return s.translate(_ESCAPES)


class SvgWriter:
    """Writes XML events to a text stream, optionally indenting nested elements."""

    def __init__(self, out: TextIO, pretty: bool = False) -> None:
        self._out = out
        self._pretty = pretty
        self._depth = 0
        self._line_break = False

    def _wrapped(self, markup: str) -> None:
        if self._pretty and self._line_break:
            self._out.write("\n" + " " * (_INDENT * self._depth))
        self._out.write(markup)
        self._line_break = True

    @staticmethod
    def _tag(name: str, attrs: Optional[Attrs]) -> str:
        rendered = "".join(f' {key}="{_escape(value)}"' for key, value in attrs or ())
        return name + rendered

    def start(self, name: str, attrs: Optional[Attrs] = None) -> None:
        """Open an element."""
        self._wrapped(f"<{self._tag(name, attrs)}>")
        self._depth += 1

    def empty(self, name: str, attrs: Optional[Attrs] = None) -> None:
        """Write a self-closing element."""
        self._wrapped(f"<{self._tag(name, attrs)}/>")

    def end(self, name: str) -> None:
        """Close an element."""
        self._depth = max(0, self._depth - 1)
        self._wrapped(f"</{name}>")

    def text(self, content: str) -> None:
        """Write escaped character data."""
        self._text_unescaped(_escape(content))

    def _text_unescaped(self, content: str) -> None:
        self._out.write(content)
        self._line_break = False

    def comment(self, content: str) -> None:
        """Write a comment; its content is escaped."""
        self._wrapped(f"<!--{_escape(content)}-->")

    def cdata(self, content: str) -> None:
        """Write a CDATA section verbatim."""
        self._wrapped(f"<![CDATA[{content}]]>")

    def raw(self, content: str) -> None:
        """Write ``content`` exactly as given."""
        self._out.write(content)


@dataclass(frozen=True)
class Pixels:
    """An absolute horizontal position in pixels."""

    value: int


@dataclass(frozen=True)
class Percent:
    """A horizontal position as a percentage of the width."""

    value: float


@dataclass
class TextItem:
    """A ``text`` element to write: position, content and extra attributes."""

    x: Union[Pixels, Percent]
    y: float
    text: str
    extra: List[Tuple[str, str]] = field(default_factory=list)


@lru_cache(maxsize=None)
def _asset(name: str) -> str:
    try:
        return Path(__file__).with_name(name).read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def _display_float(value: float) -> str:
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def _display_bool(value: bool) -> str:
    return "true" if value else "false"


def write_header(svg: SvgWriter, imageheight: int, opt: Options) -> None:
    """Write the XML declaration, doctype, opening ``svg`` tag and notes."""
    svg.raw('<?xml version="1.0" standalone="no"?>')
    svg.raw(
        '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" '
        '"http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">'
    )
    imagewidth = opt.image_width if opt.image_width is not None else DEFAULT_IMAGE_WIDTH
    svg.start(
        "svg",
        [
            ("version", "1.1"),
            ("width", str(imagewidth)),
            ("height", str(imageheight)),
            ("onload", "init(evt)"),
            ("viewBox", f"0 0 {imagewidth} {imageheight}"),
            ("xmlns", "http://www.w3.org/2000/svg"),
            ("xmlns:xlink", "http://www.w3.org/1999/xlink"),
        ],
    )
    svg.comment("Flame graph stack visualization.")
    svg.comment(f"NOTES: {opt.notes}")


def write_prelude(
    svg: SvgWriter, imageheight: int, bgcolor1: str, bgcolor2: str, opt: Options
) -> None:
    """Write the background, style, script and the fixed text elements."""
    svg.start("defs")
    svg.start(
        "linearGradient",
        [("id", "background"), ("y1", "0"), ("y2", "1"), ("x1", "0"), ("x2", "0")],
    )
    svg.empty("stop", [("stop-color", bgcolor1), ("offset", "5%")])
    svg.empty("stop", [("stop-color", bgcolor2), ("offset", "95%")])
    svg.end("linearGradient")
    svg.end("defs")

    svg.start("style", [("type", "text/css")])
    titlesize = opt.font_size + 5
    svg._text_unescaped(
        "\ntext { font-family:"
        f"{enquote(chr(34), opt.font_type)}; font-size:{opt.font_size}px; fill:rgb(0,0,0); }}\n"
        f"#title {{ text-anchor:middle; font-size:{titlesize}px; }}\n"
        f"{_asset('flamegraph.css')}"
    )
    svg.end("style")

    svg.start("script", [("type", "text/ecmascript")])
    svg.cdata(
        f"var nametype = {enquote(chr(39), opt.name_type)};\n"
        f"var fontsize = {opt.font_size};\n"
        f"var fontwidth = {_display_float(opt.font_width)};\n"
        f"var xpad = {XPAD};\n"
        f"var inverted = {_display_bool(opt.direction is Direction.INVERTED)};\n"
        f"var searchcolor = '{opt.search_color}';\n"
        f"var fluiddrawing = {_display_bool(opt.image_width is None)};"
    )
    if not opt.no_javascript:
        svg.cdata(_asset("flamegraph.js"))
    svg.end("script")

    svg.empty(
        "rect",
        [
            ("x", "0"),
            ("y", "0"),
            ("width", "100%"),
            ("height", str(imageheight)),
            ("fill", "url(#background)"),
        ],
    )

    top_y = float(opt.font_size * 2)
    bottom_y = float(imageheight - opt.ypad2() // 2)
    image_width = opt.image_width if opt.image_width is not None else DEFAULT_IMAGE_WIDTH
    search_x = Pixels(image_width - XPAD - 100)

    write_text(svg, TextItem(Percent(50.0), top_y, opt.title, [("id", "title")]))
    if opt.subtitle is not None:
        write_text(
            svg,
            TextItem(
                Percent(50.0), float(opt.font_size * 4), opt.subtitle, [("id", "subtitle")]
            ),
        )
    write_text(svg, TextItem(Pixels(XPAD), bottom_y, " ", [("id", "details")]))
    write_text(
        svg,
        TextItem(Pixels(XPAD), top_y, "Reset Zoom", [("id", "unzoom"), ("class", "hide")]),
    )
    write_text(svg, TextItem(search_x, top_y, "Search", [("id", "search")]))
    write_text(svg, TextItem(search_x, bottom_y, " ", [("id", "matched")]))


def write_text(svg: SvgWriter, item: TextItem) -> None:
    """Write a ``text`` element with its extra attributes followed by ``x`` and ``y``."""
    if isinstance(item.x, Pixels):
        x = str(item.x.value)
    else:
        x = f"{item.x.value:.4f}%"
    y = f"{item.y:.2f}"
    svg.start("text", [*item.extra, ("x", x), ("y", y)])
    svg.text(item.text)
    svg.end("text")


def enquote(quote: str, s: str) -> str:
    """Wrap ``s`` in ``quote``, escaping that quote and backslashes with a backslash."""
    escaped = "".join(
        f"\\{ch}" if ch == quote else "\\\\" if ch == "\\" else ch for ch in s
    )
    return f"{quote}{escaped}{quote}"