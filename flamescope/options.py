"""Configuration for flame graph rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .attrs import FuncFrameAttrsMap
from .color import (
    BackgroundColor,
    Color,
    Palette,
    SearchColor,
    parse_palette,
    parse_search_color,
)
from .palette_map import PaletteMap

__all__ = [
    "Direction",
    "Options",
    "XPAD",
    "FRAMEPAD",
    "DEFAULT_IMAGE_WIDTH",
    "COLORS",
    "SEARCH_COLOR",
    "TITLE",
    "FRAME_HEIGHT",
    "MIN_WIDTH",
    "FONT_TYPE",
    "FONT_SIZE",
    "FONT_WIDTH",
    "COUNT_NAME",
    "NAME_TYPE",
    "FACTOR",
]

XPAD = 10
FRAMEPAD = 1
# Initial width when none is given; the embedded script makes it fluid on load.
DEFAULT_IMAGE_WIDTH = 1200

COLORS = "hot"
SEARCH_COLOR = "#e600e6"
TITLE = "Flame Graph"
FRAME_HEIGHT = 16
MIN_WIDTH = 0.1
FONT_TYPE = "Verdana"
FONT_SIZE = 12
FONT_WIDTH = 0.59
COUNT_NAME = "samples"
NAME_TYPE = "Function:"
FACTOR = 1.0


class Direction(Enum):
    """Which way stacks grow in the plot."""

    STRAIGHT = "straight"
    INVERTED = "inverted"


@dataclass
class Options:
    """Settings that control how a flame graph is drawn."""

    colors: Palette = field(default_factory=lambda: parse_palette(COLORS))
    bgcolors: Union[BackgroundColor, Color, None] = None
    hash: bool = False
    palette_map: Optional[PaletteMap] = None
    func_frameattrs: FuncFrameAttrsMap = field(default_factory=FuncFrameAttrsMap)
    direction: Direction = Direction.STRAIGHT
    search_color: SearchColor = field(
        default_factory=lambda: parse_search_color(SEARCH_COLOR)
    )
    title: str = TITLE
    subtitle: Optional[str] = None
    image_width: Optional[int] = None
    frame_height: int = FRAME_HEIGHT
    min_width: float = MIN_WIDTH
    font_type: str = FONT_TYPE
    font_size: int = FONT_SIZE
    font_width: float = FONT_WIDTH
    count_name: str = COUNT_NAME
    name_type: str = NAME_TYPE
    notes: str = ""
    negate_differentials: bool = False
    factor: float = FACTOR
    pretty_xml: bool = False
    no_sort: bool = False
    reverse_stack_order: bool = False
    no_javascript: bool = False

    def ypad1(self) -> int:
        """Padding above the frames, including the title."""
        return self.font_size * 3

    def ypad2(self) -> int:
        """Padding below the frames, including the labels."""
        return self.font_size * 2 + 10