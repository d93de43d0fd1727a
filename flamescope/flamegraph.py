"""Rendering folded stack traces into interactive SVG flame graphs.

Collapsed ("folded") stacks are lines of semicolon-separated frames followed
by a sample count, and optionally a second count for differential graphs.
"""

from __future__ import annotations

import logging
import math
import sys
from contextlib import ExitStack
from dataclasses import dataclass
from typing import IO, Callable, Iterable, List, Optional, Sequence, TextIO, Tuple, Union

from . import merge
from .color import DGREY, VDGREY, Color, bgcolor_for, color, color_scale
from .merge import TimedFrame
from .options import DEFAULT_IMAGE_WIDTH, FRAMEPAD, XPAD, Direction, Options
from .rand import thread_rng
from .svg import Percent, SvgWriter, TextItem, write_header, write_prelude, write_text

__all__ = [
    "NoStackCountsError",
    "from_lines",
    "from_reader",
    "from_readers",
    "from_files",
    "deannotate",
]

_log = logging.getLogger(__name__)

_ANNOTATIONS = "kwij"


class NoStackCountsError(ValueError):
    """Raised when the input holds no valid stack counts."""


@dataclass
class _Rectangle:
    x1_pct: float
    y1: int
    x2_pct: float
    y2: int

    @property
    def width_pct(self) -> float:
        return self.x2_pct - self.x1_pct

    @property
    def height(self) -> int:
        return self.y2 - self.y1


def _divide(num: float, den: float) -> float:
    try:
        return num / den
    except ZeroDivisionError:
        if num == 0 or math.isnan(num):
            return math.nan
        return math.copysign(math.inf, num) * math.copysign(1.0, den)


def _round_to_count(value: float) -> int:
    """Round half away from zero, saturating at zero as an unsigned count does."""
    if math.isnan(value) or value <= 0:
        return 0
    return int(math.floor(value + 0.5))


def _reverse_stacks(lines: Iterable[str]) -> List[str]:
    reversed_lines = []
    for line in lines:
        found = merge.rfind_samples(line)
        samples_idx = found[0] if found is not None else len(line)
        found = merge.rfind_samples(line[: max(samples_idx - 1, 0)])
        if found is not None:
            samples_idx = found[0]
        stack = ";".join(reversed(line[:samples_idx].strip().split(";")))
        reversed_lines.append(f"{stack} {line[samples_idx:]}")
    return reversed_lines


def _merged_frames(opt: Options, lines: Iterable[str]) -> Tuple[List[TimedFrame], int, int, int]:
    if opt.reverse_stack_order:
        if opt.no_sort:
            _log.warning(
                "Input lines are always sorted when `reverse_stack_order` is `true`. "
                "The `no_sort` option is being ignored."
            )
        return merge.frames(sorted(_reverse_stacks(lines)))
    if opt.no_sort:
        return merge.frames(lines)
    return merge.frames(sorted(lines))


def _frame_info(opt: Options, frame: TimedFrame, samples: int, timemax: int) -> str:
    samples_txt = f"{samples:,}"
    if not frame.location.function and frame.location.depth == 0:
        return f"all ({samples_txt} {opt.count_name}, 100%)"

    pct = _divide(100 * samples, timemax * opt.factor)
    function = deannotate(frame.location.function)
    head = f"{function} ({samples_txt} {opt.count_name}, {pct:.2f}%"
    if frame.delta is None:
        return head + ")"
    if frame.delta == 0:
        return head + "; 0.00%)"
    delta = -frame.delta if opt.negate_differentials else frame.delta
    delta_pct = _divide(100 * delta, timemax * opt.factor)
    return head + f"; {delta_pct:+.2f}%)"


def _write_container_start(
    opt: Options, svg: SvgWriter, frame: TimedFrame, title: str
) -> Tuple[bool, str]:
    frame_attributes = opt.func_frameattrs.frameattrs_for_func(frame.location.function)
    if frame_attributes is None:
        svg.start("g")
        return False, title

    has_href = "xlink:href" in frame_attributes.attrs
    svg.start("a" if has_href else "g", list(frame_attributes.attrs.items()))
    if frame_attributes.title is not None:
        title = frame_attributes.title
    return has_href, title


def _frame_color(
    opt: Options, frame: TimedFrame, delta_max: int, rng: Callable[[], float]
) -> Color:
    function = frame.location.function
    if function == "--":
        return VDGREY
    if function == "-":
        return DGREY
    if frame.delta is not None:
        delta = -frame.delta if opt.negate_differentials else frame.delta
        return color_scale(delta, delta_max)
    if opt.palette_map is not None:
        return opt.palette_map.find_color_for(
            function, lambda name: color(opt.colors, opt.hash, name, rng)
        )
    return color(opt.colors, opt.hash, function, rng)


def _filled_rectangle(svg: SvgWriter, rect: _Rectangle, fill: Color) -> None:
    svg.empty(
        "rect",
        [
            ("x", f"{rect.x1_pct:.4f}%"),
            ("y", str(rect.y1)),
            ("width", f"{rect.width_pct:.4f}%"),
            ("height", str(rect.height)),
            ("fill", f"rgb({fill.r},{fill.g},{fill.b})"),
        ],
    )


def _fit_chars(opt: Options, rect: _Rectangle, image_width: float) -> int:
    ratio = _divide(rect.width_pct, 100.0 * opt.font_size * opt.font_width / image_width)
    if math.isnan(ratio) or ratio <= 0:
        return 0
    if math.isinf(ratio):
        return sys.maxsize
    return math.trunc(ratio)


def _label(opt: Options, frame: TimedFrame, rect: _Rectangle, image_width: float) -> str:
    fitchars = _fit_chars(opt, rect, image_width)
    if fitchars < 3:
        return ""
    f = deannotate(frame.location.function)
    if len(f.encode("utf-8")) < fitchars:
        return f
    return f[: fitchars - 2] + ".."


def _write_error(svg: SvgWriter, opt: Options) -> None:
    imageheight = opt.font_size * 5
    write_header(svg, imageheight, opt)
    write_text(
        svg,
        TextItem(
            Percent(50.0),
            float(opt.font_size * 2),
            "ERROR: No valid input provided to flamegraph",
        ),
    )
    svg.end("svg")


def from_lines(opt: Options, lines: Iterable[str], writer: TextIO) -> None:
    """Write an SVG flame graph for folded stack ``lines`` to ``writer``.

    Each line holds semicolon-separated frames, a sample count and an optional
    second count; with two counts a differential flame graph is drawn.
    Raises :class:`NoStackCountsError` (after writing an error SVG) when no
    samples are found, and :class:`ValueError` for unsorted input with ``no_sort``.
    """
    frames, time, ignored, delta_max = _merged_frames(opt, lines)

    if ignored:
        _log.warning("Ignored %d lines with invalid format", ignored)

    svg = SvgWriter(writer, opt.pretty_xml)

    if time == 0:
        _log.error("No stack counts found")
        _write_error(svg, opt)
        raise NoStackCountsError("No stack counts found")

    image_width = float(opt.image_width if opt.image_width is not None else DEFAULT_IMAGE_WIDTH)
    timemax = time
    widthpertime_pct = 100.0 / timemax
    minwidth_time = opt.min_width / widthpertime_pct

    frames = [f for f in frames if f.end_time - f.start_time >= minwidth_time]
    depthmax = max((f.location.depth for f in frames), default=0)

    imageheight = (depthmax + 1) * opt.frame_height + opt.ypad1() + opt.ypad2()
    write_header(svg, imageheight, opt)
    bgcolor1, bgcolor2 = bgcolor_for(opt.bgcolors, opt.colors)
    write_prelude(svg, imageheight, bgcolor1, bgcolor2, opt)

    rng = thread_rng()

    svg.start(
        "svg",
        [("id", "frames"), ("x", str(XPAD)), ("width", str(int(image_width) - XPAD - XPAD))],
    )

    for frame in frames:
        depth = frame.location.depth
        if opt.direction is Direction.INVERTED:
            y1 = opt.ypad1() + depth * opt.frame_height
            y2 = opt.ypad1() + (depth + 1) * opt.frame_height - FRAMEPAD
        else:
            y1 = imageheight - opt.ypad2() - (depth + 1) * opt.frame_height + FRAMEPAD
            y2 = imageheight - opt.ypad2() - depth * opt.frame_height

        rect = _Rectangle(
            frame.start_time * widthpertime_pct, y1, frame.end_time * widthpertime_pct, y2
        )

        samples = _round_to_count((frame.end_time - frame.start_time) * opt.factor)
        info = _frame_info(opt, frame, samples, timemax)

        has_href, title = _write_container_start(opt, svg, frame, info)
        svg.start("title")
        svg.text(title)
        svg.end("title")

        _filled_rectangle(svg, rect, _frame_color(opt, frame, delta_max, rng))

        write_text(
            svg,
            TextItem(
                Percent(rect.x1_pct + 100.0 * 3.0 / image_width),
                3.0 + (rect.y1 + rect.y2) / 2.0,
                _label(opt, frame, rect, image_width),
            ),
        )

        svg.end("a" if has_href else "g")

    svg.end("svg")
    svg.end("svg")


def _split_lines(text: str) -> List[str]:
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def _read_text(reader: IO) -> str:
    data = reader.read()
    if isinstance(data, bytes):
        return data.decode("utf-8")
    return data


def from_readers(opt: Options, readers: Iterable[IO], writer: TextIO) -> None:
    """Concatenate the contents of ``readers`` and draw a flame graph from them."""
    text = "".join(_read_text(reader) for reader in readers)
    from_lines(opt, _split_lines(text), writer)


def from_reader(opt: Options, reader: IO, writer: TextIO) -> None:
    """Draw a flame graph from the folded stack lines in ``reader``."""
    from_readers(opt, [reader], writer)


def from_files(
    opt: Options, files: Sequence[Union[str, "os.PathLike[str]"]], writer: TextIO
) -> None:
    """Draw a flame graph from folded stack files; ``-`` or no files means stdin."""
    names = [str(f) for f in files]
    if not names or names == ["-"]:
        from_reader(opt, sys.stdin, writer)
        return

    with ExitStack() as stack:
        readers: List[IO] = []
        stdin_added = False
        for name in names:
            if name == "-":
                if not stdin_added:
                    readers.append(sys.stdin)
                    stdin_added = True
            else:
                readers.append(stack.enter_context(open(name, "rb")))
        from_readers(opt, readers, writer)


def deannotate(f: str) -> str:
    """Strip a trailing ``_[k]``, ``_[w]``, ``_[i]`` or ``_[j]`` annotation."""
    if f.endswith("]"):
        ai = f.rfind("_[")
        if ai != -1 and len(f[ai:].encode("utf-8")) == 4 and f[ai + 2 : ai + 3] in _ANNOTATIONS:
            return f[:ai]
    return f


import os  # noqa: E402  (used only in annotations)