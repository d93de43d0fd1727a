"""Merging sorted folded stack lines into timed frames."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

__all__ = ["Frame", "TimedFrame", "frames", "rfind_samples", "parse_nsamples"]

_log = logging.getLogger(__name__)

_DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class Frame:
    """A function at a given stack depth."""

    function: str
    depth: int


@dataclass
class TimedFrame:
    """A frame together with the span of samples it covers."""

    location: Frame
    start_time: int
    end_time: int
    delta: Optional[int] = None


@dataclass
class _FrameTime:
    start_time: int
    delta: Optional[int]


class _Samples(NamedTuple):
    count: int
    rest: str
    truncated: bool


def _all_digits(s: str) -> bool:
    return all(ch in _DIGITS for ch in s)


def rfind_samples(line: str) -> Optional[Tuple[int, int]]:
    """Locate a sample count at the end of ``line``.

    Returns ``(start, dot)`` where ``start`` is the index of the count and ``dot`` is
    the offset of the decimal point within it, or the count's length if it has none.
    Returns ``None`` when the line does not end in a count.
    """
    space = line.rfind(" ")
    if space == -1:
        return None
    samplesi = space + 1
    samples = line[samplesi:]
    doti = samples.find(".")
    if doti != -1:
        if _all_digits(samples[:doti]) and _all_digits(samples[doti + 1 :]):
            return samplesi, doti
        return None
    if not _all_digits(samples):
        return None
    return samplesi, len(line) - samplesi


def parse_nsamples(line: str) -> Optional[_Samples]:
    """Parse the trailing sample count of ``line``.

    Returns the integer count (any fractional part dropped), the line without the
    count, and whether a non-zero fractional part was dropped; ``None`` if there is
    no valid count.
    """
    found = rfind_samples(line)
    if found is None:
        return None
    samplesi, doti = found
    samples = line[samplesi:]
    fraction = samples[doti + 1 :]
    truncated = doti < len(samples) - 1 and not all(ch == "0" for ch in fraction)
    whole = samples[:doti]
    if not whole:
        return None
    return _Samples(int(whole), line[:samplesi].rstrip(), truncated)


def _flow(
    tmp: Dict[Frame, _FrameTime],
    out: List[TimedFrame],
    last: Sequence[str],
    this: Sequence[str],
    time: int,
    delta: Optional[int],
) -> None:
    shared_depth = 0
    for old, new in zip(last, this):
        if old != new:
            break
        shared_depth += 1

    for depth, func in enumerate(last[shared_depth:], start=shared_depth):
        key = Frame(func, depth)
        try:
            frame_time = tmp.pop(key)
        except KeyError:
            raise RuntimeError(f"did not have start time for {key}") from None
        out.append(TimedFrame(key, frame_time.start_time, time, frame_time.delta))

    new_frames = this[shared_depth:]
    for offset, func in enumerate(new_frames):
        key = Frame(func, shared_depth + offset)
        is_last = offset == len(new_frames) - 1
        frame_delta = 0 if delta is not None and not is_last else delta
        if key in tmp:
            raise RuntimeError(
                f"start time {tmp[key].start_time} already registered for frame"
            )
        tmp[key] = _FrameTime(time, frame_delta)


def frames(lines: Iterable[str]) -> Tuple[List[TimedFrame], int, int, int]:
    """Merge sorted folded stack lines into timed frames.

    Returns ``(frames, total_time, ignored_lines, delta_max)``. Raises
    :class:`ValueError` when the lines are not sorted.
    """
    time = 0
    ignored = 0
    last = ""
    tmp: Dict[Frame, _FrameTime] = {}
    out: List[TimedFrame] = []
    delta: Optional[int] = None
    delta_max = 1
    warned_fractional = False
    prev_line: Optional[str] = None

    for raw in lines:
        line = raw.strip()
        if not line:
            continue

        if prev_line is not None and prev_line > line:
            raise ValueError("unsorted input lines detected")

        parsed = parse_nsamples(line)
        if parsed is None:
            ignored += 1
            continue
        nsamples, line, truncated = parsed
        original = parse_nsamples(line)
        if original is not None:
            line = original.rest
            truncated = truncated or original.truncated
            delta = nsamples - original.count
            delta_max = max(abs(delta), delta_max)

        if truncated and not warned_fractional:
            warned_fractional = True
            _log.warning(
                "The input data has fractional sample counts that will be truncated to "
                "integers. If you need to retain the extra precision you can scale up the "
                "sample data and use the --factor option to scale it back down."
            )

        if not line:
            ignored += 1
            continue

        stack = line
        this = [""] + stack.split(";")
        previous = [""] + last.split(";") if last else []
        _flow(tmp, out, previous, this, time, delta)

        last = stack
        time += nsamples
        prev_line = line

    if last:
        _flow(tmp, out, [""] + last.split(";"), [], time, delta)

    return out, time, ignored, delta_max