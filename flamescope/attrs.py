"""Per-function SVG attributes loaded from a name-attribute file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

__all__ = ["FrameAttrs", "FuncFrameAttrsMap"]

_log = logging.getLogger(__name__)


@dataclass
class FrameAttrs:
    """Attributes to set on the SVG elements of a frame.

    ``title`` replaces the generated title text when set.
    """

    title: Optional[str] = None
    attrs: Dict[str, str] = field(default_factory=dict)

    def add_attr(self, func: str, name: str, value: str) -> None:
        """Set an attribute, warning when it replaces an earlier value."""
        if name in self.attrs:
            _log.warning(
                'duplicate attribute `%s` in nameattr file for `%s`; replacing value "%s" with "%s"',
                name,
                func,
                self.attrs[name],
                value,
            )
        self.attrs[name] = value

    def parse_extra_attrs(self, func: str, s: str) -> None:
        """Add the ``name=value`` pairs found in ``s``."""
        for name, value in _extra_attrs(s):
            self.add_attr(func, name, value)


def _first_space(s: str) -> int:
    return next((i for i, ch in enumerate(s) if ch.isspace()), -1)


def _extra_attrs(s: str) -> Iterator[Tuple[str, str]]:
    while True:
        name_part, sep, rest = s.partition("=")
        name = name_part.strip()
        if not name:
            _log.warning('"=" found with no name in extra attributes')
            return
        *extras, name = name.split()
        for extra in extras:
            _log.warning(
                "extra attribute %s has no value (did you mean to quote the value?)", extra
            )
        if not sep:
            return
        rest = rest.lstrip()
        if not rest:
            _log.warning('no value after "=" for extra attribute %s', name)

        if rest.startswith('"'):
            end = rest.find('"', 1)
            if end == -1:
                _log.warning("no end quote found for extra attribute %s", name)
                return
            value, s = rest[1:end], rest[end:]
        else:
            w = _first_space(rest)
            if w != -1:
                value, s = rest[:w], rest[w + 1 :]
            else:
                value, s = rest, ""
        yield name, value


@dataclass
class FuncFrameAttrsMap:
    """Custom SVG attributes for frames, keyed by function name."""

    funcs: Dict[str, FrameAttrs] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Union[str, "os.PathLike[str]"]) -> "FuncFrameAttrsMap":
        """Parse frame attributes from a file."""
        with open(path, encoding="utf-8") as handle:
            return cls.from_reader(handle)

    @classmethod
    def from_reader(cls, reader: Iterable[str]) -> "FuncFrameAttrsMap":
        """Parse lines of ``function<TAB>name=value<TAB>...``."""
        result = cls()
        for raw in reader:
            func, sep, namevals = raw.strip().partition("\t")
            if not func:
                continue
            funcattrs = result.funcs.setdefault(func, FrameAttrs())
            if not sep:
                continue
            for nameval in namevals.split("\t"):
                name_part, eq, value = nameval.partition("=")
                name = name_part.strip()
                if not name or not eq:
                    continue
                value = value.strip()
                if value.startswith('"') and value.endswith('"'):
                    value = value[1:-1]
                if name == "title":
                    funcattrs.title = value
                elif name == "href":
                    funcattrs.add_attr(func, "xlink:href", value)
                elif name in ("id", "class", "target"):
                    funcattrs.add_attr(func, name, value)
                elif name in ("g_extra", "a_extra"):
                    funcattrs.parse_extra_attrs(func, value)
                else:
                    _log.warning("invalid attribute %s found for %s", name, func)

            if "xlink:href" in funcattrs.attrs and "target" not in funcattrs.attrs:
                funcattrs.attrs["target"] = "_top"
        return result

    def frameattrs_for_func(self, func: str) -> Optional[FrameAttrs]:
        """Return the attributes for ``func``, if any."""
        return self.funcs.get(func)