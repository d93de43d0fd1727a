"""Colour palettes and the rules that pick a hue from a function name."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "BasicPalette",
    "MultiPalette",
    "resolve_java",
    "resolve_perl",
    "resolve_js",
    "resolve_wakeup",
]


class BasicPalette(Enum):
    """A plain palette whose colour does not depend on function semantics."""

    HOT = "hot"
    MEM = "mem"
    IO = "io"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    AQUA = "aqua"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"


class MultiPalette(Enum):
    """A semantic palette that picks a basic palette per function name."""

    JAVA = "java"
    JS = "js"
    PERL = "perl"
    WAKEUP = "wakeup"

    def resolve(self, name: str) -> BasicPalette:
        """Return the basic palette used for ``name`` under this semantic palette."""
        return _RESOLVERS[self](name)


_JAVA_PREFIXES = ("java/", "javax/", "jdk/", "net/", "org/", "com/", "io/", "sun/")

_JAVA_ANNOTATIONS = {
    "k": BasicPalette.ORANGE,  # kernel
    "i": BasicPalette.AQUA,  # inlined
    "j": BasicPalette.GREEN,  # jit
}


def resolve_java(name: str) -> BasicPalette:
    """Pick a palette for a Java frame, honouring ``_[k]``/``_[i]``/``_[j]`` annotations."""
    if name.endswith("]"):
        ai = name.rfind("_[")
        if ai != -1 and len(name[ai:]) == 4:
            annotated = _JAVA_ANNOTATIONS.get(name[ai + 2 : ai + 3])
            if annotated is not None:
                return annotated

    java_prefix = name[1:] if name.startswith("L") else name
    if java_prefix.startswith(_JAVA_PREFIXES):
        return BasicPalette.GREEN
    if "::" in name:
        return BasicPalette.YELLOW
    return BasicPalette.RED


def resolve_perl(name: str) -> BasicPalette:
    """Pick a palette for a Perl frame."""
    if name.endswith("_[k]"):
        return BasicPalette.ORANGE
    if "Perl" in name or ".pl" in name:
        return BasicPalette.GREEN
    if "::" in name:
        return BasicPalette.YELLOW
    return BasicPalette.RED


def resolve_js(name: str) -> BasicPalette:
    """Pick a palette for a JavaScript frame."""
    if name and not name.strip():
        return BasicPalette.GREEN
    if name.endswith("_[k]"):
        return BasicPalette.ORANGE
    if name.endswith("_[j]"):
        return BasicPalette.GREEN if "/" in name else BasicPalette.AQUA
    if "::" in name:
        return BasicPalette.YELLOW
    if ":" in name:
        return BasicPalette.AQUA
    slash = name.find("/")
    if slash != -1 and ".js" in name[slash:]:
        return BasicPalette.GREEN
    return BasicPalette.RED


def resolve_wakeup(name: str) -> BasicPalette:
    """Wakeup stacks are always drawn in aqua."""
    return BasicPalette.AQUA


_RESOLVERS = {
    MultiPalette.JAVA: resolve_java,
    MultiPalette.JS: resolve_js,
    MultiPalette.PERL: resolve_perl,
    MultiPalette.WAKEUP: resolve_wakeup,
}