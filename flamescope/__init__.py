"""Flame graph SVG rendering from folded stack traces, including differential graphs."""

__version__ = "0.1.0"