"""Image rendering of dependency graphs."""

from .renderer import LAYOUTS, GraphRenderer, parse_figsize

__all__ = ["LAYOUTS", "GraphRenderer", "parse_figsize"]
