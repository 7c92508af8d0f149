"""Rendering engines.

An engine parses SVG documents and renders them; :class:`svgrender.Rsvg`
adapts one engine into the public facade. :class:`ResvgEngine` is the
default engine, built on resvg.
"""

from .base_engine import DEFAULT_DPI, Engine, EngineHandle
from .resvg_engine import ResvgEngine, ResvgHandle

__all__ = ["DEFAULT_DPI", "Engine", "EngineHandle", "ResvgEngine", "ResvgHandle"]
