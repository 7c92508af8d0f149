from logging import getLogger

from svgrender.engine import Engine, ResvgEngine
from svgrender.errors import (
    DocumentClosed,
    EngineError,
    InvalidInputType,
    LoadFailure,
    RenderFailure,
    SubelementNotFound,
    SvgRenderError,
    UnsupportedFormat,
)
from svgrender.facade import Rsvg
from svgrender.request import (
    BoundingBox,
    PixelFormat,
    RenderFormat,
    RenderRequest,
    RenderResult,
    Resolution,
)
from svgrender.resource_limits import RenderLimits
from svgrender.version import __version__ as __version__

logger = getLogger(__name__)

__all__ = [
    "BoundingBox",
    "DocumentClosed",
    "Engine",
    "EngineError",
    "InvalidInputType",
    "LoadFailure",
    "PixelFormat",
    "RenderFailure",
    "RenderFormat",
    "RenderLimits",
    "RenderRequest",
    "RenderResult",
    "Resolution",
    "ResvgEngine",
    "Rsvg",
    "SubelementNotFound",
    "SvgRenderError",
    "UnsupportedFormat",
]
