"""Render request and result types.

Every call shape accepted by :meth:`svgrender.Rsvg.render` is normalized into
a single :class:`RenderRequest` before it reaches the engine. Results come
back as :class:`RenderResult`, and geometry queries as :class:`BoundingBox`.
"""

import dataclasses
import logging
import numbers
import operator
from enum import Enum
from typing import Any, Mapping, NamedTuple, Optional, Union

from svgrender.errors import UnsupportedFormat

logger = logging.getLogger(__name__)

# Digits kept in every bounding box handed to callers.
GEOMETRY_DIGITS = 3


class RenderFormat(str, Enum):
    """High-level output formats."""

    RAW = "raw"
    PNG = "png"
    PDF = "pdf"
    SVG = "svg"


class PixelFormat(str, Enum):
    """Pixel layouts of raw output, named after Cairo image formats."""

    ARGB32 = "argb32"
    RGB24 = "rgb24"
    A8 = "a8"
    A1 = "a1"
    RGB16_565 = "rgb16_565"
    RGB30 = "rgb30"


DEFAULT_FORMAT = RenderFormat.RAW
DEFAULT_PIXEL_FORMAT = PixelFormat.ARGB32

_OPTION_KEYS = {"format", "width", "height", "id", "element"}


def parse_format(
    value: Union[str, RenderFormat, PixelFormat, None],
) -> tuple[RenderFormat, Optional[PixelFormat]]:
    """Map a format name to a (format, pixel format) pair.

    ``None`` selects the default raw ARGB32 output. ``"raw"`` is raw ARGB32,
    and a pixel format name such as ``"a8"`` is raw output in that layout.
    Matching is exact; callers that accept loose spelling must fold case
    themselves.

    Raises:
        UnsupportedFormat: If the name is not recognized.
    """
    if value is None:
        return DEFAULT_FORMAT, DEFAULT_PIXEL_FORMAT
    if isinstance(value, PixelFormat):
        return RenderFormat.RAW, value
    if isinstance(value, RenderFormat):
        return value, DEFAULT_PIXEL_FORMAT if value is RenderFormat.RAW else None
    if not isinstance(value, str):
        raise UnsupportedFormat(f"Unsupported render format: {value!r}")
    try:
        render_format = RenderFormat(value)
    except ValueError:
        pass
    else:
        if render_format is RenderFormat.RAW:
            return render_format, DEFAULT_PIXEL_FORMAT
        return render_format, None
    try:
        return RenderFormat.RAW, PixelFormat(value)
    except ValueError:
        raise UnsupportedFormat(f"Unsupported render format: {value!r}") from None


def _check_size(name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        if isinstance(value, numbers.Real) and float(value).is_integer():
            value = int(value)
        else:
            raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return operator.index(value)


@dataclasses.dataclass(frozen=True)
class RenderRequest:
    """One canonical render request.

    Example::

        request = RenderRequest.from_options({"format": "png", "width": 200})
        result = svg.render(request)
    """

    format: RenderFormat = DEFAULT_FORMAT
    pixel_format: Optional[PixelFormat] = DEFAULT_PIXEL_FORMAT
    width: Optional[int] = None
    height: Optional[int] = None
    element_id: Optional[str] = None

    def __post_init__(self) -> None:
        render_format, pixel_format = parse_format(self.format)
        # A bare pixel format name already carries its layout.
        if self.format is None or self.format == RenderFormat.RAW:
            try:
                pixel_format = PixelFormat(self.pixel_format or DEFAULT_PIXEL_FORMAT)
            except ValueError:
                raise UnsupportedFormat(
                    f"Unsupported pixel format: {self.pixel_format!r}"
                ) from None
        object.__setattr__(self, "format", render_format)
        object.__setattr__(self, "pixel_format", pixel_format)
        object.__setattr__(self, "width", _check_size("width", self.width))
        object.__setattr__(self, "height", _check_size("height", self.height))

    @classmethod
    def from_format(
        cls,
        format: Union[str, RenderFormat, PixelFormat, None] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        element_id: Optional[str] = None,
    ) -> "RenderRequest":
        """Build a request from a single format name."""
        render_format, pixel_format = parse_format(format)
        return cls(
            format=render_format,
            pixel_format=pixel_format,
            width=width,
            height=height,
            element_id=element_id,
        )

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]]) -> "RenderRequest":
        """Build a request from an options mapping.

        Recognized keys are ``format``, ``width``, ``height`` and ``id``
        (``element`` is accepted as an alias of ``id``). The format name is
        matched exactly.

        Raises:
            TypeError: If the mapping has unknown keys.
            UnsupportedFormat: If the format is not recognized.
        """
        options = dict(options or {})
        unknown = set(options) - _OPTION_KEYS
        if unknown:
            raise TypeError(f"Unknown render options: {', '.join(sorted(unknown))}")
        element_id = options.get("id")
        if element_id is None:
            element_id = options.get("element")
        return cls.from_format(
            options.get("format"),
            width=options.get("width"),
            height=options.get("height"),
            element_id=element_id,
        )

    @classmethod
    def from_args(
        cls,
        width: Optional[int] = None,
        height: Optional[int] = None,
        format: Optional[str] = None,
        id: Optional[str] = None,
    ) -> "RenderRequest":
        """Build a request from the positional ``(width, height, format, id)`` shape.

        The format name is case-folded before matching.
        """
        if isinstance(format, str):
            format = format.lower()
        return cls.from_format(format, width=width, height=height, element_id=id)

    @property
    def is_resolved(self) -> bool:
        return self.width is not None and self.height is not None

    def resolve(self, width: int, height: int) -> "RenderRequest":
        """Fill in missing output dimensions."""
        return dataclasses.replace(
            self,
            width=self.width if self.width is not None else width,
            height=self.height if self.height is not None else height,
        )


@dataclasses.dataclass
class RenderResult:
    """Output of a render call.

    ``data`` is text for SVG output and bytes otherwise. ``pixel_format`` is
    only set for raw output.
    """

    data: Union[bytes, str]
    format: str
    width: int
    height: int
    pixel_format: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in document pixel coordinates."""

    x: float
    y: float
    width: float
    height: float

    def rounded(self, digits: int = GEOMETRY_DIGITS) -> "BoundingBox":
        return BoundingBox(
            x=round(self.x, digits),
            y=round(self.y, digits),
            width=round(self.width, digits),
            height=round(self.height, digits),
        )

    def as_dict(self) -> dict[str, float]:
        return dataclasses.asdict(self)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class Resolution(NamedTuple):
    """Horizontal and vertical resolution in dots per inch."""

    x: float
    y: float
