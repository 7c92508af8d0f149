import logging
import math
from typing import Any, Mapping, Optional, Union

from svgrender.deprecated import LegacyRenderMixin
from svgrender.engine import Engine, EngineHandle, ResvgEngine
from svgrender.errors import (
    DocumentClosed,
    EngineError,
    InvalidInputType,
    LoadFailure,
    RenderFailure,
    SubelementNotFound,
)
from svgrender.request import BoundingBox, RenderRequest, RenderResult, Resolution
from svgrender.resource_limits import RenderLimits

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Rsvg(LegacyRenderMixin):
    """One SVG document to be rendered.

    Example usage::

        from svgrender import Rsvg

        with open("input.svg", "rb") as f:
            svg = Rsvg(f.read())

        print(svg.width, svg.height)
        png = svg.render(format="png", width=200, height=200)
        with open("output.png", "wb") as f:
            f.write(png.data)

        # Only one subelement.
        if svg.has_element("#logo"):
            logo = svg.render(format="png", id="#logo")

        svg.close()

    The object can also be used as a context manager, which closes it on exit.
    Operations on a closed document raise :class:`DocumentClosed`.

    Instances are not thread-safe; serialize all calls on one instance.
    """

    def __init__(
        self,
        buffer: Union[bytes, bytearray, memoryview, str],
        *,
        engine: Optional[Engine] = None,
        limits: Optional[RenderLimits] = None,
    ) -> None:
        """Load an SVG document.

        Args:
            buffer: SVG source as bytes, or as a string which is encoded as UTF-8.
            engine: Rendering engine. Defaults to a new :class:`ResvgEngine`.
            limits: Resource limits. Defaults to :meth:`RenderLimits.default`.

        Raises:
            InvalidInputType: If buffer is neither bytes nor a string.
            LoadFailure: If the input is too large or cannot be parsed.
        """
        if isinstance(buffer, str):
            buffer = buffer.encode("utf-8")
        elif isinstance(buffer, (bytearray, memoryview)):
            buffer = bytes(buffer)
        if not isinstance(buffer, bytes):
            raise InvalidInputType(
                f"buffer should be bytes or a string, got {type(buffer).__name__}"
            )

        self._engine = engine if engine is not None else ResvgEngine()
        self._limits = limits if limits is not None else RenderLimits.default()
        self._handle: Optional[EngineHandle] = None

        if (
            self._limits.is_input_size_limited()
            and len(buffer) > self._limits.max_input_size
        ):
            raise LoadFailure(
                f"Rsvg load failure: input of {len(buffer)} bytes exceeds the "
                f"limit of {self._limits.max_input_size} bytes"
            )

        try:
            handle = self._engine.parse(buffer)
            self._engine.release_load_resources(handle)
        except EngineError as e:
            raise LoadFailure(f"Rsvg load failure: {e}") from e
        self._handle = handle
        logger.debug(f"Loaded {self!r}")

    @property
    def handle(self) -> EngineHandle:
        """Engine handle of the document."""
        if self._handle is None:
            raise DocumentClosed("Operation on a closed Rsvg document")
        return self._handle

    @property
    def closed(self) -> bool:
        return self._handle is None

    def close(self) -> None:
        """Release the engine resources of the document.

        Calling close() more than once is allowed. Documents that are never
        closed are released when garbage collected.
        """
        self._handle = None

    def __enter__(self) -> "Rsvg":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def base_uri(self) -> Optional[str]:
        """Base URI that relative references in the document resolve against."""
        return self._engine.get_base_uri(self.handle)

    @base_uri.setter
    def base_uri(self, value: Optional[str]) -> None:
        self._engine.set_base_uri(self.handle, value)

    @property
    def dpi_x(self) -> float:
        """Horizontal resolution. Setting None restores the engine default."""
        return self._engine.get_dpi_x(self.handle)

    @dpi_x.setter
    def dpi_x(self, value: Optional[float]) -> None:
        self._engine.set_dpi_x(self.handle, value)

    @property
    def dpi_y(self) -> float:
        """Vertical resolution. Setting None restores the engine default."""
        return self._engine.get_dpi_y(self.handle)

    @dpi_y.setter
    def dpi_y(self, value: Optional[float]) -> None:
        self._engine.set_dpi_y(self.handle, value)

    @property
    def width(self) -> int:
        """Intrinsic width of the document in pixels."""
        return self._engine.get_width(self.handle)

    @property
    def height(self) -> int:
        """Intrinsic height of the document in pixels."""
        return self._engine.get_height(self.handle)

    def get_dpi(self) -> Resolution:
        """Resolution as reported by the engine, after any clamping."""
        return self._engine.get_dpi(self.handle)

    def set_dpi(self, x: Optional[float], y: Optional[float] = _UNSET) -> None:
        """Set the resolution. Common values are 75, 90 and 300 DPI.

        Args:
            x: Horizontal resolution.
            y: Vertical resolution. Defaults to x when left out.

        Passing None for an axis resets it to the engine default; 0 is kept
        as an explicit value.
        """
        if y is _UNSET:
            y = x
        self._engine.set_dpi(self.handle, x, y)

    def dimensions(self, id: Optional[str] = None) -> BoundingBox:
        """Get the size of the document, or the size and position of a subelement.

        Args:
            id: Subelement id, starting with "#".

        Raises:
            SubelementNotFound: If the subelement does not exist.
            RenderFailure: If the engine fails to compute the geometry.
        """
        try:
            box = self._engine.dimensions(self.handle, id)
        except KeyError:
            raise SubelementNotFound(f"Subelement not found: {id!r}") from None
        except EngineError as e:
            raise RenderFailure(f"Rsvg render failure: {e}") from e
        return box.rounded()

    def has_element(self, id: str) -> bool:
        """Check whether a subelement with the given "#id" exists."""
        return bool(self._engine.has_element(self.handle, id))

    def autocrop(self) -> BoundingBox:
        """Find the smallest area of the document that has painted content."""
        try:
            area = self._engine.autocrop(self.handle)
        except EngineError as e:
            raise RenderFailure(f"Rsvg render failure: {e}") from e
        logger.debug(f"Autocrop area: {area}")
        return area.rounded()

    def render(self, *args: Any, **kwargs: Any) -> RenderResult:
        """Render the document.

        Valid high-level formats are raw, png, pdf and svg. Raw output uses
        the argb32 pixel layout unless one of rgb24, a8, a1, rgb16_565 or
        rgb30 is given as the format. If an id is given, only that subelement
        is rendered.

        Accepted call shapes::

            svg.render()
            svg.render(RenderRequest(format="png", width=100))
            svg.render({"format": "png", "width": 100, "height": 100, "id": "#a"})
            svg.render(format="png", width=100, height=100, id="#a")
            svg.render(100, 100, "PNG", "#a")  # deprecated positional form

        Format names are matched exactly, except in the positional form
        where they are case-folded.

        Raises:
            UnsupportedFormat: If the format is not recognized.
            SubelementNotFound: If the subelement does not exist.
            ValueError: If the requested size is invalid or over the limit.
            RenderFailure: If the engine fails or keeps returning empty output.
        """
        return self._render(self._normalize(args, kwargs))

    def _normalize(
        self, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> RenderRequest:
        """Turn any accepted call shape into one RenderRequest."""
        options_like = (type(None), RenderRequest, Mapping)
        if len(args) > 1 or (args and not isinstance(args[0], options_like)):
            return RenderRequest.from_args(*args, **kwargs)
        if args and kwargs:
            raise TypeError("render() takes either an options object or keyword options")
        if args and isinstance(args[0], RenderRequest):
            return args[0]
        if args:
            return RenderRequest.from_options(args[0])
        return RenderRequest.from_options(kwargs)

    def _target_box(self, request: RenderRequest) -> BoundingBox:
        """Area of the document that a request renders."""
        if request.element_id is not None:
            return self.dimensions(request.element_id)
        return BoundingBox(0.0, 0.0, float(self.width), float(self.height))

    def _resolve(self, request: RenderRequest, box: BoundingBox) -> RenderRequest:
        """Apply default output dimensions and check them against the limits."""
        if request.width == 0 or request.height == 0:
            raise ValueError("Render width and height must be positive")

        resolved = request.resolve(math.ceil(box.width), math.ceil(box.height))
        assert resolved.width is not None and resolved.height is not None

        if self._limits.is_dimension_limited():
            limit = self._limits.max_dimension
            if resolved.width > limit or resolved.height > limit:
                raise ValueError(
                    f"Render size {resolved.width}x{resolved.height} exceeds the "
                    f"limit of {limit} pixels"
                )
        return resolved

    def _render(self, request: RenderRequest) -> RenderResult:
        box = self._target_box(request)
        resolved = self._resolve(request, box)
        # Degenerate documents and elements without extent render to an
        # empty buffer every time.
        retry = self.width + self.height > 0
        if request.element_id is not None and box.is_empty:
            logger.debug(f"Subelement {request.element_id!r} has no extent")
            retry = False
        attempts = self._limits.max_render_retries + 1 if retry else 1
        for attempt in range(1, attempts + 1):
            try:
                result = self._engine.render(self.handle, resolved)
            except EngineError as e:
                raise RenderFailure(f"Rsvg render failure: {e}") from e

            # The engine occasionally returns an empty buffer for a document
            # that has content; rendering again succeeds.
            if retry and len(result.data) == 0:
                if attempt < attempts:
                    logger.warning(
                        f"Empty render result, retrying ({attempt}/{attempts - 1})"
                    )
                continue
            return result

        raise RenderFailure(
            f"Rsvg render failure: empty result after {attempts} attempt(s)"
        )

    def __repr__(self) -> str:
        if self.closed:
            return f"{type(self).__name__}(closed)"
        fields = [f"width={self.width}", f"height={self.height}"]
        if self.base_uri:
            fields.append(f"base_uri={self.base_uri!r}")
        return f"{type(self).__name__}({', '.join(fields)})"
