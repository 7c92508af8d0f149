"""Scripted engine for facade tests."""

from typing import Optional

from svgrender import BoundingBox, RenderRequest, RenderResult
from svgrender.engine import Engine, EngineHandle
from svgrender.errors import EngineError


class FakeEngine(Engine):
    """Scripted engine that records the requests it receives.

    ``empty_renders`` is the number of leading render calls that return an
    empty buffer, to simulate the transient engine fault. ``geometry_error``
    makes element and autocrop queries fail.
    """

    def __init__(
        self,
        width: int = 100,
        height: int = 100,
        empty_renders: int = 0,
        parse_error: Optional[str] = None,
        elements: Optional[dict[str, BoundingBox]] = None,
        crop: Optional[BoundingBox] = None,
        geometry_error: Optional[str] = None,
    ) -> None:
        self.width = width
        self.height = height
        self.empty_renders = empty_renders
        self.parse_error = parse_error
        self.elements = elements or {}
        self.crop = crop or BoundingBox(0.0, 0.0, float(width), float(height))
        self.geometry_error = geometry_error
        self.requests: list[RenderRequest] = []
        self.released = 0

    def parse(self, data: bytes) -> EngineHandle:
        if self.parse_error is not None:
            raise EngineError(self.parse_error)
        return EngineHandle(source=data, width=self.width, height=self.height)

    def release_load_resources(self, handle: EngineHandle) -> None:
        self.released += 1
        handle.loading = False

    def dimensions(
        self, handle: EngineHandle, element_id: Optional[str] = None
    ) -> BoundingBox:
        if element_id is None:
            return BoundingBox(0.0, 0.0, float(handle.width), float(handle.height))
        if self.geometry_error is not None:
            raise EngineError(self.geometry_error)
        return self.elements[element_id]

    def has_element(self, handle: EngineHandle, element_id: str) -> bool:
        return element_id in self.elements

    def autocrop(self, handle: EngineHandle) -> BoundingBox:
        if self.geometry_error is not None:
            raise EngineError(self.geometry_error)
        return self.crop

    def render(self, handle: EngineHandle, request: RenderRequest) -> RenderResult:
        self.requests.append(request)
        if self.empty_renders > 0:
            self.empty_renders -= 1
            data = b""
        else:
            data = repr(request).encode("utf-8")
        return RenderResult(
            data=data,
            format=request.format.value,
            width=request.width or 0,
            height=request.height or 0,
            pixel_format=request.pixel_format.value if request.pixel_format else None,
        )
