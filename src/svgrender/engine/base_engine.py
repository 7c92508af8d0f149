import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from svgrender.request import BoundingBox, RenderRequest, RenderResult, Resolution

logger = logging.getLogger(__name__)

DEFAULT_DPI = 90.0


@dataclasses.dataclass
class EngineHandle:
    """State an engine keeps for one parsed document.

    ``width`` and ``height`` are fixed when the document is parsed. Engines
    may subclass this to carry their own parsed representation.
    """

    source: bytes
    width: int
    height: int
    base_uri: Optional[str] = None
    dpi_x: float = DEFAULT_DPI
    dpi_y: float = DEFAULT_DPI
    loading: bool = True


class Engine(ABC):
    """Base class for SVG rendering engines.

    An engine parses SVG bytes into an :class:`EngineHandle` and answers
    geometry and render requests against it. Subclasses must implement
    `parse`, `release_load_resources`, `dimensions`, `has_element`,
    `autocrop` and `render`. Requests handed to `render` are always fully
    resolved.

    Geometry is returned unrounded; rounding is the caller's concern.
    """

    default_dpi: float = DEFAULT_DPI

    @abstractmethod
    def parse(self, data: bytes) -> EngineHandle:
        """Parse an SVG document.

        Raises:
            EngineError: If the document cannot be parsed.
        """
        raise NotImplementedError

    @abstractmethod
    def release_load_resources(self, handle: EngineHandle) -> None:
        """Finish the load phase; the document structure is final afterwards."""
        raise NotImplementedError

    @abstractmethod
    def dimensions(
        self, handle: EngineHandle, element_id: Optional[str] = None
    ) -> BoundingBox:
        """Size and position of the document or of one subelement.

        Raises:
            KeyError: If the subelement does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def has_element(self, handle: EngineHandle, element_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def autocrop(self, handle: EngineHandle) -> BoundingBox:
        """Smallest box enclosing all non-transparent content."""
        raise NotImplementedError

    @abstractmethod
    def render(self, handle: EngineHandle, request: RenderRequest) -> RenderResult:
        raise NotImplementedError

    def get_base_uri(self, handle: EngineHandle) -> Optional[str]:
        return handle.base_uri

    def set_base_uri(self, handle: EngineHandle, value: Optional[str]) -> None:
        handle.base_uri = value

    def get_width(self, handle: EngineHandle) -> int:
        return handle.width

    def get_height(self, handle: EngineHandle) -> int:
        return handle.height

    def get_dpi_x(self, handle: EngineHandle) -> float:
        return handle.dpi_x

    def get_dpi_y(self, handle: EngineHandle) -> float:
        return handle.dpi_y

    def set_dpi_x(self, handle: EngineHandle, value: Optional[float]) -> None:
        handle.dpi_x = self._clamp_dpi(value)

    def set_dpi_y(self, handle: EngineHandle, value: Optional[float]) -> None:
        handle.dpi_y = self._clamp_dpi(value)

    def get_dpi(self, handle: EngineHandle) -> Resolution:
        return Resolution(self.get_dpi_x(handle), self.get_dpi_y(handle))

    def set_dpi(
        self, handle: EngineHandle, x: Optional[float], y: Optional[float]
    ) -> None:
        self.set_dpi_x(handle, x)
        self.set_dpi_y(handle, y)

    def _clamp_dpi(self, value: Any) -> float:
        """None resets to the default resolution; negative values clamp to 0."""
        if value is None:
            return self.default_dpi
        value = float(value)
        if value < 0:
            logger.warning(f"Negative resolution {value} clamped to 0")
            return 0.0
        return value
