"""Resvg-based rendering engine.

This module provides an :class:`Engine` that parses SVG documents with
ElementTree and rasterizes them with the resvg library via resvg-py. Output
encoding beyond PNG is done with Pillow and numpy.
"""

import dataclasses
import logging
import math
import os
import re
import urllib.parse
import urllib.request
import xml.etree.ElementTree as ET
from typing import Optional

import resvg_py

from svgrender import image_utils, svg_utils
from svgrender.errors import EngineError
from svgrender.request import (
    BoundingBox,
    RenderFormat,
    RenderRequest,
    RenderResult,
)

from .base_engine import Engine, EngineHandle

logger = logging.getLogger(__name__)

FONT_FILE_RE = re.compile(r'src:\s*url\(["\']?(file://[^"\')]+)["\']?\)')


@dataclasses.dataclass
class ResvgHandle(EngineHandle):
    """Parsed document for :class:`ResvgEngine`."""

    root: ET.Element = dataclasses.field(default=None, repr=False)  # type: ignore[assignment]
    document_size: tuple[float, float] = (0.0, 0.0)
    ids: dict[str, ET.Element] = dataclasses.field(default_factory=dict, repr=False)
    font_files: list[str] = dataclasses.field(default_factory=list)
    _geometry: dict[tuple[str, float], Optional[BoundingBox]] = dataclasses.field(
        default_factory=dict, init=False, repr=False
    )


class ResvgEngine(Engine):
    """SVG engine backed by resvg.

    Documents are laid out at their intrinsic pixel size. Rendering embeds
    the document, or an isolated copy in which only the requested subelement
    paints, in an outer <svg> whose viewBox selects the target box and whose
    size is the requested output size.

    Autocrop comes from the alpha channel of a supersampled render of the
    document viewport. Subelement geometry is measured the same way on a
    copy in which the element paints opaquely and is not clipped by the
    viewport, so unfilled and off-canvas elements keep their full extent.

    Note:
        resvg takes a single resolution; the horizontal resolution is used
        for unit conversion inside the document.

    Example:
        >>> engine = ResvgEngine()
        >>> handle = engine.parse(b'<svg xmlns="http://www.w3.org/2000/svg" ...>')
        >>> engine.release_load_resources(handle)
        >>> result = engine.render(handle, RenderRequest("png", width=100, height=100))
    """

    #: How many times a geometry scan may grow its area while the element is
    #: not found or reaches its edge. Each step quadruples the margin around the document.
    max_scan_expansions = 3

    def __init__(self, scan_scale: float = 4.0, max_scan_size: int = 4096) -> None:
        """Initialize the resvg engine.

        Args:
            scan_scale: Supersampling factor for geometry scans. Higher values
                give finer subpixel geometry at a higher cost.
            max_scan_size: Upper bound on either side of a scan render in
                pixels; large documents are scanned at a reduced scale.
        """
        self.scan_scale = scan_scale
        self.max_scan_size = max_scan_size

    def parse(self, data: bytes) -> ResvgHandle:
        try:
            root = svg_utils.fromstring(data)
        except (ET.ParseError, ValueError) as e:
            raise EngineError(str(e)) from e

        document_size = svg_utils.intrinsic_size(root, self.default_dpi)
        width, height = (int(math.floor(v + 0.5)) for v in document_size)
        logger.debug(f"Parsed SVG document of {width}x{height} pixels")
        return ResvgHandle(
            source=bytes(data),
            width=width,
            height=height,
            dpi_x=self.default_dpi,
            dpi_y=self.default_dpi,
            root=root,
            document_size=document_size,
        )

    def release_load_resources(self, handle: EngineHandle) -> None:
        handle = self._check_handle(handle)
        handle.ids = svg_utils.build_id_index(handle.root)
        handle.font_files = self._extract_font_file_paths(
            handle.source.decode("utf-8", errors="replace")
        )
        handle.loading = False
        logger.debug(f"Indexed {len(handle.ids)} element id(s)")

    def has_element(self, handle: EngineHandle, element_id: str) -> bool:
        return self._find_element(self._check_handle(handle), element_id) is not None

    def dimensions(
        self, handle: EngineHandle, element_id: Optional[str] = None
    ) -> BoundingBox:
        handle = self._check_handle(handle)
        if element_id is None:
            return BoundingBox(0.0, 0.0, float(handle.width), float(handle.height))
        if self._find_element(handle, element_id) is None:
            raise KeyError(element_id)

        key = (element_id, handle.dpi_x)
        if key not in handle._geometry:
            isolated = svg_utils.isolate_element(handle.root, element_id[1:])
            svg_utils.force_paint(isolated)
            handle._geometry[key] = self._measure(handle, isolated)
        return handle._geometry[key] or BoundingBox(0.0, 0.0, 0.0, 0.0)

    def autocrop(self, handle: EngineHandle) -> BoundingBox:
        handle = self._check_handle(handle)
        doc_width, doc_height = handle.document_size
        if doc_width <= 0 or doc_height <= 0:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)
        box, _ = self._scan(handle, handle.root, (0.0, 0.0, doc_width, doc_height))
        return box or BoundingBox(0.0, 0.0, 0.0, 0.0)

    def render(self, handle: EngineHandle, request: RenderRequest) -> RenderResult:
        handle = self._check_handle(handle)
        if not request.is_resolved:
            raise ValueError(f"Render request is not resolved: {request}")
        assert request.width is not None and request.height is not None

        if request.element_id is not None:
            box = self.dimensions(handle, request.element_id)
            root = svg_utils.isolate_element(handle.root, request.element_id[1:])
        else:
            box = BoundingBox(0.0, 0.0, *handle.document_size)
            root = handle.root

        result = RenderResult(
            data=b"",
            format=request.format.value,
            width=request.width,
            height=request.height,
            pixel_format=request.pixel_format.value if request.pixel_format else None,
        )
        if request.format is RenderFormat.SVG:
            result.data = ""
        if box.is_empty or request.width <= 0 or request.height <= 0:
            logger.debug("Nothing to render, target box is empty")
            return result

        svg = svg_utils.wrap_viewport(
            root,
            (box.x, box.y, box.width, box.height),
            request.width,
            request.height,
            handle.document_size,
            overflow=request.element_id is not None,
        )
        if request.format is RenderFormat.SVG:
            result.data = svg_utils.tostring(svg)
            return result

        png_bytes = self._rasterize(handle, svg)
        if request.format is RenderFormat.PNG:
            result.data = png_bytes
        elif request.format is RenderFormat.PDF:
            image = image_utils.decode_image(png_bytes)
            result.data = image_utils.encode_image(image, "PDF")
        else:
            assert request.pixel_format is not None
            image = image_utils.decode_image(png_bytes)
            result.data = image_utils.encode_pixels(image, request.pixel_format)
        return result

    def _check_handle(self, handle: EngineHandle) -> ResvgHandle:
        if not isinstance(handle, ResvgHandle):
            raise TypeError(f"Expected ResvgHandle, got {type(handle).__name__}")
        return handle

    def _find_element(
        self, handle: ResvgHandle, element_id: str
    ) -> Optional[ET.Element]:
        if not isinstance(element_id, str) or not element_id.startswith("#"):
            return None
        ids = svg_utils.build_id_index(handle.root) if handle.loading else handle.ids
        return ids.get(element_id[1:])

    def _measure(self, handle: ResvgHandle, root: ET.Element) -> Optional[BoundingBox]:
        """Find the extent of an isolated element in document pixels.

        A coarse scan over the document and a margin around it locates the
        element, growing the margin while the element is not found or touches
        the scan edge. A second scan over the located area gives the precise
        box.
        """
        doc_width, doc_height = handle.document_size
        if doc_width <= 0 or doc_height <= 0:
            return None
        margin = max(doc_width, doc_height)
        for _ in range(self.max_scan_expansions + 1):
            region = (-margin, -margin, doc_width + 2 * margin, doc_height + 2 * margin)
            box, clipped = self._scan(handle, root, region, overflow=True)
            if box is not None and not clipped:
                break
            margin *= 4
        if box is None:
            return None
        if clipped:
            logger.warning(f"Element extends beyond the scan area {region}, clipping")

        # One coarse pixel of padding covers antialiased edges.
        pad = region[2] / self._scan_size(region)[0]
        region = (
            box.x - pad,
            box.y - pad,
            box.width + 2 * pad,
            box.height + 2 * pad,
        )
        fine, _ = self._scan(handle, root, region, overflow=True)
        return fine or box

    def _scan_size(self, region: tuple[float, float, float, float]) -> tuple[int, int]:
        """Output pixel size of a supersampled scan over a region."""
        scale = min(self.scan_scale, self.max_scan_size / max(region[2], region[3]))
        width = max(1, math.ceil(region[2] * scale))
        height = max(1, math.ceil(region[3] * scale))
        return width, height

    def _scan(
        self,
        handle: ResvgHandle,
        root: ET.Element,
        region: tuple[float, float, float, float],
        overflow: bool = False,
    ) -> tuple[Optional[BoundingBox], bool]:
        """Find the painted extent within a region of the document.

        Returns:
            The extent in document pixels, or None if nothing paints, and
            whether the extent touches the edge of the region.
        """
        out_width, out_height = self._scan_size(region)
        svg = svg_utils.wrap_viewport(
            root, region, out_width, out_height, handle.document_size, overflow
        )
        image = image_utils.decode_image(self._rasterize(handle, svg))
        bbox = image_utils.alpha_bbox(image)
        if bbox is None:
            return None, False

        scale_x = out_width / region[2]
        scale_y = out_height / region[3]
        left, top, right, bottom = bbox
        box = BoundingBox(
            x=region[0] + left / scale_x,
            y=region[1] + top / scale_y,
            width=(right - left) / scale_x,
            height=(bottom - top) / scale_y,
        )
        clipped = left == 0 or top == 0 or right == out_width or bottom == out_height
        return box, clipped

    def _rasterize(self, handle: ResvgHandle, svg: ET.Element) -> bytes:
        """Rasterize an SVG element tree to PNG bytes."""
        try:
            png_bytes = resvg_py.svg_to_bytes(
                svg_string=svg_utils.tostring(svg),
                dpi=int(round(handle.dpi_x)),
                resources_dir=self._resources_dir(handle.base_uri),
                font_files=handle.font_files or None,
            )
        except Exception as e:
            raise EngineError(f"resvg failed: {e}") from e
        return bytes(png_bytes)

    @staticmethod
    def _resources_dir(base_uri: Optional[str]) -> Optional[str]:
        """Local directory that relative references resolve against.

        Only plain paths and file:// URIs resolve; other schemes are ignored.
        """
        if not base_uri:
            return None
        parsed = urllib.parse.urlparse(base_uri)
        if parsed.scheme == "file":
            path = urllib.request.url2pathname(parsed.path)
        elif parsed.scheme == "" or len(parsed.scheme) == 1:
            # A single letter is a Windows drive, not a scheme.
            path = base_uri
        else:
            logger.debug(f"Ignoring non-local base URI: {base_uri}")
            return None
        if os.path.isdir(path):
            return path
        return os.path.dirname(path) or None

    @staticmethod
    def _extract_font_file_paths(svg_content: str) -> list[str]:
        """Extract font file paths from @font-face src: url("file://...") rules."""
        font_files = [
            match.replace("file://", "") for match in FONT_FILE_RE.findall(svg_content)
        ]
        if font_files:
            logger.debug(f"Extracted {len(font_files)} font file(s) from SVG")
        return font_files
