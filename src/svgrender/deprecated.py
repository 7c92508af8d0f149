from typing import Any, Optional, Protocol

from svgrender.request import RenderFormat, RenderRequest, RenderResult


class RendererProtocol(Protocol):
    """Renderer state protocol."""

    def render(self, *args: Any, **kwargs: Any) -> RenderResult: ...


class LegacyRenderMixin:
    """Format-specific render helpers of the 1.x API.

    Each helper builds the equivalent :class:`RenderRequest` and hands it to
    ``render``; there is no other behavior here.
    """

    def render_raw(
        self: RendererProtocol,
        width: Optional[int] = None,
        height: Optional[int] = None,
        id: Optional[str] = None,
    ) -> RenderResult:
        """Render as a raw ARGB32 buffer of ``width * height * 4`` bytes.

        Deprecated: use ``render(format="raw", ...)``.
        """
        return self.render(
            RenderRequest.from_format(RenderFormat.RAW, width, height, id)
        )

    def render_png(
        self: RendererProtocol,
        width: Optional[int] = None,
        height: Optional[int] = None,
        id: Optional[str] = None,
    ) -> RenderResult:
        """Deprecated: use ``render(format="png", ...)``."""
        return self.render(
            RenderRequest.from_format(RenderFormat.PNG, width, height, id)
        )

    def render_pdf(
        self: RendererProtocol,
        width: Optional[int] = None,
        height: Optional[int] = None,
        id: Optional[str] = None,
    ) -> RenderResult:
        """Deprecated: use ``render(format="pdf", ...)``."""
        return self.render(
            RenderRequest.from_format(RenderFormat.PDF, width, height, id)
        )

    def render_svg(
        self: RendererProtocol,
        width: Optional[int] = None,
        height: Optional[int] = None,
        id: Optional[str] = None,
    ) -> RenderResult:
        """Render as normalized SVG text.

        The output follows a stricter structure than the input but is not
        necessarily smaller.

        Deprecated: use ``render(format="svg", ...)``.
        """
        return self.render(
            RenderRequest.from_format(RenderFormat.SVG, width, height, id)
        )
