"""Exception hierarchy for the SVG render facade."""


class SvgRenderError(Exception):
    """Base class for all errors raised by svgrender."""


class InvalidInputType(SvgRenderError, TypeError):
    """The document source is neither bytes nor a string."""


class LoadFailure(SvgRenderError, ValueError):
    """The engine could not load the document."""


class SubelementNotFound(SvgRenderError, KeyError):
    """No subelement matches the requested id."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class UnsupportedFormat(SvgRenderError, ValueError):
    """The render format is not one of the known output formats."""


class RenderFailure(SvgRenderError, RuntimeError):
    """Rendering did not produce a usable result."""


class DocumentClosed(SvgRenderError, RuntimeError):
    """The document was used after close()."""


class EngineError(SvgRenderError):
    """Raised by engine implementations for backend failures."""
