"""Resource limits for document loading and rendering.

This module provides configurable limits that keep a single document from
exhausting memory, and the retry budget for transient empty renders.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Cairo image surfaces cannot exceed 32767 pixels per side.
MAX_SURFACE_DIMENSION = 32767

DEFAULT_MAX_INPUT_SIZE = 64 * 1024 * 1024
DEFAULT_MAX_RENDER_RETRIES = 2


@dataclass
class RenderLimits:
    """Resource limits for Rsvg documents.

    These limits constrain:
    - Input size (prevents memory exhaustion while parsing)
    - Output dimensions (prevents memory exhaustion while rasterizing)
    - Render retries (bounds the masking of empty engine output)

    Limits can be configured via environment variables or constructor parameters.
    Constructor parameters take precedence over environment variables.

    Environment variables:
        SVGRENDER_MAX_INPUT_SIZE: Maximum SVG source size in bytes
            (default: 67108864 = 64MB)
        SVGRENDER_MAX_DIMENSION: Maximum output width or height in pixels
            (default: 32767)
        SVGRENDER_MAX_RENDER_RETRIES: Retries after an empty render result
            (default: 2)

    Example:
        >>> limits = RenderLimits.default()
        >>> limits = RenderLimits(max_input_size=1024 * 1024, max_dimension=4096)
        >>> svg = Rsvg(data, limits=limits)
    """

    max_input_size: int = DEFAULT_MAX_INPUT_SIZE
    max_dimension: int = MAX_SURFACE_DIMENSION
    max_render_retries: int = DEFAULT_MAX_RENDER_RETRIES

    @classmethod
    def default(cls) -> "RenderLimits":
        """Create RenderLimits with values from environment variables.

        Raises:
            ValueError: If an environment variable is not a valid integer.

        Note:
            Negative values are treated as 0 with a warning logged. For the size
            limits 0 means disabled; for retries 0 means a single attempt.
        """

        def parse_env_int(key: str, default: int) -> int:
            value_str = os.environ.get(key)
            if value_str is None:
                return default

            try:
                value = int(value_str)
            except ValueError as e:
                raise ValueError(
                    f"Environment variable {key}={value_str!r} is not a valid integer"
                ) from e

            if value < 0:
                logger.warning(
                    f"Environment variable {key}={value} is negative, treating as 0."
                )
                return 0

            return value

        return cls(
            max_input_size=parse_env_int(
                "SVGRENDER_MAX_INPUT_SIZE", DEFAULT_MAX_INPUT_SIZE
            ),
            max_dimension=parse_env_int(
                "SVGRENDER_MAX_DIMENSION", MAX_SURFACE_DIMENSION
            ),
            max_render_retries=parse_env_int(
                "SVGRENDER_MAX_RENDER_RETRIES", DEFAULT_MAX_RENDER_RETRIES
            ),
        )

    @classmethod
    def unlimited(cls) -> "RenderLimits":
        """Create RenderLimits with the size limits disabled.

        The retry budget keeps its default; rendering is never retried forever.

        Warning:
            Only use this for trusted input in controlled environments.
        """
        return cls(max_input_size=0, max_dimension=0)

    def is_input_size_limited(self) -> bool:
        """Check if the input size limit is enabled."""
        return self.max_input_size > 0

    def is_dimension_limited(self) -> bool:
        """Check if the output dimension limit is enabled."""
        return self.max_dimension > 0
