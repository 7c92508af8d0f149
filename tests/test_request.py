"""Tests for render request normalization."""

import numpy as np
import pytest

from svgrender.errors import UnsupportedFormat
from svgrender.request import (
    BoundingBox,
    PixelFormat,
    RenderFormat,
    RenderRequest,
    parse_format,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, (RenderFormat.RAW, PixelFormat.ARGB32)),
        ("raw", (RenderFormat.RAW, PixelFormat.ARGB32)),
        ("png", (RenderFormat.PNG, None)),
        ("pdf", (RenderFormat.PDF, None)),
        ("svg", (RenderFormat.SVG, None)),
        ("argb32", (RenderFormat.RAW, PixelFormat.ARGB32)),
        ("rgb24", (RenderFormat.RAW, PixelFormat.RGB24)),
        ("a8", (RenderFormat.RAW, PixelFormat.A8)),
        ("a1", (RenderFormat.RAW, PixelFormat.A1)),
        ("rgb16_565", (RenderFormat.RAW, PixelFormat.RGB16_565)),
        ("rgb30", (RenderFormat.RAW, PixelFormat.RGB30)),
        (PixelFormat.A8, (RenderFormat.RAW, PixelFormat.A8)),
        (RenderFormat.PNG, (RenderFormat.PNG, None)),
    ],
)
def test_parse_format(value: object, expected: tuple) -> None:
    assert parse_format(value) == expected  # type: ignore[arg-type]


@pytest.mark.parametrize("value", ["PNG", "gif", "", "jpeg", 3])
def test_parse_format_unsupported(value: object) -> None:
    with pytest.raises(UnsupportedFormat):
        parse_format(value)  # type: ignore[arg-type]


def test_request_defaults() -> None:
    request = RenderRequest()
    assert request.format is RenderFormat.RAW
    assert request.pixel_format is PixelFormat.ARGB32
    assert not request.is_resolved


def test_request_from_string_format() -> None:
    assert RenderRequest(format="png").pixel_format is None  # type: ignore[arg-type]
    assert RenderRequest(format="a1").pixel_format is PixelFormat.A1  # type: ignore[arg-type]
    assert RenderRequest(format="raw", pixel_format="rgb24").pixel_format is PixelFormat.RGB24  # type: ignore[arg-type]


def test_request_unknown_pixel_format() -> None:
    with pytest.raises(UnsupportedFormat):
        RenderRequest(pixel_format="rgb48")  # type: ignore[arg-type]


def test_from_options() -> None:
    request = RenderRequest.from_options(
        {"format": "pdf", "width": 200, "height": 100, "id": "#a"}
    )
    assert request == RenderRequest(
        format=RenderFormat.PDF, pixel_format=None, width=200, height=100, element_id="#a"
    )


def test_from_options_prefers_id_over_element() -> None:
    request = RenderRequest.from_options({"id": "#a", "element": "#b"})
    assert request.element_id == "#a"


def test_from_args_folds_case() -> None:
    request = RenderRequest.from_args(10, 20, "PDF", "#a")
    assert request.format is RenderFormat.PDF
    assert (request.width, request.height, request.element_id) == (10, 20, "#a")


def test_integral_float_size_accepted() -> None:
    assert RenderRequest(width=200.0).width == 200  # type: ignore[arg-type]


def test_integer_like_size_accepted() -> None:
    request = RenderRequest(width=np.int64(50), height=np.uint16(20))
    assert (request.width, request.height) == (50, 20)
    assert type(request.width) is int


@pytest.mark.parametrize("value", [-1, 1.5, "100", True])
def test_invalid_size(value: object) -> None:
    with pytest.raises(ValueError):
        RenderRequest(width=value)  # type: ignore[arg-type]


def test_resolve_keeps_given_values() -> None:
    request = RenderRequest(width=50).resolve(100, 80)
    assert (request.width, request.height) == (50, 80)
    assert request.is_resolved


def test_bounding_box_rounded() -> None:
    box = BoundingBox(0.1 + 0.2, 1 / 3, 2.0004, 99.99999)
    assert box.rounded() == BoundingBox(0.3, 0.333, 2.0, 100.0)
    assert box.rounded().as_dict() == {"x": 0.3, "y": 0.333, "width": 2.0, "height": 100.0}


def test_bounding_box_is_empty() -> None:
    assert BoundingBox(5, 5, 0, 10).is_empty
    assert not BoundingBox(0, 0, 1, 1).is_empty
