import logging

import pytest
from fake_engine import FakeEngine

from svgrender import BoundingBox, RenderLimits

logger = logging.getLogger(__name__)


SIMPLE_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">
    <rect id="box" x="10" y="10" width="80" height="80" fill="red"/>
    <g id="empty"/>
</svg>"""


@pytest.fixture
def simple_svg() -> str:
    """100x100 document with one red square and one empty group."""
    return SIMPLE_SVG


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine(elements={"#box": BoundingBox(10.0, 10.0, 80.0, 80.0)})


@pytest.fixture
def limits() -> RenderLimits:
    return RenderLimits()
