"""Tests for SVG tree helpers."""

import xml.etree.ElementTree as ET

import pytest

from svgrender import svg_utils

NS = f"{{{svg_utils.NAMESPACE}}}"


@pytest.mark.parametrize(
    "value, dpi, expected",
    [
        ("100", 90.0, 100.0),
        ("100px", 90.0, 100.0),
        (" 12.5 ", 90.0, 12.5),
        ("1in", 90.0, 90.0),
        ("1in", 300.0, 300.0),
        ("2.54cm", 96.0, 96.0),
        ("25.4mm", 72.0, 72.0),
        ("72pt", 90.0, 90.0),
        ("6pc", 90.0, 90.0),
        ("2em", 90.0, 32.0),
        ("1e2", 90.0, 100.0),
    ],
)
def test_parse_length(value: str, dpi: float, expected: float) -> None:
    assert svg_utils.parse_length(value, dpi) == pytest.approx(expected)


def test_parse_length_percentage() -> None:
    assert svg_utils.parse_length("50%", 90.0, reference=200.0) == 100.0
    assert svg_utils.parse_length("50%", 90.0) is None


@pytest.mark.parametrize("value", [None, "", "auto", "10 apples", "abc"])
def test_parse_length_malformed(value: str | None) -> None:
    assert svg_utils.parse_length(value, 90.0) is None


def test_parse_viewbox() -> None:
    assert svg_utils.parse_viewbox("0 0 100 50") == (0.0, 0.0, 100.0, 50.0)
    assert svg_utils.parse_viewbox("-10,-10, 20 20") == (-10.0, -10.0, 20.0, 20.0)
    assert svg_utils.parse_viewbox("0 0 100") is None
    assert svg_utils.parse_viewbox("0 0 -1 10") is None
    assert svg_utils.parse_viewbox(None) is None


@pytest.mark.parametrize(
    "attrib, expected",
    [
        ({"width": "100", "height": "50"}, (100.0, 50.0)),
        ({"viewBox": "0 0 200 150"}, (200.0, 150.0)),
        ({"width": "100%", "height": "100%", "viewBox": "0 0 200 150"}, (200.0, 150.0)),
        ({"width": "400", "viewBox": "0 0 200 100"}, (400.0, 200.0)),
        ({"height": "50", "viewBox": "0 0 200 100"}, (100.0, 50.0)),
        ({"width": "1in", "height": "2in"}, (90.0, 180.0)),
        ({}, (0.0, 0.0)),
    ],
)
def test_intrinsic_size(attrib: dict[str, str], expected: tuple[float, float]) -> None:
    root = ET.Element(f"{NS}svg", attrib)
    assert svg_utils.intrinsic_size(root, 90.0) == pytest.approx(expected)


def test_fromstring_qualifies_tags() -> None:
    root = svg_utils.fromstring(b'<svg width="10" height="10"><rect id="a"/></svg>')
    assert root.tag == f"{NS}svg"
    assert root[0].tag == f"{NS}rect"


def test_fromstring_rejects_non_svg_root() -> None:
    with pytest.raises(ValueError, match="expected <svg>"):
        svg_utils.fromstring(b"<html/>")


def test_fromstring_rejects_malformed_xml() -> None:
    with pytest.raises(ET.ParseError):
        svg_utils.fromstring(b"<svg")


def test_build_id_index_first_wins() -> None:
    root = svg_utils.fromstring(
        b'<svg xmlns="http://www.w3.org/2000/svg">'
        b'<g id="a"><rect id="b"/></g><circle id="a"/></svg>'
    )
    index = svg_utils.build_id_index(root)
    assert set(index) == {"a", "b"}
    assert svg_utils.local_name(index["a"].tag) == "g"


def test_isolate_element() -> None:
    root = svg_utils.fromstring(
        b'<svg xmlns="http://www.w3.org/2000/svg">'
        b'<defs><linearGradient id="g"/></defs>'
        b'<rect id="before"/>'
        b'<g id="group"><circle id="target"/><rect id="sibling"/></g>'
        b'<rect id="after"/>'
        b"</svg>"
    )
    isolated = svg_utils.isolate_element(root, "target")
    index = svg_utils.build_id_index(isolated)
    assert index["before"].get("display") == "none"
    assert index["after"].get("display") == "none"
    assert index["sibling"].get("display") == "none"
    assert index["group"].get("display") is None
    assert index["target"].get("display") is None
    assert index["g"].get("display") is None
    # The original tree is untouched.
    assert svg_utils.build_id_index(root)["before"].get("display") is None


def test_isolate_missing_element() -> None:
    root = svg_utils.fromstring(b'<svg xmlns="http://www.w3.org/2000/svg"/>')
    with pytest.raises(KeyError):
        svg_utils.isolate_element(root, "missing")


def test_wrap_viewport() -> None:
    root = svg_utils.fromstring(
        b'<svg xmlns="http://www.w3.org/2000/svg" width="1in" height="1in"/>'
    )
    outer = svg_utils.wrap_viewport(root, (10.0, 10.0, 80.5, 80.0), 200, 100, (90.0, 90.0))
    assert outer.get("width") == "200"
    assert outer.get("height") == "100"
    assert outer.get("viewBox") == "10 10 80.5 80"
    assert outer.get("preserveAspectRatio") == "none"
    inner = outer[0]
    assert inner.get("width") == "90"
    assert inner.get("height") == "90"
    assert root.get("width") == "1in"
    assert inner.get("overflow") is None


def test_wrap_viewport_overflow() -> None:
    root = svg_utils.fromstring(b'<svg xmlns="http://www.w3.org/2000/svg"/>')
    outer = svg_utils.wrap_viewport(
        root, (-100.0, -100.0, 300.0, 300.0), 300, 300, (100.0, 100.0), overflow=True
    )
    assert outer.get("viewBox") == "-100 -100 300 300"
    assert outer[0].get("overflow") == "visible"


def test_force_paint() -> None:
    root = svg_utils.fromstring(
        b'<svg xmlns="http://www.w3.org/2000/svg">'
        b'<mask id="m"><rect id="mask-rect" fill="white"/></mask>'
        b'<g id="group" opacity="0"><rect id="shape" fill="none" style="stroke:red;"/></g>'
        b"</svg>"
    )
    svg_utils.force_paint(root)
    index = svg_utils.build_id_index(root)
    assert index["group"].get("style") == svg_utils.FORCED_PAINT_STYLE
    assert index["shape"].get("style") == "stroke:red;" + svg_utils.FORCED_PAINT_STYLE
    assert index["shape"].get("fill") == "none"
    assert index["m"].get("style") is None
    assert index["mask-rect"].get("style") is None


def test_tostring_uses_default_namespace() -> None:
    root = svg_utils.fromstring(b'<svg xmlns="http://www.w3.org/2000/svg"><rect/></svg>')
    text = svg_utils.tostring(root)
    assert text.startswith('<svg xmlns="http://www.w3.org/2000/svg"')
    assert "ns0:" not in text


def test_num2str() -> None:
    assert svg_utils.num2str(10) == "10"
    assert svg_utils.num2str(10.0) == "10"
    assert svg_utils.num2str(0.125) == "0.125"
    assert svg_utils.num2str(-0.5) == "-0.5"
