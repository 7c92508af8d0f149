import logging
import re
import xml.etree.ElementTree as ET
from copy import deepcopy
from re import Pattern
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

ET.register_namespace("", NAMESPACE)
ET.register_namespace("xlink", XLINK_NAMESPACE)

DEFAULT_NUMBER_DIGITS = 4
DEFAULT_FONT_SIZE = 16.0

LENGTH_RE: Pattern[str] = re.compile(
    r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(px|in|cm|mm|pt|pc|em|ex|%)?\s*$"
)
VIEWBOX_SEP_RE: Pattern[str] = re.compile(r"[\s,]+")

# Elements that never paint by themselves; they stay visible when a
# subelement is isolated so references into them keep working.
NON_RENDERING_TAGS = frozenset(
    [
        "defs",
        "style",
        "script",
        "title",
        "desc",
        "metadata",
        "clipPath",
        "mask",
        "marker",
        "pattern",
        "filter",
        "symbol",
        "linearGradient",
        "radialGradient",
        "font-face",
    ]
)

FORCED_PAINT_STYLE = "fill:#000;fill-opacity:1;stroke-opacity:1;opacity:1"


def num2str(num: int | float, digit: int = DEFAULT_NUMBER_DIGITS) -> str:
    """Convert a number to a string, trimming trailing zeros from floats."""
    if isinstance(num, int):
        return str(num)
    if num.is_integer():
        return str(int(num))
    number = f"{num:.{digit}f}"
    return number.rstrip("0").rstrip(".")


def seq2str(seq: Sequence[int | float], sep: str = " ") -> str:
    return sep.join(num2str(n) for n in seq)


def local_name(tag: object) -> str:
    """Return the tag name without its namespace, or "" for comments."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def qualify(root: ET.Element) -> None:
    """Move un-namespaced elements into the SVG namespace in place."""
    for node in root.iter():
        if isinstance(node.tag, str) and not node.tag.startswith("{"):
            node.tag = f"{{{NAMESPACE}}}{node.tag}"


def fromstring(data: bytes) -> ET.Element:
    """Parse SVG bytes and return the <svg> root element.

    Raises:
        ET.ParseError: If the data is not well-formed XML.
        ValueError: If the root element is not <svg>.
    """
    root = ET.fromstring(data)
    if local_name(root.tag) != "svg":
        raise ValueError(f"Root element is <{local_name(root.tag)}>, expected <svg>")
    qualify(root)
    return root


def tostring(node: ET.Element) -> str:
    """Serialize an element without reformatting its whitespace."""
    return ET.tostring(node, encoding="unicode", xml_declaration=False)


def parse_length(
    value: Optional[str], dpi: float, reference: Optional[float] = None
) -> Optional[float]:
    """Convert an SVG length to pixels.

    Args:
        value: Length string such as "100", "2in" or "50%".
        dpi: Resolution used for absolute units.
        reference: Length that percentages refer to. Percentages resolve
            to None when no reference is available.

    Returns:
        Length in pixels, or None if the value is missing or malformed.
    """
    if value is None:
        return None
    match = LENGTH_RE.match(value)
    if match is None:
        logger.debug(f"Ignoring malformed length: {value!r}")
        return None
    number = float(match.group(1))
    unit = match.group(2) or "px"
    if unit == "px":
        return number
    if unit == "in":
        return number * dpi
    if unit == "cm":
        return number * dpi / 2.54
    if unit == "mm":
        return number * dpi / 25.4
    if unit == "pt":
        return number * dpi / 72.0
    if unit == "pc":
        return number * dpi / 6.0
    if unit == "em":
        return number * DEFAULT_FONT_SIZE
    if unit == "ex":
        return number * DEFAULT_FONT_SIZE / 2.0
    if reference is None:
        return None
    return number * reference / 100.0


def parse_viewbox(value: Optional[str]) -> Optional[tuple[float, float, float, float]]:
    """Parse a viewBox attribute into (x, y, width, height)."""
    if not value:
        return None
    try:
        numbers = [float(v) for v in VIEWBOX_SEP_RE.split(value.strip())]
    except ValueError:
        logger.debug(f"Ignoring malformed viewBox: {value!r}")
        return None
    if len(numbers) != 4 or numbers[2] < 0 or numbers[3] < 0:
        logger.debug(f"Ignoring malformed viewBox: {value!r}")
        return None
    return numbers[0], numbers[1], numbers[2], numbers[3]


def intrinsic_size(root: ET.Element, dpi: float) -> tuple[float, float]:
    """Compute the natural size of an <svg> root in pixels.

    Missing or percentage width and height fall back to the viewBox. A
    document with neither has a zero size.
    """
    viewbox = parse_viewbox(root.get("viewBox"))
    width = parse_length(root.get("width"), dpi, viewbox[2] if viewbox else None)
    height = parse_length(root.get("height"), dpi, viewbox[3] if viewbox else None)
    if viewbox is not None:
        vw, vh = viewbox[2], viewbox[3]
        if width is None and height is None:
            width, height = vw, vh
        elif width is None:
            width = height * vw / vh if vh else 0.0
        elif height is None:
            height = width * vh / vw if vw else 0.0
    return max(width or 0.0, 0.0), max(height or 0.0, 0.0)


def build_id_index(root: ET.Element) -> dict[str, ET.Element]:
    """Map id attributes to elements; the first occurrence of an id wins."""
    index: dict[str, ET.Element] = {}
    for node in root.iter():
        node_id = node.get("id")
        if node_id and node_id not in index:
            index[node_id] = node
    return index


def _find_path(root: ET.Element, target: ET.Element) -> Optional[list[ET.Element]]:
    """Return the chain of elements from root down to target."""
    if root is target:
        return [root]
    for child in root:
        path = _find_path(child, target)
        if path is not None:
            return [root] + path
    return None


def isolate_element(root: ET.Element, element_id: str) -> ET.Element:
    """Return a copy of the document in which only one subelement paints.

    Every painting sibling along the path from the root to the target is
    hidden with display="none". Non-rendering containers such as <defs>
    stay untouched.

    Raises:
        KeyError: If no element has the id.
    """
    svg = deepcopy(root)
    target = build_id_index(svg).get(element_id)
    if target is None:
        raise KeyError(element_id)
    path = _find_path(svg, target)
    assert path is not None
    on_path = set(map(id, path))
    for ancestor in path[:-1]:
        for child in ancestor:
            if id(child) in on_path or local_name(child.tag) in NON_RENDERING_TAGS:
                continue
            if isinstance(child.tag, str):
                child.set("display", "none")
    return svg


def force_paint(root: ET.Element) -> None:
    """Make every shape of a document paint opaquely, in place.

    Fills become opaque black and group opacity is dropped, so that shapes
    with fill="none" or full transparency still show their geometry. Content
    of non-rendering containers such as <mask> or <clipPath> is left alone.
    """
    style = root.get("style", "").strip().rstrip(";")
    if style:
        style += ";"
    root.set("style", style + FORCED_PAINT_STYLE)
    for child in root:
        if isinstance(child.tag, str) and local_name(child.tag) not in NON_RENDERING_TAGS:
            force_paint(child)


def wrap_viewport(
    root: ET.Element,
    box: Sequence[float],
    width: int,
    height: int,
    document_size: tuple[float, float],
    overflow: bool = False,
) -> ET.Element:
    """Embed a document in an outer <svg> that maps a box onto the output.

    The document is laid out at its intrinsic pixel size, and the region
    ``box`` (x, y, width, height in document pixels) is stretched to
    ``width`` x ``height`` output pixels. With ``overflow`` set, content
    outside the document viewport is not clipped.
    """
    outer = ET.Element(
        f"{{{NAMESPACE}}}svg",
        {
            "width": str(width),
            "height": str(height),
            "viewBox": seq2str(box),
            "preserveAspectRatio": "none",
        },
    )
    inner = deepcopy(root)
    inner.set("x", "0")
    inner.set("y", "0")
    inner.set("width", num2str(document_size[0]))
    inner.set("height", num2str(document_size[1]))
    if overflow:
        inner.set("overflow", "visible")
    outer.append(inner)
    return outer
