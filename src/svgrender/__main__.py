import argparse
import json
import logging
import os
import sys

from svgrender import Rsvg
from svgrender.request import RenderFormat, RenderRequest

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Render an SVG file")
    parser.add_argument("input", metavar="INPUT", type=str, help="Input SVG file path")
    parser.add_argument(
        "output",
        metavar="PATH",
        type=str,
        nargs="?",
        default=None,
        help="Output file. If omitted, print the document dimensions as JSON.",
    )
    parser.add_argument(
        "--format",
        metavar="FORMAT",
        type=str,
        default=None,
        help="Output format (png, pdf, svg, raw, or a raw pixel format such as "
        "argb32). Default: guessed from the output extension, else png.",
    )
    parser.add_argument(
        "--width", metavar="PIXELS", type=int, default=None, help="Output width."
    )
    parser.add_argument(
        "--height", metavar="PIXELS", type=int, default=None, help="Output height."
    )
    parser.add_argument(
        "--id",
        dest="element_id",
        metavar="ID",
        type=str,
        default=None,
        help='Render only the subelement with this id, e.g. "#logo".',
    )
    parser.add_argument(
        "--dpi", metavar="DPI", type=float, default=None, help="Resolution in DPI."
    )
    parser.add_argument(
        "--base-uri",
        metavar="URI",
        type=str,
        default=None,
        help="Base URI for relative references. Default: the input file.",
    )
    parser.add_argument(
        "--autocrop",
        action="store_true",
        help="Print the painted area of the document as JSON.",
    )
    parser.add_argument(
        "--loglevel",
        metavar="LEVEL",
        default="WARNING",
        help="Logging level, default WARNING",
    )
    return parser.parse_args(argv)


def guess_format(output: str | None) -> str:
    """Guess the render format from an output file extension."""
    if output:
        ext = os.path.splitext(output)[1].lower().lstrip(".")
        if ext in (RenderFormat.PNG.value, RenderFormat.PDF.value, RenderFormat.SVG.value):
            return ext
        if ext in ("raw", "bin"):
            return RenderFormat.RAW.value
    return RenderFormat.PNG.value


def main(argv: list[str] | None = None) -> None:
    """Main function to render an SVG file or report its geometry."""
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.loglevel.upper(), "WARNING"))

    with open(args.input, "rb") as f:
        data = f.read()

    with Rsvg(data) as svg:
        svg.base_uri = args.base_uri or os.path.abspath(args.input)
        if args.dpi is not None:
            svg.set_dpi(args.dpi)

        if args.autocrop:
            json.dump(svg.autocrop().as_dict(), sys.stdout)
            sys.stdout.write("\n")
            return
        if args.output is None:
            json.dump(svg.dimensions(args.element_id).as_dict(), sys.stdout)
            sys.stdout.write("\n")
            return

        request = RenderRequest.from_format(
            args.format or guess_format(args.output),
            width=args.width,
            height=args.height,
            element_id=args.element_id,
        )
        result = svg.render(request)

    logger.info(
        f"Saving {args.output} ({result.format}, {result.width}x{result.height})"
    )
    if isinstance(result.data, str):
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result.data)
    else:
        with open(args.output, "wb") as f:
            f.write(result.data)


if __name__ == "__main__":
    main()
