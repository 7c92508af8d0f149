import io
import logging

import numpy as np
from PIL import Image

from svgrender.request import PixelFormat

logger = logging.getLogger(__name__)


def decode_image(data: bytes, mode: str | None = "RGBA") -> Image.Image:
    """Decode image data from bytes to a PIL image."""
    with io.BytesIO(data) as input:
        image = Image.open(input)
        image.load()
    if mode is not None and image.mode != mode:
        return image.convert(mode)
    return image


def encode_image(image: Image.Image, format: str = "PNG") -> bytes:
    """Encode a PIL image to bytes in the specified format.

    For formats without alpha support (JPEG, PDF), RGBA images are converted
    to RGB over a white background. PDF output carries no timestamps, so the
    same image always encodes to the same bytes.
    """
    format = format.upper()
    if format in ("JPEG", "PDF") and image.mode == "RGBA":
        rgb_image = Image.new("RGB", image.size, (255, 255, 255))
        rgb_image.paste(image, mask=image.split()[3])  # Use alpha as mask
        image = rgb_image

    params: dict[str, object] = {}
    if format == "PDF":
        params = {"creationDate": None, "modDate": None}
    with io.BytesIO() as output:
        image.save(output, format=format, **params)
        return output.getvalue()


def premultiply(image: Image.Image) -> np.ndarray:
    """Return an RGBA image as a premultiplied uint8 array of shape (h, w, 4)."""
    pixels = np.asarray(image.convert("RGBA"), dtype=np.uint16)
    alpha = pixels[..., 3:4]
    rgb = (pixels[..., :3] * alpha + 127) // 255
    return np.concatenate([rgb, alpha], axis=-1).astype(np.uint8)


def encode_pixels(image: Image.Image, pixel_format: PixelFormat) -> bytes:
    """Pack an RGBA image into a raw Cairo pixel layout.

    Multi-byte pixels are stored as native-endian integers, as Cairo does,
    and rows are packed without padding.

    - argb32: 32 bits, premultiplied alpha in the high byte.
    - rgb24: 32 bits, color over black, high byte unused (zero).
    - a8: 8 bits of alpha.
    - a1: 1 bit of alpha (set when alpha >= 128), least significant bit first.
    - rgb16_565: 16 bits, 5-6-5 color over black.
    - rgb30: 32 bits, 10 bits per color channel over black.
    """
    pixels = premultiply(image).astype(np.uint32)
    r, g, b, a = (pixels[..., i] for i in range(4))
    pixel_format = PixelFormat(pixel_format)

    if pixel_format is PixelFormat.ARGB32:
        packed = (a << 24) | (r << 16) | (g << 8) | b
        return packed.astype("=u4").tobytes()
    if pixel_format is PixelFormat.RGB24:
        packed = (r << 16) | (g << 8) | b
        return packed.astype("=u4").tobytes()
    if pixel_format is PixelFormat.A8:
        return a.astype(np.uint8).tobytes()
    if pixel_format is PixelFormat.A1:
        bits = (a >= 128).astype(np.uint8).ravel()
        return np.packbits(bits, bitorder="little").tobytes()
    if pixel_format is PixelFormat.RGB16_565:
        packed = ((r >> 3) << 11) | ((g >> 2) << 5) | (b >> 3)
        return packed.astype("=u2").tobytes()
    if pixel_format is PixelFormat.RGB30:
        r10, g10, b10 = ((c * 1023 + 127) // 255 for c in (r, g, b))
        packed = (r10 << 20) | (g10 << 10) | b10
        return packed.astype("=u4").tobytes()
    raise ValueError(f"Unsupported pixel format: {pixel_format}")


def alpha_bbox(image: Image.Image) -> tuple[int, int, int, int] | None:
    """Return the (left, top, right, bottom) extent of non-transparent pixels."""
    return image.getchannel("A").getbbox()
