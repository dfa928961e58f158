import logging
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union
import cairo

with warnings.catch_warnings():
    warnings.simplefilter("ignore", DeprecationWarning)
    import pyvips

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Raised when image bytes cannot be decoded."""

    pass


@dataclass
class DecodedImage:
    width: int
    height: int
    surface: cairo.ImageSurface

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 1.0


def _vips_to_surface(image: pyvips.Image) -> cairo.ImageSurface:
    """
    Converts a vips image into a premultiplied cairo ARGB32 surface.
    """
    if image.interpretation not in (
        pyvips.Interpretation.SRGB,
        pyvips.Interpretation.B_W,
    ):
        image = image.colourspace(pyvips.Interpretation.SRGB)
    if image.bands == 1:
        image = image.bandjoin([image, image])
    elif image.bands == 2:
        # Grey + alpha.
        image = image[0].bandjoin([image[0], image[0], image[1]])
    if image.bands == 3:
        image = image.bandjoin(255)
    image = image.cast(pyvips.BandFormat.UCHAR)

    # Cairo expects premultiplied alpha in native-endian ARGB, which is
    # BGRA byte order on little-endian machines.
    image = image.premultiply().cast(pyvips.BandFormat.UCHAR)
    b, g, r, a = image[2], image[1], image[0], image[3]
    bgra = b.bandjoin([g, r, a])
    buf = bytearray(bgra.write_to_memory())
    return cairo.ImageSurface.create_for_data(
        buf,
        cairo.FORMAT_ARGB32,
        bgra.width,
        bgra.height,
        bgra.width * 4,
    )


def decode_bytes(data: bytes) -> DecodedImage:
    """Decodes raw image bytes into a drawable surface."""
    try:
        image = pyvips.Image.new_from_buffer(
            data, "", access=pyvips.Access.SEQUENTIAL
        )
        surface = _vips_to_surface(image)
    except pyvips.Error as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    return DecodedImage(image.width, image.height, surface)


def load_image(path: Union[str, Path]) -> DecodedImage:
    """
    Reads and decodes an image file. A missing file is reported as
    FileNotFoundError before any decoding is attempted.
    """
    file = Path(path)
    if not file.is_file():
        raise FileNotFoundError(f"Image file not found: {file}")
    return decode_bytes(file.read_bytes())


def read_image_size(path: Union[str, Path]) -> Tuple[int, int]:
    """
    Returns the pixel dimensions of an image file. Only the header is
    read.
    """
    file = Path(path)
    if not file.is_file():
        raise FileNotFoundError(f"Image file not found: {file}")
    try:
        image = pyvips.Image.new_from_file(str(file))
    except pyvips.Error as e:
        raise DecodeError(f"Could not decode {file}: {e}") from e
    if image.width <= 0 or image.height <= 0:
        raise DecodeError(f"Image {file} has no pixels")
    return image.width, image.height
