"""Image inspection for vault uploads."""

from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError


def inspect_image(image_data: bytes) -> tuple[int, int, str]:
    """Verify the bytes decode as an image and return (width, height, format).

    Raises ValueError when Pillow cannot read the data.
    """
    try:
        img = Image.open(BytesIO(image_data))
        img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValueError(f"Not a valid image: {e}") from e

    # verify() leaves the image unusable, reopen to read the oriented size
    img = Image.open(BytesIO(image_data))
    fmt = (img.format or "").lower()
    width, height = ImageOps.exif_transpose(img).size
    return width, height, fmt
