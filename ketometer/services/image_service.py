"""
Image processing service - decode, verify, downscale, encode for OpenAI.
"""
import base64
import binascii
import io

from PIL import Image, ImageOps, UnidentifiedImageError

from ketometer.core.logger import logger
from ketometer.models.request import ImagePayload


# JPEG quality used when a large photo is re-encoded
JPEG_QUALITY = 85


def decode_base64_image(encoded: str) -> bytes:
    """
    Decode a base64 image string from the client.

    Accepts plain base64 or a ``data:<type>;base64,`` URI and ignores
    embedded whitespace.

    Raises:
        ValueError: If the string is not valid base64 or decodes to nothing
    """
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]
    encoded = "".join(encoded.split())

    try:
        data = base64.b64decode(encoded, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 image data: {e}")

    if not data:
        raise ValueError("empty image data")
    return data


def verify_image(data: bytes) -> str:
    """
    Check that bytes decode as an image.

    ``verify()`` only checks the container, so the image is reopened and
    fully loaded to catch truncated or corrupt pixel data.

    Returns:
        Pillow format name (e.g. "JPEG", "PNG")

    Raises:
        ValueError: If Pillow cannot identify or verify the image
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            image_format = img.format or "UNKNOWN"
        with Image.open(io.BytesIO(data)) as img:
            img.load()
        return image_format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise ValueError(f"unreadable image: {e}")


def prepare_image(image: ImagePayload, max_dimension: int) -> ImagePayload:
    """
    Downscale an image whose long edge exceeds ``max_dimension``.

    Large phone photos are re-encoded as JPEG to keep the upstream
    payload small; images within the limit are returned unchanged.
    """
    with Image.open(io.BytesIO(image.data)) as img:
        if max(img.size) <= max_dimension:
            return image

        original_size = img.size
        # Phones store sideways photos with an EXIF Orientation tag
        resized = ImageOps.exif_transpose(img).convert("RGB")
        resized.thumbnail((max_dimension, max_dimension))

        buf = io.BytesIO()
        resized.save(buf, format="JPEG", quality=JPEG_QUALITY)
        data = buf.getvalue()
        buf.close()

    logger.info(
        f"Downscaled image {original_size[0]}x{original_size[1]} -> "
        f"{resized.size[0]}x{resized.size[1]} ({len(image.data)} -> {len(data)} bytes)"
    )
    return ImagePayload(data=data, media_type="image/jpeg", uri=image.uri)


def to_data_url(image: ImagePayload) -> str:
    """Inline data URI for an image."""
    return f"data:{image.media_type};base64,{base64.b64encode(image.data).decode()}"


def images_to_content(images: list[ImagePayload]) -> list[dict]:
    """
    Convert images to OpenAI-compatible content format.

    Args:
        images: Decoded images

    Returns:
        OpenAI content array with base64 encoded images
    """
    return [
        {"type": "image_url", "image_url": {"url": to_data_url(img)}}
        for img in images
    ]


def media_type_for(image_format: str) -> str | None:
    """MIME type Pillow associates with a detected format, if any."""
    return Image.MIME.get(image_format.upper())
