"""Image utility functions for encoding uploads and decoding results."""

import base64
import io
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Union
from PIL import Image

from stylefusion.core.models import (
    DATA_URI_PATTERN,
    DEFAULT_MIME_TYPE,
    EncodedImage,
    GeneratedImage,
)

logger = logging.getLogger(__name__)


class ImageFormat:
    """Formats accepted for encoding PIL images."""
    PNG = "PNG"
    JPEG = "JPEG"
    WEBP = "WEBP"


def detect_mime_type(data: bytes) -> str:
    """Detect the media type of encoded image bytes.

    The bytes themselves are inspected with Pillow; file names are never
    trusted.

    Args:
        data: Encoded image bytes

    Returns:
        The detected media type, or "image/jpeg" if detection fails
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            mime_type = Image.MIME.get(image.format or "")
    except Exception as e:
        logger.debug(f"Could not identify image format: {e}")
        return DEFAULT_MIME_TYPE

    return mime_type or DEFAULT_MIME_TYPE


def encode_image_bytes(data: bytes, preview_path: Optional[str] = None) -> EncodedImage:
    """Encode raw image bytes for transport.

    Args:
        data: Encoded image bytes
        preview_path: Optional local file the bytes came from

    Returns:
        EncodedImage with base64 payload and detected media type

    Raises:
        ValueError: If data is empty
    """
    if not data:
        raise ValueError("Image data is empty")

    return EncodedImage(
        data=base64.b64encode(data).decode("ascii"),
        mime_type=detect_mime_type(data),
        preview_path=preview_path
    )


def encode_image_file(path: Union[str, Path]) -> EncodedImage:
    """Read a local image file and encode it.

    Args:
        path: Path to the image file

    Returns:
        EncodedImage for the file contents

    Raises:
        ValueError: If the file cannot be read or is empty
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error(f"Failed to read image file {path}: {e}")
        raise ValueError(f"Failed to read image file {path.name}: {e}") from e

    if not data:
        raise ValueError(f"Failed to read image file {path.name}: file is empty")

    encoded = encode_image_bytes(data, preview_path=str(path))
    logger.info(f"Loaded {path.name} as {encoded.mime_type} ({len(data)} bytes)")
    return encoded


def encode_pil_image(image: Image.Image, format: str = ImageFormat.PNG) -> EncodedImage:
    """Encode an in-memory PIL image.

    Args:
        image: PIL Image object
        format: Output format (PNG, JPEG, or WEBP)

    Returns:
        EncodedImage holding the saved bytes
    """
    output = io.BytesIO()

    # JPEG and WebP are saved without an alpha channel
    if format in (ImageFormat.JPEG, ImageFormat.WEBP) and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    image.save(output, format=format)
    return encode_image_bytes(output.getvalue())


def parse_data_uri(uri: str) -> tuple[str, str]:
    """Split a base64 data URI into its media type and payload.

    Args:
        uri: A string like "data:image/png;base64,AAAA"

    Returns:
        Tuple of (mime_type, base64_data)

    Raises:
        ValueError: If the string is not a base64 data URI
    """
    match = DATA_URI_PATTERN.match(uri or "")
    if not match:
        raise ValueError("Not a base64 data URI")
    return match.group("mime_type"), match.group("data")


def decode_generated_image(generated_image: GeneratedImage) -> Image.Image:
    """Open a generated image for display.

    Args:
        generated_image: GeneratedImage object

    Returns:
        Loaded PIL Image
    """
    image = Image.open(io.BytesIO(generated_image.to_bytes()))
    image.load()
    return image


def create_downloadable_image(generated_image: GeneratedImage) -> tuple[bytes, str]:
    """Prepare a generated image for saving.

    Args:
        generated_image: GeneratedImage object

    Returns:
        Tuple of (image_bytes, filename)
    """
    return generated_image.to_bytes(), generated_image.download_filename()


def get_image_info(image_bytes: bytes) -> Dict[str, Any]:
    """Get basic information about an image.

    Args:
        image_bytes: Image file bytes

    Returns:
        Dictionary with image information (size, format, mode, etc.)
    """
    image = Image.open(io.BytesIO(image_bytes))

    return {
        "width": image.width,
        "height": image.height,
        "format": image.format,
        "mode": image.mode,
        "size_bytes": len(image_bytes)
    }
