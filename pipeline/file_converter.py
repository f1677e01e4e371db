import base64
import binascii
import io
import re
from PIL import Image, UnidentifiedImageError
import pillow_heif

from config import settings
from .errors import InputError

pillow_heif.register_heif_opener()

DATA_URI_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


def decode_image_payload(image: str) -> bytes:
    """
    Base64 request payload -> raw image bytes.
    A leading data-URI header (data:image/<fmt>;base64,) is stripped first.
    """
    if not image or not image.strip():
        raise InputError("No image provided")

    b64_data = DATA_URI_PREFIX.sub("", image.strip(), count=1)
    try:
        raw = base64.b64decode(b64_data, validate=False)
    except (binascii.Error, ValueError):
        raise InputError("Image is not valid base64")

    if not raw:
        raise InputError("Image payload is empty")

    max_bytes = settings.MAX_IMAGE_MB * 1024 * 1024
    if len(raw) > max_bytes:
        raise InputError(f"Image exceeds {settings.MAX_IMAGE_MB:g} MB limit")

    return raw


def convert_to_jpeg(raw: bytes, quality: int = None) -> bytes:
    """
    Normalise any supported image (JPEG / PNG / WEBP / HEIC) to RGB JPEG.
    """
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InputError("Image could not be decoded", details={"reason": str(e)})

    out = io.BytesIO()
    img.convert("RGB").save(out, "JPEG", quality=quality or settings.JPEG_QUALITY)
    return out.getvalue()
