import logging
import time
from typing import Optional

from .errors import RecognitionFailure
from .extractor import extract
from .file_converter import convert_to_jpeg, decode_image_payload
from .models import ValidationResult
from .recognizer import TextRecognizer

logger = logging.getLogger(__name__)


def run_pipeline(image: str, document_type: Optional[str], recognizer: TextRecognizer) -> ValidationResult:
    """
    Processing flow behind the OCR endpoint

    Args:
        image: base64 image, optionally with a data-URI header
        document_type: document type identifier ("unknown" when not given)
        recognizer: text recognition engine

    Returns:
        ValidationResult; soft failures come back with is_valid=False

    Raises:
        InputError: payload missing, not base64 or not an image
        RecognitionFailure: the recognizer failed
    """
    document_type = document_type or "unknown"

    # Step 1: decode and normalise the upload
    raw = decode_image_payload(image)
    jpeg = convert_to_jpeg(raw)

    # Step 2: text recognition
    started = time.perf_counter()
    try:
        text = recognizer.recognize(jpeg)
    except RecognitionFailure:
        raise
    except Exception as e:
        raise RecognitionFailure(reason=str(e)) from e
    logger.info(
        f"{recognizer.name} recognized {len((text or '').splitlines())} lines "
        f"in {(time.perf_counter() - started) * 1000:.0f}ms"
    )

    # Step 3: structured extraction
    return extract(text or "", document_type)
