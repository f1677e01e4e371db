import base64
import io
import logging
from abc import ABC, abstractmethod
from typing import Optional

import pytesseract
from openai import OpenAI
from PIL import Image

from config import settings
from .errors import RecognitionFailure

logger = logging.getLogger(__name__)

TRANSCRIBE_PROMPT = """
You are a document text transcription system.

Transcribe ALL text visible in this document image exactly as printed.

Rules:
- One printed line per output line, top to bottom
- Keep numbers, dates and capitalisation exactly as shown
- Do not translate, summarise or add commentary
- If no text is visible, return an empty response
"""


class TextRecognizer(ABC):
    """
    Turns an encoded image into newline-delimited text.
    Any engine failure surfaces as RecognitionFailure.
    """

    name = "base"

    @abstractmethod
    def recognize(self, image_bytes: bytes) -> str:
        ...


class TesseractRecognizer(TextRecognizer):
    """Local Tesseract OCR"""

    name = "tesseract"

    def __init__(self, lang: Optional[str] = None, timeout: Optional[float] = None):
        self.lang = lang or settings.TESSERACT_LANG
        self.timeout = settings.OCR_TIMEOUT_SECONDS if timeout is None else timeout
        if settings.TESSERACT_CMD:
            pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD

    def recognize(self, image_bytes: bytes) -> str:
        try:
            img = Image.open(io.BytesIO(image_bytes)).convert("RGB")
            return pytesseract.image_to_string(img, lang=self.lang, timeout=self.timeout)
        except Exception as e:
            logger.error(f"Tesseract recognition failed: {e}")
            raise RecognitionFailure(reason=str(e)) from e


class OpenAIVisionRecognizer(TextRecognizer):
    """Transcription through an OpenAI vision model"""

    name = "openai"

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self.client = client or OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OCR_TIMEOUT_SECONDS,
        )
        self.model = model or settings.OPENAI_MODEL

    def encode_image(self, image_bytes: bytes) -> str:
        """Encode image as base64 data URL"""
        b64 = base64.b64encode(image_bytes).decode("utf-8")
        return f"data:image/jpeg;base64,{b64}"

    def recognize(self, image_bytes: bytes) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": TRANSCRIBE_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {
                                    "url": self.encode_image(image_bytes)
                                }
                            }
                        ]
                    }
                ],
                max_tokens=600,
                temperature=0
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"OpenAI transcription failed: {e}")
            raise RecognitionFailure(reason=str(e)) from e


RECOGNIZERS = {
    TesseractRecognizer.name: TesseractRecognizer,
    OpenAIVisionRecognizer.name: OpenAIVisionRecognizer,
}


def build_recognizer(engine: Optional[str] = None) -> TextRecognizer:
    """Recognizer selected by OCR_ENGINE"""
    engine = (engine or settings.OCR_ENGINE).lower()
    if engine not in RECOGNIZERS:
        raise ValueError(f"Unknown OCR engine: {engine}")
    logger.info(f"Using {engine} text recognizer")
    return RECOGNIZERS[engine]()
