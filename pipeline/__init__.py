"""
Document Scan Pipeline

This package contains the capture and verification flow for identity documents:
- Live capture-quality analysis with auto-capture countdown
- Selfie auto-capture readiness
- Burst capture with sharpest-frame selection and contrast enhancement
- Text recognition (Tesseract or OpenAI Vision)
- Per-document-type field extraction and validation
"""

from .face_readiness import FaceConditions, FaceReadiness
from .scanner import ScanSession

__version__ = "1.0.0"

__all__ = ["FaceConditions", "FaceReadiness", "ScanSession"]
