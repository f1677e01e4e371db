from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

import logging
from functools import lru_cache
from typing import Optional

from pipeline.run_pipeline import run_pipeline
from pipeline.errors import VerificationError, InputError, log_error
from pipeline.models import DocumentType
from pipeline.recognizer import TextRecognizer, build_recognizer
from config import settings, DOCUMENT_TYPES

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Document Scan Verification Service",
    description="Text recognition and field validation for captured identity documents",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ProcessRequest(BaseModel):
    image: Optional[str] = None
    document_type: Optional[str] = Field(default=None, alias="documentType")


@lru_cache
def get_recognizer() -> TextRecognizer:
    return build_recognizer()


# ------------------------
# Error envelope
# ------------------------
@app.exception_handler(VerificationError)
async def verification_error_handler(request: Request, exc: VerificationError):
    log_error(exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = InputError("Malformed request payload", details={"errors": str(exc.errors())})
    log_error(error)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Failed to process image"},
    )


# ------------------------
# OCR processing API
# ------------------------
@app.post("/api/ocr/process")
def process_ocr(
    payload: ProcessRequest,
    recognizer: TextRecognizer = Depends(get_recognizer),
):
    """
    Recognize and validate a captured document image.
    Accepts base64 JPEG / PNG / HEIC, with or without a data-URI header.
    """
    if not payload.image:
        raise InputError("No image provided")

    validation_result = run_pipeline(payload.image, payload.document_type, recognizer)

    return {
        "success": True,
        "validationResult": validation_result.to_dict(),
    }


# ------------------------
# Reference data
# ------------------------
@app.get("/api/document-types")
async def list_document_types(category: Optional[str] = None):
    types = [
        DocumentType.from_config(doc_id, data)
        for doc_id, data in DOCUMENT_TYPES.items()
        if category is None or data["category"] == category
    ]
    return {"documentTypes": [doc.to_dict() for doc in types]}


# ------------------------
# Health Check
# ------------------------
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "document-scan",
        "ocr_engine": settings.OCR_ENGINE,
    }


# ------------------------
# Local Dev Entry
# ------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
