"""
Error types that map to the uniform API error envelope.

Extraction that finds nothing is not an error: it comes back as a
ValidationResult with is_valid=False and rejection reasons.
"""
import logging

logger = logging.getLogger(__name__)


class VerificationError(Exception):
    """Base exception for hard failures in the verification flow"""
    status_code = 500

    def __init__(self, message, error_code, details=None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Convert error to the JSON error envelope"""
        return {
            "success": False,
            "error": self.message,
        }


class InputError(VerificationError):
    """Malformed or missing request payload"""
    status_code = 400

    def __init__(self, message, details=None):
        super().__init__(message=message, error_code="INVALID_INPUT", details=details)


class RecognitionFailure(VerificationError):
    """Text recognition raised or timed out"""
    status_code = 500

    def __init__(self, reason=None):
        super().__init__(
            message="Failed to process image",
            error_code="RECOGNITION_FAILED",
            details={"reason": reason},
        )


class FrameSourceError(VerificationError):
    """Camera or snapshot source could not deliver a frame"""
    status_code = 500

    def __init__(self, source, reason=None):
        super().__init__(
            message=f"Failed to read frame from {source}",
            error_code="FRAME_UNAVAILABLE",
            details={"source": source, "reason": reason},
        )


def log_error(error: VerificationError) -> None:
    """Log a hard failure with its details"""
    logger.error(f"[{error.error_code}] {error.message} | details={error.details}")
