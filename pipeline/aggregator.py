from typing import Optional

from config import settings
from .models import ValidationResult, VariantOutput

NO_DATA_REASON = "No recognizable data found."


def base_result(clarity_score: Optional[float] = None) -> ValidationResult:
    """Starting point every document-specific result is merged onto"""
    if clarity_score is None:
        clarity_score = settings.PLACEHOLDER_CLARITY_SCORE
    return ValidationResult(is_valid=True, clarity_score=clarity_score)


def aggregate(
    variant: VariantOutput,
    base: Optional[ValidationResult] = None,
    clarity_score: Optional[float] = None,
) -> ValidationResult:
    """
    Merge heuristic output onto the base result.

    Validity comes from the heuristic when it expressed one. Fields and
    reasons keep base-then-heuristic order. A result without any field is
    never valid.
    """
    base = base or base_result(clarity_score)

    is_valid = variant.is_valid if variant.is_valid is not None else base.is_valid
    ocr_fields = base.ocr_fields + tuple(variant.ocr_fields)
    rejection_reasons = base.rejection_reasons + tuple(variant.rejection_reasons)

    if not ocr_fields:
        is_valid = False
        if NO_DATA_REASON not in rejection_reasons:
            rejection_reasons += (NO_DATA_REASON,)

    return ValidationResult(
        is_valid=is_valid,
        clarity_score=base.clarity_score,
        ocr_fields=ocr_fields,
        fraud_flags=base.fraud_flags,
        rejection_reasons=rejection_reasons,
    )
