"""
Data containers shared across the scan and extraction stages.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, Dict, Any, List


@dataclass(frozen=True)
class AnalysisSample:
    """Raw measurements taken from one downsampled frame."""
    avg_luminance: float
    avg_gradient: float
    edge_activity: Dict[str, float]  # top/bottom/left/right, normalised
    text_density: int


@dataclass(frozen=True)
class ScanWarning:
    type: str       # blur, glare, motion, shadow, lighting, alignment, resolution
    severity: str   # low, medium, high
    message: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class EdgeFlags:
    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False

    @property
    def all_detected(self) -> bool:
        return self.top and self.bottom and self.left and self.right

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)


@dataclass(frozen=True)
class CountdownStatus:
    phase: str = "idle"  # idle, counting, fired
    remaining: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class QualityState:
    """
    Snapshot of the analyzer after a tick.
    Only the QualityAnalyzer builds new instances.
    """
    clarity_score: float
    lighting: str = "good"
    edges: EdgeFlags = field(default_factory=EdgeFlags)
    warnings: Tuple[ScanWarning, ...] = ()
    document_detected: bool = False
    countdown: CountdownStatus = field(default_factory=CountdownStatus)

    @property
    def has_high_warning(self) -> bool:
        return any(w.severity == "high" for w in self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clarity_score": round(self.clarity_score, 2),
            "lighting": self.lighting,
            "edges": self.edges.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
            "document_detected": self.document_detected,
            "countdown": self.countdown.to_dict(),
        }


@dataclass(frozen=True)
class DocumentType:
    id: str
    name: str
    category: str  # id, address, dob
    description: str = ""
    requirements: Tuple[str, ...] = ()
    enabled: bool = True
    disabled_reason: Optional[str] = None

    @classmethod
    def from_config(cls, doc_id: str, data: Dict[str, Any]) -> "DocumentType":
        return cls(
            id=doc_id,
            name=data["name"],
            category=data["category"],
            description=data.get("description", ""),
            requirements=tuple(data.get("requirements", ())),
            enabled=data.get("enabled", True),
            disabled_reason=data.get("disabled_reason"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "requirements": list(self.requirements),
            "enabled": self.enabled,
        }
        if self.disabled_reason:
            result["disabledReason"] = self.disabled_reason
        return result


@dataclass(frozen=True)
class OCRField:
    label: str
    extracted: str
    confidence: int
    expected: Optional[str] = None
    mismatch: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "label": self.label,
            "extracted": self.extracted,
            "confidence": self.confidence,
            "mismatch": self.mismatch,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        return result


@dataclass
class VariantOutput:
    """What a document-type heuristic hands back to the aggregator."""
    ocr_fields: List[OCRField] = field(default_factory=list)
    rejection_reasons: List[str] = field(default_factory=list)
    # None means the heuristic has no opinion on validity
    is_valid: Optional[bool] = None


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    clarity_score: float
    ocr_fields: Tuple[OCRField, ...] = ()
    fraud_flags: Tuple[str, ...] = ()
    rejection_reasons: Tuple[str, ...] = ()

    def get_field(self, label: str) -> Optional[OCRField]:
        for ocr_field in self.ocr_fields:
            if ocr_field.label == label:
                return ocr_field
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys)."""
        return {
            "isValid": self.is_valid,
            "clarityScore": self.clarity_score,
            "ocrFields": [f.to_dict() for f in self.ocr_fields],
            "fraudFlags": list(self.fraud_flags),
            "rejectionReasons": list(self.rejection_reasons),
        }
