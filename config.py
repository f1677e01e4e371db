from pydantic_settings import BaseSettings
from typing import Dict, Any, Optional

class Settings(BaseSettings):
    # Text recognition
    OCR_ENGINE: str = "tesseract"  # "tesseract" or "openai"
    TESSERACT_CMD: Optional[str] = None
    TESSERACT_LANG: str = "eng"
    OCR_TIMEOUT_SECONDS: float = 30
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4.1-mini"

    # Frame sampling
    ANALYSIS_WIDTH: int = 320
    ANALYSIS_INTERVAL_MS: int = 200
    SAMPLE_STRIDE: int = 2

    # Quality thresholds
    LOW_LIGHT_LUMA: float = 50
    GLARE_LUMA: float = 220
    EDGE_MARGIN_RATIO: float = 0.15
    EDGE_ACTIVITY_THRESHOLD: float = 12
    TEXT_CONTRAST_THRESHOLD: int = 20
    TEXT_DENSITY_THRESHOLD: int = 150
    BLUR_WARNING_SCORE: float = 40
    MIN_SOURCE_WIDTH: int = 960

    # Clarity smoothing and readiness
    CLARITY_SMOOTHING: float = 0.7
    INITIAL_CLARITY_SCORE: float = 50
    READY_CLARITY_SCORE: float = 60
    COUNTDOWN_SECONDS: int = 3
    COUNTDOWN_TICK_SECONDS: float = 1.0
    # Re-check readiness on the final countdown tick instead of firing blind
    REVALIDATE_ON_FIRE: bool = False

    # Selfie readiness
    FACE_MIN_QUALITY: float = 75

    # Burst capture
    BURST_FRAMES: int = 3
    BURST_DELAY_MS: int = 100
    BURST_SCORE_STRIDE: int = 4
    JPEG_QUALITY: int = 90

    # Frame sources
    CAMERA_INDEX: int = 0
    CAMERA_WIDTH: int = 1920
    CAMERA_HEIGHT: int = 1080
    SNAPSHOT_URL: Optional[str] = None
    SNAPSHOT_TIMEOUT_SECONDS: float = 5

    # Validation results
    PLACEHOLDER_CLARITY_SCORE: float = 85
    MAX_IMAGE_MB: float = 50

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()

# Reference data for the documents a user can scan
DOCUMENT_TYPES: Dict[str, Dict[str, Any]] = {
    "passport": {
        "name": "Passport",
        "category": "id",
        "description": "International travel document with photo",
        "requirements": ["Photo page visible", "MRZ readable", "Not expired"],
        "enabled": True,
    },
    "aadhaar-card": {
        "name": "Aadhaar Card",
        "category": "id",
        "description": "Generic 12-digit identification card",
        "requirements": ["Front side", "12-digit number visible", "Photo visible"],
        "enabled": True,
    },
    "pan-card": {
        "name": "PAN Card",
        "category": "id",
        "description": "Permanent Account Number card",
        "requirements": ["Card number readable", "Name visible", "Date of birth visible"],
        "enabled": True,
    },
    "drivers-license": {
        "name": "Driver's License",
        "category": "id",
        "description": "Valid driving license with photo",
        "requirements": ["Front side", "Photo visible", "Not expired"],
        "enabled": True,
    },
    "voter-id": {
        "name": "Voter ID",
        "category": "id",
        "description": "Electoral identification card",
        "requirements": ["Photo visible", "ID number readable"],
        "enabled": False,
        "disabled_reason": "Not available for your region",
    },
    "utility-bill": {
        "name": "Utility Bill",
        "category": "address",
        "description": "Electricity, gas, or water bill",
        "requirements": ["Issued within 3 months", "Name and address visible"],
        "enabled": True,
    },
    "bank-statement": {
        "name": "Bank Statement",
        "category": "address",
        "description": "Recent bank account statement",
        "requirements": ["Issued within 3 months", "Bank letterhead visible"],
        "enabled": True,
    },
    "tax-document": {
        "name": "Tax Document",
        "category": "address",
        "description": "Government tax correspondence",
        "requirements": ["Current tax year", "Address visible"],
        "enabled": True,
    },
    "rental-agreement": {
        "name": "Rental Agreement",
        "category": "address",
        "description": "Valid lease or rental contract",
        "requirements": ["Signed by both parties", "Address visible"],
        "enabled": False,
        "disabled_reason": "Profile shows property ownership",
    },
    "birth-certificate": {
        "name": "Birth Certificate",
        "category": "dob",
        "description": "Official birth registration document",
        "requirements": ["Official seal visible", "Date of birth readable"],
        "enabled": True,
    },
    "passport-dob": {
        "name": "Passport (DOB page)",
        "category": "dob",
        "description": "Passport showing date of birth",
        "requirements": ["Bio data page", "DOB clearly visible", "Not expired"],
        "enabled": True,
    },
    "school-certificate": {
        "name": "School Certificate",
        "category": "dob",
        "description": "Educational certificate with DOB",
        "requirements": ["Issuing school visible", "Date of birth readable"],
        "enabled": False,
        "disabled_reason": "Age verified through other documents",
    },
}

# 12 digits, optionally grouped 4-4-4 by a space or dash
TWELVE_DIGIT_ID_REGEX = r"\b\d{4}[ \-]?\d{4}[ \-]?\d{4}\b"

# 5 letters, 4 digits (OCR may read 0 as O), 1 letter
FUZZY_ALNUM_ID_REGEX = r"\b[A-Z]{5}[0-9O]{4}[A-Z]\b"

# dd-mm-yyyy or dd/mm/yyyy
FULL_DATE_REGEX = r"\b\d{2}[/\-]\d{2}[/\-]\d{4}\b"

YEAR_REGEX = r"\b\d{4}\b"

# Looser date shape used by the generic document heuristic
LOOSE_DATE_REGEX = r"\b\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}\b"

DOCUMENT_NUMBER_REGEX = r"\b[A-Z0-9]{6,12}\b"

UPPERCASE_NAME_REGEX = r"^[A-Z\s.]+$"

# Header words that must never be mistaken for a person's name
FATHERS_NAME_BLACKLIST = r"Permanent|Account|Number|Card|Govt|India|Signature|Income|Tax"
NAME_BLACKLIST = r"INCOME|TAX|Who|Govt|India|Permanent|Account|Number|Card"
FALLBACK_NAME_BLACKLIST = r"INCOME|TAX|INDIA|GOVT|ACCOUNT|NUMBER|CARD|Permanent"
