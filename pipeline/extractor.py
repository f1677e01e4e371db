import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from config import (
    TWELVE_DIGIT_ID_REGEX, FUZZY_ALNUM_ID_REGEX, FULL_DATE_REGEX, YEAR_REGEX,
    LOOSE_DATE_REGEX, DOCUMENT_NUMBER_REGEX, UPPERCASE_NAME_REGEX,
    FATHERS_NAME_BLACKLIST, NAME_BLACKLIST, FALLBACK_NAME_BLACKLIST,
)
from .aggregator import aggregate
from .models import OCRField, ValidationResult, VariantOutput

logger = logging.getLogger(__name__)


def split_lines(text: str) -> List[str]:
    """Trimmed, non-empty lines in their original order"""
    lines = (line.strip() for line in (text or "").split("\n"))
    return [line for line in lines if line]


def find_birth_date(text: str, dob_confidence: int, year_confidence: int) -> Optional[OCRField]:
    """Full dd/mm/yyyy date if present, otherwise a bare year"""
    dob_match = re.search(FULL_DATE_REGEX, text)
    if dob_match:
        return OCRField(label="DOB", extracted=dob_match.group(), confidence=dob_confidence)

    year_match = re.search(YEAR_REGEX, text)
    if year_match:
        return OCRField(label="Year of Birth", extracted=year_match.group(), confidence=year_confidence)
    return None


class DocumentHeuristic(ABC):
    """Field-extraction rules for one family of documents"""

    @abstractmethod
    def parse(self, text: str, lines: List[str]) -> VariantOutput:
        ...


class TwelveDigitIdHeuristic(DocumentHeuristic):
    """Cards carrying a 12-digit number, printed as 4-4-4"""

    def __init__(self):
        self.id_regex = re.compile(TWELVE_DIGIT_ID_REGEX)

    def parse(self, text: str, lines: List[str]) -> VariantOutput:
        result = VariantOutput(is_valid=True)

        id_match = self.id_regex.search(text)
        if id_match:
            result.ocr_fields.append(OCRField(label="ID Number", extracted=id_match.group(), confidence=90))
            # the number's own 4-digit groups must not pass for a birth year
            text = text[:id_match.start()] + " " + text[id_match.end():]
        else:
            result.is_valid = False
            result.rejection_reasons.append("Could not find 12-digit ID number.")

        if re.search(r"female", text, re.IGNORECASE):
            result.ocr_fields.append(OCRField(label="Gender", extracted="Female", confidence=85))
        elif re.search(r"male", text, re.IGNORECASE):
            result.ocr_fields.append(OCRField(label="Gender", extracted="Male", confidence=85))

        birth = find_birth_date(text, dob_confidence=85, year_confidence=80)
        if birth:
            result.ocr_fields.append(birth)

        return result


class FuzzyAlphanumericIdHeuristic(DocumentHeuristic):
    """
    Cards with a 5-letter, 4-digit, 1-letter number. OCR often reads the
    digit 0 as the letter O, so the numeric block is corrected after matching.

    Typical layout, top to bottom:
        header (issuing department)
        name
        father's name
        date of birth
        card number
    """

    def __init__(self):
        self.id_regex = re.compile(FUZZY_ALNUM_ID_REGEX)
        self.date_regex = re.compile(FULL_DATE_REGEX)

    def correct_id(self, raw: str) -> str:
        numeric = raw[5:9].replace("O", "0").replace("I", "1")
        return raw[:5] + numeric + raw[9:]

    def parse(self, text: str, lines: List[str]) -> VariantOutput:
        result = VariantOutput(is_valid=True)

        id_match = self.id_regex.search(text)
        if id_match:
            result.ocr_fields.append(OCRField(
                label="ID Number",
                extracted=self.correct_id(id_match.group()),
                confidence=92,
            ))
        else:
            result.is_valid = False
            result.rejection_reasons.append("Could not find valid alphanumeric ID number.")

        birth = find_birth_date(text, dob_confidence=90, year_confidence=70)
        if birth:
            result.ocr_fields.append(birth)

        result.ocr_fields.extend(self.find_names(lines))
        return result

    def find_names(self, lines: List[str]) -> List[OCRField]:
        anchor = self._line_index(lines, self.date_regex)
        if anchor == -1:
            anchor = self._line_index(lines, self.id_regex)

        if anchor < 2:
            return self._fallback_name(lines)

        names = []
        fathers_name = lines[anchor - 1]
        if len(fathers_name) > 3 and not re.search(FATHERS_NAME_BLACKLIST, fathers_name, re.IGNORECASE):
            names.append(OCRField(label="Father's Name", extracted=fathers_name, confidence=75))

        name = lines[anchor - 2]
        if len(name) > 3 and not re.search(NAME_BLACKLIST, name, re.IGNORECASE):
            names.append(OCRField(label="Name", extracted=name, confidence=75))
        return names

    def _fallback_name(self, lines: List[str]) -> List[OCRField]:
        for line in lines:
            if (
                re.match(UPPERCASE_NAME_REGEX, line)
                and len(line) > 3
                and not re.search(FALLBACK_NAME_BLACKLIST, line, re.IGNORECASE)
            ):
                return [OCRField(label="Name", extracted=line, confidence=60)]
        return []

    @staticmethod
    def _line_index(lines: List[str], pattern: re.Pattern) -> int:
        for idx, line in enumerate(lines):
            if pattern.search(line):
                return idx
        return -1


class GenericDocumentHeuristic(DocumentHeuristic):
    """
    Fallback for document types without dedicated rules: the first 6-12
    character alphanumeric token that is not part of a date.
    Leaves validity to the aggregator.
    """

    def __init__(self):
        self.date_regex = re.compile(LOOSE_DATE_REGEX)
        self.token_regex = re.compile(DOCUMENT_NUMBER_REGEX)

    def parse(self, text: str, lines: List[str]) -> VariantOutput:
        result = VariantOutput()
        date_match = self.date_regex.search(text)

        for token in self.token_regex.finditer(text):
            if self._is_date_like(token, date_match):
                continue
            result.ocr_fields.append(OCRField(label="Document Number", extracted=token.group(), confidence=80))
            break

        return result

    def _is_date_like(self, token: re.Match, date_match: Optional[re.Match]) -> bool:
        if self.date_regex.fullmatch(token.group()):
            return True
        if date_match is None:
            return False
        return token.start() < date_match.end() and date_match.start() < token.end()


HEURISTICS: Dict[str, DocumentHeuristic] = {
    "aadhaar-card": TwelveDigitIdHeuristic(),
    "pan-card": FuzzyAlphanumericIdHeuristic(),
}
DEFAULT_HEURISTIC = GenericDocumentHeuristic()


def heuristic_for(document_type: Optional[str]) -> DocumentHeuristic:
    return HEURISTICS.get(document_type or "", DEFAULT_HEURISTIC)


def extract(text: str, document_type: Optional[str], clarity_score: Optional[float] = None) -> ValidationResult:
    """Recognized text -> labeled fields and a pass/fail verdict"""
    lines = split_lines(text)
    heuristic = heuristic_for(document_type)
    variant = heuristic.parse(text or "", lines)
    result = aggregate(variant, clarity_score=clarity_score)

    logger.info(
        f"Extracted {len(result.ocr_fields)} fields for {document_type or 'unknown'} "
        f"using {type(heuristic).__name__} (valid={result.is_valid})"
    )
    return result
