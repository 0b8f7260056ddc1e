"""
medtriage/detectors/phi_detector.py
HIPAA compliance layer: PHI detection and redaction.

Seven independent detectors run over the full text. Counts are regex
match counts, not distinct values. Redaction covers phone, email, SSN,
MRN and address by default; names and dates are detected but only
redacted when redact_names_and_dates is set (see DESIGN.md).
"""

import logging
import re
from typing import Dict, List, Pattern, Tuple

from medtriage.models.record import PHIFinding

logger = logging.getLogger(__name__)

# ── DETECTOR TABLE ───────────────────────────────────────────
# Order matters for redaction: phone runs before SSN.

PHI_PATTERNS: Dict[str, Pattern] = {
    'names': re.compile(
        r'\b(?:[A-Z][a-z]+ ){1,2}[A-Z][a-z]+\b'),
    'phoneNumbers': re.compile(
        r'\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b'),
    'emails': re.compile(
        r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'),
    'ssn': re.compile(
        r'\b\d{3}[-.\s]?\d{2}[-.\s]?\d{4}\b'),
    'medicalRecordNumbers': re.compile(
        r'\b(?:MRN|Medical Record)\s*#?\s*\d+\b', re.IGNORECASE),
    'addresses': re.compile(
        r'\b\d+\s+[A-Za-z0-9\s,]+(?:Avenue|Lane|Road|Boulevard|Drive|Street'
        r'|Ave|Ln|Rd|Blvd|Dr|St)\.?\s+(?:Apt|Unit|Suite)?\s*\d*\b', re.IGNORECASE),
    'dates': re.compile(
        r'\b(?:(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?'
        r'|Jul(?:y)?|Aug(?:ust)?|Sep(?:tember)?|Oct(?:ober)?|Nov(?:ember)?'
        r'|Dec(?:ember)?)\s+\d{1,2},\s+\d{4}'
        r'|\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})\b'),
}

# ── REDACTION TABLE ──────────────────────────────────────────

REDACTIONS: List[Tuple[str, str]] = [
    ('phoneNumbers',         '[PHONE NUMBER]'),
    ('emails',               '[EMAIL]'),
    ('ssn',                  '[SSN]'),
    ('medicalRecordNumbers', '[MEDICAL RECORD NUMBER]'),
    ('addresses',            '[ADDRESS]'),
]

# Applied after REDACTIONS, only when explicitly enabled
EXTENDED_REDACTIONS: List[Tuple[str, str]] = [
    ('dates', '[DATE]'),
    ('names', '[NAME]'),
]

COMPLIANCE_RECOMMENDATIONS = [
    "Detected potential PHI in message. Consider redacting or encrypting this information.",
    "Ensure proper authorization before storing or transmitting this information.",
    "Document the purpose for which this PHI is being collected.",
]


def check(text: str) -> PHIFinding:
    """Run every detector. No PHI values are logged — counts only."""
    detected: Dict[str, int] = {}
    for category, pattern in PHI_PATTERNS.items():
        count = sum(1 for _ in pattern.finditer(text or ''))
        if count:
            detected[category] = count

    contains_phi = bool(detected)
    if contains_phi:
        logger.debug(f"PHI detected: {detected}")

    return PHIFinding(
        contains_phi    = contains_phi,
        detected_phi    = detected,
        recommendations = list(COMPLIANCE_RECOMMENDATIONS) if contains_phi else [],
        safe_to_store   = not contains_phi,
    )


def redact(text: str, include_names_and_dates: bool = False) -> str:
    """
    Replace PHI spans with placeholders. Idempotent:
    redact(redact(t)) == redact(t).
    """
    steps = REDACTIONS + (EXTENDED_REDACTIONS if include_names_and_dates else [])
    redacted = text or ''
    for category, placeholder in steps:
        redacted = PHI_PATTERNS[category].sub(placeholder, redacted)
    return redacted
