"""
medtriage/detectors/entity_extractor.py
Regex/lexicon entity extraction — pure Python, fully offline.

Token categories are matched one token at a time and return the whole
token; date patterns run over the raw text and return the matched span.
No normalization: "headache" and "head ache" stay distinct surface strings.
Duplicates are preserved, in order of first appearance.
"""

import re
from typing import Dict, List, Pattern

from medtriage.models.record import ENTITY_CATEGORIES

# ── PATTERN TABLES ───────────────────────────────────────────
# Extend these freely. Keys become entity categories in output.

TOKEN_PATTERNS: Dict[str, Pattern] = {
    'medications': re.compile(
        r'\b(pill|medication|medicine|prescription|drug|dose|tablet|capsule'
        r'|antibiotic|inhaler|insulin|injection)s?\b', re.IGNORECASE),
    'symptoms': re.compile(
        r'\b(pain|ache|fever|cough|headache|nausea|dizz|swelling|rash|fatigue'
        r'|tired|exhausted|vomit|diarrhea|constipation|bleed|breath|numb|itch'
        r'|burn|sore)\w*\b', re.IGNORECASE),
    'medicalConditions': re.compile(
        r'\b(diabet|hypertension|asthma|arthritis|depression|anxiety|allerg'
        r'|cancer|heart|stroke|infection|disease|disorder|syndrome)\w*\b', re.IGNORECASE),
    'bodyParts': re.compile(
        r'\b(head|chest|arm|leg|foot|hand|back|neck|shoulder|knee|ankle|wrist'
        r'|stomach|throat|ear|eye|nose|skin|heart|lung|liver|kidney)s?\b', re.IGNORECASE),
}

TEXT_PATTERNS: Dict[str, Pattern] = {
    'dates': re.compile(
        r'\b(?:(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?'
        r'|Jul(?:y)?|Aug(?:ust)?|Sep(?:tember)?|Oct(?:ober)?|Nov(?:ember)?'
        r'|Dec(?:ember)?)\s+\d{1,2}(?:,\s+\d{4})?'
        r'|\d{1,2}[/\-]\d{1,2}(?:[/\-]\d{2,4})?)\b', re.IGNORECASE),
}


def extract(tokens: List[str], raw_text: str) -> Dict[str, List[str]]:
    """
    Build the entity bag. Always contains every category in
    ENTITY_CATEGORIES, empty lists included.
    """
    bag: Dict[str, List[str]] = {c: [] for c in ENTITY_CATEGORIES}

    for category, pattern in TEXT_PATTERNS.items():
        bag.setdefault(category, []).extend(
            m.group(0) for m in pattern.finditer(raw_text or '')
        )

    for category, pattern in TOKEN_PATTERNS.items():
        bag.setdefault(category, []).extend(
            t for t in tokens if pattern.search(t)
        )

    return bag
