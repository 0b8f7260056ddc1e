"""
medtriage/detectors/language.py
Pattern-based language guess and dictionary "translation".

detect() returns the first language (in LANGUAGE_PATTERNS order) whose
pattern hits reach half its pattern count; English is the default.
localize() is a whole-word substitution stand-in for a real translation
service — unknown language pairs come back unchanged.
"""

import logging
import re
from typing import Dict, List, Pattern

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = 'en'
SUPPORTED_LANGUAGES = ('en', 'es', 'fr', 'zh', 'ar')

LANGUAGE_PATTERNS: Dict[str, List[Pattern]] = {
    'en': [
        re.compile(r'\b(the|a|an|is|are|was|were|have|has|had|will|would|can|could|should|may|might)\b', re.I),
        re.compile(r'\b(hello|hi|hey|good|thank|please|help|need|want|question|problem)\b', re.I),
    ],
    'es': [
        re.compile(r'\b(el|la|los|las|un|una|es|son|era|fueron|tiene|tengo|había|será|sería|puede|podría|debería)\b', re.I),
        re.compile(r'\b(hola|buenos|gracias|por favor|ayuda|necesito|quiero|pregunta|problema)\b', re.I),
    ],
    'fr': [
        re.compile(r"\b(le|la|les|un|une|est|sont|était|ont|avait|sera|serait|peut|pourrait|devrait)\b", re.I),
        re.compile(r"\b(bonjour|salut|merci|s'il vous plaît|aide|besoin|veux|question|problème)\b", re.I),
    ],
    'zh': [re.compile(r'[\u4e00-\u9fff]')],
    'ar': [re.compile(r'[\u0600-\u06ff]')],
}

# Source-target pair → term table. Longer phrases first.
TRANSLATION_DICTIONARY: Dict[str, Dict[str, str]] = {
    'en-es': {
        'thank you':    'gracias',
        'appointment':  'cita',
        'doctor':       'médico',
        'prescription': 'receta',
        'medication':   'medicamento',
        'symptoms':     'síntomas',
        'pain':         'dolor',
        'fever':        'fiebre',
        'please':       'por favor',
        'help':         'ayuda',
        'emergency':    'emergencia',
        'hospital':     'hospital',
        'insurance':    'seguro',
        'billing':      'facturación',
    },
}


def detect(text: str) -> str:
    """Language code for text. Empty / non-text input → 'en'."""
    if not isinstance(text, str) or not text.strip():
        return DEFAULT_LANGUAGE

    for code, patterns in LANGUAGE_PATTERNS.items():
        hits = sum(1 for p in patterns if p.search(text))
        if hits > 0 and hits >= len(patterns) / 2:
            return code
    return DEFAULT_LANGUAGE


def translate(text: str, source: str = 'en', target: str = 'en') -> str:
    if source == target:
        return text
    dictionary = TRANSLATION_DICTIONARY.get(f"{source}-{target}")
    if not dictionary:
        logger.info(f"Translation not available for {source}-{target}")
        return text

    translated = text
    for term, replacement in dictionary.items():
        translated = re.sub(
            rf'\b{re.escape(term)}\b',
            lambda _m, r=replacement: r,
            translated,
            flags=re.IGNORECASE,
        )
    return translated


def localize(text: str, target_language: str = 'en') -> str:
    """English response → target language (best effort)."""
    if not target_language or target_language == DEFAULT_LANGUAGE:
        return text
    return translate(text, DEFAULT_LANGUAGE, target_language)
