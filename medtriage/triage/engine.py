"""
medtriage/triage/engine.py
Clinical-urgency triage — layered keyword rules plus sentiment.

Rules, first match wins:
  1. emergency keyword phrase in message     → emergency  (call 911, immediately)
  2. urgent keyword phrase OR sentiment urgent → urgent   (urgent care, today)
  3. sentiment score < -0.3                  → prompt     (1-2 days)
  4. otherwise                               → routine

Phrases are matched as substrings of the lower-cased full message, so
multi-word phrases like "chest pain" match as a unit.
"""

import logging
from typing import Dict, List, Optional

from medtriage.detectors import entity_extractor, sentiment as sentiment_scorer
from medtriage.models.record import SentimentResult, TriageResult
from medtriage.nlp.tokenizer import tokenize

logger = logging.getLogger(__name__)

PROMPT_SCORE_THRESHOLD = -0.3

EMERGENCY_KEYWORDS: List[str] = [
    'chest pain', 'severe bleeding', 'shortness of breath', 'difficulty breathing',
    'stroke', 'unconscious', 'unresponsive', 'seizure', 'severe head injury',
    'suicidal', 'overdose', 'poisoning', 'anaphylaxis', 'severe allergic',
]

URGENT_KEYWORDS: List[str] = [
    'fever', 'vomiting', 'dehydration', 'infection', 'broken bone', 'fracture',
    'sprain', 'moderate pain', 'minor burn', 'cut requiring stitches',
    'severe sore throat', 'severe headache', 'abdominal pain',
]

# level → (care recommendation, timeframe)
CARE_PATHWAYS: Dict[str, tuple] = {
    'emergency': ('Please call 911 or go to the nearest emergency room immediately.',
                  'immediately'),
    'urgent':    ('Please seek urgent care or contact your doctor today.',
                  'today'),
    'prompt':    ('Schedule an appointment soon with your healthcare provider.',
                  'within 1-2 days'),
    'routine':   ('Schedule a regular appointment with your healthcare provider.',
                  'within the next few days'),
}

# Ticket priority escalation for the external Ticket Store
PRIORITY_ESCALATION: Dict[str, str] = {
    'emergency': 'urgent',
    'urgent':    'high',
    'prompt':    'medium',
}


def _contains_any(text_lower: str, phrases: List[str]) -> bool:
    return any(p in text_lower for p in phrases)


def triage(
    message:   str,
    sentiment: Optional[SentimentResult] = None,
    symptoms:  Optional[List[str]]       = None,
) -> TriageResult:
    """
    Assign an urgency level and care pathway.
    sentiment / symptoms are computed from the message when not supplied.
    """
    if sentiment is None or symptoms is None:
        tokens = tokenize(message)
        if sentiment is None:
            sentiment = sentiment_scorer.score(tokens)
        if symptoms is None:
            symptoms = entity_extractor.extract(tokens, message)['symptoms']

    lowered = (message or '').lower()

    if _contains_any(lowered, EMERGENCY_KEYWORDS):
        level = 'emergency'
    elif _contains_any(lowered, URGENT_KEYWORDS) or sentiment.is_urgent:
        level = 'urgent'
    elif sentiment.score < PROMPT_SCORE_THRESHOLD:
        level = 'prompt'
    else:
        level = 'routine'

    recommendation, timeframe = CARE_PATHWAYS[level]
    logger.debug(f"Triage: level={level} sentiment={sentiment.label}")

    return TriageResult(
        urgency_level         = level,
        care_recommendation   = recommendation,
        timeframe             = timeframe,
        detected_symptoms     = list(symptoms),
        sentiment             = sentiment,
        requires_human_review = level != 'routine',
    )


def priority_update(urgency_level: str) -> Optional[str]:
    """Ticket priority to apply for a triage level, or None to leave it."""
    return PRIORITY_ESCALATION.get(urgency_level)
