"""
medtriage/detectors/sentiment.py
Lexicon sentiment scorer — AFINN-style word valences, pure Python.

score = Σ valence(stem(token)) / len(tokens), sign-flipped after a
negation word for the rest of the message. Not clamped.

Label thresholds:  > 0.2 positive · < -0.2 negative · else neutral
is_urgent: (negative AND score < -0.5) OR any token in URGENT_TERMS
"""

from typing import Dict, List

from medtriage.models.record import SentimentResult
from medtriage.nlp.tokenizer import stem

POSITIVE_THRESHOLD =  0.2
NEGATIVE_THRESHOLD = -0.2
URGENT_SCORE       = -0.5

URGENT_TERMS = frozenset({
    'emergency', 'urgent', 'immediately', 'severe', 'critical', 'help', 'now', 'asap',
})

NEGATIONS = frozenset({
    'not', 'no', 'never', 'none', 'nothing', 'nobody', 'nor', 'neither',
    'cannot', 'don', 'doesn', 'didn', 'isn', 'wasn', 'aren', 'haven',
    'hasn', 'shouldn', 'couldn', 'wouldn',
})

# ── VALENCE LEXICON ──────────────────────────────────────────
# AFINN-165 values for the vocabulary patients actually use.
# Keys are stemmed at import; later duplicates of a stem win.

VALENCE: Dict[str, int] = {
    # negative: health & distress
    'pain': -2, 'painful': -2, 'hurt': -2, 'hurts': -2, 'hurting': -2,
    'sick': -2, 'ill': -2, 'injured': -2, 'injury': -2, 'wound': -2,
    'suffer': -2, 'suffering': -2, 'agony': -3, 'bleeding': -2,
    'weak': -2, 'tired': -2, 'exhausted': -2, 'fatigue': -2,
    'dizzy': -1, 'nauseous': -2, 'vomiting': -2,
    'emergency': -2, 'critical': -2, 'urgent': -1, 'severe': -2,
    'dead': -3, 'death': -2, 'die': -3, 'dying': -3, 'kill': -3,
    'suicide': -2, 'suicidal': -2, 'overdose': -2, 'abuse': -3,
    'scared': -2, 'afraid': -2, 'fear': -2, 'frightened': -2, 'terrified': -3,
    'panic': -3, 'worried': -3, 'worry': -3, 'worrying': -3, 'anxious': -2,
    'nervous': -2, 'stress': -1, 'stressed': -2, 'depressed': -2,
    'sad': -2, 'unhappy': -2, 'miserable': -3, 'hopeless': -2,
    'helpless': -2, 'desperate': -3, 'alone': -2, 'lonely': -2,
    'cry': -1, 'crying': -2, 'upset': -2, 'concerned': -2,
    # negative: service & frustration
    'bad': -3, 'worse': -3, 'worst': -3, 'terrible': -3, 'awful': -3,
    'horrible': -3, 'problem': -2, 'problems': -2, 'trouble': -2,
    'error': -2, 'fail': -2, 'failed': -2, 'broken': -1, 'wrong': -2,
    'lost': -3, 'loss': -3, 'unable': -2, 'confused': -2, 'confusing': -2,
    'frustrated': -2, 'frustrating': -2, 'annoyed': -2, 'annoying': -2,
    'angry': -3, 'mad': -3, 'hate': -3, 'disappointed': -2,
    'ridiculous': -3, 'useless': -2, 'waiting': -1, 'delay': -1,
    'sorry': -1, 'missed': -2,
    # positive
    'good': 3, 'great': 3, 'excellent': 3, 'wonderful': 4, 'amazing': 4,
    'fantastic': 4, 'perfect': 3, 'nice': 3, 'fine': 2, 'better': 2,
    'best': 3, 'happy': 3, 'glad': 3, 'pleased': 3, 'satisfied': 2,
    'love': 3, 'like': 2, 'thank': 2, 'thanks': 2, 'thankful': 2,
    'grateful': 3, 'appreciate': 2, 'appreciated': 2, 'helpful': 2,
    'help': 2, 'please': 1, 'kind': 2, 'welcome': 2, 'safe': 1,
    'healthy': 2, 'improve': 2, 'improved': 2, 'improvement': 2,
    'relief': 1, 'relieved': 2, 'recover': 2, 'recovered': 2,
    'easy': 1, 'hope': 2, 'hopeful': 2, 'yes': 1, 'calm': 2,
}

_STEMMED_VALENCE: Dict[str, int] = {stem(w): v for w, v in VALENCE.items()}


def score(tokens: List[str]) -> SentimentResult:
    """Deterministic; no external calls. Empty token list → neutral 0.0."""
    if not tokens:
        return SentimentResult(score=0.0, label='neutral', is_urgent=False)

    total    = 0
    negator  = 1
    for token in tokens:
        if token in NEGATIONS:
            negator = -1
            continue
        total += negator * _STEMMED_VALENCE.get(stem(token), 0)

    value = total / len(tokens)

    if value > POSITIVE_THRESHOLD:
        label = 'positive'
    elif value < NEGATIVE_THRESHOLD:
        label = 'negative'
    else:
        label = 'neutral'

    has_urgent_terms = any(t in URGENT_TERMS for t in tokens)
    is_urgent = (label == 'negative' and value < URGENT_SCORE) or has_urgent_terms

    return SentimentResult(score=value, label=label, is_urgent=is_urgent)
