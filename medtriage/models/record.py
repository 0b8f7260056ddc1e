"""
medtriage/models/record.py
Shared dataclass schema. The tokenizer, classifier, detectors, triage
engine, composer, stores and exporters all use these types.
Do not add logic here — data only.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# ── CLOSED VOCABULARIES ──────────────────────────────────────

INTENTS = (
    'general', 'appointment', 'prescription', 'billing', 'technical',
    'symptoms', 'preventive', 'emergency', 'mental_health',
)

SENTIMENT_LABELS = ('positive', 'neutral', 'negative')

# Ordered by severity, higher rank wins
URGENCY_RANK = {
    'routine':   0,
    'prompt':    1,
    'urgent':    2,
    'emergency': 3,
}

ENTITY_CATEGORIES = (
    'dates', 'medications', 'symptoms', 'medicalConditions', 'bodyParts',
)


@dataclass(frozen=True)
class TrainingExample:
    """One labeled line of the intent corpus."""
    text:     str
    category: str               # one of INTENTS


@dataclass
class SentimentResult:
    score:      float
    label:      str             # positive / neutral / negative
    is_urgent:  bool


@dataclass
class Analysis:
    """Output of the pure per-message analysis."""
    intent:         str
    entities:       Dict[str, List[str]]
    tokens:         List[str]
    stemmed_tokens: List[str]
    sentiment:      SentimentResult


@dataclass
class PHIFinding:
    contains_phi:    bool
    detected_phi:    Dict[str, int]  = field(default_factory=dict)   # category → match count
    recommendations: List[str]       = field(default_factory=list)
    safe_to_store:   bool            = True


@dataclass
class TriageResult:
    urgency_level:         str                  # routine / prompt / urgent / emergency
    care_recommendation:   str
    timeframe:             str
    detected_symptoms:     List[str]            = field(default_factory=list)
    sentiment:             Optional[SentimentResult] = None
    requires_human_review: bool                 = False


@dataclass
class ProviderRecommendation:
    specialties:     List[str]
    provider_types:  List[str]
    location_based:  Optional[str] = None
    message:         str           = ''


@dataclass
class ContextEntry:
    """One turn kept in a user's conversation history."""
    message:    str
    analysis:   Analysis
    language:   str
    timestamp:  float            # epoch seconds


@dataclass
class ConversationContext:
    history:          List[ContextEntry] = field(default_factory=list)
    last_interaction: float              = 0.0


@dataclass
class FeedbackRecord:
    user_id:       str
    message_id:    str
    helpful:       bool
    feedback_text: str
    timestamp:     float


@dataclass
class FeedbackSummary:
    count:              int   = 0
    helpful_count:      int   = 0
    helpful_percentage: float = 0.0


# ── EXTERNAL-SERVICE PAYLOADS ────────────────────────────────

@dataclass
class Transcription:
    transcribed_text:  str
    confidence_score:  float
    language_detected: str


@dataclass
class VoiceResponse:
    audio_data:        bytes
    format:            str
    duration_estimate: float     # seconds


@dataclass
class EHRSummary:
    """Patient data returned by the EHR seam. Lists of plain dicts."""
    medications: List[Dict[str, Any]] = field(default_factory=list)
    allergies:   List[Dict[str, Any]] = field(default_factory=list)
    conditions:  List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class UserProfile:
    """Preferences supplied by the external User Store."""
    user_id:            Optional[str] = None
    preferred_language: Optional[str] = None
    voice_preference:   Optional[str] = None
    ehr_consent:        bool          = False
    ehr_patient_id:     Optional[str] = None
    location:           Optional[str] = None
    voice_output:       bool          = False


@dataclass
class EnhancedResponse:
    """Everything the enhanced flow returns to the ticket layer."""
    text_response:         str
    compliance:            PHIFinding
    triage:                TriageResult
    requires_human_review: bool
    redacted_message:      str
    language:              str                              = 'en'
    intent:                str                              = 'general'
    providers:             Optional[ProviderRecommendation] = None
    voice_response:        Optional[VoiceResponse]          = None
    priority_update:       Optional[str]                    = None
