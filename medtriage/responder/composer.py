"""
medtriage/responder/composer.py
Builds the natural-language reply from every analysis signal.

Template bucket precedence (first match wins):
  1. intent == emergency, urgent sentiment, or emergency triage → 'emergency'
  2. any symptom entities                                     → 'symptoms'
  3. any medical-condition entities                           → 'medicalConditions'
  4. the classified intent (or ticket category)               → that bucket, else 'other'

Prefix: "[LEVEL] <care recommendation>" whenever triage is not routine;
otherwise an empathy phrase when sentiment is negative but not urgent.
Randomness comes only from the injected random.Random.
"""

import logging
import random
from typing import Dict, List, Optional

from medtriage.detectors.language import DEFAULT_LANGUAGE, localize
from medtriage.models.record import (
    Analysis,
    EHRSummary,
    PHIFinding,
    ProviderRecommendation,
    TriageResult,
)
from medtriage.responder.ehr import enhance_with_ehr

logger = logging.getLogger(__name__)

# ── TEMPLATES ────────────────────────────────────────────────
# Fields: {topic} {dates_clause} {for_dates} {medications} {medication_or_default}
#         {symptoms} {conditions}

RESPONSE_TEMPLATES: Dict[str, List[str]] = {
    'general': [
        "Thank you for your general healthcare inquiry. I understand you're asking about {topic}... "
        "A healthcare provider will review your case soon.",
        "I've noted your question about general healthcare matters. While I can provide basic "
        "information, a human healthcare provider will follow up with more specific guidance about {topic}...",
    ],
    'appointment': [
        "I see you have a question about appointments{dates_clause}. I can help with basic scheduling "
        "information, but a staff member will need to confirm any changes to your appointments.",
        "Thank you for your appointment-related query. I've logged this in our system, and a healthcare "
        "provider will assist you with scheduling{for_dates}.",
    ],
    'prescription': [
        "I understand you have a question about your {medications}. For patient safety, a healthcare "
        "provider will need to review your medication request.",
        "Thank you for your prescription inquiry. While I cannot provide medical advice, I've prioritized "
        "your request about {medication_or_default} for review by a qualified healthcare provider.",
    ],
    'billing': [
        "I see your question is about billing. I've recorded your concern, and a billing specialist "
        "will review your account and respond shortly.",
        "Thank you for your billing inquiry. Your financial questions are important to us, and a team "
        "member will address your concerns about {topic}... soon.",
    ],
    'technical': [
        "I understand you're experiencing technical difficulties with {topic}... I've logged this issue, "
        "and our technical support team will help resolve it.",
        "Thank you for reporting this technical issue. Our IT team will review your case about {topic}... "
        "and provide assistance shortly.",
    ],
    'symptoms': [
        "I notice you mentioned {symptoms}. While I can't provide medical advice, a healthcare "
        "professional will review your symptoms and respond soon.",
        "Thank you for sharing information about your {symptoms}. A qualified healthcare provider will "
        "assess this information and follow up with you shortly.",
    ],
    'medicalConditions': [
        "I see you've mentioned {conditions}. A healthcare provider with expertise in this area will "
        "review your message and respond soon.",
        "Thank you for providing information about {conditions}. This helps us direct your inquiry to "
        "the appropriate healthcare specialist.",
    ],
    'preventive': [
        "Thank you for your interest in preventive care. I've noted your question about {topic}... "
        "A healthcare provider will provide you with detailed preventive care information soon.",
        "I appreciate your focus on preventive healthcare. Your question about {topic}... has been "
        "logged, and a healthcare professional will follow up with personalized guidance.",
    ],
    'emergency': [
        "I understand you're asking about emergency care. If this is a medical emergency, please call "
        "911 immediately. A healthcare provider will review your message as soon as possible.",
        "For emergency situations, please call 911 or go to your nearest emergency room. I've flagged "
        "your message for urgent review by our healthcare team.",
    ],
    'mental_health': [
        "Thank you for reaching out about mental health services. Your wellbeing is important to us, "
        "and a mental health professional will respond to your inquiry soon.",
        "I appreciate you sharing your mental health concerns. A qualified mental health provider will "
        "review your message and follow up with support options shortly.",
    ],
    'other': [
        "Thank you for your message. I've analyzed your request about {topic}... and a healthcare team "
        "member will respond to your specific needs soon.",
        "I've received your inquiry. While I can help with basic information, a healthcare provider "
        "will follow up with personalized assistance regarding {topic}...",
    ],
}

EMPATHY_PHRASES: List[str] = [
    "I understand this may be frustrating. ",
    "I'm sorry to hear you're having difficulties. ",
    "I appreciate your patience with this matter. ",
]

PROVIDERS_HEADER = "\n\nBased on your symptoms, you might consider consulting with: "

PHI_NOTICE = (
    "\n\nFor your privacy, please avoid sharing personal identifiers such as phone "
    "numbers, email addresses or ID numbers in messages."
)


def select_bucket(
    analysis:  Analysis,
    triage:    TriageResult,
    category:  Optional[str] = None,
) -> str:
    intent = analysis.intent or category
    if (intent == 'emergency'
            or analysis.sentiment.is_urgent
            or triage.urgency_level == 'emergency'):
        return 'emergency'
    if analysis.entities.get('symptoms'):
        return 'symptoms'
    if analysis.entities.get('medicalConditions'):
        return 'medicalConditions'
    return intent if intent in RESPONSE_TEMPLATES else 'other'


def _template_fields(analysis: Analysis) -> Dict[str, str]:
    entities    = analysis.entities
    dates       = ', '.join(entities.get('dates', []))
    medications = ', '.join(entities.get('medications', []))
    return {
        'topic':                 ' '.join(analysis.tokens[:3]),
        'dates_clause':          f" on {dates}" if dates else '',
        'for_dates':             f" for {dates}" if dates else '',
        'medications':           medications or 'prescription',
        'medication_or_default': medications or 'your medication',
        'symptoms':              ', '.join(entities.get('symptoms', [])) or 'symptoms',
        'conditions':            ', '.join(entities.get('medicalConditions', [])) or 'your condition',
    }


class ResponseComposer:
    """Stateless apart from the injected RNG. Seed it for reproducible replies."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def compose(
        self,
        message:     str,
        category:    Optional[str],
        analysis:    Analysis,
        triage:      TriageResult,
        compliance:  Optional[PHIFinding]             = None,
        ehr_context: Optional[EHRSummary]             = None,
        language:    str                              = DEFAULT_LANGUAGE,
        providers:   Optional[ProviderRecommendation] = None,
        notify_phi:  bool                             = False,
    ) -> str:
        bucket    = select_bucket(analysis, triage, category)
        templates = RESPONSE_TEMPLATES[bucket]
        body      = templates[self.rng.randrange(len(templates))].format(**_template_fields(analysis))

        if triage.urgency_level != 'routine':
            prefix = f"[{triage.urgency_level.upper()}] {triage.care_recommendation}\n\n"
        elif analysis.sentiment.label == 'negative' and not analysis.sentiment.is_urgent:
            prefix = EMPATHY_PHRASES[self.rng.randrange(len(EMPATHY_PHRASES))]
        else:
            prefix = ''

        response = prefix + body
        response = enhance_with_ehr(response, ehr_context)

        if providers and providers.specialties:
            response += PROVIDERS_HEADER
            for specialty in providers.specialties:
                response += f"\n- {specialty}"

        if notify_phi and compliance is not None and compliance.contains_phi:
            response += PHI_NOTICE

        logger.debug(f"Composed reply: bucket={bucket} level={triage.urgency_level} length={len(response)}")

        if language and language != DEFAULT_LANGUAGE:
            return localize(response, language)
        return response
