"""
medtriage/triage/providers.py
Specialty / provider-type recommendation from keyword hits.

Every SPECIALTY_MAP keyword found in the message or in a detected
symptom adds its specialty (deduplicated, first-hit order).
No hit → Primary Care.
"""

from typing import Dict, Iterable, List, Optional

from medtriage.models.record import ProviderRecommendation

DEFAULT_SPECIALTY = 'Primary Care'

DISCLAIMER = (
    "These recommendations are based on your symptoms and should be "
    "confirmed by a healthcare professional."
)

SPECIALTY_MAP: Dict[str, str] = {
    # Cardiovascular
    'chest pain':     'Cardiology',
    'heart':          'Cardiology',
    'blood pressure': 'Cardiology',
    'palpitations':   'Cardiology',

    # Respiratory
    'breathing':      'Pulmonology',
    'lung':           'Pulmonology',
    'cough':          'Pulmonology',
    'asthma':         'Pulmonology',

    # Digestive
    'stomach':        'Gastroenterology',
    'digestion':      'Gastroenterology',
    'bowel':          'Gastroenterology',
    'nausea':         'Gastroenterology',
    'vomit':          'Gastroenterology',

    # Neurological
    'headache':       'Neurology',
    'migraine':       'Neurology',
    'dizz':           'Neurology',
    'numbness':       'Neurology',
    'seizure':        'Neurology',

    # Musculoskeletal
    'joint':          'Orthopedics',
    'bone':           'Orthopedics',
    'muscle':         'Orthopedics',
    'back pain':      'Orthopedics',
    'arthritis':      'Rheumatology',

    # Dermatological
    'rash':           'Dermatology',
    'skin':           'Dermatology',
    'itch':           'Dermatology',
    'acne':           'Dermatology',

    # Psychiatric
    'anxiety':        'Psychiatry',
    'depression':     'Psychiatry',
    'stress':         'Psychiatry',
    'mood':           'Psychiatry',
    'sleep':          'Sleep Medicine',

    # General
    'fever':          'Primary Care',
    'cold':           'Primary Care',
    'flu':            'Primary Care',
    'vaccination':    'Primary Care',
    'check up':       'Primary Care',
}

# Specialties that map to named provider roles instead of "<X> Specialist"
PROVIDER_TYPES: Dict[str, List[str]] = {
    'Primary Care': ['Family Medicine Physician', 'Internal Medicine Physician', 'Nurse Practitioner'],
    'Psychiatry':   ['Psychiatrist', 'Psychologist', 'Licensed Clinical Social Worker'],
    'Psychology':   ['Psychiatrist', 'Psychologist', 'Licensed Clinical Social Worker'],
}


def match_specialties(message: str, symptoms: Optional[Iterable[str]] = None) -> List[str]:
    found: Dict[str, None] = {}   # ordered set
    texts = [(message or '').lower()] + [s.lower() for s in (symptoms or [])]
    for text in texts:
        for keyword, specialty in SPECIALTY_MAP.items():
            if keyword in text:
                found.setdefault(specialty, None)
    if not found:
        found[DEFAULT_SPECIALTY] = None
    return list(found)


def provider_types(specialties: Iterable[str]) -> List[str]:
    """Primary Care roles first, then mental-health roles, then "<X> Specialist"."""
    specialties = list(specialties)
    types: List[str] = []
    for group, roles in PROVIDER_TYPES.items():
        if group not in specialties:
            continue
        for role in roles:
            if role not in types:
                types.append(role)
    types.extend(f"{s} Specialist" for s in specialties if s not in PROVIDER_TYPES)
    return types


def recommend(
    message:             str,
    symptoms:            Optional[List[str]] = None,
    location:            Optional[str]       = None,
    max_recommendations: int                 = 0,
) -> ProviderRecommendation:
    """
    Specialties and provider types for a message.
    max_recommendations > 0 caps both lists.
    """
    specialties = match_specialties(message, symptoms)
    types       = provider_types(specialties)

    if max_recommendations and max_recommendations > 0:
        specialties = specialties[:max_recommendations]
        types       = types[:max_recommendations]

    return ProviderRecommendation(
        specialties    = specialties,
        provider_types = types,
        location_based = f"Providers near {location}" if location else None,
        message        = DISCLAIMER,
    )
