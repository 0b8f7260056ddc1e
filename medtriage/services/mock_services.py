"""
medtriage/services/mock_services.py
Offline stand-ins for the voice and EHR services.
Fixed outputs, no network, no delays. Replace with real adapters
in deployment; nothing in the core depends on these values.
"""

import logging
from typing import List, Optional

from medtriage.errors import UpstreamUnavailable
from medtriage.models.record import EHRSummary, Transcription, VoiceResponse
from medtriage.services.base import EHRAdapter, VoiceAdapter

logger = logging.getLogger(__name__)

MOCK_TRANSCRIPTION = (
    "This is a simulated transcription. In production, this would be the "
    "actual transcribed text from the audio."
)

CHARS_PER_SECOND = 15

MOCK_PATIENT_SUMMARY = {
    'medications': [
        {'name': 'Simulated Medication 1', 'dosage': '10mg', 'frequency': 'daily'},
        {'name': 'Simulated Medication 2', 'dosage': '20mg', 'frequency': 'twice daily'},
    ],
    'allergies': [
        {'substance': 'Simulated Allergen 1', 'severity': 'moderate', 'reaction': 'rash'},
        {'substance': 'Simulated Allergen 2', 'severity': 'severe', 'reaction': 'anaphylaxis'},
    ],
    'conditions': [
        {'name': 'Simulated Condition 1', 'status': 'active', 'diagnosed_date': '2022-01-15'},
        {'name': 'Simulated Condition 2', 'status': 'resolved', 'diagnosed_date': '2021-05-22'},
    ],
}


class MockVoiceAdapter(VoiceAdapter):

    def __init__(self, transcription: Optional[str] = None, available: bool = True):
        self.transcription = transcription or MOCK_TRANSCRIPTION
        self.available     = available

    def transcribe(self, audio: bytes) -> Transcription:
        if not self.available:
            raise UpstreamUnavailable("Voice service unavailable")
        logger.info(f"Processing voice input: {len(audio)} bytes")
        return Transcription(
            transcribed_text  = self.transcription,
            confidence_score  = 0.95,
            language_detected = 'en',
        )

    def synthesize(self, text: str, language: str = 'en', voice_gender: str = 'female') -> VoiceResponse:
        if not self.available:
            raise UpstreamUnavailable("Voice service unavailable")
        logger.info(f"Generating voice response: {len(text)} chars, language={language}, voice={voice_gender}")
        return VoiceResponse(
            audio_data        = b'Simulated audio data',
            format            = 'audio/mp3',
            duration_estimate = len(text) / CHARS_PER_SECOND,
        )


class MockEHRAdapter(EHRAdapter):

    def __init__(self, available: bool = True):
        self.available = available

    def fetch(self, patient_id: str, data_types: List[str]) -> EHRSummary:
        if not self.available:
            raise UpstreamUnavailable("EHR service unavailable")
        if not patient_id:
            raise UpstreamUnavailable("EHR lookup requires a patient id")
        logger.info(f"Retrieving {', '.join(data_types)} from EHR")
        wanted = set(data_types)
        return EHRSummary(**{
            category: [dict(item) for item in items] if category in wanted else []
            for category, items in MOCK_PATIENT_SUMMARY.items()
        })
