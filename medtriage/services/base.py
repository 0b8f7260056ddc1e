"""
medtriage/services/base.py
Abstract seams for the external services the triage core talks to.
To add a real backend: subclass and implement the abstract methods.

Contract for every adapter: on any backend failure raise
UpstreamUnavailable. The pipeline catches it and omits that signal;
it never fails the whole response.
"""

from abc import ABC, abstractmethod
from typing import List

from medtriage.models.record import EHRSummary, Transcription, VoiceResponse


class VoiceAdapter(ABC):
    """Speech-to-text and text-to-speech."""

    @abstractmethod
    def transcribe(self, audio: bytes) -> Transcription:
        """Raw audio bytes → transcription."""
        ...

    @abstractmethod
    def synthesize(self, text: str, language: str = 'en', voice_gender: str = 'female') -> VoiceResponse:
        """Composed reply → audio payload."""
        ...


class EHRAdapter(ABC):
    """Electronic Health Record lookups (FHIR or vendor API in production)."""

    @abstractmethod
    def fetch(self, patient_id: str, data_types: List[str]) -> EHRSummary:
        """
        Return only the requested categories (medications, allergies,
        conditions). Unrequested categories come back empty.
        """
        ...
