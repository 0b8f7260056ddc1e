"""
medtriage/pipeline.py
Message analysis & triage orchestrator.

  message → tokenize → {classify, extract, score} → triage + PHI check
          → provider recommendation → compose → (localize)

Every stage is a pure function of the message and the trained classifier.
The only side effects are the context-store write and feedback recording,
and failures there are logged and swallowed — they never block a reply.

Raw message text is never logged; log lines carry labels and counts only.
"""

import logging
import random
import time
from typing import Any, Callable, Dict, Optional

from medtriage.config import (
    default_config,
    feature_enabled,
    require_feature,
    setting,
)
from medtriage.context.feedback import FeedbackStore
from medtriage.context.store import ContextStore
from medtriage.detectors import entity_extractor, phi_detector
from medtriage.detectors import sentiment as sentiment_scorer
from medtriage.detectors.language import detect
from medtriage.errors import ClassifierUnready, InvalidInput, UpstreamUnavailable
from medtriage.models.record import (
    Analysis,
    ContextEntry,
    ConversationContext,
    EHRSummary,
    EnhancedResponse,
    FeedbackSummary,
    PHIFinding,
    ProviderRecommendation,
    Transcription,
    TriageResult,
    UserProfile,
    VoiceResponse,
)
from medtriage.nlp.classifier import ClassifierModel, build_default_model
from medtriage.nlp.tokenizer import normalize
from medtriage.responder.composer import ResponseComposer
from medtriage.services.base import EHRAdapter, VoiceAdapter
from medtriage.services.mock_services import MockEHRAdapter, MockVoiceAdapter
from medtriage.triage import engine, providers

logger = logging.getLogger(__name__)


def validate_message(message: Any) -> str:
    """Boundary check. Returns the message unchanged or raises InvalidInput."""
    if not isinstance(message, str) or not message.strip():
        raise InvalidInput("Message text is required")
    if '\x00' in message:
        raise InvalidInput("Message text contains binary data")
    return message


class MessagePipeline:
    """
    Owns the trained classifier and the per-process stores.

    Usage:
        pipeline = build_pipeline(load_config())
        reply    = pipeline.respond("I need to schedule a checkup", user_id="u1")
        full     = pipeline.respond_enhanced(msg, profile=UserProfile(user_id="u1"))
    """

    def __init__(
        self,
        classifier:     ClassifierModel,
        context_store:  Optional[ContextStore]   = None,
        feedback_store: Optional[FeedbackStore]  = None,
        config:         Optional[Dict[str, Any]] = None,
        rng:            Optional[random.Random]  = None,
        voice:          Optional[VoiceAdapter]   = None,
        ehr:            Optional[EHRAdapter]     = None,
        clock:          Callable[[], float]      = time.time,
    ):
        if not classifier.is_trained:
            raise ClassifierUnready("Pipeline requires a trained classifier")
        self.classifier     = classifier
        self.context_store  = context_store if context_store is not None else ContextStore(clock=clock)
        self.feedback_store = feedback_store if feedback_store is not None else FeedbackStore(clock=clock)
        self.config         = config if config is not None else default_config()
        self.composer       = ResponseComposer(rng)
        self.voice          = voice
        self.ehr            = ehr
        self._clock         = clock

    @property
    def _debug(self) -> bool:
        return bool(self.config.get('global', {}).get('debug_mode'))

    # ── ANALYSIS ─────────────────────────────────────────────

    def analyze(self, message: str) -> Analysis:
        """Pure per-message analysis. Raises InvalidInput for empty text."""
        text            = validate_message(message)
        tokens, stemmed = normalize(text)
        intent          = self.classifier.classify(text)
        entities        = entity_extractor.extract(tokens, text)
        sentiment       = sentiment_scorer.score(tokens)

        if self._debug:
            counts = {k: len(v) for k, v in entities.items()}
            logger.debug(
                f"Analysis: intent={intent} tokens={len(tokens)} "
                f"sentiment={sentiment.label}({sentiment.score:.2f}) "
                f"urgent={sentiment.is_urgent} "
                f"entities={counts}"
            )

        return Analysis(
            intent         = intent,
            entities       = entities,
            tokens         = tokens,
            stemmed_tokens = stemmed,
            sentiment      = sentiment,
        )

    def check_compliance(self, message: str) -> PHIFinding:
        require_feature(self.config, 'hipaa_compliance')
        return phi_detector.check(validate_message(message))

    def redact(self, message: str) -> str:
        require_feature(self.config, 'hipaa_compliance')
        return phi_detector.redact(
            validate_message(message),
            include_names_and_dates=self._redact_names_and_dates,
        )

    def triage(self, message: str) -> TriageResult:
        require_feature(self.config, 'triage_system')
        return engine.triage(validate_message(message))

    def recommend_providers(
        self,
        message:  Optional[str],
        symptoms: Optional[list] = None,
        location: Optional[str]  = None,
    ) -> ProviderRecommendation:
        """A symptom list alone is enough; otherwise the message is required and analyzed."""
        require_feature(self.config, 'doctor_recommendation')
        if symptoms and not (isinstance(message, str) and message.strip()):
            text = ''
        else:
            text = validate_message(message)
            if symptoms is None:
                symptoms = self.analyze(text).entities['symptoms']
        return self._providers(text, symptoms, location)

    # ── RESPONSES ────────────────────────────────────────────

    def respond(
        self,
        message:            str,
        category:           Optional[str]         = None,
        user_id:            Optional[str]         = None,
        preferred_language: Optional[str]         = None,
        ehr_data:           Optional[EHRSummary]  = None,
    ) -> str:
        """Composed reply text for one message."""
        analysis      = self.analyze(message)
        language      = preferred_language or detect(message)
        self._remember(user_id, message, analysis, language)

        triage_result = engine.triage(message, analysis.sentiment, analysis.entities['symptoms'])
        compliance    = phi_detector.check(message)

        return self.composer.compose(
            message, category, analysis, triage_result,
            compliance  = compliance,
            ehr_context = ehr_data,
            language    = language,
            notify_phi  = feature_enabled(self.config, 'hipaa_compliance', 'notify_on_phi_detection'),
        )

    def respond_enhanced(
        self,
        message:  str,
        category: Optional[str]         = None,
        user_id:  Optional[str]         = None,
        profile:  Optional[UserProfile] = None,
    ) -> EnhancedResponse:
        """
        Full flow: compliance, triage, EHR enrichment, provider list,
        composed reply, optional voice output and ticket priority update.
        """
        started  = time.perf_counter()
        profile  = profile or UserProfile(user_id=user_id)
        user_id  = user_id or profile.user_id

        analysis = self.analyze(message)
        language = profile.preferred_language or detect(message)
        self._remember(user_id, message, analysis, language)

        if feature_enabled(self.config, 'hipaa_compliance'):
            compliance = phi_detector.check(message)
        else:
            compliance = PHIFinding(contains_phi=False, safe_to_store=True)

        symptoms      = analysis.entities['symptoms']
        triage_result = engine.triage(message, analysis.sentiment, symptoms)

        provider_rec = None
        if symptoms and feature_enabled(self.config, 'doctor_recommendation'):
            provider_rec = self._providers(message, symptoms, profile.location)

        text = self.composer.compose(
            message, category, analysis, triage_result,
            compliance  = compliance,
            ehr_context = self._fetch_ehr(profile),
            language    = language,
            providers   = provider_rec,
            notify_phi  = feature_enabled(self.config, 'hipaa_compliance', 'notify_on_phi_detection'),
        )

        voice_response = None
        if profile.voice_output and feature_enabled(self.config, 'voice_interface', 'output_enabled'):
            voice_response = self._synthesize(text, language, profile.voice_preference)

        if compliance.contains_phi and feature_enabled(self.config, 'hipaa_compliance', 'auto_redact_phi'):
            redacted = phi_detector.redact(message, include_names_and_dates=self._redact_names_and_dates)
        else:
            redacted = message

        result = EnhancedResponse(
            text_response         = text,
            compliance            = compliance,
            triage                = triage_result,
            requires_human_review = triage_result.requires_human_review or compliance.contains_phi,
            redacted_message      = redacted,
            language              = language,
            intent                = analysis.intent,
            providers             = provider_rec,
            voice_response        = voice_response,
            priority_update       = self._priority_update(triage_result.urgency_level),
        )

        if (triage_result.urgency_level == 'emergency'
                and feature_enabled(self.config, 'triage_system', 'escalate_emergencies')):
            logger.warning(f"Emergency escalation: message from user={user_id} flagged for immediate review")

        if (triage_result.urgency_level == 'urgent'
                and feature_enabled(self.config, 'triage_system', 'notify_providers_on_urgent')):
            logger.warning(f"Provider notification: urgent message from user={user_id}")

        if self.config.get('global', {}).get('log_enhanced_responses'):
            logger.info(
                f"Enhanced response: intent={result.intent} urgency={triage_result.urgency_level} "
                f"phi={compliance.contains_phi} review={result.requires_human_review} "
                f"length={len(text)} elapsed={time.perf_counter() - started:.3f}s"
            )
        return result

    # ── VOICE ────────────────────────────────────────────────

    def transcribe(self, audio: bytes) -> Transcription:
        """Voice input seam. UpstreamUnavailable propagates — there is no text without it."""
        require_feature(self.config, 'voice_interface', 'input_enabled')
        if not audio:
            raise InvalidInput("Audio payload is required")
        if self.voice is None:
            raise UpstreamUnavailable("No voice service configured")
        transcription = self.voice.transcribe(audio)
        logger.info(
            f"Transcribed {len(audio)} bytes "
            f"(confidence={transcription.confidence_score:.2f}, language={transcription.language_detected})"
        )
        return transcription

    # ── FEEDBACK / CONTEXT ───────────────────────────────────

    def record_feedback(
        self,
        user_id:       str,
        message_id:    str,
        helpful:       bool,
        feedback_text: str = '',
    ) -> bool:
        if not user_id or not message_id:
            raise InvalidInput("user_id and message_id are required")
        try:
            return self.feedback_store.record(user_id, message_id, helpful, feedback_text)
        except Exception as e:
            logger.error(f"Feedback write failed for user={user_id}: {e}", exc_info=True)
            return False

    def feedback_summary(self) -> FeedbackSummary:
        return self.feedback_store.summarize()

    def context(self, user_id: str) -> Optional[ConversationContext]:
        return self.context_store.get(user_id)

    # ── INTERNAL ─────────────────────────────────────────────

    @property
    def _redact_names_and_dates(self) -> bool:
        return bool(setting(self.config, 'hipaa_compliance', 'redact_names_and_dates'))

    def _remember(self, user_id: Optional[str], message: str, analysis: Analysis, language: str) -> None:
        if not user_id:
            return
        stored = message
        if feature_enabled(self.config, 'hipaa_compliance', 'auto_redact_phi'):
            stored = phi_detector.redact(message, include_names_and_dates=self._redact_names_and_dates)
        try:
            self.context_store.update(user_id, ContextEntry(
                message   = stored,
                analysis  = analysis,
                language  = language,
                timestamp = self._clock(),
            ))
        except Exception as e:
            logger.error(f"Context update failed for user={user_id}: {e}", exc_info=True)

    def _providers(self, message: str, symptoms: list, location: Optional[str]) -> ProviderRecommendation:
        rec = providers.recommend(
            message, symptoms, location,
            max_recommendations=int(setting(self.config, 'doctor_recommendation', 'max_recommendations') or 0),
        )
        if not feature_enabled(self.config, 'doctor_recommendation', 'include_specialties'):
            rec.specialties = []
        if not feature_enabled(self.config, 'doctor_recommendation', 'include_provider_types'):
            rec.provider_types = []
        return rec

    def _fetch_ehr(self, profile: UserProfile) -> Optional[EHRSummary]:
        if self.ehr is None or not profile.ehr_patient_id:
            return None
        if not feature_enabled(self.config, 'ehr_integration'):
            return None
        if setting(self.config, 'ehr_integration', 'require_explicit_consent') and not profile.ehr_consent:
            logger.debug(f"EHR skipped: no consent for user={profile.user_id}")
            return None
        try:
            return self.ehr.fetch(profile.ehr_patient_id,
                                  list(setting(self.config, 'ehr_integration', 'data_types')))
        except UpstreamUnavailable as e:
            logger.warning(f"EHR unavailable — replying without records: {e}")
            return None

    def _synthesize(self, text: str, language: str, voice_gender: Optional[str]) -> Optional[VoiceResponse]:
        if self.voice is None:
            return None
        gender = voice_gender or setting(self.config, 'voice_interface', 'default_voice_gender')
        try:
            return self.voice.synthesize(text, language=language, voice_gender=gender)
        except UpstreamUnavailable as e:
            logger.warning(f"Voice synthesis unavailable — text reply only: {e}")
            return None

    def _priority_update(self, urgency_level: str) -> Optional[str]:
        if not feature_enabled(self.config, 'triage_system', 'auto_prioritize'):
            return None
        return engine.priority_update(urgency_level)


def build_pipeline(
    config: Optional[Dict[str, Any]] = None,
    rng:    Optional[random.Random]  = None,
    clock:  Callable[[], float]      = time.time,
) -> MessagePipeline:
    """Default wiring: trained classifier, stores sized from config, offline service stubs."""
    config = config if config is not None else default_config()
    return MessagePipeline(
        classifier     = build_default_model(),
        context_store  = ContextStore(
            max_history         = int(setting(config, 'context', 'max_history')),
            idle_expiry_seconds = float(setting(config, 'context', 'idle_expiry_minutes')) * 60,
            clock               = clock,
        ),
        feedback_store = FeedbackStore(clock=clock),
        config         = config,
        rng            = rng,
        voice          = MockVoiceAdapter(),
        ehr            = MockEHRAdapter(),
        clock          = clock,
    )
