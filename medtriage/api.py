"""
medtriage/api.py
─────────────────────────────────────────────────────────────────────────────
Message Analysis & Triage — dual-mode API layer

TWO USAGE MODES:
  1. Importable module (ticketing backend):
         from medtriage.api import TriageAPI
         api    = TriageAPI()
         result = api.analyze("I need to schedule a checkup", user_id="u1")

  2. FastAPI HTTP server:
         python -m medtriage.api                  # default: port 8770
         python -m medtriage.api --port 9000
         uvicorn medtriage.api:app --port 8770

ENDPOINTS:
  POST /analyze              — full enhanced response for one message
  POST /voice                — base64 audio → transcription → enhanced response
  POST /hipaa-check          — PHI findings + redacted copy
  POST /triage               — urgency level and care pathway
  POST /recommend-providers  — specialties and provider types
  POST /feedback             — record helpful / not helpful
  GET  /feedback/summary     — aggregated feedback
  GET  /context/{user_id}    — bounded conversation history (redacted)
  GET  /config               — current feature toggles
  POST /config               — update toggles in memory
  GET  /health               — liveness + classifier state

ERRORS:
  InvalidInput → 400, ConfigurationDisabled → 403,
  UpstreamUnavailable → 502, ClassifierUnready → 500.

PRIVACY NOTE:
  Message text is never logged. Context history holds redacted text only
  while hipaa_compliance.auto_redact_phi is on.
"""

import base64
import binascii
import logging
import random
from contextlib import asynccontextmanager
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from medtriage import __version__
from medtriage.config import feature_enabled, load_config, setting, update_config
from medtriage.context.scheduler import BackgroundScheduler
from medtriage.errors import (
    ClassifierUnready,
    ConfigurationDisabled,
    InvalidInput,
    TriageError,
    UpstreamUnavailable,
)
from medtriage.models.record import UserProfile
from medtriage.pipeline import MessagePipeline, build_pipeline

logger = logging.getLogger(__name__)

# ── OPTIONAL FASTAPI IMPORT ─────────────────────────────────────────────────
# TriageAPI works without FastAPI; only _build_app() and serve() need it.

try:
    from fastapi import Body, FastAPI, HTTPException
    from pydantic import BaseModel, Field
    _FASTAPI_AVAILABLE = True
except ImportError:  # pragma: no cover
    _FASTAPI_AVAILABLE = False
    FastAPI = None          # type: ignore
    HTTPException = None    # type: ignore
    BaseModel = object      # type: ignore

DEFAULT_PORT = 8770

STATUS_CODES = {
    InvalidInput:          400,
    ConfigurationDisabled: 403,
    UpstreamUnavailable:   502,
    ClassifierUnready:     500,
}


def _serialize(obj) -> Dict[str, Any]:
    """asdict() plus base64 for any audio payload."""
    data  = asdict(obj)
    voice = data.get('voice_response')
    if voice and isinstance(voice.get('audio_data'), bytes):
        voice['audio_data'] = base64.b64encode(voice['audio_data']).decode('ascii')
    return data


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS: ticketing backend interface
# ═══════════════════════════════════════════════════════════════════════════

class TriageAPI:
    """
    Dict-in / dict-out wrapper around MessagePipeline.
    No HTTP layer required — import and call directly.
    """

    def __init__(
        self,
        config:   Optional[Dict[str, Any]]  = None,
        pipeline: Optional[MessagePipeline] = None,
        rng:      Optional[random.Random]   = None,
    ):
        self.pipeline = pipeline or build_pipeline(
            config if config is not None else load_config(Path.cwd()), rng=rng,
        )
        self.scheduler = BackgroundScheduler(
            self.pipeline.context_store,
            self.pipeline.feedback_store,
            sweep_interval    = float(setting(self.config, 'context', 'sweep_interval_minutes')) * 60,
            feedback_interval = float(setting(self.config, 'context', 'feedback_interval_hours')) * 3600,
        )

    @property
    def config(self) -> Dict[str, Any]:
        return self.pipeline.config

    # ── LIFECYCLE ─────────────────────────────────────────────────────────

    def start(self) -> None:
        self.scheduler.start()

    def shutdown(self) -> None:
        self.scheduler.stop()
        self.pipeline.context_store.close()

    # ── ANALYSIS ──────────────────────────────────────────────────────────

    def analyze(
        self,
        message:  str,
        category: Optional[str]         = None,
        user_id:  Optional[str]         = None,
        profile:  Optional[UserProfile] = None,
    ) -> Dict[str, Any]:
        result = self.pipeline.respond_enhanced(message, category, user_id, profile)
        return _serialize(result)

    def voice(
        self,
        audio_b64: str,
        category:  Optional[str]         = None,
        user_id:   Optional[str]         = None,
        profile:   Optional[UserProfile] = None,
    ) -> Dict[str, Any]:
        try:
            audio = base64.b64decode(audio_b64 or '', validate=True)
        except (binascii.Error, ValueError):
            raise InvalidInput("audio_data must be base64-encoded")
        transcription = self.pipeline.transcribe(audio)
        # a spoken question gets a spoken answer, in the language it was asked
        profile = replace(
            profile or UserProfile(user_id=user_id),
            voice_output       = True,
            preferred_language = (profile and profile.preferred_language) or transcription.language_detected,
        )
        result = self.pipeline.respond_enhanced(
            transcription.transcribed_text, category, user_id, profile,
        )
        return {
            'transcription': asdict(transcription),
            'response':      _serialize(result),
        }

    def hipaa_check(self, message: str) -> Dict[str, Any]:
        finding = self.pipeline.check_compliance(message)
        return {
            **asdict(finding),
            'redacted_message': self._redacted_copy(message, finding),
        }

    def _redacted_copy(self, message: str, finding) -> Optional[str]:
        """Redacted text only when PHI was found and auto-redaction is on."""
        if finding.contains_phi and feature_enabled(self.config, 'hipaa_compliance', 'auto_redact_phi'):
            return self.pipeline.redact(message)
        return None

    def triage(self, message: str) -> Dict[str, Any]:
        return asdict(self.pipeline.triage(message))

    def recommend_providers(
        self,
        message:  str,
        symptoms: Optional[List[str]] = None,
        location: Optional[str]       = None,
    ) -> Dict[str, Any]:
        return asdict(self.pipeline.recommend_providers(message, symptoms, location))

    # ── FEEDBACK / CONTEXT ────────────────────────────────────────────────

    def feedback(self, user_id: str, message_id: str, helpful: bool, feedback_text: str = '') -> Dict[str, Any]:
        ok = self.pipeline.record_feedback(user_id, message_id, helpful, feedback_text)
        return {'success': ok}

    def feedback_summary(self) -> Dict[str, Any]:
        return asdict(self.pipeline.feedback_summary())

    def context(self, user_id: str) -> Optional[Dict[str, Any]]:
        ctx = self.pipeline.context(user_id)
        if ctx is None:
            return None
        return {
            'user_id':          user_id,
            'last_interaction': ctx.last_interaction,
            'history': [
                {
                    'message':   e.message,
                    'intent':    e.analysis.intent,
                    'sentiment': asdict(e.analysis.sentiment),
                    'language':  e.language,
                    'timestamp': e.timestamp,
                }
                for e in ctx.history
            ],
        }

    def update_config(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        self.pipeline.config = update_config(self.config, updates)
        logger.info(f"Config updated: sections={sorted(updates)}")
        return self.config


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI HTTP APP
# ═══════════════════════════════════════════════════════════════════════════

def _guarded(fn, *args, **kwargs):
    """Run an API call, mapping TriageError subclasses to HTTP status codes."""
    try:
        return fn(*args, **kwargs)
    except TriageError as exc:
        status = next((code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)), 500)
        if status >= 500:
            logger.error(f"{fn.__name__} failed: {exc}")
        raise HTTPException(status_code=status, detail=str(exc))


def _build_app(
    config: Optional[Dict[str, Any]]  = None,
    api:    Optional[TriageAPI]       = None,
) -> FastAPI:
    """
    Build and return the FastAPI application instance.
    The background scheduler runs for the lifetime of the app.
    """
    if not _FASTAPI_AVAILABLE:
        raise ImportError("FastAPI is not installed. Run: pip install fastapi uvicorn")

    _api = api or TriageAPI(config=config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        _api.start()
        try:
            yield
        finally:
            _api.shutdown()

    _app = FastAPI(
        title       = "Message Analysis & Triage API",
        description = "Intent, PHI, sentiment and urgency triage for patient messages",
        version     = __version__,
        docs_url    = "/docs",
        redoc_url   = None,
        lifespan    = lifespan,
    )

    # ── REQUEST MODELS ──────────────────────────────────────────────────

    class ProfileFields(BaseModel):
        user_id:            Optional[str] = None
        preferred_language: Optional[str] = None
        voice_preference:   Optional[str] = None
        voice_output:       bool          = False
        ehr_consent:        bool          = False
        ehr_patient_id:     Optional[str] = None
        location:           Optional[str] = None

        def profile(self) -> UserProfile:
            return UserProfile(
                user_id            = self.user_id,
                preferred_language = self.preferred_language,
                voice_preference   = self.voice_preference,
                ehr_consent        = self.ehr_consent,
                ehr_patient_id     = self.ehr_patient_id,
                location           = self.location,
                voice_output       = self.voice_output,
            )

    class AnalyzeRequest(ProfileFields):
        message:  str
        category: Optional[str] = None

    class VoiceRequest(ProfileFields):
        audio_data: str = Field(..., description="base64-encoded audio")
        category:   Optional[str] = None

    class MessageRequest(BaseModel):
        message: str

    class ProviderRequest(BaseModel):
        message:  str                 = ''
        symptoms: Optional[List[str]] = None
        location: Optional[str]       = None

    class FeedbackRequest(BaseModel):
        user_id:       str
        message_id:    str
        helpful:       bool
        feedback_text: str = ''

    # ── ENDPOINTS ───────────────────────────────────────────────────────

    @_app.post("/analyze", summary="Full enhanced response")
    def analyze(req: AnalyzeRequest):
        return _guarded(_api.analyze, req.message, req.category, req.user_id, req.profile())

    @_app.post("/voice", summary="Voice message → enhanced response")
    def voice(req: VoiceRequest):
        return _guarded(_api.voice, req.audio_data, req.category, req.user_id, req.profile())

    @_app.post("/hipaa-check", summary="PHI detection and redaction")
    def hipaa_check(req: MessageRequest):
        return _guarded(_api.hipaa_check, req.message)

    @_app.post("/triage", summary="Urgency triage")
    def triage(req: MessageRequest):
        return _guarded(_api.triage, req.message)

    @_app.post("/recommend-providers", summary="Specialty recommendations")
    def recommend_providers(req: ProviderRequest):
        return _guarded(_api.recommend_providers, req.message, req.symptoms, req.location)

    @_app.post("/feedback", summary="Record response feedback")
    def feedback(req: FeedbackRequest):
        return _guarded(_api.feedback, req.user_id, req.message_id, req.helpful, req.feedback_text)

    @_app.get("/feedback/summary", summary="Aggregated feedback")
    def feedback_summary():
        return _api.feedback_summary()

    @_app.get("/context/{user_id}", summary="Conversation history for a user")
    def get_context(user_id: str):
        data = _api.context(user_id)
        if data is None:
            raise HTTPException(status_code=404, detail=f"No context for user: {user_id}")
        return data

    @_app.get("/config", summary="Current feature toggles")
    def get_config():
        return {"config": _api.config}

    @_app.post("/config", summary="Update feature toggles")
    def post_config(update: Dict[str, Any] = Body(default_factory=dict)):
        try:
            return {"status": "ok", "config": _api.update_config(update or {})}
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":             "ok",
            "classifier_trained": _api.pipeline.classifier.is_trained,
            "categories":         _api.pipeline.classifier.categories,
            "active_users":       len(_api.pipeline.context_store),
            "scheduler_running":  _api.scheduler.running,
            "version":            __version__,
        }

    return _app


# Module-level app instance, used by uvicorn medtriage.api:app
if _FASTAPI_AVAILABLE:
    app = _build_app()
else:
    app = None  # type: ignore


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT: python -m medtriage.api
# ═══════════════════════════════════════════════════════════════════════════

def serve(host: str = "127.0.0.1", port: int = DEFAULT_PORT) -> None:
    import uvicorn

    server_app = _build_app(config=load_config(Path.cwd()))
    logger.info(f"Triage API listening on http://{host}:{port} (docs: /docs)")
    uvicorn.run(server_app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        prog        = "medtriage.api",
        description = "Message Analysis & Triage API server",
    )
    parser.add_argument("--port", type=int, default=DEFAULT_PORT,
                        help=f"Port to bind (default: {DEFAULT_PORT})")
    parser.add_argument("--host", type=str, default="127.0.0.1",
                        help="Host to bind")
    args = parser.parse_args()

    logging.basicConfig(
        level   = logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )
    serve(host=args.host, port=args.port)
