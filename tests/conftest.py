"""
tests/conftest.py
Shared fixtures. Deterministic: seeded RNG, fake clock, no network.
Synthetic messages only — no real patient data.
"""

import random

import pytest
from fastapi.testclient import TestClient

from medtriage.api import TriageAPI, _build_app
from medtriage.config import default_config
from medtriage.context.feedback import FeedbackStore
from medtriage.context.store import ContextStore
from medtriage.models.record import (
    Analysis,
    ContextEntry,
    SentimentResult,
    TriageResult,
)
from medtriage.nlp.classifier import build_default_model
from medtriage.pipeline import MessagePipeline
from medtriage.services.mock_services import MockEHRAdapter, MockVoiceAdapter
from medtriage.triage.engine import CARE_PATHWAYS

CHEST_PAIN = "I'm experiencing chest pain and shortness of breath"
SSN_MSG    = "My SSN is 123-45-6789, please help"
CHECKUP    = "I need to schedule a checkup"


class FakeClock:
    """Callable clock the tests advance by hand."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ── BUILDERS ─────────────────────────────────────────────────

def make_analysis(
    intent:    str   = 'general',
    tokens:    list  = None,
    score:     float = 0.0,
    label:     str   = 'neutral',
    is_urgent: bool  = False,
    **entities,
) -> Analysis:
    bag = {c: [] for c in ('dates', 'medications', 'symptoms', 'medicalConditions', 'bodyParts')}
    bag.update(entities)
    tokens = tokens if tokens is not None else ['please', 'help', 'me', 'today']
    return Analysis(
        intent         = intent,
        entities       = bag,
        tokens         = tokens,
        stemmed_tokens = list(tokens),
        sentiment      = SentimentResult(score=score, label=label, is_urgent=is_urgent),
    )


def make_triage(level: str = 'routine') -> TriageResult:
    recommendation, timeframe = CARE_PATHWAYS[level]
    return TriageResult(
        urgency_level         = level,
        care_recommendation   = recommendation,
        timeframe             = timeframe,
        requires_human_review = level != 'routine',
    )


def make_entry(message: str, timestamp: float = 0.0) -> ContextEntry:
    return ContextEntry(message=message, analysis=make_analysis(), language='en', timestamp=timestamp)


# ── FIXTURES ─────────────────────────────────────────────────

@pytest.fixture(scope="session")
def classifier():
    return build_default_model()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def config():
    return default_config()


@pytest.fixture
def context_store(clock):
    return ContextStore(clock=clock)


@pytest.fixture
def feedback_store(clock):
    return FeedbackStore(clock=clock)


@pytest.fixture
def pipeline(classifier, context_store, feedback_store, config, rng, clock):
    return MessagePipeline(
        classifier     = classifier,
        context_store  = context_store,
        feedback_store = feedback_store,
        config         = config,
        rng            = rng,
        voice          = MockVoiceAdapter(),
        ehr            = MockEHRAdapter(),
        clock          = clock,
    )


@pytest.fixture
def client(pipeline):
    app = _build_app(api=TriageAPI(pipeline=pipeline))
    with TestClient(app) as c:
        yield c
