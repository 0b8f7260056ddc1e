"""
tests/test_triage.py
Triage engine rules and provider recommendations.
"""

import pytest

from medtriage.models.record import SentimentResult
from medtriage.triage import engine, providers
from medtriage.triage.engine import EMERGENCY_KEYWORDS, triage

from conftest import CHEST_PAIN, CHECKUP


class TestTriageLevels:
    @pytest.mark.parametrize("keyword", EMERGENCY_KEYWORDS)
    def test_every_emergency_keyword_is_emergency(self, keyword):
        result = triage(f"I think this is {keyword} right now")
        assert result.urgency_level == 'emergency'
        assert result.requires_human_review
        assert result.timeframe == 'immediately'

    def test_chest_pain_scenario(self):
        result = triage(CHEST_PAIN)
        assert result.urgency_level == 'emergency'
        assert result.care_recommendation.startswith("Please call 911")
        assert result.detected_symptoms == ['pain', 'breath']

    def test_phrases_match_case_insensitively(self):
        assert triage("CHEST PAIN since this morning").urgency_level == 'emergency'

    def test_urgent_keyword(self):
        result = triage("My son has a fever")
        assert result.urgency_level == 'urgent'
        assert result.timeframe == 'today'
        assert result.requires_human_review

    def test_urgent_sentiment_alone_escalates(self):
        urgent = SentimentResult(score=-0.9, label='negative', is_urgent=True)
        assert triage("question about forms", sentiment=urgent, symptoms=[]).urgency_level == 'urgent'

    def test_negative_score_below_threshold_is_prompt(self):
        # -3 / 6 tokens = -0.5: below -0.3 but not below the urgent cut-off
        result = triage("the billing portal is terrible today")
        assert result.urgency_level == 'prompt'
        assert result.timeframe == 'within 1-2 days'
        assert result.requires_human_review

    def test_routine(self):
        result = triage(CHECKUP)
        assert result.urgency_level == 'routine'
        assert result.timeframe == 'within the next few days'
        assert not result.requires_human_review

    def test_result_carries_sentiment(self):
        result = triage(CHECKUP)
        assert result.sentiment is not None
        assert result.sentiment.label == 'neutral'

    def test_emergency_outranks_urgent(self):
        assert triage("fever and chest pain").urgency_level == 'emergency'


class TestPriorityUpdate:
    @pytest.mark.parametrize("level,priority", [
        ('emergency', 'urgent'),
        ('urgent',    'high'),
        ('prompt',    'medium'),
        ('routine',   None),
    ])
    def test_mapping(self, level, priority):
        assert engine.priority_update(level) == priority


class TestProviderRecommender:
    def test_specialties_in_first_hit_order(self):
        rec = providers.recommend("I have chest pain and a headache")
        assert rec.specialties == ['Cardiology', 'Neurology']
        assert rec.provider_types == ['Cardiology Specialist', 'Neurology Specialist']

    def test_defaults_to_primary_care(self):
        rec = providers.recommend("Something feels off")
        assert rec.specialties == ['Primary Care']
        assert rec.provider_types == [
            'Family Medicine Physician', 'Internal Medicine Physician', 'Nurse Practitioner',
        ]

    def test_specialties_are_deduplicated(self):
        rec = providers.recommend("heart racing, heart pounding, chest pain")
        assert rec.specialties == ['Cardiology']

    def test_named_roles_for_primary_care_and_psychiatry(self):
        rec = providers.recommend("anxiety and a fever")
        assert rec.specialties == ['Psychiatry', 'Primary Care']
        assert rec.provider_types == [
            'Family Medicine Physician', 'Internal Medicine Physician', 'Nurse Practitioner',
            'Psychiatrist', 'Psychologist', 'Licensed Clinical Social Worker',
        ]

    def test_symptom_strings_are_scanned(self):
        assert providers.recommend("feeling unwell", symptoms=['rash']).specialties == ['Dermatology']

    def test_location_and_disclaimer(self):
        rec = providers.recommend("rash", location="Boston")
        assert rec.location_based == "Providers near Boston"
        assert rec.message == providers.DISCLAIMER
        assert providers.recommend("rash").location_based is None

    def test_cap_applies_to_both_lists(self):
        rec = providers.recommend("chest pain, headache and a rash", max_recommendations=2)
        assert rec.specialties == ['Cardiology', 'Neurology']
        assert len(rec.provider_types) == 2
