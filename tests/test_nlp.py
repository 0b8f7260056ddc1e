"""
tests/test_nlp.py
Tokenizer, training corpus and naive-Bayes intent classifier.
"""

import pytest

from medtriage.errors import ClassifierUnready, InvalidInput
from medtriage.models.record import INTENTS, TrainingExample
from medtriage.nlp.classifier import ClassifierModel
from medtriage.nlp.tokenizer import normalize, stem, tokenize, tokenize_and_stem
from medtriage.nlp.training_data import TRAINING_DATA


class TestTokenizer:
    def test_lowercases_and_splits_on_word_boundaries(self):
        assert tokenize("I'm experiencing Chest PAIN!") == ['i', 'm', 'experiencing', 'chest', 'pain']

    def test_empty_and_whitespace_yield_no_tokens(self):
        assert tokenize("") == []
        assert tokenize("   \n\t") == []

    def test_normalize_returns_parallel_sequences(self):
        tokens, stemmed = normalize("My joints are swollen and painful")
        assert len(tokens) == len(stemmed)
        assert tokens[1] == 'joints'
        assert stemmed[1] == 'joint'

    def test_stem_strips_suffixes(self):
        assert stem('pains') == 'pain'
        assert stem('schedule') == 'schedul'

    def test_classifier_features_drop_stop_words(self):
        assert tokenize_and_stem("I need to schedule a checkup") == ['need', 'schedul', 'checkup']


class TestTrainingCorpus:
    def test_every_intent_has_examples(self):
        assert {ex.category for ex in TRAINING_DATA} == set(INTENTS)

    def test_examples_are_immutable(self):
        with pytest.raises(Exception):
            TRAINING_DATA[0].text = "changed"


class TestClassifier:
    def test_untrained_model_refuses_to_classify(self):
        model = ClassifierModel()
        model.add_document("book an appointment", "appointment")
        with pytest.raises(ClassifierUnready):
            model.classify("appointment please")

    def test_training_with_no_documents_fails(self):
        with pytest.raises(ClassifierUnready):
            ClassifierModel().train()

    def test_model_is_frozen_after_training(self):
        model = ClassifierModel.from_examples([TrainingExample("pay my bill", "billing")])
        with pytest.raises(RuntimeError):
            model.add_document("another bill", "billing")

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_input_is_rejected(self, classifier, text):
        with pytest.raises(InvalidInput):
            classifier.classify(text)

    def test_ties_go_to_first_inserted_category(self):
        model = ClassifierModel.from_examples([
            TrainingExample("hello there", "first"),
            TrainingExample("hello there", "second"),
        ])
        assert model.classify("hello") == "first"

    def test_unseen_tokens_still_classify(self, classifier):
        assert classifier.classify("zzqx wvut") in INTENTS

    def test_stop_word_only_text_classifies_by_prior(self, classifier):
        # no features left, so the largest category wins
        assert classifier.classify("I am the") == "symptoms"

    def test_categories_follow_corpus_order(self, classifier):
        assert classifier.categories[0] == TRAINING_DATA[0].category
        assert set(classifier.categories) == set(INTENTS)

    @pytest.mark.parametrize("text,expected", [
        ("I need a refill on my medication", "prescription"),
        ("I have a question about my bill", "billing"),
        ("How do I reset my password?", "technical"),
        ("I'm having anxiety attacks", "mental_health"),
    ])
    def test_classifies_known_phrasings(self, classifier, text, expected):
        assert classifier.classify(text) == expected

    def test_checkup_request_is_appointment_or_general(self, classifier):
        assert classifier.classify("I need to schedule a checkup") in ("appointment", "general")

    def test_classification_is_deterministic_and_pure(self, classifier):
        before = classifier.scores("My child has a fever")
        results = {classifier.classify("My child has a fever") for _ in range(20)}
        assert len(results) == 1
        assert classifier.scores("My child has a fever") == before
