"""
medtriage/nlp/classifier.py
Bag-of-words multinomial naive Bayes intent classifier.

Trained once at process start from TRAINING_DATA and then frozen.
classify() never mutates model state, so one ClassifierModel can be
shared by every request handler.

Scoring per category c:
    log P(c) + Σ_token log((count(token, c) + α) / (total(c) + α·|V|))
Laplace smoothing (α = 1) keeps unseen tokens from zeroing a category.
Ties go to the category that appeared first in the corpus.
"""

import logging
import math
from collections import Counter
from typing import Dict, Iterable, List, Optional

from medtriage.errors import ClassifierUnready, InvalidInput
from medtriage.models.record import TrainingExample
from medtriage.nlp.tokenizer import tokenize_and_stem

logger = logging.getLogger(__name__)


class ClassifierModel:
    """Frozen-after-training naive Bayes model. Build with from_examples()."""

    def __init__(self, alpha: float = 1.0):
        self.alpha = alpha
        self._doc_counts:   Dict[str, int]     = {}   # insertion order = tie-break order
        self._token_counts: Dict[str, Counter] = {}
        self._token_totals: Dict[str, int]     = {}
        self._vocabulary:   set                = set()
        self._trained = False

    @classmethod
    def from_examples(cls, examples: Iterable[TrainingExample], alpha: float = 1.0) -> "ClassifierModel":
        model = cls(alpha=alpha)
        for ex in examples:
            model.add_document(ex.text, ex.category)
        model.train()
        return model

    # ── TRAINING ─────────────────────────────────────────────

    def add_document(self, text: str, category: str) -> None:
        if self._trained:
            raise RuntimeError("Model is frozen after train(); restart to retrain.")
        features = tokenize_and_stem(text)
        self._doc_counts[category] = self._doc_counts.get(category, 0) + 1
        self._token_counts.setdefault(category, Counter()).update(features)
        self._vocabulary.update(features)

    def train(self) -> None:
        if not self._doc_counts:
            raise ClassifierUnready("No training documents were added.")
        self._token_totals = {
            c: sum(counts.values()) for c, counts in self._token_counts.items()
        }
        self._trained = True
        logger.info(
            f"Intent classifier trained: {sum(self._doc_counts.values())} examples "
            f"across {len(self._doc_counts)} categories, vocabulary={len(self._vocabulary)}"
        )

    # ── INFERENCE ────────────────────────────────────────────

    @property
    def is_trained(self) -> bool:
        return self._trained

    @property
    def categories(self) -> List[str]:
        return list(self._doc_counts)

    def scores(self, text: str) -> Dict[str, float]:
        """Log-likelihood per category, in corpus order."""
        if not self._trained:
            raise ClassifierUnready("classify() called before train().")
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput("Cannot classify empty text.")

        features   = tokenize_and_stem(text)
        total_docs = sum(self._doc_counts.values())
        vocab_size = len(self._vocabulary)

        result: Dict[str, float] = {}
        for category, docs in self._doc_counts.items():
            counts      = self._token_counts[category]
            denominator = self._token_totals[category] + self.alpha * vocab_size
            log_prob    = math.log(docs / total_docs)
            for token in features:
                log_prob += math.log((counts.get(token, 0) + self.alpha) / denominator)
            result[category] = log_prob
        return result

    def classify(self, text: str) -> str:
        """Best intent for text. Deterministic; never raises for non-empty text."""
        best: Optional[str] = None
        best_score = -math.inf
        for category, score in self.scores(text).items():
            if score > best_score:
                best, best_score = category, score
        return best


def build_default_model() -> ClassifierModel:
    from medtriage.nlp.training_data import TRAINING_DATA
    return ClassifierModel.from_examples(TRAINING_DATA)
