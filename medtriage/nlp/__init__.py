"""
medtriage/nlp — tokenizer, training corpus and naive-Bayes intent classifier.
"""

from medtriage.nlp.classifier import ClassifierModel, build_default_model
from medtriage.nlp.tokenizer import normalize, tokenize, tokenize_and_stem

__all__ = [
    "ClassifierModel",
    "build_default_model",
    "normalize",
    "tokenize",
    "tokenize_and_stem",
]
