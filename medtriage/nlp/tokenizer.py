"""
medtriage/nlp/tokenizer.py
Tokenizer / normalizer. Lower-cases and splits on word boundaries, then
Porter-stems for matching. Every downstream stage consumes these tokens.
"""

from typing import List, Tuple

from nltk.stem.porter import PorterStemmer
from nltk.tokenize import RegexpTokenizer

# \w is unicode-aware, so accented Spanish/French words stay whole
_TOKENIZER = RegexpTokenizer(r"\w+")
_STEMMER   = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)

# Dropped before classification only; sentiment and entities see every token.
STOP_WORDS = frozenset({
    'a', 'about', 'after', 'all', 'also', 'am', 'an', 'and', 'any', 'are',
    'as', 'at', 'be', 'been', 'but', 'by', 'did', 'do', 'does', 'for',
    'from', 'had', 'has', 'have', 'he', 'her', 'here', 'him', 'his', 'how',
    'i', 'if', 'in', 'into', 'is', 'it', 'its', 'just', 'm', 'me', 'my',
    'of', 'on', 'or', 'our', 's', 'she', 'so', 'than', 'that', 'the',
    'their', 'them', 'then', 'there', 'these', 'they', 'this', 'those', 't',
    'to', 've', 'was', 'we', 'were', 'what', 'when', 'where', 'which',
    'who', 'will', 'with', 'would', 'you', 'your',
})


def tokenize(text: str) -> List[str]:
    """Lower-cased word tokens in order. Empty/whitespace input → []."""
    if not text or not text.strip():
        return []
    return _TOKENIZER.tokenize(text.lower())


def stem(token: str) -> str:
    return _STEMMER.stem(token)


def stem_tokens(tokens: List[str]) -> List[str]:
    return [_STEMMER.stem(t) for t in tokens]


def normalize(text: str) -> Tuple[List[str], List[str]]:
    """Return (tokens, stemmed_tokens) — parallel sequences."""
    tokens = tokenize(text)
    return tokens, stem_tokens(tokens)


def tokenize_and_stem(text: str) -> List[str]:
    """Stemmed tokens with stop words removed. Classifier features."""
    return [stem(t) for t in tokenize(text) if t not in STOP_WORDS]
