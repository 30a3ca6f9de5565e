"""
Term extraction: turns flat post text into unigram/bigram term streams and
selects the bounded vocabulary that becomes the graph's nodes.
"""

import re
from collections import Counter
from collections.abc import Iterable
from pathlib import Path

MIN_TERM_LENGTH = 3
MAX_NODES = 30

# A word starts with a letter or digit and continues with letters, digits,
# hyphens or apostrophes, so one-character words never match.
WORD_RE = re.compile(r"[a-z0-9][a-z0-9\-']+")

STOPWORDS = frozenset({
    "the", "and", "for", "with", "that", "this", "you", "your", "from", "are", "but", "was",
    "were", "have", "has", "had", "not", "can", "will", "would", "could", "should", "about",
    "into", "out", "over", "under", "between", "within", "without", "after", "before", "when",
    "where", "how", "why", "what", "which", "while", "than", "then", "also", "just", "like",
    "some", "more", "most", "much", "many", "each", "other", "another", "been", "being", "use",
    "used", "using", "via", "a", "an", "in", "on", "of", "to", "as", "it", "is", "at", "by",
    "or", "if", "we", "i",
})


def load_stopwords(path: Path) -> frozenset[str]:
    """Read an extra stopword list: one word per line, '#' starts a comment."""
    words = set()
    for line in path.read_text(encoding="utf-8").splitlines():
        word = line.split("#", 1)[0].strip().lower()
        if word:
            words.add(word)
    return frozenset(words)


def tokenize(
    text: str,
    stopwords: frozenset[str] = STOPWORDS,
    min_length: int = MIN_TERM_LENGTH,
) -> list[str]:
    """Split text into unigrams, each followed by the bigram it starts.

    >>> tokenize("The Quick-Brown fox jumps", frozenset({"the"}))
    ['quick-brown', 'quick-brown fox', 'fox', 'fox jumps', 'jumps']
    """
    words = [m.group().strip("-") for m in WORD_RE.finditer(text.lower())]
    words = [w for w in words if len(w) >= min_length and w not in stopwords]

    # Both halves of every bigram already passed the stopword filter.
    terms: list[str] = []
    for i, word in enumerate(words):
        terms.append(word)
        if i + 1 < len(words):
            terms.append(f"{word} {words[i + 1]}")
    return terms


def count_terms(docs: Iterable[list[str]]) -> Counter[str]:
    """Total occurrences of each term across all document streams."""
    freq: Counter[str] = Counter()
    for doc in docs:
        freq.update(doc)
    return freq


def rank_terms(freq: Counter[str]) -> list[tuple[str, int]]:
    """All terms by descending frequency, ties in alphabetical order."""
    return sorted(freq.items(), key=lambda item: (-item[1], item[0]))


def select_vocabulary(freq: Counter[str], max_nodes: int = MAX_NODES) -> list[tuple[str, int]]:
    """Keep the top max_nodes terms; list position is the node id."""
    if max_nodes < 0:
        raise ValueError(f"max_nodes must be non-negative, got {max_nodes}")
    return rank_terms(freq)[:max_nodes]


def vocabulary_index(vocab: list[tuple[str, int]]) -> dict[str, int]:
    """Map each selected term to its dense node id (0 = most frequent)."""
    return {term: i for i, (term, _) in enumerate(vocab)}
