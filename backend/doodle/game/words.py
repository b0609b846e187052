from __future__ import annotations

import random
from pathlib import Path
from typing import Mapping, Protocol, Sequence


DEFAULT_WORDS = [
    "house", "cat", "dog", "car", "tree", "book", "phone", "computer",
    "pizza", "guitar", "bicycle", "flower", "butterfly", "rainbow",
    "mountain", "ocean", "airplane", "chair", "umbrella", "elephant",
]


class WordSupply(Protocol):
    def pick(self) -> str: ...


def _clean(words: Sequence[str]) -> list[str]:
    return [w.strip() for w in words if isinstance(w, str) and w.strip()]


class FixedWordList:
    """Uniform random choice over a fixed list."""

    def __init__(self, words: Sequence[str], rng: random.Random | None = None) -> None:
        self.words = _clean(words)
        if not self.words:
            raise ValueError("word list is empty")
        self._rng = rng or random.Random()

    def pick(self) -> str:
        return self._rng.choice(self.words)


class WeightedWordList:
    """Random choice where each word is drawn proportionally to its weight."""

    def __init__(self, weights: Mapping[str, float], rng: random.Random | None = None) -> None:
        self.weights = {w.strip(): float(n) for w, n in weights.items() if w.strip() and n > 0}
        if not self.weights:
            raise ValueError("weighted word list is empty")
        self._rng = rng or random.Random()

    def pick(self) -> str:
        words = list(self.weights)
        return self._rng.choices(words, weights=[self.weights[w] for w in words], k=1)[0]


def load_word_file(path: str | Path, rng: random.Random | None = None) -> WordSupply:
    """Read an external dictionary.

    One entry per line, either ``word`` or ``word,weight``. Blank lines and
    lines starting with ``#`` are skipped. The file yields a weighted list as
    soon as any line carries a weight (unweighted lines count as 1).
    """
    weights: dict[str, float] = {}
    weighted = False

    for raw in Path(path).read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        word, sep, weight = line.rpartition(",")
        if sep:
            try:
                weights[word.strip()] = float(weight)
                weighted = True
                continue
            except ValueError:
                pass
        weights[line] = 1.0

    if weighted:
        return WeightedWordList(weights, rng=rng)
    return FixedWordList(list(weights), rng=rng)


def word_hint(word: str) -> str:
    return "".join("_" if ch.isalnum() else ch for ch in word)
