# services/sentiment/lexicon.py
"""
Keyword-lexicon sentiment scoring.

One scorer, several lexicons. Each call site (US news, European news,
Reddit, Twitter) picks a LexiconConfig; the word lists and amplification cap
are data, not code.

Score model:
  - start at 50 (neutral)
  - +8 per token in the positive set, -8 per token in the negative set
  - phrase rules (substring match on the whole text) add their delta
  - if anything matched, push away from 50 by min(2 * matches, cap)
  - clamp to [5, 95]
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Tuple

from utils.common_helpers import clamp, round_int

NEUTRAL_SCORE = 50
MIN_SCORE = 5
MAX_SCORE = 95
WORD_WEIGHT = 8
MIN_TOKEN_LEN = 3

_NON_WORD = re.compile(r"[^\w]", re.ASCII)


@dataclass(frozen=True)
class PhraseRule:
    """Adds `delta` when every phrase occurs in the lower-cased text."""

    phrases: Tuple[str, ...]
    delta: int

    def applies(self, lowered: str) -> bool:
        return all(p in lowered for p in self.phrases)


@dataclass(frozen=True)
class LexiconConfig:
    name: str
    positive_words: FrozenSet[str]
    negative_words: FrozenSet[str]
    phrase_rules: Tuple[PhraseRule, ...] = ()
    amplification_cap: int = 25


_CORE_POSITIVE = {
    "bull", "bullish", "buy", "growth", "profit", "up", "rise", "good", "great",
    "strong", "rally", "surge", "boom", "positive", "optimistic", "confident",
    "recovery", "support",
}
_CORE_NEGATIVE = {
    "bear", "bearish", "sell", "crash", "dump", "loss", "down", "fall", "bad",
    "weak", "decline", "drop", "plunge", "correction", "negative", "pessimistic",
    "worried",
}
_TRADER_POSITIVE = {
    "calls", "long", "breakout", "momentum", "uptrend", "bounce", "green", "winning",
}
_TRADER_NEGATIVE = {
    "puts", "short", "breakdown", "resistance", "downtrend", "red", "losing",
    "panic", "fear", "bubble",
}

MARKET_NEWS = LexiconConfig(
    name="market_news",
    positive_words=frozenset(
        _CORE_POSITIVE
        | _TRADER_POSITIVE
        | {
            "excellent", "opportunity", "outperform", "beat", "exceed", "upgrade",
            "target", "gains", "soar", "climb", "advance", "improve", "strengthen",
        }
    ),
    negative_words=frozenset(
        _CORE_NEGATIVE
        | _TRADER_NEGATIVE
        | {
            "terrible", "awful", "overvalued", "recession", "inflation", "risk",
            "warning", "concern", "trouble", "struggle", "miss", "disappoint",
            "downgrade", "cut", "slash", "tumble", "slide",
        }
    ),
    amplification_cap=25,
)

EUROPEAN_NEWS = LexiconConfig(
    name="european_news",
    positive_words=frozenset(
        _CORE_POSITIVE
        | {
            "excellent", "expansion", "stimulus", "upgrade", "outperform", "beat",
            "exceed", "gains", "advance", "improve", "strengthen",
            "dovish", "accommodation",
        }
    ),
    negative_words=frozenset(
        _CORE_NEGATIVE
        | {
            "terrible", "awful", "recession", "crisis", "risk", "warning", "concern",
            "trouble", "struggle", "miss", "disappoint", "downgrade", "cut",
            "austerity", "deficit", "debt", "hawkish", "tightening", "brexit",
        }
    ),
    phrase_rules=(
        PhraseRule(("ecb", "rate cut"), 10),
        PhraseRule(("energy crisis",), -15),
        PhraseRule(("eu regulation",), -5),
    ),
    amplification_cap=25,
)

REDDIT = LexiconConfig(
    name="reddit",
    positive_words=frozenset(
        _CORE_POSITIVE | _TRADER_POSITIVE | {"moon", "rocket", "gains", "excellent"}
    ),
    negative_words=frozenset(
        _CORE_NEGATIVE | _TRADER_NEGATIVE | {"terrible", "awful", "overvalued"}
    ),
    amplification_cap=20,
)

TWITTER = LexiconConfig(
    name="twitter",
    positive_words=frozenset(
        (_CORE_POSITIVE | _TRADER_POSITIVE | {"moon", "rocket", "gains", "pump"})
    ),
    negative_words=frozenset(_CORE_NEGATIVE | _TRADER_NEGATIVE),
    amplification_cap=20,
)


def tokenize(text: str) -> list[str]:
    tokens = []
    for raw in text.lower().split():
        word = _NON_WORD.sub("", raw)
        if len(word) >= MIN_TOKEN_LEN:
            tokens.append(word)
    return tokens


def score_text(text: str, lexicon: LexiconConfig = MARKET_NEWS) -> int:
    """Sentiment of `text` as an integer in [5, 95]; 50 when nothing matches."""
    if not text or not text.strip():
        return NEUTRAL_SCORE

    score = NEUTRAL_SCORE
    matches = 0
    for word in tokenize(text):
        if word in lexicon.positive_words:
            score += WORD_WEIGHT
            matches += 1
        if word in lexicon.negative_words:
            score -= WORD_WEIGHT
            matches += 1

    lowered = text.lower()
    for rule in lexicon.phrase_rules:
        if rule.applies(lowered):
            score += rule.delta

    if matches > 0:
        adjustment = min(matches * 2, lexicon.amplification_cap)
        if score > NEUTRAL_SCORE:
            score = min(score + adjustment, MAX_SCORE)
        elif score < NEUTRAL_SCORE:
            score = max(score - adjustment, MIN_SCORE)

    return round_int(clamp(score, MIN_SCORE, MAX_SCORE))
