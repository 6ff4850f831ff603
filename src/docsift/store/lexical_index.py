"""Fuzzy lexical index: token and trigram postings over chunk text.

Scoring combines three signals:
- exact: 1.0 when the whitespace-normalised query occurs verbatim (case-insensitive)
- token: mean over query tokens of 1.0 for an exact token hit, or the difflib
  ratio of the closest chunk token when it reaches FUZZY_CUTOFF
- trigram: share of query trigrams present in the chunk

score = exact + TOKEN_WEIGHT * token + TRIGRAM_WEIGHT * trigram, so any exact
substring hit (>= 1.4) outranks every fuzzy-only hit (<= 1.0).
"""
from __future__ import annotations

import re
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from types import MappingProxyType
from typing import ClassVar, Iterable, Mapping

from ..models import Chunk, Document
from .base import Index, ScoredChunk, _frozen_failures, sorted_chunks

TOKEN_RE = re.compile(r"\w+")

TOKEN_WEIGHT = 0.6
TRIGRAM_WEIGHT = 0.4
FUZZY_CUTOFF = 0.75

def normalize(text: str) -> str:
    return " ".join(text.lower().split())

def tokenize(text: str) -> list[str]:
    return TOKEN_RE.findall(text.lower())

def trigrams(text: str) -> frozenset[str]:
    return frozenset(text[i:i + 3] for i in range(len(text) - 2))

def _postings(sets: Iterable[frozenset[str]]) -> Mapping[str, frozenset[int]]:
    acc: dict[str, set[int]] = defaultdict(set)
    for i, items in enumerate(sets):
        for item in items:
            acc[item].add(i)
    return MappingProxyType({k: frozenset(v) for k, v in acc.items()})

@dataclass(frozen=True, eq=False)
class LexicalIndex(Index):
    strategy: ClassVar[str] = "lexical"

    normalized: tuple[str, ...] = ()
    token_postings: Mapping[str, frozenset[int]] = field(default_factory=lambda: MappingProxyType({}))
    trigram_postings: Mapping[str, frozenset[int]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def empty(cls) -> "LexicalIndex":
        return cls()

    @classmethod
    def from_chunks(
        cls,
        chunks: Iterable[Chunk],
        documents: Iterable[Document] = (),
        failures: Mapping[str, str] | None = None,
    ) -> "LexicalIndex":
        ordered = sorted_chunks(chunks)
        normalized = tuple(normalize(c.text) for c in ordered)
        return cls(
            chunks=ordered,
            documents=tuple(sorted(documents, key=lambda d: d.doc_id)),
            failures=_frozen_failures(failures),
            normalized=normalized,
            token_postings=_postings(frozenset(tokenize(t)) for t in normalized),
            trigram_postings=_postings(trigrams(t) for t in normalized),
        )

    def _close_tokens(self, query_token: str) -> dict[str, float]:
        """Vocabulary tokens similar to query_token, with their similarity."""
        out: dict[str, float] = {}
        if query_token in self.token_postings:
            out[query_token] = 1.0
        sm = SequenceMatcher()
        sm.set_seq2(query_token)
        for tok in self.token_postings:
            if tok == query_token:
                continue
            sm.set_seq1(tok)
            if sm.real_quick_ratio() < FUZZY_CUTOFF or sm.quick_ratio() < FUZZY_CUTOFF:
                continue
            ratio = sm.ratio()
            if ratio >= FUZZY_CUTOFF:
                out[tok] = ratio
        return out

    def score(self, query: str, min_score: float = 0.0) -> list[ScoredChunk]:
        """Score every chunk against the query; return those reaching min_score."""
        q = normalize(query)
        if not q or not self.chunks:
            return []

        q_tokens = list(dict.fromkeys(tokenize(q)))

        # token signal: best similarity per (query token, chunk)
        token_sum: Counter[int] = Counter()
        matched_tokens: dict[int, list[str]] = defaultdict(list)
        for qt in q_tokens:
            best: dict[int, tuple[float, str]] = {}
            for tok, ratio in self._close_tokens(qt).items():
                for ci in self.token_postings[tok]:
                    if ci not in best or ratio > best[ci][0]:
                        best[ci] = (ratio, tok)
            for ci, (ratio, tok) in best.items():
                token_sum[ci] += ratio
                matched_tokens[ci].append(tok)

        # trigram signal
        q_grams = trigrams(q)
        gram_hits: Counter[int] = Counter()
        for g in q_grams:
            for ci in self.trigram_postings.get(g, ()):
                gram_hits[ci] += 1

        hits: list[ScoredChunk] = []
        for ci, chunk in enumerate(self.chunks):
            exact = 1.0 if q in self.normalized[ci] else 0.0
            token_score = token_sum[ci] / len(q_tokens) if q_tokens else 0.0
            trigram_score = gram_hits[ci] / len(q_grams) if q_grams else 0.0
            score = exact + TOKEN_WEIGHT * token_score + TRIGRAM_WEIGHT * trigram_score
            if score <= 0.0 or score < min_score:
                continue
            matched = ((q,) if exact else ()) + tuple(matched_tokens.get(ci, ()))
            hits.append(ScoredChunk(chunk=chunk, score=score, matched=matched))
        return hits
