"""
HomonymCorrector — context-aware homonym correction for ASR transcripts.

Per sentence:
  1. Lower-case the sentence once; this is the context for every rule.
  2. For each rule (catalog order) and each of its alternatives, find the
     first whole-word occurrence in the current sentence.
  3. If the rule is justified by the context and not vetoed, replace that
     occurrence with the canonical word, keeping its initial-letter case.

Context is never recomputed after a replacement, so one pass is enough and
earlier rewrites cannot change later decisions. Repeated occurrences of the
same alternative are left after the first one.

Thread-safe: the catalog is read-only and all state is call-local.
"""
from __future__ import annotations

import functools
import logging
import re

from .logger import TRACE
from .rules import RuleCatalog, default_catalog
from .segmenter import segment

logger = logging.getLogger(__name__)


# ── Span helpers ─────────────────────────────────────────────────────────────

@functools.lru_cache(maxsize=256)
def _word_pattern(word: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)


def find_word(word: str, text: str) -> tuple[int, int] | None:
    """Span of the first case-insensitive whole-word occurrence, or None."""
    m = _word_pattern(word).search(text)
    return m.span() if m else None


def match_case(found: str, replacement: str) -> str:
    """Carry the initial capital of `found` over to `replacement`."""
    if found and replacement and found[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def replace_span(text: str, span: tuple[int, int], replacement: str) -> str:
    start, end = span
    return text[:start] + replacement + text[end:]


# ── Corrector ────────────────────────────────────────────────────────────────

class HomonymCorrector:
    """Applies a RuleCatalog to transcript text. Never raises on str input."""

    def __init__(self, catalog: RuleCatalog | None = None):
        self.catalog = catalog if catalog is not None else default_catalog()

    def correct_sentence(self, sentence: str) -> str:
        context = sentence.lower()
        corrected = sentence
        logger.log(TRACE, "evaluating sentence: %r", sentence)

        for rule in self.catalog.lookup_all():
            for alternative in rule.alternatives:
                span = find_word(alternative, corrected)
                if span is None:
                    continue
                if not rule.is_justified(context):
                    continue

                found = corrected[span[0]:span[1]]
                replacement = match_case(found, rule.canonical)
                corrected = replace_span(corrected, span, replacement)
                logger.debug(
                    "homonym_corrected rule=%s from=%r to=%r at=%d",
                    rule.canonical, found, replacement, span[0],
                    extra={"fields": {
                        "rule": rule.canonical,
                        "alternative": alternative,
                        "found": found,
                        "replacement": replacement,
                        "start": span[0],
                    }},
                )

        return corrected

    def process(self, text: str) -> str:
        """Correct every sentence of a transcript. Blank input is returned as-is."""
        if text is None or not text.strip():
            return text

        result = " ".join(self.correct_sentence(s) for s in segment(text)).strip()

        if result != text:
            logger.info(
                "transcript changed by correction pass (%d -> %d chars)", len(text), len(result),
                extra={"fields": {"input": text, "output": result}},
            )
        return result
