"""Sentence segmentation for transcript text."""
import re

from .config import SENTENCE_TERMINALS

# Split AFTER a terminal mark, on the whitespace that follows it. Runs like
# "?!" or "..." stay together because the split needs whitespace.
_SENTENCE_BREAK = re.compile(rf"(?<=[{re.escape(SENTENCE_TERMINALS)}])\s+")


def segment(text: str) -> list[str]:
    """Split text into sentences, keeping terminal punctuation attached."""
    if not text:
        return []
    return [s for s in _SENTENCE_BREAK.split(text) if s]
