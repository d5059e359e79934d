"""
Readability pass for corrected transcripts.

Independent of homonym correction; run it after (or without) the corrector.
Steps run in a fixed order: whitespace collapse assumes the spacing fixes
before it have already run.
"""
import re
from typing import Callable

from .config import SENTENCE_TERMINALS, SPACED_PUNCTUATION

_TERM = re.escape(SENTENCE_TERMINALS)
_PUNCT = re.escape(SPACED_PUNCTUATION)

# Terminal mark, optional whitespace, lower-case letter. Whitespace is
# optional because the spacing fix ("world.how" -> "world. how") runs later.
_SENTENCE_START = re.compile(rf"([{_TERM}]\s*)([a-z])")
_STANDALONE_I = re.compile(r"\bi\b")
_SPACE_BEFORE_PUNCT = re.compile(rf"\s+([{_PUNCT}])")
_MISSING_SPACE_AFTER_PUNCT = re.compile(rf"([{_PUNCT}])([a-zA-Z])")
_WHITESPACE_RUN = re.compile(r"\s+")
_FIRST_CHAR = re.compile(r"^(\s*)(\S)")


def capitalize_sentence_starts(text: str) -> str:
    return _SENTENCE_START.sub(lambda m: m.group(1) + m.group(2).upper(), text)


def capitalize_pronoun_i(text: str) -> str:
    return _STANDALONE_I.sub("I", text)


def strip_space_before_punctuation(text: str) -> str:
    return _SPACE_BEFORE_PUNCT.sub(r"\1", text)


def space_after_punctuation(text: str) -> str:
    return _MISSING_SPACE_AFTER_PUNCT.sub(r"\1 \2", text)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text)


def capitalize_first(text: str) -> str:
    return _FIRST_CHAR.sub(lambda m: m.group(1) + m.group(2).upper(), text, count=1)


STEPS: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("sentence_starts", capitalize_sentence_starts),
    ("pronoun_i", capitalize_pronoun_i),
    ("space_before_punct", strip_space_before_punctuation),
    ("space_after_punct", space_after_punctuation),
    ("collapse_whitespace", collapse_whitespace),
    ("capitalize_first", capitalize_first),
    ("strip", str.strip),
)


def normalize(text: str) -> str:
    """Fix capitalization and punctuation spacing. Blank input is returned as-is."""
    if text is None or not text.strip():
        return text
    for _name, step in STEPS:
        text = step(text)
    return text
