"""
scribefix/rules.py — Homonym rule catalog.

Each rule names one canonical spelling, the spellings an ASR engine tends to
emit in its place, and two sets of whole-sentence context predicates:
justify (any match allows the rewrite) and veto (any match blocks it).

The catalog is built once and never mutated. Adding a homonym group means
adding one entry to _SEED_RULES.

Usage:
    from scribefix.rules import default_catalog
    for rule in default_catalog().lookup_all():
        ...
"""
from __future__ import annotations

import functools
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Protocol

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Invalid rule definition. Raised while building a catalog, never while correcting."""


# ── Context predicates ───────────────────────────────────────────────────────

class ContextPredicate(Protocol):
    def __call__(self, context: str) -> bool: ...


class RegexContext:
    """Matches when the pattern covers the ENTIRE lower-cased sentence."""

    __slots__ = ("pattern", "_regex")

    def __init__(self, pattern: str):
        try:
            self._regex = re.compile(pattern, re.DOTALL)
        except re.error as e:
            raise CatalogError(f"malformed context pattern {pattern!r}: {e}") from e
        self.pattern = pattern

    def __call__(self, context: str) -> bool:
        return self._regex.fullmatch(context) is not None

    def __repr__(self) -> str:
        return f"RegexContext({self.pattern!r})"


class KeywordContext:
    """Matches when any keyword appears as a whole word in the sentence."""

    __slots__ = ("keywords",)

    _TOKEN = re.compile(r"[a-z0-9']+")

    def __init__(self, keywords: Iterable[str]):
        self.keywords = frozenset(k.lower() for k in keywords)
        if not self.keywords:
            raise CatalogError("KeywordContext needs at least one keyword")

    def __call__(self, context: str) -> bool:
        return not self.keywords.isdisjoint(self._TOKEN.findall(context))

    def __repr__(self) -> str:
        return f"KeywordContext({sorted(self.keywords)!r})"


# ── Rule ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HomonymRule:
    canonical: str
    alternatives: tuple[str, ...]
    justify: tuple[ContextPredicate, ...]
    veto: tuple[ContextPredicate, ...] = field(default=())

    def __post_init__(self):
        if not self.canonical or not self.canonical.strip():
            raise CatalogError("rule has an empty canonical word")
        if not self.alternatives:
            raise CatalogError(f"rule '{self.canonical}' has no alternatives")
        if any(not a or not a.strip() for a in self.alternatives):
            raise CatalogError(f"rule '{self.canonical}' has an empty alternative")
        if self.canonical.lower() in (a.lower() for a in self.alternatives):
            raise CatalogError(f"rule '{self.canonical}' lists itself as an alternative")
        if not self.justify:
            raise CatalogError(f"rule '{self.canonical}' has no justify patterns")

    @classmethod
    def from_patterns(cls, canonical: str, alternatives: Iterable[str],
                      justify: Iterable[str], veto: Iterable[str] = ()) -> "HomonymRule":
        try:
            justify_ctx = tuple(RegexContext(p) for p in justify)
            veto_ctx = tuple(RegexContext(p) for p in veto)
        except CatalogError as e:
            raise CatalogError(f"rule '{canonical}': {e}") from e
        return cls(canonical, tuple(alternatives), justify_ctx, veto_ctx)

    def is_justified(self, context: str) -> bool:
        """True if any justify predicate matches and no veto predicate does."""
        if not any(p(context) for p in self.justify):
            return False
        return not any(p(context) for p in self.veto)


# ── Catalog ──────────────────────────────────────────────────────────────────

class RuleCatalog:
    """
    Read-only, ordered mapping of canonical word -> HomonymRule.

    Iteration follows declaration order. That order decides the outcome
    when alternatives from two rules appear in the same sentence.
    """

    def __init__(self, rules: Iterable[HomonymRule] = ()):
        by_word: dict[str, HomonymRule] = {}
        for rule in rules:
            if rule.canonical in by_word:
                raise CatalogError(f"duplicate rule for canonical word '{rule.canonical}'")
            by_word[rule.canonical] = rule
        self._rules = by_word
        self._ordered = tuple(by_word.values())

    def lookup_all(self) -> tuple[HomonymRule, ...]:
        return self._ordered

    def get(self, canonical: str) -> HomonymRule | None:
        return self._rules.get(canonical)

    def extended(self, rules: Iterable[HomonymRule]) -> "RuleCatalog":
        """Return a new catalog; same-word rules replace in place, others append."""
        merged = dict(self._rules)
        for rule in rules:
            merged[rule.canonical] = rule
        return RuleCatalog(merged.values())

    def __iter__(self) -> Iterator[HomonymRule]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, canonical: object) -> bool:
        return canonical in self._rules

    def __repr__(self) -> str:
        return f"RuleCatalog({list(self._rules)!r})"


# ── Seed rules ───────────────────────────────────────────────────────────────
# (canonical, alternatives, justify patterns, veto patterns)
# Patterns are matched against the lower-cased sentence, so they are written
# in lower case.

_SEED_RULES: list[tuple[str, tuple[str, ...], tuple[str, ...], tuple[str, ...]]] = [
    # their/there/they're
    ("their", ("there", "they're"),
     (r".*\b(house|car|dog|cat|book|phone|computer|family|friend|children|parents)\b.*",),
     (r".*\b(is|are|was|were|will be|has been)\b.*", r".*\b(they are|they were)\b.*")),
    ("there", ("their", "they're"),
     (r".*\b(is|are|was|were|will be|has been|over|here|go|went|live|located)\b.*",),
     (r".*\b(house|car|dog|cat|book|phone)\b.*", r".*\b(they are|they were)\b.*")),

    # your/you're
    ("your", ("you're",),
     (r".*\b(house|car|name|phone|book|idea|question|answer|problem|solution)\b.*",),
     (r".*\b(you are|you were|you will be)\b.*",)),

    # to/too/two
    ("to", ("too", "two"),
     (r".*\b(go|went|going|send|give|talk|listen|want|need|have)\b.*",),
     (r".*\b(much|many|also|as well)\b.*", r".*\b(people|things|items|persons|of them)\b.*")),

    # its/it's
    ("its", ("it's",),
     (r".*\b(owns|has|possessive|belongs)\b.*",),
     (r".*\b(it is|it was|it has been)\b.*",)),

    # hear/here
    ("hear", ("here",),
     (r".*\b(listen|sound|noise|music|voice|audio|ear)\b.*",),
     (r".*\b(place|location|present|come|go|stay|live)\b.*",)),

    # by/buy/bye
    ("by", ("buy", "bye"),
     (r".*\b(written|created|made|done|sent|located|near|beside)\b.*",),
     (r".*\b(purchase|shop|store|price|cost|sell)\b.*", r".*\b(goodbye|farewell|leaving|see you)\b.*")),

    # no/know
    ("know", ("no",),
     (r".*\b(i|you|we|they|he|she|understand|aware|familiar|recognize|information)\b.*",),
     (r".*\b(not|never|none|nothing|nobody|denial|refuse|negative)\b.*",)),

    # new/knew
    ("new", ("knew",),
     (r".*\b(brand|fresh|recent|latest|modern|novel|car|phone|house|product)\b.*",),
     (r".*\b(i|you|we|they|he|she|already|before|previously|past)\b.*",)),

    # sea/see
    ("see", ("sea",),
     (r".*\b(look|watch|view|notice|observe|eye|vision|understand|comprehend|i|you|we)\b.*",),
     (r".*\b(ocean|water|beach|coast|marine|fish|wave|ship|boat)\b.*",)),

    # one/won
    ("one", ("won",),
     (r".*\b(number|single|only|first|another|more than|less than|at least)\b.*",),
     (r".*\b(victory|game|race|competition|prize|award|battle|contest|defeated)\b.*",)),
]


@functools.lru_cache(maxsize=None)
def default_catalog() -> RuleCatalog:
    """Built-in catalog, constructed on first use and shared thereafter."""
    catalog = RuleCatalog(HomonymRule.from_patterns(*entry) for entry in _SEED_RULES)
    logger.info("RuleCatalog built: %d homonym rules", len(catalog))
    return catalog


# ── User rules ───────────────────────────────────────────────────────────────

_REQUIRED_KEYS = ("canonical", "alternatives", "justify")


def _string_list(entry: dict, key: str, where: str) -> list[str]:
    value = entry.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise CatalogError(f"{where}: '{key}' must be a list of strings")
    return value


def load_rules_file(path: str | Path) -> list[HomonymRule]:
    """
    Load extra rules from a JSON list of objects:

        [{"canonical": "write", "alternatives": ["right"],
          "justify": [".*\\b(letter|essay)\\b.*"], "veto": []}]
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise CatalogError(f"cannot read rules file {path}: {e}") from e
    except ValueError as e:
        raise CatalogError(f"rules file {path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise CatalogError(f"rules file {path} must contain a JSON list")

    rules = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise CatalogError(f"{path}: entry {i} is not an object")
        missing = [k for k in _REQUIRED_KEYS if k not in entry]
        if missing:
            raise CatalogError(f"{path}: entry {i} missing {', '.join(missing)}")
        where = f"{path}: entry {i}"
        if not isinstance(entry["canonical"], str):
            raise CatalogError(f"{where}: 'canonical' must be a string")
        rules.append(HomonymRule.from_patterns(
            entry["canonical"],
            _string_list(entry, "alternatives", where),
            _string_list(entry, "justify", where),
            _string_list(entry, "veto", where),
        ))
    logger.info("Loaded %d custom homonym rules from %s", len(rules), path)
    return rules


def build_catalog(custom_rules_path: str | Path | None = None) -> RuleCatalog:
    """Default catalog, extended with a user rules file when one is configured."""
    catalog = default_catalog()
    if custom_rules_path:
        catalog = catalog.extended(load_rules_file(custom_rules_path))
    return catalog
