import sys

import pytest

sys.path.insert(0, ".")

from scribefix.rules import HomonymRule, KeywordContext, RuleCatalog  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point SettingsManager at a temp settings.json and drop the singleton."""
    from scribefix import config
    from scribefix.settings import SettingsManager

    monkeypatch.setattr(config, "SETTINGS_FILE", tmp_path / "settings.json")
    SettingsManager.reset()
    yield tmp_path / "settings.json"
    SettingsManager.reset()


@pytest.fixture
def keyword_rule():
    """Build a synthetic rule from keyword sets instead of regexes."""
    def _make(canonical, alternatives, justify, veto=()):
        return HomonymRule(
            canonical=canonical,
            alternatives=tuple(alternatives),
            justify=(KeywordContext(justify),),
            veto=(KeywordContext(veto),) if veto else (),
        )
    return _make


@pytest.fixture
def know_catalog():
    """Single no/know rule justified by a standalone 'i'."""
    return RuleCatalog([
        HomonymRule.from_patterns(
            "know", ["no"],
            [r".*\b(i|you|we)\b.*"],
            [r".*\b(not|never|nothing)\b.*"],
        ),
    ])


@pytest.fixture
def rules_file(tmp_path):
    """Write a JSON rules file and return its path."""
    import json

    def _write(entries, name="rules.json"):
        path = tmp_path / name
        path.write_text(json.dumps(entries))
        return path
    return _write
