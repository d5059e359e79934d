"""
TranscriptPostProcessor — settings-driven transcript cleanup.

Pipeline per transcript:
  1. Homonym correction   (HomonymCorrector, if `homonym_correction`)
  2. Readability pass     (normalize, if `readability_pass`)

The rule catalog is built at construction, so a broken custom rules file
raises CatalogError here and not in the middle of a transcript.
"""
import logging

from .corrector import HomonymCorrector
from .readability import normalize
from .rules import RuleCatalog, build_catalog

logger = logging.getLogger(__name__)


class TranscriptPostProcessor:

    def __init__(self, settings=None, catalog: RuleCatalog | None = None):
        if settings is None:
            from .settings import SettingsManager
            settings = SettingsManager()
        self.settings = settings
        self._fixed_catalog = catalog
        self._corrector = HomonymCorrector(self._resolve_catalog())

    def _resolve_catalog(self) -> RuleCatalog:
        if self._fixed_catalog is not None:
            return self._fixed_catalog
        return build_catalog(self.settings.get("custom_rules_path"))

    @property
    def catalog(self) -> RuleCatalog:
        return self._corrector.catalog

    def run(self, text: str) -> str:
        if self.settings.get("homonym_correction", True):
            text = self._corrector.process(text)
        if self.settings.get("readability_pass", True):
            text = normalize(text)
        return text

    def reload(self):
        """Rebuild the catalog after a settings change."""
        self._corrector = HomonymCorrector(self._resolve_catalog())
        logger.info("TranscriptPostProcessor reloaded: %d rules", len(self.catalog))
