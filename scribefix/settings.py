
import json
import logging
import os

from . import config

logger = logging.getLogger(__name__)

DEFAULTS = {
    "homonym_correction": True,
    "readability_pass": True,
    "custom_rules_path": None,
}


class SettingsManager:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(SettingsManager, cls).__new__(cls)
            cls._instance.settings = {}
            cls._instance.load()
        return cls._instance

    @property
    def path(self) -> str:
        return str(config.SETTINGS_FILE)

    def load(self):
        if os.path.exists(self.path):
            try:
                with open(self.path, 'r') as f:
                    self.settings = json.load(f)
                if not isinstance(self.settings, dict):
                    raise ValueError(f"expected a JSON object, got {type(self.settings).__name__}")
                logger.info("Settings loaded from %s", self.path)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load settings: {e}")
                self.settings = {}
        else:
            self.settings = {}

    def save(self):
        try:
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(self.settings, f, indent=4)
            logger.info("Settings saved successfully")
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")

    def get(self, key, default=None):
        if default is None:
            default = DEFAULTS.get(key)
        return self.settings.get(key, default)

    def set(self, key, value):
        self.settings[key] = value
        self.save()

    @classmethod
    def reset(cls):
        """Reset singleton instance. Used in tests to prevent state pollution."""
        cls._instance = None
