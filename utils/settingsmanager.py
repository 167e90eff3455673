import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class SettingsManager:
    """Small JSON-file key/value store rewritten on every ``set``."""

    def __init__(self, filename="settings.json"):
        self.filename = Path(filename)
        self.settings = {}
        self.load()

    def load(self):
        if os.path.exists(self.filename):
            try:
                with open(self.filename, "r", encoding="utf-8") as f:
                    self.settings = json.load(f)
            except json.JSONDecodeError:
                logger.warning("Failed to decode JSON from %s. Resetting settings.", self.filename)
                self.settings = {}
                self.save()
            if not isinstance(self.settings, dict):
                logger.warning("Settings file %s does not hold an object. Resetting settings.", self.filename)
                self.settings = {}
                self.save()
        else:
            self.settings = {}

    def save(self):
        self.filename.parent.mkdir(parents=True, exist_ok=True)
        with open(self.filename, "w", encoding="utf-8") as f:
            json.dump(self.settings, f, indent=4, ensure_ascii=False)

    def get(self, key, default=None):
        return self.settings.get(key, default)

    def set(self, key, value):
        self.settings[key] = value
        self.save()
