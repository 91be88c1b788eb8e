"""
Settings manager for conversion and tiling defaults
"""
import copy
import json
import logging
import os

from asetiler.constants import DEFAULT_TILE_SIZE
from asetiler.core.errors import InvalidTileSize

logger = logging.getLogger(__name__)


class Settings:
    """Manages tool settings with persistence."""

    DEFAULT_SETTINGS = {
        'tile_size': DEFAULT_TILE_SIZE,
        'include_hidden_layers': True,
        'paths': {
            'source': os.path.join('source', 'canvas.aseprite'),
            'output': 'public',
            'tiles': 'tiles'
        },
        'export': {
            'png_previews': False,
            'raw_canvas': False
        }
    }

    def __init__(self, settings_file='asetiler.json', create=False):
        """
        Initialize settings manager.

        Args:
            settings_file: Path to the JSON settings file
            create: Write the defaults to settings_file when it does not exist
        """
        self.settings_file = settings_file
        self.create = create
        self.settings = self.load()

    def load(self):
        """Load settings from file or fall back to defaults."""
        if os.path.exists(self.settings_file):
            try:
                with open(self.settings_file, 'r') as f:
                    loaded_settings = json.load(f)
                    # Merge with defaults to ensure all keys exist
                    return self._merge_with_defaults(loaded_settings)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Error loading settings from %s: %s; using defaults",
                               self.settings_file, e)
                return copy.deepcopy(self.DEFAULT_SETTINGS)

        settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        if self.create:
            self.save(settings)
        return settings

    def _merge_with_defaults(self, loaded):
        """Merge loaded settings with defaults to ensure all keys exist."""
        result = copy.deepcopy(self.DEFAULT_SETTINGS)

        for key, value in loaded.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                # Merge nested dicts
                result[key].update(value)
            else:
                result[key] = value

        return result

    def save(self, settings=None):
        """Save settings to file."""
        if settings is not None:
            self.settings = settings

        try:
            with open(self.settings_file, 'w') as f:
                json.dump(self.settings, f, indent=2)
            logger.info("Settings saved to %s", self.settings_file)
            return True
        except OSError as e:
            logger.error("Error saving settings: %s", e)
            return False

    def get(self, key, default=None):
        """Get a setting value using a dotted key, e.g. 'paths.output'."""
        keys = key.split('.')
        value = self.settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key, value):
        """Set a setting value using a dotted key and persist it."""
        keys = key.split('.')
        settings = self.settings

        for k in keys[:-1]:
            if k not in settings:
                settings[k] = {}
            settings = settings[k]

        settings[keys[-1]] = value
        self.save()

    def get_tile_size(self):
        """
        Get the configured tile size.

        Raises:
            InvalidTileSize: If the configured value is not an integer
        """
        value = self.settings.get('tile_size', self.DEFAULT_SETTINGS['tile_size'])
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise InvalidTileSize(f"Configured tile_size {value!r} is not an integer") from e

    def get_path(self, path_type):
        """Get a configured path."""
        return self.settings['paths'].get(path_type, path_type)


# Global settings instance
_settings_instance = None


def get_settings():
    """Get global settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def load_settings(settings_file):
    """Replace the global settings instance with one read from settings_file."""
    global _settings_instance
    _settings_instance = Settings(settings_file)
    return _settings_instance
