"""Configuration management for Local Files."""

import yaml
from pathlib import Path
from typing import Any, Dict, List


class Config:
    """Configuration manager that loads and provides access to configuration."""

    def __init__(self, config_path: str = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file (defaults to default_config.yaml)
        """
        # Get project root directory
        self.project_root = Path(__file__).parent.parent.parent
        self.config_dir = self.project_root / "config"

        # Determine which config file to use
        if config_path is None:
            local_config = self.config_dir / "local_config.yaml"
            default_config = self.config_dir / "default_config.yaml"

            if local_config.exists():
                config_path = str(local_config)
            else:
                config_path = str(default_config)

        self.config_path = Path(config_path)
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}

        return config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key (supports dot notation).

        Args:
            key: Configuration key (e.g., 'library.paths')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
        except (KeyError, TypeError):
            return default
        return default if value is None else value

    def get_library_paths(self) -> List[str]:
        """Get the root directories to scan, in configured order."""
        return [str(p) for p in self.get('library.paths', []) if p]

    def include_video(self) -> bool:
        """Whether video files with an audio track count as playable."""
        return bool(self.get('library.include_video', False))

    def get_extensions(self, media_type: str) -> List[str]:
        """Get lower-cased extensions for one media type (audio, video, photo, document)."""
        return [ext.lower() for ext in self.get(f'advanced.{media_type}_extensions', [])]

    def get_all_extensions(self) -> list:
        """Get all known file extensions."""
        extensions = []
        for media_type in ('audio', 'video', 'photo', 'document'):
            extensions.extend(self.get_extensions(media_type))
        return extensions

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access."""
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return self.get(key) is not None
