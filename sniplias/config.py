import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

import platformdirs

APP_NAME = "sniplias"


def default_data_dir() -> Path:
    return Path(platformdirs.user_data_dir(APP_NAME, appauthor=False))


def default_config_dir() -> Path:
    return Path(platformdirs.user_config_dir(APP_NAME, appauthor=False))


class Config:
    """Manage sniplias configuration and themes"""

    THEMES = {
        "default": {
            "accent_color": "#00c8ff",
            "border_color": "#37374b",
            "selected_color": "#323246",
            "muted_color": "#8c8ca0",
            "success_color": "#64ff96",
            "error_color": "#ff6464",
        },
        "ocean": {
            "accent_color": "bright_blue",
            "border_color": "blue",
            "selected_color": "cyan",
            "muted_color": "bright_black",
            "success_color": "green",
            "error_color": "bright_red",
        },
        "monochrome": {
            "accent_color": "bright_white",
            "border_color": "white",
            "selected_color": "white",
            "muted_color": "bright_black",
            "success_color": "white",
            "error_color": "bright_white",
        },
    }

    DEFAULT_CONFIG = {
        "theme": "default",
        "default_tab": "snippets",
        "snippets_file": None,
        "shell_config_file": None,
    }

    # Environment overrides win over the config file
    ENV_OVERRIDES = {
        "SNIPLIAS_SNIPPETS_FILE": "snippets_file",
        "SNIPLIAS_SHELL_CONFIG": "shell_config_file",
    }

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or default_config_dir()
        self.config_path = self.config_dir / "config.json"
        # File values hidden by an environment override, restored on save
        self.shadowed: Dict[str, Any] = {}
        self.config = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file"""
        config = self.DEFAULT_CONFIG.copy()
        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    user_config = json.load(f)
                if isinstance(user_config, dict):
                    config.update(user_config)
            except (OSError, json.JSONDecodeError):
                pass

        self.shadowed = {}
        for env_var, key in self.ENV_OVERRIDES.items():
            if os.environ.get(env_var):
                self.shadowed[key] = config[key]
                config[key] = os.environ[env_var]
        return config

    def save(self) -> None:
        """Save configuration to file, leaving environment overrides out"""
        stored = {**self.config, **self.shadowed}
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(stored, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value"""
        self.config[key] = value
        self.shadowed.pop(key, None)
        self.save()

    def get_path(self, key: str) -> Optional[Path]:
        """Get a path-valued setting with `~` expanded"""
        value = self.config.get(key)
        if not value:
            return None
        return Path(value).expanduser()

    def get_theme(self) -> Dict[str, str]:
        """Get current theme colors"""
        theme_name = self.config.get("theme", "default")
        return self.THEMES.get(theme_name, self.THEMES["default"])
