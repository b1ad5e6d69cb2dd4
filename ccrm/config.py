"""
Application configuration.

Built once at startup and handed to the components that need a storage root
or server settings. Nothing in the engine reads configuration itself.
"""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .core.exceptions import ConfigurationError

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _default_data_folder() -> Path:
    return Path.home() / "ccrm-data"


@dataclass(frozen=True)
class AppConfig:
    """Runtime settings for the CLI and the REST API."""
    data_folder: Optional[Path] = None
    students_file: str = "students.txt"
    courses_file: str = "courses.txt"
    top_n: int = 5
    rest_host: str = "0.0.0.0"
    rest_port: int = 8000
    log_level: str = "INFO"

    def __post_init__(self):
        if self.data_folder is None:
            object.__setattr__(self, "data_folder", _default_data_folder())
        elif isinstance(self.data_folder, (str, os.PathLike)):
            object.__setattr__(self, "data_folder", Path(self.data_folder).expanduser())
        else:
            raise ConfigurationError("data_folder must be a path", details={"data_folder": self.data_folder})
        for name in ("students_file", "courses_file", "rest_host", "log_level"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"{name} must be a string", details={name: getattr(self, name)})
        for name in ("top_n", "rest_port"):
            value = getattr(self, name)
            # bool is an int subclass.
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an integer", details={name: value})
        if self.top_n <= 0:
            raise ConfigurationError("top_n must be positive", details={"top_n": self.top_n})
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level {self.log_level!r}; expected one of {', '.join(LOG_LEVELS)}",
                details={"log_level": self.log_level},
            )

    @property
    def students_path(self) -> Path:
        return self.data_folder / self.students_file

    @property
    def courses_path(self) -> Path:
        return self.data_folder / self.courses_file

    def ensure_data_folder(self) -> Path:
        """Create the data folder if it does not exist yet."""
        try:
            self.data_folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Cannot create data folder {self.data_folder}: {e}") from e
        return self.data_folder

    def with_overrides(self, **overrides: Any) -> "AppConfig":
        """Copy of this config with every non-None override applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}",
                                     details={"keys": unknown})
        return cls(**data)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "AppConfig":
        """Defaults, overlaid with a JSON config file when one is given."""
        if path is None:
            return cls()
        try:
            with open(path, 'r', encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {os.fspath(path)}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a JSON object")
        return cls.from_dict(data)
