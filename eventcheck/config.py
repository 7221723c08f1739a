from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from eventcheck.settings import AppSettings

PATH_KEYS = ("attendees_json", "export_dir")


class Config(BaseModel):
    """Configuration data for an attendee console."""

    name: str = Field("eventcheck", description="Event name shown in headers and PDFs.")
    attendees_json: Path = Field(..., description="Path to the attendee snapshot JSON.")
    page_size: int = Field(10, ge=1, description="Rows or tables per page.")
    origin: str = Field(
        "http://localhost:3000",
        description="Public origin of the registration site, for guest invite links.",
    )
    export_dir: Path = Field(Path("."), description="Directory for exported files.")
    export_fields: list[str] = Field(
        default_factory=list,
        description="Default export selection; empty uses the built-in default mask.",
    )
    transport: Literal["console", "smtp"] = Field(
        "console", description="Email transport used for ticket resends."
    )
    settings: AppSettings = Field(
        default_factory=AppSettings,
        description="Email and ticket settings passed through to renderers.",
    )

    def validate_paths(self) -> None:
        """Ensure the snapshot file and export directory exist."""
        if not self.attendees_json.exists():
            raise FileNotFoundError(f"attendees_json does not exist: {self.attendees_json}")
        if not self.attendees_json.is_file():
            raise ValueError(f"attendees_json is not a file: {self.attendees_json}")
        if not self.export_dir.is_dir():
            raise ValueError(f"export_dir is not a directory: {self.export_dir}")


def resolve_config_paths(config_data: dict, config_path: Path) -> dict:
    """Return a copy of `config_data` with relative data paths anchored at the config file.

    Paths written in the YAML are relative to the file itself, not to the working
    directory the console is started from. Absolute and empty values are left alone.
    """
    resolved = dict(config_data or {})
    base_dir = Path(config_path).parent
    for key in PATH_KEYS:
        if resolved.get(key) and not Path(resolved[key]).is_absolute():
            resolved[key] = str((base_dir / resolved[key]).resolve())
    return resolved


def load_config_file(config_path: Path) -> Config:
    """Read, resolve and validate a YAML configuration file.

    Raises:
        pydantic.ValidationError: If the configuration does not match `Config`.
        FileNotFoundError, ValueError: If a configured path is missing or of the wrong kind.
        yaml.YAMLError: If the file is not valid YAML.
    """
    config_path = Path(config_path)
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping of settings")
    config = Config(**resolve_config_paths(data, config_path))
    config.validate_paths()
    return config
