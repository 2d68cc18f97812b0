"""
Configuration management using Pydantic Settings.
"""

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import DEFAULT_DAY_KEY_FORMAT


class DefaultsConfig(BaseModel):
    """Default settings for search."""
    lookahead_days: int = 7
    day_key_format: Literal["YYYY-MM-DD", "YY-MM-DD"] = DEFAULT_DAY_KEY_FORMAT

    @field_validator("lookahead_days")
    @classmethod
    def validate_lookahead(cls, value: int) -> int:
        """Ensure the lookahead window covers at least one day."""
        if value <= 0:
            raise ValueError("lookahead_days must be greater than zero")
        return value


class EventSourceConfig(BaseModel):
    """Where events are read from."""
    kind: Literal["json", "http"] = "json"
    events_file: Optional[Path] = None
    base_url: Optional[str] = None
    api_token: Optional[str] = None
    timeout_seconds: float = 30.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_kind_settings(self) -> "EventSourceConfig":
        """Ensure the settings the selected source needs are present."""
        if self.kind == "json" and self.events_file is None:
            raise ValueError("events_file is required for a json event source")
        if self.kind == "http" and not self.base_url:
            raise ValueError("base_url is required for an http event source")
        return self


class Doctor(BaseModel):
    """Doctor alias configuration."""
    name: str  # Used as alias
    doctor_id: int

    def display_name(self) -> str:
        """Get display name."""
        return self.name


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    event_source: EventSourceConfig
    doctors: List[Doctor] = Field(default_factory=list)

    @field_validator("doctors")
    @classmethod
    def validate_doctors(cls, value: List[Doctor]) -> List[Doctor]:
        """Ensure doctor aliases and ids are unique."""
        seen_names: set[str] = set()
        seen_ids: set[int] = set()
        for doctor in value:
            name_key = doctor.name.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate doctor name detected: {doctor.name}")
            if doctor.doctor_id in seen_ids:
                raise ValueError(f"Duplicate doctor id detected: {doctor.doctor_id}")
            seen_names.add(name_key)
            seen_ids.add(doctor.doctor_id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``events_file`` is resolved against the config file's
        directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        events_file = config.event_source.events_file
        if events_file is not None and not events_file.is_absolute():
            config.event_source.events_file = config_path.parent / events_file

        return config

    def find_doctor_by_name(self, name: str) -> Doctor | None:
        """Find a doctor by their name (alias)."""
        for doctor in self.doctors:
            if doctor.name.lower() == name.lower():
                return doctor
        return None

    def find_doctor_by_id(self, doctor_id: int) -> Doctor | None:
        """Find a doctor by their id."""
        for doctor in self.doctors:
            if doctor.doctor_id == doctor_id:
                return doctor
        return None

    def resolve_doctor(self, identifier: str) -> int:
        """
        Resolve a doctor identifier (name/alias or numeric id) to a doctor id.

        Args:
            identifier: Name/alias or numeric id

        Returns:
            Doctor id

        Raises:
            ValueError: If identifier cannot be resolved
        """
        identifier = identifier.strip()

        if identifier.isdigit():
            return int(identifier)

        doctor = self.find_doctor_by_name(identifier)
        if doctor:
            return doctor.doctor_id

        raise ValueError(
            f"Unknown doctor identifier: '{identifier}'. "
            f"Use a numeric doctor id or a configured name."
        )


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
