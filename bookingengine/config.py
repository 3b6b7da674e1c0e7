"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.dates import parse_time_slot
from .domain.models import Technician


def _validate_hour(value: int) -> int:
    """Validate hour is between 0 and 23."""
    if not 0 <= value <= 23:
        raise ValueError(f"Hour must be between 0 and 23, got {value}")
    return value


class BusinessHoursConfig(BaseModel):
    """Bookable hours offered to customers."""
    start_hour: int = 9
    end_hour: int = 17
    break_start: int = 12
    break_end: int = 13
    interval_minutes: int = 30

    @field_validator("start_hour", "end_hour", "break_start", "break_end")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        return _validate_hour(v)

    @field_validator("interval_minutes")
    @classmethod
    def validate_interval(cls, value: int) -> int:
        """Ensure slot interval is positive."""
        if value <= 0:
            raise ValueError("interval_minutes must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "BusinessHoursConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self


class WorkloadConfig(BaseModel):
    """Technician workday used by the daily workload timeline."""
    start_hour: int = 8
    end_hour: int = 18
    unpaid_break_minutes: int = 60
    medium_threshold: float = 50.0
    high_threshold: float = 80.0
    default_duration_minutes: int = 60

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        return _validate_hour(v)

    @field_validator("unpaid_break_minutes")
    @classmethod
    def validate_break(cls, value: int) -> int:
        if value < 0:
            raise ValueError("unpaid_break_minutes must not be negative")
        return value

    @field_validator("default_duration_minutes")
    @classmethod
    def validate_default_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("default_duration_minutes must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_window(self) -> "WorkloadConfig":
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        if self.unpaid_break_minutes >= (self.end_hour - self.start_hour) * 60:
            raise ValueError("unpaid_break_minutes must be shorter than the workday")
        if not 0 <= self.medium_threshold < self.high_threshold <= 100:
            raise ValueError("thresholds must satisfy 0 <= medium_threshold < high_threshold <= 100")
        return self


class ApiConfig(BaseModel):
    """Persistence collaborator endpoint."""
    base_url: str = "http://localhost:8000/api/v1"
    timeout_seconds: float = 30.0

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class SeedSlot(BaseModel):
    """A booked slot relative to the day availability is loaded."""
    offset_days: int
    time: str

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        parse_time_slot(value)
        return value


class SeedConfig(BaseModel):
    """Static availability used when the collaborator cannot be reached."""
    fully_booked_day_offsets: List[int] = Field(default_factory=lambda: [5])
    booked_slots: List[SeedSlot] = Field(
        default_factory=lambda: [SeedSlot(offset_days=1, time="10:30")]
    )


class TechnicianConfig(BaseModel):
    """Technician entry."""
    id: int
    name: str

    def to_technician(self) -> Technician:
        return Technician(id=self.id, name=self.name)


class AppConfig(BaseModel):
    """Application configuration."""
    business_hours: BusinessHoursConfig = Field(default_factory=BusinessHoursConfig)
    workload: WorkloadConfig = Field(default_factory=WorkloadConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)
    timezone: Optional[str] = None  # None: the machine's local zone
    technicians: List[TechnicianConfig] = Field(default_factory=list)

    @field_validator("technicians")
    @classmethod
    def validate_technicians(cls, value: List[TechnicianConfig]) -> List[TechnicianConfig]:
        """Ensure technician ids and names are unique."""
        seen_ids: set[int] = set()
        seen_names: set[str] = set()
        for technician in value:
            name_key = technician.name.lower()
            if technician.id in seen_ids:
                raise ValueError(f"Duplicate technician id detected: {technician.id}")
            if name_key in seen_names:
                raise ValueError(f"Duplicate technician name detected: {technician.name}")
            seen_ids.add(technician.id)
            seen_names.add(name_key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

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

        return cls(**data)

    def get_technicians(self) -> List[Technician]:
        return [entry.to_technician() for entry in self.technicians]

    def find_technician(self, identifier: str) -> Technician | None:
        """Find a technician by id or (case-insensitive) name."""
        for entry in self.technicians:
            if str(entry.id) == identifier or entry.name.lower() == identifier.lower():
                return entry.to_technician()
        return None


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


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the configuration, falling back to built-in defaults when no file exists."""
    path = config_path or get_default_config_path()
    if config_path is None and not path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(path)
