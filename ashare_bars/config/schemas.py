"""
Configuration schemas using Pydantic for validation and type safety.
"""

from typing import Optional, Literal
from pydantic import BaseModel, Field, field_validator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..data.calendars import parse_datetime
from ..data.errors import ParseError
from ..data.periods import Period


class CalendarConfig(BaseModel):
    """Market calendar configuration"""
    timezone: str = Field(default="Asia/Shanghai", description="Market local timezone (IANA name)")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        """Ensure the zone exists"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class DataConfig(BaseModel):
    """Data source configuration"""
    provider: Literal["csv"] = Field(default="csv", description="Bar loader type")
    data_dir: str = Field(default="data", description="Root directory of the bar files")


class ResampleConfig(BaseModel):
    """What to load and how to resample it"""
    symbol: Optional[str] = Field(default=None, description="Stock code, e.g. '600444'")
    source: str = Field(default="day", description="Period of the stored bars ('day' or '<n>min')")
    target: str = Field(default="week", description="Period to resample to ('day', 'week' or '<n>min')")
    end: Optional[str] = Field(default=None, description="Last session (YYYY-MM-DD); latest session if omitted")
    limit: Optional[int] = Field(default=None, description="Keep only the last N output bars")
    sessions: int = Field(default=1, description="Minute sources: number of sessions up to `end`")

    @field_validator("symbol", mode="before")
    @classmethod
    def validate_symbol(cls, v):
        """Codes parsed as numbers by YAML/JSON overrides lose their leading zeros"""
        if isinstance(v, int):
            return str(v).zfill(6)
        return v

    @field_validator("source", "target", mode="before")
    @classmethod
    def validate_period(cls, v):
        """Validate period strings, keep them in canonical text form"""
        try:
            return str(Period.parse(v))
        except ParseError as e:
            raise ValueError(str(e)) from e

    @field_validator("end", mode="before")
    @classmethod
    def validate_end(cls, v):
        """End must be a date string when given"""
        if v is None or v == "":
            return None
        try:
            parse_datetime(str(v))
        except ParseError as e:
            raise ValueError(str(e)) from e
        return str(v)

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v):
        if v is not None and v <= 0:
            raise ValueError(f"limit must be positive, got {v}")
        return v

    @field_validator("sessions")
    @classmethod
    def validate_sessions(cls, v):
        if v <= 0:
            raise ValueError(f"sessions must be positive, got {v}")
        return v

    def source_period(self) -> Period:
        return Period.parse(self.source)

    def target_period(self) -> Period:
        return Period.parse(self.target)


class AppConfig(BaseModel):
    """Complete configuration"""
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    resample: ResampleConfig = Field(default_factory=ResampleConfig)
