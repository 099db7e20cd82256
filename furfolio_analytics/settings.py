"""Analytics settings shared by the command line tools.

Settings come from three layers, later ones winning: built-in defaults, an
optional JSON settings file, then explicit command line flags. The
``FURFOLIO_TIMEZONE`` environment variable supplies the timezone when
neither the file nor a flag sets one.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from furfolio_analytics.analyses.retention import (
    DEFAULT_ACTIVE_WINDOW_DAYS,
    DEFAULT_INACTIVE_WINDOW_DAYS,
    DEFAULT_NEW_CLIENT_WINDOW_DAYS,
    DEFAULT_RETENTION_RISK_WINDOW_DAYS,
    RetentionConfig,
)
from furfolio_analytics.exceptions import InvalidInputError
from furfolio_analytics.foundation.calendar import ReferenceCalendar
from furfolio_analytics.foundation.records import TransactionCategory

TIMEZONE_ENV_VAR = "FURFOLIO_TIMEZONE"
DEFAULT_TIMEZONE = "UTC"


def _require_known_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidInputError(f"Unknown timezone: {value}") from exc
    return value


class AnalyticsSettings(BaseModel):
    """Validated analytics configuration."""

    timezone: Optional[str] = Field(
        default=None, description="IANA timezone defining day and month boundaries"
    )
    excluded_categories: list[TransactionCategory] = Field(
        default_factory=list,
        description="Transaction categories left out of revenue figures",
    )
    daily_window_days: int = Field(default=30, ge=1)
    growth_window_days: int = Field(default=30, ge=1)
    top_owner_count: int = Field(default=3, ge=0)
    monthly_goal: Optional[Decimal] = Field(default=None, gt=0)
    new_client_window_days: int = Field(default=DEFAULT_NEW_CLIENT_WINDOW_DAYS, ge=1)
    active_window_days: int = Field(default=DEFAULT_ACTIVE_WINDOW_DAYS, ge=1)
    retention_risk_window_days: int = Field(
        default=DEFAULT_RETENTION_RISK_WINDOW_DAYS, ge=1
    )
    inactive_window_days: int = Field(default=DEFAULT_INACTIVE_WINDOW_DAYS, ge=1)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _require_known_timezone(value)

    def resolved_timezone(self) -> str:
        """Return the configured zone, else ``$FURFOLIO_TIMEZONE``, else UTC.

        Raises ``InvalidInputError`` when the environment names an unknown zone.
        """
        if self.timezone:
            return self.timezone
        from_env = os.getenv(TIMEZONE_ENV_VAR)
        if from_env:
            return _require_known_timezone(from_env)
        return DEFAULT_TIMEZONE

    def calendar(self) -> ReferenceCalendar:
        return ReferenceCalendar(self.resolved_timezone())

    def retention_config(self) -> RetentionConfig:
        return RetentionConfig(
            new_client_window_days=self.new_client_window_days,
            active_window_days=self.active_window_days,
            retention_risk_window_days=self.retention_risk_window_days,
            inactive_window_days=self.inactive_window_days,
        )


def load_settings(path: Optional[Path] = None, **overrides: object) -> AnalyticsSettings:
    """Build settings from an optional JSON file plus non-None overrides."""
    data: dict[str, object] = {}
    if path is not None:
        with path.open("r", encoding="utf-8") as fh:
            loaded = json.load(fh)
        if not isinstance(loaded, dict):
            raise InvalidInputError(f"Settings file {path} must contain a JSON object")
        data.update(loaded)
    data.update({key: value for key, value in overrides.items() if value is not None})
    return AnalyticsSettings.model_validate(data)
