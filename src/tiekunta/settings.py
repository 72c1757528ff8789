from __future__ import annotations
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .rules.weight_tables import normalise_forest_zone

class Settings(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Comma-separated; "*" opens CORS to every origin.
    allow_origins: str = Field(default="*", alias="ALLOW_ORIGINS")
    # Used when a calculation request carries no vyohyke of its own.
    default_forest_zone: Optional[str] = Field(default=None, alias="DEFAULT_FOREST_ZONE")

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("default_forest_zone", mode="before")
    @classmethod
    def _check_zone(cls, value):
        if value is None or str(value).strip() == "":
            return None
        zone = normalise_forest_zone(value)
        if zone is None:
            raise ValueError("DEFAULT_FOREST_ZONE must be one of 1..5")
        return zone

    @property
    def origins(self) -> List[str]:
        origins = [o.strip() for o in self.allow_origins.split(",") if o.strip()]
        return origins or ["*"]

settings = Settings()
