import os
from typing import List, Tuple
from pydantic import BaseModel


def _range(raw: str) -> Tuple[float, float]:
    lo, hi = raw.split(",")
    return float(lo), float(hi)


class Settings(BaseModel):
    DB_URL: str = os.getenv(
        "DB_URL",
        "postgresql+psycopg2://fnstats:fnstats@db:5432/fnstats"
    )
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SQL_ECHO: bool = os.getenv("SQL_ECHO", "0").lower() in ("1", "true", "yes")

    # initial slider positions for a tournament page
    DEFAULT_DISTANCE_RANGE_M: Tuple[float, float] = _range(os.getenv("DEFAULT_DISTANCE_RANGE_M", "0,400"))
    DEFAULT_TIME_RANGE_MIN: Tuple[float, float] = _range(os.getenv("DEFAULT_TIME_RANGE_MIN", "0,30"))

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
