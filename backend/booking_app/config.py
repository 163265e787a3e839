from functools import lru_cache
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


class Settings(BaseModel):
    database_url: str = Field(default="sqlite+aiosqlite:///./booking.db")
    echo_sql: bool = Field(default=False)
    auth_secret: str = Field(default="change-me")
    auth_algorithm: str = Field(default="HS256")
    access_token_minutes: int = Field(default=30, ge=1)
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    defaults = Settings.model_fields
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults["database_url"].default),
        echo_sql=bool(int(os.getenv("ECHO_SQL", "0"))),
        auth_secret=os.getenv("AUTH_SECRET", defaults["auth_secret"].default),
        auth_algorithm=os.getenv("AUTH_ALGORITHM", defaults["auth_algorithm"].default),
        access_token_minutes=int(os.getenv("ACCESS_TOKEN_MINUTES", "30")),
        log_level=os.getenv("LOG_LEVEL", defaults["log_level"].default).upper(),
    )
