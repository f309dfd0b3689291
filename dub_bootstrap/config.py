"""
Bootstrap configuration
"""
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DFLAGS = "-g -O -w"


class Settings(BaseSettings):
    """Environment overrides, read once at the entry point."""

    # Compiler binary (name or path); empty means probe the candidate list
    DMD: str = ""

    # Whitespace-separated user flags appended after the fixed flags
    DFLAGS: str = DEFAULT_DFLAGS

    # Version used when no positional argument is given
    GITVER: str = ""

    # Project root holding source/, bin/ and build-files.txt
    DUB_ROOT: Optional[str] = None

    # Per-command timeout in seconds; unset or empty blocks until the child exits
    BOOTSTRAP_TIMEOUT: Optional[float] = None

    model_config = SettingsConfigDict(case_sensitive=True)

    @field_validator("BOOTSTRAP_TIMEOUT", mode="before")
    @classmethod
    def empty_timeout_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def dflags(self) -> List[str]:
        """User flags as an argument list (an empty DFLAGS yields none)."""
        return self.DFLAGS.split()


def load_settings() -> Settings:
    return Settings()
