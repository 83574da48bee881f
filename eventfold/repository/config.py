"""Repository configuration using pydantic-settings."""

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from ..serialization import BinarySerializer, JsonSerializer, Serializer


class RepositorySettings(BaseSettings):
    """Defaults applied by every Repository before its options.

    All settings can be configured via environment variables with the
    EVENTFOLD_ prefix. For example:
    - EVENTFOLD_SERIALIZER=json
    - EVENTFOLD_STORE_TIMEOUT=2.5
    - EVENTFOLD_VERIFY_VERSIONS=false

    Attributes:
        serializer: Serializer installed by default, "binary" or "json".
            A with_serializer() option replaces it.
        verify_versions: Check that the events a command produced continue
            the history at ``current + 1`` without gaps before saving them.
        store_timeout: Upper bound in seconds for each store call. The
            active ExecutionContext deadline applies too; the smaller wins.
        log_level: Level of the repository's trace records (loads, applies).

    Example:
        >>> settings = RepositorySettings(serializer="json", store_timeout=1.0)
        >>> repository = Repository(Person, [PersonCreated], settings=settings)
    """

    serializer: Literal["binary", "json"] = "binary"
    verify_versions: bool = True
    store_timeout: float | None = Field(default=None, gt=0)
    log_level: str = "DEBUG"

    model_config = {"env_prefix": "EVENTFOLD_"}

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)  # type: ignore[no-any-return]

    def build_serializer(self) -> Serializer:
        """Create an empty serializer of the configured kind."""
        if self.serializer == "json":
            return JsonSerializer()
        return BinarySerializer()
