"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator

from .media import QUALITY_TIERS


class ResolverConfig(BaseModel):
    """A validated configuration model for the application."""

    # Resolve Settings
    quality: str = "high"
    stream_format: str = "mp4"
    fallback: bool = False
    max_workers: int = 4
    timeout: int = 30

    # Logging
    json_logs: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("quality")
    @classmethod
    def validate_quality(cls, v: str) -> str:
        """Ensures quality is one of the tiers the API understands."""
        v = v.lower()
        if v not in QUALITY_TIERS:
            raise ValueError(f"Quality must be one of {', '.join(QUALITY_TIERS)}.")
        return v

    @field_validator("stream_format")
    @classmethod
    def validate_stream_format(cls, v: str) -> str:
        """The stream API only serves HLS-wrapped mp4."""
        if v != "mp4":
            raise ValueError("Stream format must be 'mp4'.")
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1 or v > 300:
            raise ValueError("Timeout must be between 1 and 300 seconds.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
