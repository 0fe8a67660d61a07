"""
Pydantic model for a resolved stream and the quality tiers the API offers.
"""

from pydantic import BaseModel, Field

# Tiers in descending order; fallback walks this order.
QUALITY_TIERS = ("high", "medium", "low")

QUALITY_MAP = {
    "high": {"name": "High (up to 320kbps)", "short": "HIGH", "color": "magenta"},
    "medium": {"name": "Medium (up to 128kbps)", "short": "MED", "color": "cyan"},
    "low": {"name": "Low (up to 64kbps)", "short": "LOW", "color": "yellow"},
}


def get_quality_info(quality: str) -> dict[str, str]:
    """Gets display information for a quality tier from the central map."""
    return QUALITY_MAP.get(
        quality, {"name": "Unknown", "short": "?", "color": "white"}
    )


class MediaUrl(BaseModel):
    """A playable stream for one quality tier of a track."""

    quality: str
    bit_rate: str = Field("", alias="bitRate")
    url: str
    format: str = "mp4"

    class Config:
        """Pydantic model configuration."""

        frozen = True
        populate_by_name = True

    def to_output(self) -> dict[str, str]:
        """Serializes using the external field names (``bitRate``)."""
        return self.model_dump(by_alias=True)
