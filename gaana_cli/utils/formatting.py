"""
Helper functions for formatting data into human-readable strings.
"""


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2m 12s').
    Sub-second durations are shown in milliseconds.
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def mask_stream_path(stream_path: str, keep: int = 12) -> str:
    """Shortens an encrypted stream path for log output."""
    if len(stream_path) <= keep * 2:
        return stream_path
    return f"{stream_path[:keep]}…{stream_path[-keep:]}"
