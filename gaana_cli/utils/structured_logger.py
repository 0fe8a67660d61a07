"""
Structured logging system for better log analysis and debugging.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("gaana_cli")
        logger.info("stream_resolved",
                    track_id="12345",
                    quality="high",
                    bit_rate="320")
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        self.json_log_path: Path | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"gaana_cli_{timestamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        for key, value in context.items():
            if key not in ("level", "timestamp"):
                parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        """Write structured log entry to JSON file."""
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry) + "\n")
            self._json_file.flush()
        except (OSError, TypeError, ValueError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _log(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            # Event text may contain brackets; keep RichHandler from reading them as markup
            self._logger.log(
                level, self._format_message(event, **context), extra={"markup": False}
            )
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._log(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._log(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._log(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._log(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class ResolveLogger:
    """Specialized logger for stream resolution events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def stream_resolved(self, track_id: str, quality: str, bit_rate: str, url: str):
        self.logger.info(
            "stream_resolved",
            track_id=track_id,
            quality=quality,
            bit_rate=bit_rate,
            url=url,
        )

    def stream_unavailable(self, track_id: str, quality: str, api_status: Any):
        """Log an envelope without a usable stream path."""
        self.logger.debug(
            "stream_unavailable",
            track_id=track_id,
            quality=quality,
            api_status=api_status,
        )

    def decode_failed(self, track_id: str, quality: str, failure: str, detail: str):
        """Log a stream path that could not be decoded."""
        self.logger.debug(
            "stream_decode_failed",
            track_id=track_id,
            quality=quality,
            failure=failure,
            detail=detail,
        )

    def request_failed(self, track_id: str, quality: str, error: str):
        """Log a transport failure."""
        self.logger.debug(
            "api_request_failed",
            track_id=track_id,
            quality=quality,
            error=error,
        )


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, ResolveLogger]:
    """
    Create the structured loggers.

    Returns:
        Tuple of (base_logger, resolve_logger)
    """
    base = StructuredLogger("gaana_cli.events", log_dir=log_dir, enable_json=enable_json)
    return base, ResolveLogger(base)
