"""Configuration module for markdown-brain.

Loads configuration from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path

TRANSPORTS = ("stdio", "sse")


@dataclass
class Config:
    """Application configuration."""

    docs_root: Path
    extension: str
    transport: str
    port: int
    debounce_seconds: float
    fuzzy_threshold: float
    rescan_interval: int
    log_level: str

    @classmethod
    def from_env(cls, root_override: str | None = None) -> "Config":
        """Load configuration from environment variables.

        Args:
            root_override: If provided, overrides the MARKDOWN_DOCS_PATH env var.
        """
        root = root_override or os.getenv("MARKDOWN_DOCS_PATH", "./docs")
        docs_root = Path(root).expanduser()

        extension = os.getenv("BRAIN_EXTENSION", ".md").strip()
        if not extension or extension == ".":
            raise ValueError("BRAIN_EXTENSION must not be empty")
        if not extension.startswith("."):
            extension = "." + extension

        transport = os.getenv("BRAIN_TRANSPORT", "stdio").lower()
        if transport not in TRANSPORTS:
            raise ValueError(
                f"Invalid BRAIN_TRANSPORT value '{transport}': expected one of {', '.join(TRANSPORTS)}"
            )

        port_str = os.getenv("BRAIN_PORT", "8080")
        try:
            port = int(port_str)
            if not 1 <= port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {port}")
        except ValueError as e:
            raise ValueError(f"Invalid BRAIN_PORT value '{port_str}': {e}") from e

        debounce_str = os.getenv("BRAIN_DEBOUNCE_MS", "250")
        try:
            debounce_ms = int(debounce_str)
            if debounce_ms < 0:
                raise ValueError(f"Debounce must be >= 0, got {debounce_ms}")
        except ValueError as e:
            raise ValueError(f"Invalid BRAIN_DEBOUNCE_MS value '{debounce_str}': {e}") from e

        threshold_str = os.getenv("BRAIN_FUZZY_THRESHOLD", "0.4")
        try:
            fuzzy_threshold = float(threshold_str)
            if not 0 < fuzzy_threshold <= 1:
                raise ValueError(f"Threshold must be in (0, 1], got {fuzzy_threshold}")
        except ValueError as e:
            raise ValueError(f"Invalid BRAIN_FUZZY_THRESHOLD value '{threshold_str}': {e}") from e

        # Rescan interval - 0 disables periodic reconcile
        interval_str = os.getenv("BRAIN_RESCAN_INTERVAL", "0")
        try:
            rescan_interval = int(interval_str)
            if rescan_interval < 0:
                raise ValueError(f"Rescan interval must be >= 0, got {rescan_interval}")
        except ValueError as e:
            raise ValueError(f"Invalid BRAIN_RESCAN_INTERVAL value '{interval_str}': {e}") from e

        log_level = os.getenv("BRAIN_LOG_LEVEL", "INFO").upper()

        return cls(
            docs_root=docs_root,
            extension=extension,
            transport=transport,
            port=port,
            debounce_seconds=debounce_ms / 1000.0,
            fuzzy_threshold=fuzzy_threshold,
            rescan_interval=rescan_interval,
            log_level=log_level,
        )
