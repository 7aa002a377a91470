from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .identity import is_null_identity, normalize_identity

DEFAULT_OWNER_IDENTITY = "0x00000000000000000000000000000000000000a1"
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class RuntimeSettings:
    """Runtime settings loaded from environment with fail-fast validation."""

    owner_identity: str = DEFAULT_OWNER_IDENTITY
    owner_display_name: str = "System Owner"
    max_ingredients_per_product: int = 256
    event_log_path: str = ""
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        return cls(
            owner_identity=os.getenv("BATCHTRACE_OWNER_IDENTITY", DEFAULT_OWNER_IDENTITY),
            owner_display_name=os.getenv("BATCHTRACE_OWNER_DISPLAY_NAME", "System Owner"),
            max_ingredients_per_product=_get_env_int(
                "BATCHTRACE_MAX_INGREDIENTS_PER_PRODUCT", default=256, minimum=1, maximum=10_000
            ),
            event_log_path=os.getenv("BATCHTRACE_EVENT_LOG_PATH", ""),
            log_level=os.getenv("BATCHTRACE_LOG_LEVEL", "INFO"),
        ).normalized()

    @property
    def event_log_file(self) -> Path | None:
        return Path(self.event_log_path) if self.event_log_path else None

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    def normalized(self) -> "RuntimeSettings":
        """Validate and normalize all fields. Raises ValueError on invalid configuration."""
        if is_null_identity(self.owner_identity):
            raise ValueError("BATCHTRACE_OWNER_IDENTITY must be a non-null identity")
        display_name = self.owner_display_name.strip()
        if not display_name:
            raise ValueError("BATCHTRACE_OWNER_DISPLAY_NAME must be non-empty")
        if not 1 <= self.max_ingredients_per_product <= 10_000:
            raise ValueError(
                f"BATCHTRACE_MAX_INGREDIENTS_PER_PRODUCT must be in [1, 10000], got: {self.max_ingredients_per_product}"
            )
        log_level = self.log_level.strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"BATCHTRACE_LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}")
        return RuntimeSettings(
            owner_identity=normalize_identity(self.owner_identity),
            owner_display_name=display_name,
            max_ingredients_per_product=self.max_ingredients_per_product,
            event_log_path=self.event_log_path.strip(),
            log_level=log_level,
        )


def _get_env_int(name: str, default: int, minimum: int, maximum: int) -> int:
    """Parse an integer from an environment variable with bounds checking.

    Raises:
        ValueError: If the value is not an integer or is outside bounds.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        parsed = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got: {raw!r}") from exc
    if parsed < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got: {parsed}")
    if parsed > maximum:
        raise ValueError(f"{name} must be <= {maximum}, got: {parsed}")
    return parsed
