from __future__ import annotations

import logging
from pathlib import Path

import pytest

from batchtrace.settings import DEFAULT_OWNER_IDENTITY, RuntimeSettings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BATCHTRACE_OWNER_IDENTITY",
        "BATCHTRACE_OWNER_DISPLAY_NAME",
        "BATCHTRACE_MAX_INGREDIENTS_PER_PRODUCT",
        "BATCHTRACE_EVENT_LOG_PATH",
        "BATCHTRACE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = RuntimeSettings.from_env()
    assert settings.owner_identity == DEFAULT_OWNER_IDENTITY
    assert settings.owner_display_name == "System Owner"
    assert settings.max_ingredients_per_product == 256
    assert settings.event_log_file is None
    assert settings.logging_level == logging.INFO


def test_from_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("BATCHTRACE_OWNER_IDENTITY", "  0x" + "AB" * 20 + " ")
    monkeypatch.setenv("BATCHTRACE_OWNER_DISPLAY_NAME", " Plant Manager ")
    monkeypatch.setenv("BATCHTRACE_MAX_INGREDIENTS_PER_PRODUCT", "12")
    monkeypatch.setenv("BATCHTRACE_EVENT_LOG_PATH", str(tmp_path / "events.jsonl"))
    monkeypatch.setenv("BATCHTRACE_LOG_LEVEL", "debug")

    settings = RuntimeSettings.from_env()
    assert settings.owner_identity == "0x" + "ab" * 20
    assert settings.owner_display_name == "Plant Manager"
    assert settings.max_ingredients_per_product == 12
    assert settings.event_log_file == tmp_path / "events.jsonl"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("BATCHTRACE_MAX_INGREDIENTS_PER_PRODUCT", "abc"),
        ("BATCHTRACE_MAX_INGREDIENTS_PER_PRODUCT", "0"),
        ("BATCHTRACE_MAX_INGREDIENTS_PER_PRODUCT", "10001"),
        ("BATCHTRACE_OWNER_IDENTITY", "0x" + "0" * 40),
        ("BATCHTRACE_OWNER_DISPLAY_NAME", "   "),
        ("BATCHTRACE_LOG_LEVEL", "LOUD"),
    ],
)
def test_invalid_env_raises(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        RuntimeSettings.from_env()
