"""Unit tests for the translate_texts command-line host."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

import translate_texts
from config.loader import ConfigLoader
from core.trans.interface import ConfigurationError, Result

if TYPE_CHECKING:
    from pathlib import Path


def test_parse_arguments_defaults() -> None:
    args = translate_texts.parse_arguments([])

    assert args.config == "batch_translate.ini"
    assert args.input is None
    assert args.debug is False


def test_read_fragments_skips_blank_lines(tmp_path: Path) -> None:
    source: Path = tmp_path / "input.txt"
    source.write_text("こんにちは\n\n   \n世界\n", encoding="utf-8")

    assert translate_texts.read_fragments(str(source)) == ["こんにちは", "世界"]


def test_render_results_keeps_sources_of_failed_batches(caplog: pytest.LogCaptureFixture) -> None:
    results: list[Result] = [
        Result(sources=["a", "b"], texts=["A", "B"]),
        Result(sources=["c"], error="Claude API returned empty translation."),
    ]

    assert translate_texts.render_results(results) == ["A", "B", "c"]
    assert any("Claude API returned empty translation." in rec.message for rec in caplog.records)


def test_main_returns_error_for_missing_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    status: int = translate_texts.main(["--config", str(tmp_path / "absent.ini")])

    assert status == 1
    assert "Failed to load configuration file" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_run_prints_translations(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    ini_path: Path = tmp_path / "batch_translate.ini"
    ini_path.write_text("[TRANSLATION]\nENGINE = \"claude\"\n", encoding="utf-8")
    loader = ConfigLoader(config_filename=str(ini_path), script_name="test")
    monkeypatch.setattr(translate_texts.TransManager, "initialize", AsyncMock())
    monkeypatch.setattr(translate_texts.TransManager, "close", AsyncMock())
    monkeypatch.setattr(
        translate_texts.TransManager,
        "translate",
        AsyncMock(return_value=[Result(sources=["x", "y"], texts=["X", "Y"]), Result(sources=["z"], error="boom")]),
    )

    status: int = await translate_texts.run(loader, ["x", "y", "z"])

    assert status == 1
    assert capsys.readouterr().out.splitlines() == ["X", "Y", "z"]


@pytest.mark.asyncio
async def test_run_stops_on_configuration_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ini_path: Path = tmp_path / "batch_translate.ini"
    ini_path.write_text("", encoding="utf-8")
    loader = ConfigLoader(config_filename=str(ini_path), script_name="test")
    monkeypatch.setattr(
        translate_texts.TransManager, "initialize", AsyncMock(side_effect=ConfigurationError("missing key"))
    )
    close = AsyncMock()
    monkeypatch.setattr(translate_texts.TransManager, "close", close)

    assert await translate_texts.run(loader, ["x"]) == 1
    close.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_stops_on_invalid_endpoint_setting(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    ini_path: Path = tmp_path / "batch_translate.ini"
    ini_path.write_text(
        "[TRANSLATION]\nENGINE = \"claude\"\n\n[Claude]\nApiKey = key\nMinDelaySeconds = soon\n", encoding="utf-8"
    )
    loader = ConfigLoader(config_filename=str(ini_path), script_name="test")

    assert await translate_texts.run(loader, ["x"]) == 1
    assert any("Claude.MinDelaySeconds" in rec.message for rec in caplog.records)
