"""Tests for generate and config CLI commands."""

import os
import subprocess
import sys
from pathlib import Path

# Get the project root directory (two levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent


def _run(*args: str, env: dict | None = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
        env=env,
        timeout=30,
    )


def test_help_lists_commands():
    """Top-level help should name every command group."""
    result = _run("--help")
    assert result.returncode == 0
    assert "generate" in result.stdout
    assert "config" in result.stdout


def test_unknown_command_fails():
    """Unknown commands exit non-zero."""
    result = _run("frobnicate")
    assert result.returncode == 1
    assert "Unknown command" in result.stderr


def test_generate_layout_accepts_flags():
    """generate layout should expose input, design and provider flags."""
    result = _run("generate", "layout", "--help")
    assert result.returncode == 0
    for flag in ("--input", "--design", "--design-output", "--provider", "--layout"):
        assert flag in result.stdout


def test_generate_variations_accepts_count():
    """generate variations should accept --count."""
    result = _run("generate", "variations", "--help")
    assert result.returncode == 0
    assert "--count" in result.stdout


def test_generate_layout_rejects_unknown_layout():
    """Layout preference is restricted to the known values."""
    result = _run("generate", "layout", "x", "-i", "missing.md", "--layout", "carousel")
    assert result.returncode == 2
    assert "invalid choice" in result.stderr


def test_generate_layout_missing_input_fails(tmp_path):
    """A missing input file is reported, not raised."""
    result = _run("generate", "layout", "x", "-i", str(tmp_path / "missing.md"))
    assert result.returncode == 1
    assert "Generation failed" in result.stderr


def test_generate_layout_missing_credentials_fails(tmp_path):
    """Without credentials generation stops before any request."""
    source = tmp_path / "notes.md"
    source.write_text("Hello world.\n", encoding="utf-8")
    env = {**os.environ, "GEMINI_API_KEY": "", "API_KEY": ""}

    result = _run(
        "generate", "layout", "x", "-i", str(source), "-p", "schema-native", env=env
    )

    assert result.returncode == 1
    assert "Generation failed" in result.stderr


def test_generate_providers_runs():
    """generate providers lists both provider kinds."""
    result = _run("generate", "providers")
    assert result.returncode == 0
    assert "schema-native" in result.stderr
    assert "chat-completion" in result.stderr


def test_config_list_category():
    """config list filters by category."""
    result = _run("config", "list", "--category", "generation")
    assert result.returncode == 0
    assert "LAYOUTFORGE_CHUNK_SIZE" in result.stdout
    assert "GEMINI_API_KEY" not in result.stdout
