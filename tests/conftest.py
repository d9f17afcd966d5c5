"""Shared fixtures for dwmstatus tests."""

import os

import pytest


@pytest.fixture
def fake_playerctl(tmp_path, monkeypatch):
    """Return a function that puts a playerctl printing raw bytes first on PATH."""

    def install(output: bytes) -> None:
        data = tmp_path / "playerctl.out"
        data.write_bytes(output)
        script = tmp_path / "playerctl"
        script.write_text(f"#!/bin/sh\ncat '{data}'\n")
        script.chmod(0o755)
        monkeypatch.setenv("PATH", f"{tmp_path}{os.pathsep}{os.environ.get('PATH', '')}")

    return install
