"""Pytest configuration.

Pipeline tests run against a recording fake engine so they need neither
libvips nor real images. The fake copies its source bytes into the cache
directory and appends a marker, so each step's output is distinguishable
and traceable back to its input.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from image_conversion.image_engine import EngineConfig
from image_conversion.ops.artifact_store import TemporaryArtifactStore

INPUT_BYTES = b"CAT-IMAGE-BYTES"


@dataclass
class EngineCall:
    config: EngineConfig
    filename: str
    params: dict[str, Any]
    output: str


class RecordingEngine:
    def __init__(self, factory: RecordingEngineFactory, config: EngineConfig) -> None:
        self.factory = factory
        self.config = config

    def make_image(self, filename: str, params: dict[str, Any]) -> str:
        step = len(self.factory.calls) + 1
        out_name = f"step{step}-{os.path.splitext(filename)[0]}.img"
        with open(os.path.join(self.config.source, filename), "rb") as f:
            data = f.read()
        with open(os.path.join(self.config.cache, out_name), "wb") as f:
            f.write(data + f"|step{step}".encode())
        self.factory.calls.append(EngineCall(self.config, filename, dict(params), out_name))
        return out_name


class RecordingEngineFactory:
    """Drop-in for ``create_server`` that records every engine call."""

    def __init__(self) -> None:
        self.calls: list[EngineCall] = []
        self.configs: list[EngineConfig] = []

    def __call__(self, config: EngineConfig) -> RecordingEngine:
        self.configs.append(config)
        return RecordingEngine(self, config)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "IMAGE_CONVERSION_DRIVER",
        "IMAGE_CONVERSION_TEMP_DIR",
        "IMAGE_CONVERSION_LOG_LEVEL",
        "IMAGE_CONVERSION_LOG_CATS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def engine() -> RecordingEngineFactory:
    return RecordingEngineFactory()


@pytest.fixture
def input_image(tmp_path: Path) -> Path:
    src_dir = tmp_path / "input"
    src_dir.mkdir()
    path = src_dir / "cat.jpg"
    path.write_bytes(INPUT_BYTES)
    return path


@pytest.fixture
def default_dir(tmp_path: Path) -> Path:
    d = tmp_path / "default-tmp"
    d.mkdir()
    return d


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    return tmp_path / "workspace"


@pytest.fixture
def store(default_dir: Path) -> TemporaryArtifactStore:
    return TemporaryArtifactStore(default_directory=str(default_dir))
