"""Engine interface: configuration, protocol and driver registry.

An engine is built fresh for every manipulation group from an EngineConfig
and produces exactly one output file per ``make_image`` call, inside
``config.cache``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from image_conversion.exceptions import ImageConversionError
from image_conversion.logger import get_logger

_logger = get_logger("engine")


@dataclass(frozen=True)
class EngineConfig:
    source: str  # directory holding the input file
    cache: str  # workspace; outputs are written here, flat
    driver: str
    watermarks: str | None = None  # search directory for the `mark` filename


class ImageEngine(Protocol):
    config: EngineConfig

    def make_image(self, filename: str, params: Mapping[str, Any]) -> str:
        """Process ``source/filename`` and return the output filename in ``cache``."""
        ...


EngineFactory = Callable[[EngineConfig], ImageEngine]

_DRIVERS: dict[str, EngineFactory] = {}


def register_driver(name: str, factory: EngineFactory) -> None:
    _DRIVERS[name] = factory
    _logger.debug("engine driver registered: %s", name)


def _builtin_factory(name: str) -> EngineFactory | None:
    # Imported lazily so the core stays importable without libvips.
    if name == "vips":
        from .server import VipsServer

        return VipsServer
    return None


def create_server(config: EngineConfig) -> ImageEngine:
    factory = _DRIVERS.get(config.driver) or _builtin_factory(config.driver)
    if factory is None:
        raise ImageConversionError(f"unknown image driver {config.driver!r}")
    return factory(config)
