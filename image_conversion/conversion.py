"""ImageConversion: chainable front door over pipeline, store and publisher.

    ImageConversion.create("cat.jpg") \\
        .set_temporary_directory("/tmp/work") \\
        .perform_manipulations([{"width": 100, "crop": "crop"}, {"blur": 5}]) \\
        .save("out.jpg")

Driver and workspace defaults come from SettingsManager, read once here.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from image_conversion.image_engine import EngineFactory, create_server
from image_conversion.logger import get_logger
from image_conversion.ops.artifact_store import TemporaryArtifactStore
from image_conversion.pipeline import ManipulationPipeline
from image_conversion.publisher import ArtifactPublisher
from image_conversion.settings_manager import SettingsManager

_logger = get_logger("conversion")


class ImageConversion:
    def __init__(
        self,
        input_image: str,
        settings: SettingsManager | None = None,
        engine_factory: EngineFactory = create_server,
    ) -> None:
        settings = settings or SettingsManager()
        self.input_image = input_image
        self._store = TemporaryArtifactStore()
        self._pipeline = ManipulationPipeline(self._store, engine_factory, settings.image_driver)
        self._publisher = ArtifactPublisher(self._pipeline)

        temp_dir = settings.temporary_directory
        if temp_dir:
            self.set_temporary_directory(temp_dir)

    @classmethod
    def create(cls, input_image: str, settings: SettingsManager | None = None) -> ImageConversion:
        return cls(input_image, settings)

    @property
    def pipeline(self) -> ManipulationPipeline:
        return self._pipeline

    @property
    def store(self) -> TemporaryArtifactStore:
        return self._store

    def set_temporary_directory(self, temporary_directory: str) -> ImageConversion:
        self._store.configure_workspace(temporary_directory)
        return self

    def get_temporary_directory(self) -> str:
        return self._store.directory

    def use_image_driver(self, image_driver: str) -> ImageConversion:
        self._pipeline.driver = image_driver
        return self

    def perform_manipulations(self, manipulations: Iterable[Mapping[str, Any]]) -> ImageConversion:
        self._pipeline.apply(self.input_image, manipulations)
        return self

    def save(self, output_file: str) -> None:
        # an empty conversion never opened the store
        self._store.open(self.input_image)
        self._publisher.publish(output_file)
        _logger.debug("saved %s -> %s", self.input_image, output_file)
