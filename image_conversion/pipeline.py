"""ManipulationPipeline: runs manipulation groups through the engine in order.

Each group becomes exactly one engine call, and each call consumes the
previous call's output. The artifact store keeps exactly one intermediate
file alive between calls.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from image_conversion.exceptions import ImageConversionError
from image_conversion.image_engine import EngineConfig, EngineFactory, create_server
from image_conversion.logger import get_logger
from image_conversion.ops.artifact_store import TemporaryArtifactStore
from image_conversion.ops.parameters import prepare_manipulations
from image_conversion.ops.watermark import extract_watermark_path

_logger = get_logger("pipeline")


class PipelineState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    ABORTED = "aborted"
    COMPLETED = "completed"


class ManipulationPipeline:
    """Orchestrates one conversion over a TemporaryArtifactStore.

    On failure the pipeline is ABORTED for good; the last recorded
    intermediate stays on disk (``store.live_artifact``) until the caller
    calls ``store.discard()``.
    """

    def __init__(
        self,
        store: TemporaryArtifactStore,
        engine_factory: EngineFactory = create_server,
        driver: str = "vips",
    ) -> None:
        self.store = store
        self.driver = driver
        self._engine_factory = engine_factory
        self._state = PipelineState.IDLE
        self._group_index: int | None = None
        self._error: Exception | None = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def group_index(self) -> int | None:
        """Index of the group being (or last) processed in the current run."""
        return self._group_index

    @property
    def error(self) -> Exception | None:
        return self._error

    def apply(self, input_image: str, sequence: Iterable[Mapping[str, Any]]) -> str:
        """Run every group of ``sequence`` against ``input_image``.

        Returns the final artifact: the live intermediate, or ``input_image``
        itself when no group ran.
        """
        if self._state is PipelineState.ABORTED:
            raise ImageConversionError("pipeline was aborted and can't be reused") from self._error
        if self._state is PipelineState.PROCESSING:
            raise ImageConversionError("pipeline is already running")

        self.store.open(input_image)
        self._state = PipelineState.PROCESSING
        try:
            for index, group in enumerate(sequence):
                self._group_index = index
                self._apply_group(input_image, group)
        except Exception as exc:
            self._state = PipelineState.ABORTED
            self._error = exc
            _logger.error(
                "pipeline aborted at group %s: %s (live artifact left: %s)",
                self._group_index,
                exc,
                self.store.live_artifact,
            )
            raise
        self._state = PipelineState.COMPLETED

        result = self.store.live_artifact or input_image
        _logger.debug("pipeline completed: %s", result)
        return result

    def _apply_group(self, input_image: str, group: Mapping[str, Any]) -> None:
        input_file = self.store.live_artifact or input_image

        group, watermark_dir = extract_watermark_path(group)
        # translate before touching the engine: unknown names abort with no call
        params = prepare_manipulations(group)

        config = EngineConfig(
            source=os.path.dirname(input_file) or ".",
            cache=self.store.directory,
            driver=self.driver,
            watermarks=watermark_dir,
        )
        engine = self._engine_factory(config)
        filename = os.path.basename(input_file)
        _logger.debug("group %s: %s params=%s", self._group_index, filename, params)

        output = os.path.join(self.store.directory, engine.make_image(filename, params))
        self.store.record_intermediate(output)
