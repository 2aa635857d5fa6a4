from __future__ import annotations

from image_conversion.exceptions import ImageConversionError
from image_conversion.logger import get_logger
from image_conversion.pipeline import ManipulationPipeline, PipelineState

_logger = get_logger("publisher")


class ArtifactPublisher:
    """Copies a finished pipeline's result to its destination."""

    def __init__(self, pipeline: ManipulationPipeline) -> None:
        self.pipeline = pipeline

    def publish(self, destination: str) -> str:
        state = self.pipeline.state
        if state is PipelineState.ABORTED:
            raise ImageConversionError("refusing to publish the result of an aborted pipeline") from self.pipeline.error
        if state is PipelineState.PROCESSING:
            raise ImageConversionError("pipeline is still running")

        _logger.debug("publishing %s -> %s", self.pipeline.store.live_artifact or self.pipeline.store.input_image, destination)
        return self.pipeline.store.finalize(destination)
