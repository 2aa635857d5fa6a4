"""Image conversion pipeline.

Runs an ordered sequence of manipulation groups through an image engine,
one engine call per group, each call consuming the previous call's output.
Intermediate files live in a temporary workspace and are cleaned up as they
are superseded and when the result is saved.

    from image_conversion import ImageConversion

    ImageConversion.create("cat.jpg").perform_manipulations(
        [{"width": 100, "height": 100, "crop": "crop"}, {"blur": 5}]
    ).save("thumb.jpg")
"""

from image_conversion.conversion import ImageConversion
from image_conversion.exceptions import (
    CouldNotConvert,
    ImageConversionError,
    InvalidTemporaryDirectory,
    IOFailure,
    UnknownManipulation,
)
from image_conversion.manipulations import ManipulationGroup, ManipulationSequence
from image_conversion.ops.artifact_store import TemporaryArtifactStore
from image_conversion.pipeline import ManipulationPipeline, PipelineState
from image_conversion.publisher import ArtifactPublisher

__all__ = [
    "ArtifactPublisher",
    "CouldNotConvert",
    "IOFailure",
    "ImageConversion",
    "ImageConversionError",
    "InvalidTemporaryDirectory",
    "ManipulationGroup",
    "ManipulationPipeline",
    "ManipulationSequence",
    "PipelineState",
    "TemporaryArtifactStore",
    "UnknownManipulation",
]
