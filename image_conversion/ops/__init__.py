"""Operations layer.

Pure translation helpers (parameters, watermark) and the filesystem side of
a conversion (file_operations, artifact_store). The pipeline orchestrates
these; none of them talks to the engine.
"""
