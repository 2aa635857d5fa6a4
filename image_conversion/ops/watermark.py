from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from image_conversion.ops.parameters import Manipulation

WATERMARK = Manipulation.WATERMARK.value


def extract_watermark_path(group: Mapping[str, Any]) -> tuple[dict[str, Any], str | None]:
    """Split the watermark path out of a manipulation group.

    Returns a copy of ``group`` whose ``watermark`` value is the bare
    filename, plus the directory part so it can be handed to the engine as
    its watermark search directory. Groups without a watermark come back
    unchanged with ``None``. ``group`` itself is never modified.
    """
    extracted = dict(group)
    if WATERMARK not in extracted:
        return extracted, None

    raw = os.fspath(extracted[WATERMARK])
    # "/a/b/logo.png/" names logo.png in /a/b
    path = raw.rstrip("/" + os.sep) or raw
    extracted[WATERMARK] = os.path.basename(path)
    return extracted, os.path.dirname(path) or "."
