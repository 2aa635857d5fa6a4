"""Image Engine - the pixel-processing side of a conversion.

The pipeline only sees the interface in ``engine``; ``server`` holds the
libvips implementation behind the ``vips`` driver and is imported lazily.

Usage:
    from image_conversion.image_engine import EngineConfig, create_server

    server = create_server(EngineConfig(source="/in", cache="/tmp", driver="vips"))
    out_name = server.make_image("cat.jpg", {"w": 100, "fit": "crop"})
"""

from .engine import EngineConfig, EngineFactory, ImageEngine, create_server, register_driver

__all__ = ["EngineConfig", "EngineFactory", "ImageEngine", "create_server", "register_driver"]
