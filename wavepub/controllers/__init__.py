"""FastAPI routers acting as controllers in the MVC architecture."""

from . import audio, videos

__all__ = ["audio", "videos"]
