from .base import VesselSchema

__all__ = ["VesselSchema"]
