"""Shared foundational helpers for Vessel domain models."""

from .json_types import JSONPrimitive, JSONValue

__all__ = ["JSONPrimitive", "JSONValue"]
