"""Vessel upload simulator backend package."""

from .indicator import ProgressIndicator  # noqa: F401
from .server import create_app  # noqa: F401
from .sockets import SocketManager  # noqa: F401
from .upload import UploadFile, UploadManager  # noqa: F401

__all__ = [
    "create_app",
    "ProgressIndicator",
    "SocketManager",
    "UploadFile",
    "UploadManager",
]
