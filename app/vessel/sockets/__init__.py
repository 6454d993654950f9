from .manager import SocketManager

__all__ = ["SocketManager"]
