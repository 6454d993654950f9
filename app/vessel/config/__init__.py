"""Configuration constants and environment parsing for the Vessel backend."""

from .constants import *  # noqa: F401,F403
from .constants import __all__ as _constants_all
from .environment import ServerEnvironmentConfig, get_server_environment

__all__ = [*_constants_all, "ServerEnvironmentConfig", "get_server_environment"]
