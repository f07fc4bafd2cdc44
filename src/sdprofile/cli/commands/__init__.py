"""CLI commands for sdprofile."""

from .config import config
from .profile import create, inspect, validate
from .templates import templates
from .transfer import transfer

__all__ = ["config", "create", "inspect", "templates", "transfer", "validate"]
