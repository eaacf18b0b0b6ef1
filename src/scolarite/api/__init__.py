"""REST API for scolarite."""

from scolarite.api.app import create_app
from scolarite.api.models import APIResponse

__all__ = [
    "APIResponse",
    "create_app",
]
