"""sdprofile: inspect and edit Stream Deck profile archives."""

__version__ = "0.1.0"

from .models import ProfileArchive, ProfileTemplates
from .services import PreflightValidator, ProfileArchiveService, WorkspaceService

__all__ = [
    "PreflightValidator",
    "ProfileArchive",
    "ProfileArchiveService",
    "ProfileTemplates",
    "WorkspaceService",
]
