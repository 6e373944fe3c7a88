"""
Uploads Module

Directory-backed storage for uploaded scenario and traffic data files.
"""

from .models import FileInfo, FileListItem, ScenarioPreview, TablePreview
from .service import UploadService

__all__ = ["FileInfo", "FileListItem", "ScenarioPreview", "TablePreview", "UploadService"]
