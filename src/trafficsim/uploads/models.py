"""
Upload Data Formats

Metadata returned for uploaded files. Nothing here is persisted: the upload
directory is the only store and these records are derived from it on demand.
"""

from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import Field

from ..scenarios.models import CamelModel


class ScenarioPreview(CamelModel):
    """Shallow look into an uploaded JSON scenario document"""
    has_vehicles: bool
    has_signals: bool
    vehicle_count: int
    signal_count: int


class TablePreview(CamelModel):
    """Shape of an uploaded CSV data file"""
    row_count: int
    column_count: int
    columns: List[str] = Field(default_factory=list)


class FileInfo(CamelModel):
    """Metadata of a freshly uploaded file"""
    id: str
    original_name: str
    filename: str
    path: str
    size: int
    mimetype: str
    uploaded_at: str
    type: str
    is_valid: Optional[bool] = None
    preview: Optional[Union[ScenarioPreview, TablePreview]] = None
    error: Optional[str] = None


class FileListItem(CamelModel):
    """Directory entry of the upload store"""
    filename: str
    path: str
    size: int
    created: str
    modified: str


def iso_from_epoch(seconds: float) -> str:
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
