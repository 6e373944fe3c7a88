"""
Upload Service

Stores uploaded scenario and data files in a directory. The directory is the
authoritative store: there is no metadata index, so listing re-reads the
directory and its stat information on every call.

Stored files are named ``<ms-timestamp>-<9-digit-random>-<original-name>``
to keep concurrent uploads apart. JSON scenario uploads are re-read after
writing and flagged (not rejected) when they do not parse.
"""

import json
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Iterable, List, Optional, Union

import pandas as pd
from werkzeug.utils import secure_filename

from ..config.settings import DEFAULT_ALLOWED_MIMETYPES, MAX_UPLOAD_BYTES
from ..errors import InvalidInputError, NotFoundError, StoreIOError, UploadTooLargeError
from ..scenarios.models import timestamp
from .models import FileInfo, FileListItem, ScenarioPreview, TablePreview, iso_from_epoch

logger = logging.getLogger(__name__)

JSON_MIMETYPE = 'application/json'
CSV_MIMETYPE = 'text/csv'

NO_FILE_MESSAGE = "No file uploaded or invalid file type"
INVALID_FILENAME_MESSAGE = "Invalid filename"
FORBIDDEN_FILENAME_PARTS = ('..', '/', '\\')


class UploadService:
    """
    File upload management for scenario and traffic data files.

    Features:
    - MIME type allow-list and size limit
    - Collision-resistant stored names
    - JSON scenario preview and CSV shape preview
    - Listing, deletion and download by stored filename
    """

    def __init__(self, upload_dir: Union[str, Path],
                 allowed_mimetypes: Optional[Iterable[str]] = None,
                 max_bytes: int = MAX_UPLOAD_BYTES):
        """
        Initialize upload service

        Args:
            upload_dir: Directory holding uploaded files
            allowed_mimetypes: Accepted MIME types
            max_bytes: Maximum accepted file size in bytes
        """
        self.upload_dir = Path(upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.allowed_mimetypes = set(allowed_mimetypes or DEFAULT_ALLOWED_MIMETYPES)
        self.max_bytes = max_bytes

    @staticmethod
    def generate_filename(original_name: str) -> str:
        """Build the on-disk name for an upload"""
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(900_000_000) + 100_000_000}"
        original = Path(original_name or '')
        safe_name = secure_filename(original.name)
        if not secure_filename(original.stem):
            # Non-ASCII names sanitize away entirely; keep the extension
            safe_name = secure_filename('upload' + original.suffix) or 'upload'
        return f"{unique_suffix}-{safe_name}"

    def save(self, file, kind: str) -> FileInfo:
        """
        Store an uploaded file

        Args:
            file: werkzeug FileStorage (or None when the field was missing)
            kind: "scenario" or "data"

        Returns:
            Metadata of the stored file
        """
        if file is None or not file.filename or file.mimetype not in self.allowed_mimetypes:
            logger.warning(f"Rejected {kind} upload: "
                           f"{getattr(file, 'filename', None)!r} ({getattr(file, 'mimetype', None)})")
            raise InvalidInputError(NO_FILE_MESSAGE)

        stream = file.stream
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(0)
        if size > self.max_bytes:
            logger.warning(f"Rejected {kind} upload {file.filename!r}: {size} bytes exceeds {self.max_bytes}")
            raise UploadTooLargeError(f"File exceeds maximum size of {self.max_bytes} bytes")

        filename = self.generate_filename(file.filename)
        path = self.upload_dir / filename
        try:
            file.save(str(path))
        except OSError as e:
            logger.exception(f"Failed to write upload {path}")
            self._discard(path)
            raise StoreIOError(f"Failed to write {path}: {e}", "Failed to upload file") from e

        info = FileInfo(
            id=path.stem,
            original_name=file.filename,
            filename=filename,
            path=str(path),
            size=path.stat().st_size,
            mimetype=file.mimetype,
            uploaded_at=timestamp(),
            type=kind,
        )

        if file.mimetype == JSON_MIMETYPE:
            self._inspect_json(path, info)
        elif kind == 'data' and file.mimetype == CSV_MIMETYPE:
            self._inspect_csv(path, info)

        logger.info(f"Stored {kind} upload {file.filename!r} as {filename} ({info.size} bytes)")
        return info

    @staticmethod
    def _discard(path: Path):
        """Remove a partially written upload"""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial upload {path}: {e}")

    def _inspect_json(self, path: Path, info: FileInfo):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = json.load(f)
        except ValueError as e:
            info.is_valid = False
            info.error = f"Invalid JSON format: {e}"
            logger.info(f"Upload {info.filename} is not valid JSON: {e}")
            return

        if isinstance(content, dict):
            vehicles = content.get('vehicles')
            signals = content.get('signals')
            info.is_valid = True
            info.preview = ScenarioPreview(
                has_vehicles=isinstance(vehicles, list),
                has_signals=isinstance(signals, list),
                vehicle_count=len(vehicles) if isinstance(vehicles, list) else 0,
                signal_count=len(signals) if isinstance(signals, list) else 0,
            )
        elif isinstance(content, list):
            info.is_valid = True
            info.preview = ScenarioPreview(
                has_vehicles=False, has_signals=False, vehicle_count=0, signal_count=0
            )

    def _inspect_csv(self, path: Path, info: FileInfo):
        try:
            frame = pd.read_csv(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            info.is_valid = False
            info.error = f"Invalid CSV format: {e}"
            return

        info.is_valid = True
        info.preview = TablePreview(
            row_count=len(frame.index),
            column_count=len(frame.columns),
            columns=[str(column) for column in frame.columns],
        )

    def list(self) -> List[FileListItem]:
        """Enumerate stored files, sorted by filename"""
        if not self.upload_dir.exists():
            return []

        try:
            files = []
            for entry in sorted(self.upload_dir.iterdir()):
                if not entry.is_file():
                    continue
                stats = entry.stat()
                files.append(FileListItem(
                    filename=entry.name,
                    path=str(entry),
                    size=stats.st_size,
                    created=iso_from_epoch(getattr(stats, 'st_birthtime', stats.st_ctime)),
                    modified=iso_from_epoch(stats.st_mtime),
                ))
            return files
        except OSError as e:
            logger.exception(f"Failed to list {self.upload_dir}")
            raise StoreIOError(f"Failed to list {self.upload_dir}: {e}", "Failed to list files") from e

    def resolve(self, filename: str) -> Path:
        """
        Map a stored filename to its path

        Raises:
            InvalidInputError: for names containing '..', '/' or '\\', or
                resolving outside the upload directory
            NotFoundError: if the file does not exist
        """
        if any(part in filename for part in FORBIDDEN_FILENAME_PARTS):
            raise InvalidInputError(INVALID_FILENAME_MESSAGE)

        path = (self.upload_dir / filename).resolve()
        if path.parent != self.upload_dir:
            raise InvalidInputError(INVALID_FILENAME_MESSAGE)

        if not path.is_file():
            raise NotFoundError("File not found")
        return path

    def delete(self, filename: str):
        """Remove a stored file"""
        path = self.resolve(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError("File not found")
        except OSError as e:
            logger.exception(f"Failed to delete {path}")
            raise StoreIOError(f"Failed to delete {path}: {e}", "Failed to delete file") from e
        logger.info(f"Deleted upload {filename}")
