"""
Storage Service
Local disk layout for uploaded template images and generated artifacts
"""

import os
import tempfile
import zipfile
from pathlib import Path
from typing import Iterable

from certissuer.config import settings
from certissuer.errors import PdfWriteError


class StorageService:
    """Resolves artifact references and writes files atomically"""

    @staticmethod
    def _strip_reference(reference: str) -> str:
        # references look like "/uploads/x.png"; the leading separator must go
        # or Path joining would discard the root
        return (reference or "").strip().lstrip("/\\")

    @staticmethod
    def resolve_upload_path(reference: str) -> Path:
        """Resolve a stored image reference such as `/uploads/x.png` under UPLOADS_DIR"""
        relative = StorageService._strip_reference(reference)
        if relative.startswith("uploads/"):
            relative = relative[len("uploads/"):]
        return Path(settings.UPLOADS_DIR) / relative

    @staticmethod
    def generated_reference(filename: str) -> str:
        return f"{settings.GENERATED_URL_PREFIX.rstrip('/')}/{filename}"

    @staticmethod
    def resolve_generated_path(reference: str) -> Path:
        """Resolve `/generated/<file>` to its location under GENERATED_DIR"""
        return Path(settings.GENERATED_DIR) / os.path.basename(StorageService._strip_reference(reference))

    @staticmethod
    def ensure_dir(path) -> None:
        """Create directory if missing (mkdir -p equivalent)."""
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise PdfWriteError(f"Cannot create output directory {path}: {e}") from e

    @staticmethod
    def write_atomic(path, data: bytes) -> None:
        """Write data to a temporary file then atomically rename to target path."""
        dir_path = os.path.dirname(os.fspath(path))
        StorageService.ensure_dir(dir_path)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=dir_path)
        except OSError as e:
            raise PdfWriteError(f"Cannot write {path}: {e}") from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            raise PdfWriteError(f"Cannot write {path}: {e}") from e
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    @staticmethod
    def write_archive(path, members: Iterable) -> int:
        """Zip existing files into `path`, each stored under its own basename

        Returns the number of entries written. Missing members are left out.
        """
        dir_path = os.path.dirname(os.fspath(path))
        StorageService.ensure_dir(dir_path)
        written = 0
        try:
            fd, tmp_path = tempfile.mkstemp(dir=dir_path, suffix=".zip")
        except OSError as e:
            raise PdfWriteError(f"Cannot write archive {path}: {e}") from e
        try:
            with os.fdopen(fd, "wb") as handle:
                with zipfile.ZipFile(handle, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
                    for member in members:
                        if not os.path.isfile(member):
                            continue
                        archive.write(member, arcname=os.path.basename(member))
                        written += 1
            os.replace(tmp_path, path)
        except OSError as e:
            raise PdfWriteError(f"Cannot write archive {path}: {e}") from e
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        return written

    @staticmethod
    def delete_file(path) -> bool:
        """Remove a file if present; returns whether something was deleted"""
        if path and os.path.isfile(path):
            os.remove(path)
            return True
        return False


storage_service = StorageService()
