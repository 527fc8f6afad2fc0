"""File storage on local disk and reference-counted cleanup of orphaned files.

A file record may be linked from any number of raports and materials. It is
deleted (record first, then the stored object) once the last link goes away.
"""
import logging
import shutil
import time
from pathlib import Path

from fastapi import UploadFile
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import BadRequest
from app.models.file import File
from app.models.material import MaterialFile
from app.models.raport import RaportFile

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"


class FileStorage:
    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, upload: UploadFile) -> tuple[str, str]:
        """Persist ``upload`` under a timestamp-prefixed name; returns (stored_name, url)."""
        original = Path(upload.filename or "upload").name
        stored_name = f"{int(time.time() * 1000)}-{original}"
        with open(self.root / stored_name, "wb") as out:
            shutil.copyfileobj(upload.file, out)
        return stored_name, URL_PREFIX + stored_name

    def path_for(self, url: str) -> Path:
        return self.root / Path(url).name

    def remove(self, url: str) -> None:
        path = self.path_for(url)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Stored file already missing: %s", path)


def reference_count(db: Session, file_id: int) -> int:
    raport_refs = (
        db.query(func.count(RaportFile.id)).filter(RaportFile.file_id == file_id).scalar()
    ) or 0
    material_refs = (
        db.query(func.count(MaterialFile.id)).filter(MaterialFile.file_id == file_id).scalar()
    ) or 0
    return int(raport_refs + material_refs)


def lock_files(db: Session, file_ids: list[int]) -> list[File]:
    """Row-lock the given file records, failing if any id is unknown.

    Attaching and releasing both go through this lock so a reference count is
    never taken while another transaction re-attaches the same file.
    """
    if not file_ids:
        return []
    wanted = set(file_ids)
    files = (
        db.query(File)
        .filter(File.id.in_(wanted))
        .order_by(File.id)
        .with_for_update()
        .all()
    )
    missing = wanted - {f.id for f in files}
    if missing:
        raise BadRequest(f"Unknown file ids: {sorted(missing)}")
    return files


def release_file(db: Session, file_id: int) -> str | None:
    """Delete the file record if nothing references it any more.

    Must run after the caller's link deletion has been flushed. Returns the URL
    of the deleted record so the caller can remove the stored object after commit.
    """
    file = db.query(File).filter(File.id == file_id).with_for_update().first()
    if file is None:
        return None
    if reference_count(db, file_id) > 0:
        return None

    url = file.url
    db.delete(file)
    db.flush()
    logger.info("Orphaned file %s (%s) deleted", file_id, url)
    return url


def remove_stored(storage: FileStorage, urls: list[str | None]) -> None:
    """Remove stored objects once their records are gone; call after commit."""
    for url in urls:
        if url:
            storage.remove(url)
