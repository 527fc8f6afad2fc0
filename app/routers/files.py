import logging

from fastapi import APIRouter, Depends, File as FileParam, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import STAFF_ROLES
from app.core.current_user import get_current_user
from app.core.deps import get_db, get_file_storage
from app.core.errors import BadRequest, Forbidden, InternalError, NotFound
from app.core.permissions import get_authorization_service
from app.models.class_session import ClassSession
from app.models.file import File
from app.models.material import Material, MaterialFile
from app.models.raport import Raport, RaportFile
from app.models.user import User
from app.schemas.file import FileRead
from app.services.authorization import AuthorizationService
from app.services.files import FileStorage
from app.services.raports import is_section_member

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=FileRead, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: UploadFile | None = FileParam(default=None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    me: User = Depends(get_current_user),
):
    if file is None or not file.filename:
        raise BadRequest("No file uploaded.")

    stored_name, url = storage.save(file)
    record = File(
        name=file.filename,
        url=url,
        type=file.content_type or "application/octet-stream",
    )
    db.add(record)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        storage.remove(url)
        logger.exception("Error saving file record for %s", stored_name)
        raise InternalError("Failed to upload file.")

    db.refresh(record)
    logger.info("User %s uploaded file %s as %s", me.id, record.id, stored_name)
    return record


def _send(storage: FileStorage, record: File) -> FileResponse:
    path = storage.path_for(record.url)
    if not path.is_file():
        raise NotFound("File not found on server.")
    return FileResponse(path, media_type=record.type, filename=record.name)


def _get_file(db: Session, file_id: int) -> File:
    record = db.get(File, file_id)
    if record is None:
        raise NotFound("File not found.")
    return record


@router.get("/download/{file_id}")
def download_material_file(
    file_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    me: User = Depends(get_current_user),
    authz: AuthorizationService = Depends(get_authorization_service),
):
    record = _get_file(db, file_id)

    materials = (
        db.query(Material)
        .join(MaterialFile, MaterialFile.material_id == Material.id)
        .filter(MaterialFile.file_id == file_id)
        .all()
    )
    if not materials:
        raise NotFound("File is not attached to any material.")

    # any one material granting access is enough
    for material in materials:
        role = authz.role_in_course(me.id, material.course_id)
        if role is None:
            continue
        if role in STAFF_ROLES or material.visible:
            return _send(storage, record)

    raise Forbidden("Access denied. You cannot download this file.")


@router.get("/download-raport/{file_id}")
def download_raport_file(
    file_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    me: User = Depends(get_current_user),
    authz: AuthorizationService = Depends(get_authorization_service),
):
    record = _get_file(db, file_id)

    rows = (
        db.query(Raport.section_id, ClassSession.course_id)
        .join(RaportFile, RaportFile.raport_id == Raport.id)
        .join(ClassSession, ClassSession.id == Raport.class_session_id)
        .filter(RaportFile.file_id == file_id)
        .all()
    )
    if not rows:
        raise NotFound("File is not attached to any raport.")

    for section_id, course_id in rows:
        if is_section_member(db, section_id, me.id):
            return _send(storage, record)
        if authz.role_in_course(me.id, course_id) in STAFF_ROLES:
            return _send(storage, record)

    raise Forbidden("Access denied. You cannot download this file.")
