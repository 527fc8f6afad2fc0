import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import ROLE_STUDENT, ROLES, STAFF_ROLES
from app.core.deps import get_db, get_file_storage
from app.core.errors import AppError, InternalError, NotFound
from app.core.permissions import CourseAccess, require_course_role
from app.models.material import Material, MaterialFile
from app.schemas.auth import Message
from app.schemas.material import MaterialCreate, MaterialRead, MaterialUpdate
from app.services.files import FileStorage, lock_files, release_file, remove_stored

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_material(db: Session, course_id: int, material_id: int) -> Material:
    material = db.query(Material).filter(Material.id == material_id).first()
    if not material or material.course_id != course_id:
        raise NotFound("Material not found.")
    return material


def _unlink(db: Session, material_id: int, file_ids: list[int]) -> list[str | None]:
    released: list[str | None] = []
    for file_id in dict.fromkeys(file_ids):
        deleted = (
            db.query(MaterialFile)
            .filter(MaterialFile.material_id == material_id, MaterialFile.file_id == file_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            continue
        db.flush()
        released.append(release_file(db, file_id))
    return released


def _link(db: Session, material_id: int, file_ids: list[int]) -> None:
    file_ids = list(dict.fromkeys(file_ids))
    if not file_ids:
        return
    lock_files(db, file_ids)
    linked = {
        fid
        for (fid,) in db.query(MaterialFile.file_id).filter(
            MaterialFile.material_id == material_id, MaterialFile.file_id.in_(file_ids)
        )
    }
    db.add_all(
        MaterialFile(material_id=material_id, file_id=fid) for fid in file_ids if fid not in linked
    )


@router.get("/{course_id}/materials", response_model=list[MaterialRead])
def list_materials(
    course_id: int,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*ROLES)),
):
    query = (
        db.query(Material)
        .options(selectinload(Material.files))
        .filter(Material.course_id == course_id)
    )
    if access.role == ROLE_STUDENT:
        query = query.filter(Material.visible.is_(True))
    return query.order_by(Material.index.asc(), Material.id.asc()).all()


@router.post(
    "/{course_id}/materials",
    response_model=MaterialRead,
    status_code=status.HTTP_201_CREATED,
)
def create_material(
    course_id: int,
    payload: MaterialCreate,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    try:
        material = Material(
            course_id=course_id,
            title=payload.title,
            description=payload.description,
            visible=payload.visible,
            index=payload.index,
        )
        db.add(material)
        db.flush()

        _link(db, material.id, payload.file_ids)
        db.commit()
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating material in course %s", course_id)
        raise InternalError("Failed to create material.")

    db.refresh(material)
    return material


@router.put("/{course_id}/materials/{material_id}", response_model=MaterialRead)
def update_material(
    course_id: int,
    material_id: int,
    payload: MaterialUpdate,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    material = _get_material(db, course_id, material_id)

    try:
        if payload.title is not None:
            material.title = payload.title
        if payload.description is not None:
            material.description = payload.description
        if payload.visible is not None:
            material.visible = payload.visible
        if payload.index is not None:
            material.index = payload.index

        # a file both removed and re-added stays linked
        kept = set(payload.new_file_ids)
        released = _unlink(
            db, material.id, [fid for fid in payload.deleted_file_ids if fid not in kept]
        )
        _link(db, material.id, payload.new_file_ids)
        db.commit()
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating material %s", material_id)
        raise InternalError("Failed to update material.")

    # stored objects go only after the records are committed away
    remove_stored(storage, released)
    db.refresh(material)
    return material


@router.delete("/{course_id}/materials/{material_id}", response_model=Message)
def delete_material(
    course_id: int,
    material_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    material = _get_material(db, course_id, material_id)

    try:
        file_ids = [
            fid
            for (fid,) in db.query(MaterialFile.file_id).filter(
                MaterialFile.material_id == material.id
            )
        ]
        released = _unlink(db, material.id, file_ids)
        db.delete(material)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting material %s", material_id)
        raise InternalError("Failed to delete material.")

    remove_stored(storage, released)
    removed = sum(1 for url in released if url)
    logger.info("Material %s deleted, %d orphaned file(s) removed", material_id, removed)
    return {"message": "Material deleted successfully."}
