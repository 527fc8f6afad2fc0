from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.current_user import get_current_user
from app.core.deps import get_db, get_file_storage
from app.models.raport import Raport
from app.models.user import User
from app.schemas.raport import RaportEdit, RaportRead
from app.services.files import FileStorage
from app.services.raports import edit_raport, get_owned_raport

router = APIRouter()


def get_raport_for_owner(
    raport_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Raport:
    return get_owned_raport(db, raport_id, current_user)


@router.get("/{raport_id}", response_model=RaportRead)
def read_raport(raport: Raport = Depends(get_raport_for_owner)):
    return raport


@router.put("/{raport_id}/edit_raport", response_model=RaportRead)
def update_raport(
    payload: RaportEdit,
    raport: Raport = Depends(get_raport_for_owner),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
):
    return edit_raport(
        db,
        storage,
        raport,
        description=payload.description,
        deleted_file_ids=payload.deleted_file_ids,
        new_file_ids=payload.new_file_ids,
    )
