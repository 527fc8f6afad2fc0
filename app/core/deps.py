from fastapi import Request

from app.core.security import TokenRevocationStore, TokenService
from app.db.session import SessionLocal
from app.services.files import FileStorage


# every request that needs DB will get a fresh session, and it will always close.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_revocation_store(request: Request) -> TokenRevocationStore:
    return request.app.state.revocation_store


def get_file_storage(request: Request) -> FileStorage:
    return request.app.state.file_storage
