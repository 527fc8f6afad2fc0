import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.current_user import get_current_user, get_token
from app.core.deps import get_db, get_revocation_store, get_token_service
from app.core.errors import Conflict, Unauthorized
from app.core.security import (
    TokenRevocationStore,
    TokenService,
    hash_password,
    verify_password,
)
from app.models.user import User
from app.schemas.auth import LoginRequest, Message, Token
from app.schemas.user import UserCreate, UserRead

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=Token,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"description": "Username or email already registered"},
    },
)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    clauses = [User.username == payload.username]
    if payload.email:
        clauses.append(User.email == payload.email)
    if db.query(User).filter(or_(*clauses)).first():
        raise Conflict("Username or email already registered.")

    user = User(
        username=payload.username,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username or email already registered.")
    db.refresh(user)

    logger.info("User %s registered", user.id)
    return {"access_token": tokens.create_access_token(user.id), "token_type": "bearer"}


@router.post(
    "/login",
    response_model=Token,
    responses={
        401: {"description": "Invalid username or password"},
    },
)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user = db.query(User).filter(User.username == payload.username).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise Unauthorized("Invalid username or password.")

    return {"access_token": tokens.create_access_token(user.id), "token_type": "bearer"}


@router.post("/refresh", response_model=Token)
def refresh(
    current_user: User = Depends(get_current_user),
    tokens: TokenService = Depends(get_token_service),
):
    return {"access_token": tokens.create_access_token(current_user.id), "token_type": "bearer"}


@router.post("/logout", response_model=Message)
def logout(
    token: str = Depends(get_token),
    current_user: User = Depends(get_current_user),
    revoked: TokenRevocationStore = Depends(get_revocation_store),
):
    revoked.revoke(token)
    logger.info("User %s logged out", current_user.id)
    return {"message": "Logged out successfully."}


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user
