from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import or_
from sqlmodel import Session, select

from peiwan.core.security import (
    create_user_token,
    get_password_hash,
    password_needs_rehash,
    verify_password,
)
from peiwan.db.database import unit_of_work
from peiwan.dependencies import get_db
from peiwan.models import ActivityType, User
from peiwan.schemas.auth import Token
from peiwan.schemas.user import UserCreate, UserRead
from peiwan.services.activity import log_activity
from peiwan.services.ledger import open_account

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(user_in: UserCreate, db: Session = Depends(get_db)) -> User:
    existing_username = db.exec(select(User).where(User.username == user_in.username)).first()
    if existing_username:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already registered")

    if user_in.phone:
        existing_phone = db.exec(select(User).where(User.phone == user_in.phone)).first()
        if existing_phone:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Phone already registered")

    with unit_of_work(db):
        user = User(
            username=user_in.username,
            phone=user_in.phone,
            display_name=user_in.display_name,
            hashed_password=get_password_hash(user_in.password),
            role=user_in.role,
        )
        db.add(user)
        db.flush()
        if user.can_earn:
            open_account(db, user.id)
        log_activity(
            db,
            user_id=user.id,
            action_type=ActivityType.registered,
            title="注册账号",
            detail=f"角色: {user.role.value}",
        )

    db.refresh(user)
    logger.info("Registered user_id=%s role=%s", user.id, user.role.value)
    return user


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    remember_me: bool = Form(default=False),
    db: Session = Depends(get_db),
) -> Token:
    user = db.exec(
        select(User).where(
            or_(
                User.username == form_data.username,
                User.phone == form_data.username,
            )
        )
    ).first()

    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    if password_needs_rehash(user.hashed_password):
        with unit_of_work(db):
            user.hashed_password = get_password_hash(form_data.password)
            db.add(user)
        db.refresh(user)
        logger.info("Upgraded password hash for user_id=%s", user.id)

    return Token(access_token=create_user_token(user, remember_me=remember_me), token_type="bearer")
