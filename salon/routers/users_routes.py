# salon/routers/users_routes.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from salon.auth import get_current_user, get_optional_user, hash_password, unauthorized, user_dict
from salon.db import get_session
from salon.deps import require_role
from salon.models import User
from salon.repository import StaffRepository, get_staff_repo
from salon.schemas import UserCreate, UserPublic, UserRole

logger = logging.getLogger("salon.users")

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
    staff: StaffRepository = Depends(get_staff_repo),
    current_user: Optional[dict] = Depends(get_optional_user),
):
    # 1) Only admins add accounts, once the first (admin) account exists
    if session.exec(select(User.id)).first() is None:
        if user.role != UserRole.admin:
            raise HTTPException(status_code=422, detail="The first account must be an admin")
    elif current_user is None:
        raise unauthorized("Not authenticated")
    else:
        require_role(current_user, "admin")

    # 2) Staff accounts belong to exactly one staff member
    if user.role == UserRole.staff:
        if user.staff_id is None or staff.get(user.staff_id) is None:
            raise HTTPException(status_code=422, detail="Staff accounts must be linked to a staff member")
        if staff.account_for(user.staff_id) is not None:
            raise HTTPException(status_code=409, detail="Staff member already has an account")
    elif user.staff_id is not None:
        raise HTTPException(status_code=422, detail="Admin accounts are not linked to a staff member")

    # 3) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 4) Create user in DB
    db_user = User(
        email=user.email,
        password_hash=hash_password(user.password),
        role=user.role.value,
        staff_id=user.staff_id,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id
    logger.info("created %s account %s (staff %s)", db_user.role, db_user.email, db_user.staff_id)

    return user_dict(db_user)
