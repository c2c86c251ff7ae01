# salon/routers/auth_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from salon.db import get_session
from salon.models import User
from salon.schemas import Token
from salon.auth import account_disabled, create_access_token, verify_password

logger = logging.getLogger("salon.auth")

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    # OAuth2 "password" flow uses the "username" field for the email
    email = form_data.username

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None or not verify_password(form_data.password, user.password_hash):
        logger.warning("failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    # accounts of deactivated staff members are locked out
    if account_disabled(session, user):
        logger.warning("login refused for %s: staff member %s is inactive", email, user.staff_id)
        raise HTTPException(status_code=403, detail="Staff member is inactive")

    logger.info("%s login for %s", user.role, email)
    return {"access_token": create_access_token(user), "token_type": "bearer"}
