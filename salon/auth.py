# salon/auth.py

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext

from sqlmodel import Session, select
from salon.data import SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES
from salon.db import get_session
from salon.models import StaffMember, User

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
# same scheme, but lets an unauthenticated caller through (first-account setup)
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def create_access_token(user: User, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    claims = {"sub": user.email, "role": user.role, "exp": expire}
    if user.staff_id is not None:
        claims["staff_id"] = user.staff_id
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def account_disabled(session: Session, user: User) -> bool:
    """A staff account stops working while its staff member is deactivated."""
    if user.role != "staff":
        return False
    member = session.get(StaffMember, user.staff_id) if user.staff_id is not None else None
    return member is None or not member.active


def user_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "staff_id": user.staff_id,
    }


def _user_from_token(token: str, session: Session) -> dict:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise unauthorized("Invalid token")

    email = payload.get("sub")
    if email is None:
        raise unauthorized("Invalid token")

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None:
        raise unauthorized("User not found")
    if account_disabled(session, user):
        raise HTTPException(status_code=403, detail="Staff member is inactive")

    return user_dict(user)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> dict:
    return _user_from_token(token, session)


def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    session: Session = Depends(get_session),
) -> Optional[dict]:
    if token is None:
        return None
    return _user_from_token(token, session)
