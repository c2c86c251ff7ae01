# salon/deps.py

from fastapi import Depends, HTTPException

from salon.auth import get_current_user
from salon.validation import ValidationResult


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    require_role(current_user, "admin")
    return current_user


def raise_for_violations(result: ValidationResult):
    if not result.ok:
        raise HTTPException(
            status_code=422,
            detail=[v.model_dump() for v in result.violations],
        )
