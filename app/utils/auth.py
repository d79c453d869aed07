# app/utils/auth.py
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.database import get_db
from app.models.user import User, Role
from app.utils.principal import Principal, resolve_principal

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def verify_token(token: str) -> Optional[dict]:
    """Verify JWT token and return payload without raising exceptions"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def get_current_principal(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = verify_token(token)
    if payload is None:
        raise credentials_exception

    # Missing id/role claims raise MalformedCredential
    claimed = resolve_principal(payload)

    user = db.query(User).filter(User.id == claimed.id).first()
    if user is None:
        raise credentials_exception

    # Check if user is active
    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account has been deactivated. Please contact administrator.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Role and manager changes apply to tokens issued before them
    return Principal(id=user.id, role=user.role, manager_id=user.manager_id)


def require_roles(*roles: Role):
    """Dependency that only lets principals with one of ``roles`` through"""
    def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden. You do not have permission to access this resource.",
            )
        return principal
    return checker
