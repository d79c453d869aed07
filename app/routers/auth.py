import logging

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import UserLogin, UserOut
from app.schemas.tokens import Token
from app.utils.auth import get_current_principal
from app.utils.principal import Principal
from app.utils.security import verify_password, create_access_token, token_claims_for

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=Token)
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.username == user.username).first()
    if not db_user or not verify_password(user.password, db_user.hashed_password):
        logger.info("Failed login attempt for username %s", user.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    if not db_user.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This account has been deactivated",
        )

    token = create_access_token(data=token_claims_for(db_user))
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": UserOut.model_validate(db_user),
    }


@router.get("/me", response_model=UserOut)
def get_me(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Get the profile of the authenticated user"""
    user = db.query(User).filter(User.id == principal.id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
