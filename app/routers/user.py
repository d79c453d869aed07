# app/routers/user.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, Role
from app.schemas.user import UserCreate, UserOut, UserUpdate
from app.utils.auth import require_roles
from app.utils.hierarchy import HierarchyManager
from app.utils.principal import Principal
from app.utils.security import hash_password

logger = logging.getLogger(__name__)

router = APIRouter()

admin_only = require_roles(Role.ADMIN)


def _ensure_manager_exists(db: Session, manager_id):
    if manager_id is None:
        return
    manager = db.query(User).filter(User.id == manager_id).first()
    if not manager:
        raise HTTPException(status_code=400, detail="Manager not found")


@router.get("", response_model=List[UserOut])
def get_all_users(
    db: Session = Depends(get_db),
    principal: Principal = Depends(admin_only),
):
    """Get all users (admin only)"""
    return db.query(User).order_by(User.id).all()


@router.get("/managed", response_model=List[UserOut])
def get_managed_users(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    """Get the direct reports of the current user"""
    return HierarchyManager(db).get_direct_reports(principal.id)


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(admin_only),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(admin_only),
):
    """Create a new user (admin only)"""
    email = user.email.lower()
    existing_user = db.query(User).filter(
        or_(User.username == user.username, User.email == email)
    ).first()
    if existing_user:
        if existing_user.username == user.username:
            raise HTTPException(status_code=400, detail="Username already exists")
        raise HTTPException(status_code=400, detail="Email already exists")

    _ensure_manager_exists(db, user.manager_id)

    db_user = User(
        username=user.username,
        email=email,
        name=user.name,
        hashed_password=hash_password(user.password),
        role=user.role,
        manager_id=user.manager_id,
        active=user.active,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("User %s created by admin %s", db_user.id, principal.id)
    return db_user


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(admin_only),
):
    """Update a user (admin only)"""
    db_user = db.query(User).filter(User.id == user_id).first()
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")

    update_data = user_update.model_dump(exclude_unset=True)

    if update_data.get("username") and update_data["username"] != db_user.username:
        if db.query(User).filter(User.username == update_data["username"]).first():
            raise HTTPException(status_code=400, detail="Username already exists")

    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
        if update_data["email"] != db_user.email:
            if db.query(User).filter(User.email == update_data["email"]).first():
                raise HTTPException(status_code=400, detail="Email already exists")

    if "manager_id" in update_data:
        _ensure_manager_exists(db, update_data["manager_id"])

    # If updating password, hash it
    if update_data.get("password"):
        update_data["hashed_password"] = hash_password(update_data.pop("password"))
    else:
        update_data.pop("password", None)

    for key, value in update_data.items():
        if value is None and key not in ("manager_id",):
            continue
        setattr(db_user, key, value)

    db.commit()
    db.refresh(db_user)
    return db_user


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(admin_only),
):
    """Delete a user (admin only); admin accounts can only delete themselves"""
    db_user = db.query(User).filter(User.id == user_id).first()
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")

    if db_user.role == Role.ADMIN and principal.id != db_user.id:
        raise HTTPException(status_code=403, detail="Cannot delete admin user")

    try:
        db.delete(db_user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is still referenced by tasks or reports",
        )
    logger.info("User %s deleted by admin %s", user_id, principal.id)
    return {"message": "User deleted successfully"}
