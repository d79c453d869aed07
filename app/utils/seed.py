# app/utils/seed.py
"""
Default accounts created on first start so the API can be used right away
"""

import logging

from sqlalchemy.orm import Session

from app.models.user import User, Role
from app.utils.security import hash_password

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    {
        "username": "admin",
        "password": "admin123",
        "name": "Admin",
        "email": "admin@example.com",
        "role": Role.ADMIN,
    },
    {
        "username": "manager",
        "password": "manager123",
        "name": "Manager",
        "email": "manager@example.com",
        "role": Role.MANAGER,
    },
    {
        "username": "user",
        "password": "user123",
        "name": "User",
        "email": "user@example.com",
        "role": Role.USER,
        "manager": "manager",
    },
]


def seed_default_users(db: Session) -> int:
    """Create any missing default account; returns how many were created"""
    created = 0
    for user_data in DEFAULT_USERS:
        existing_user = db.query(User).filter(User.username == user_data["username"]).first()
        if existing_user:
            logger.info("User %s already exists", user_data["username"])
            continue

        manager_id = None
        if user_data.get("manager"):
            manager = db.query(User).filter(User.username == user_data["manager"]).first()
            manager_id = manager.id if manager else None

        db.add(User(
            username=user_data["username"],
            email=user_data["email"],
            name=user_data["name"],
            hashed_password=hash_password(user_data["password"]),
            role=user_data["role"],
            manager_id=manager_id,
        ))
        db.commit()
        created += 1
        logger.info("User %s created", user_data["username"])
    return created
