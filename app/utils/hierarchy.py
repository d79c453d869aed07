# app/utils/hierarchy.py
from typing import List, Optional, Set
from sqlalchemy.orm import Session
from app.models.user import User, Role


class HierarchyManager:
    """Team directory backed by the users table.

    Reports are resolved through the ``manager_id`` back-reference and only
    one level deep; the manager graph is not checked for cycles.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_direct_reports(self, manager_id: int) -> List[User]:
        """Get the users whose manager is ``manager_id``"""
        return self.db.query(User).filter(
            User.manager_id == manager_id
        ).all()

    def direct_reports_of(self, principal_id: int) -> Set[int]:
        rows = self.db.query(User.id).filter(User.manager_id == principal_id).all()
        return {row[0] for row in rows}

    def role_of(self, principal_id: Optional[int]) -> Optional[Role]:
        """Role of an existing user, or None when no such user exists"""
        if principal_id is None:
            return None
        row = self.db.query(User.role).filter(User.id == principal_id).first()
        return row[0] if row else None
