# create_tables.py
import sys

from app.database import Base, SessionLocal, engine
from app.models import User, Task  # noqa: F401  registers the tables
from app.utils.seed import seed_default_users


def create_tables(drop_existing: bool = False):
    """Create all tables, optionally dropping the existing ones first"""
    if drop_existing:
        Base.metadata.drop_all(bind=engine)
        print("🗑️  Existing tables dropped")

    Base.metadata.create_all(bind=engine)
    print("✅ All tables created successfully!")

    db = SessionLocal()
    try:
        created = seed_default_users(db)
        print(f"✅ {created} default user(s) created")
    finally:
        db.close()


if __name__ == "__main__":
    create_tables(drop_existing="--drop" in sys.argv)
