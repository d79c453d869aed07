from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.config.settings import settings

DATABASE_URL = settings.DATABASE_URL

# SQLite needs cross-thread access for the threadpool FastAPI runs sync routes in;
# hosted PostgreSQL keeps sslmode
if settings.is_sqlite():
    connect_args = {"check_same_thread": False}
else:
    connect_args = {"sslmode": settings.DB_SSLMODE}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# ✅ This is required to be imported wherever DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
