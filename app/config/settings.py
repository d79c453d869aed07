# app/config/settings.py
# Runtime configuration for the task API

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings read from the environment"""

    ENVIRONMENT = os.getenv('ENVIRONMENT', 'development')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Database
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./tasks.db')
    DB_SSLMODE = os.getenv('DB_SSLMODE', 'require')

    # Tokens
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me-in-production')
    ALGORITHM = os.getenv('ALGORITHM', 'HS256')
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', 60 * 24))

    # Server
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', '8000'))
    RELOAD = os.getenv('RELOAD', 'true').lower() == 'true'

    SEED_DEFAULT_USERS = os.getenv('SEED_DEFAULT_USERS', 'true').lower() == 'true'

    CORS_ORIGINS = os.getenv(
        'CORS_ORIGINS',
        'http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000',
    )

    @classmethod
    def get_cors_origins(cls) -> List[str]:
        """Split the comma separated origin list"""
        return [origin.strip() for origin in cls.CORS_ORIGINS.split(',') if origin.strip()]

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT.lower() == 'production'

    @classmethod
    def is_sqlite(cls) -> bool:
        return cls.DATABASE_URL.startswith('sqlite')


settings = Settings()
