"""
clinicxz/config.py

Runtime settings. Every value can be overridden from the environment.
"""

import os

# sqlite+aiosqlite:///clinicxz.db -> clinicxz.db in the working directory
DATABASE_URL = os.getenv("CLINICXZ_DATABASE_URL", "sqlite+aiosqlite:///clinicxz.db")

# echo=True prints every statement SQLAlchemy emits
ECHO_SQL = os.getenv("CLINICXZ_ECHO_SQL", "0").strip().lower() in ["1", "true", "yes"]

# Credential inserted when the users table is empty
BOOTSTRAP_USERNAME = os.getenv("CLINICXZ_ADMIN_USERNAME", "admin")
BOOTSTRAP_PASSWORD = os.getenv("CLINICXZ_ADMIN_PASSWORD", "admin123")

LOG_LEVEL = os.getenv("CLINICXZ_LOG_LEVEL", "INFO").upper()
