import os
import tempfile
import pytest
import sqlite3
from app.cache import db as cache_db
from app.services import link_preview

@pytest.fixture(autouse=True)
def setup_test_environment():
    """Point the cache at a temporary database and reset the shared service"""
    # Store original values
    original_db_path = cache_db.DATABASE_PATH

    # Create temporary database for tests
    temp_db = tempfile.NamedTemporaryFile(suffix='.sqlite', delete=False)
    temp_db_path = temp_db.name
    temp_db.close()

    cache_db.DATABASE_PATH = temp_db_path
    link_preview._service = None

    # Initialize test database
    cache_db.init_db()

    yield

    # Restore original values
    cache_db.DATABASE_PATH = original_db_path
    link_preview._service = None

    # Cleanup temporary database - close all connections first (Windows fix)
    try:
        conn = sqlite3.connect(temp_db_path)
        conn.close()

        if os.path.exists(temp_db_path):
            os.unlink(temp_db_path)
    except OSError:
        # If cleanup fails, it's not critical for tests
        pass
