import os
import sqlite3
import time
from typing import Optional
from app.core.config import settings

DATABASE_PATH = settings.DATABASE_PATH

def init_db():
    """Initialize SQLite database with cache table"""
    directory = os.path.dirname(DATABASE_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with sqlite3.connect(DATABASE_PATH) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS cache (
                cache_key TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                expires_at REAL NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_cache_expires_at ON cache(expires_at)")
        conn.commit()

def get(key: str, now: Optional[float] = None) -> Optional[str]:
    """Get the cached payload for key, ignoring expired entries"""
    now = time.time() if now is None else now
    with sqlite3.connect(DATABASE_PATH) as conn:
        cursor = conn.execute(
            "SELECT payload FROM cache WHERE cache_key = ? AND expires_at > ?",
            (key, now)
        )
        result = cursor.fetchone()
        return result[0] if result else None

def set(key: str, payload: str, ttl_seconds: float, now: Optional[float] = None):
    """Store payload under key until now + ttl_seconds, replacing any previous row"""
    now = time.time() if now is None else now
    with sqlite3.connect(DATABASE_PATH) as conn:
        conn.execute(
            "INSERT OR REPLACE INTO cache (cache_key, payload, expires_at) VALUES (?, ?, ?)",
            (key, payload, now + ttl_seconds)
        )
        conn.commit()

def purge_expired(now: Optional[float] = None) -> int:
    """Remove expired cache entries, returning how many were deleted"""
    now = time.time() if now is None else now
    with sqlite3.connect(DATABASE_PATH) as conn:
        cursor = conn.execute("DELETE FROM cache WHERE expires_at <= ?", (now,))
        conn.commit()
        return cursor.rowcount

def clear_all():
    """Clear all cache entries (for testing)"""
    with sqlite3.connect(DATABASE_PATH) as conn:
        conn.execute("DELETE FROM cache")
        conn.commit()

def get_stats(now: Optional[float] = None) -> dict:
    """Get cache statistics"""
    now = time.time() if now is None else now
    with sqlite3.connect(DATABASE_PATH) as conn:
        cursor = conn.execute("SELECT COUNT(*) FROM cache")
        total_entries = cursor.fetchone()[0]

        cursor = conn.execute("SELECT COUNT(*) FROM cache WHERE expires_at > ?", (now,))
        live_entries = cursor.fetchone()[0]

        return {
            "total_entries": total_entries,
            "live_entries": live_entries,
            "database_path": DATABASE_PATH
        }
