import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from utils.constants import DB_FILE, DEFAULT_CATEGORIES, DEFAULT_USER_NAME

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None
        # Held by every write unit; the connection is shared across threads.
        self.lock = threading.RLock()

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema and seed defaults."""
        conn = self.get_connection()
        self._create_schema(conn)
        self._seed_defaults(conn)
        conn.commit()

    @contextmanager
    def transaction(self):
        """Group several DAO writes (called with commit=False) into one unit."""
        with self.lock:
            conn = self.get_connection()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                name       TEXT NOT NULL UNIQUE,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS categories (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                name       TEXT NOT NULL UNIQUE,
                color_hex  TEXT NOT NULL DEFAULT '#888888',
                icon       TEXT NOT NULL DEFAULT 'tag',
                is_system  INTEGER NOT NULL DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS recurring_expenses (
                id                  INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id             INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                category_id         INTEGER NOT NULL REFERENCES categories(id),
                title               TEXT NOT NULL,
                amount              REAL NOT NULL CHECK(amount > 0),
                frequency           TEXT NOT NULL
                                    CHECK(frequency IN ('daily','weekly','monthly','yearly')),
                day_of_week         INTEGER CHECK(day_of_week BETWEEN 0 AND 6),
                day_of_month        INTEGER CHECK(day_of_month BETWEEN 1 AND 31),
                month_of_year       INTEGER CHECK(month_of_year BETWEEN 1 AND 12),
                start_date          TEXT NOT NULL,
                end_date            TEXT,
                next_due            TEXT NOT NULL,
                last_processed_date TEXT,
                active              INTEGER NOT NULL DEFAULT 1,
                auto_create         INTEGER NOT NULL DEFAULT 1,
                reminder_days       INTEGER NOT NULL DEFAULT 1
                                    CHECK(reminder_days BETWEEN 0 AND 30),
                description         TEXT NOT NULL DEFAULT '',
                tags                TEXT NOT NULL DEFAULT '',
                created_at          TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at          TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS recurring_created_expenses (
                id            INTEGER PRIMARY KEY AUTOINCREMENT,
                recurring_id  INTEGER NOT NULL REFERENCES recurring_expenses(id) ON DELETE CASCADE,
                expense_id    INTEGER REFERENCES expenses(id) ON DELETE SET NULL,
                date_created  TEXT NOT NULL,
                amount        REAL NOT NULL
            );

            CREATE TABLE IF NOT EXISTS expenses (
                id            INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id       INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                category_id   INTEGER NOT NULL REFERENCES categories(id) ON DELETE RESTRICT,
                amount        REAL NOT NULL CHECK(amount > 0),
                date          TEXT NOT NULL,
                remarks       TEXT NOT NULL DEFAULT '',
                is_recurring  INTEGER NOT NULL DEFAULT 0,
                recurring_id  INTEGER REFERENCES recurring_expenses(id) ON DELETE SET NULL,
                created_at    TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_recurring_user_active ON recurring_expenses(user_id, active);
            CREATE INDEX IF NOT EXISTS idx_recurring_active_due  ON recurring_expenses(active, next_due);
            CREATE INDEX IF NOT EXISTS idx_ledger_recurring      ON recurring_created_expenses(recurring_id);
            CREATE INDEX IF NOT EXISTS idx_expenses_user_date    ON expenses(user_id, date);
            CREATE UNIQUE INDEX IF NOT EXISTS idx_expenses_recurring_cycle
                ON expenses(recurring_id, date) WHERE recurring_id IS NOT NULL;

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        for cat in DEFAULT_CATEGORIES:
            conn.execute(
                """INSERT OR IGNORE INTO categories(name, color_hex, icon, is_system)
                   VALUES (?, ?, ?, ?)""",
                (cat["name"], cat["color_hex"], cat["icon"], cat["is_system"]),
            )

        conn.execute(
            "INSERT OR IGNORE INTO users(name) VALUES (?)",
            (DEFAULT_USER_NAME,),
        )

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (and initializes) the DB in db_folder or CWD."""
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            db_path = os.path.join(db_folder, DB_FILE)
        else:
            db_path = DB_FILE
        logger.info("Opening database %s", db_path)
        db = DatabaseManager(db_path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
