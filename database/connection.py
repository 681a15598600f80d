# =============================================================================
# database/connection.py
# =============================================================================
# PURPOSE:
#   Handles database connections. This is the ONLY file that knows how to
#   connect to the database. All other code uses get_db_connection().
#
# SQLITE BASICS:
#   - SQLite is a file-based database (no server needed)
#   - The .db file is created the first time we connect
#   - One writer at a time; each call here opens a fresh connection
# =============================================================================

import sqlite3

import config


def get_db_connection(db_path=None):
    """
    Create and return a connection to the SQLite database.

    PARAMETERS:
        db_path (str): Optional path; defaults to config.DB_PATH

    USAGE:
        conn = get_db_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM shipments")
            rows = cursor.fetchall()
        finally:
            conn.close()

    NOTES:
        - config.DB_PATH is read on every call, so tests can point the app
          at a temporary file after import
        - Foreign keys are OFF by default in SQLite, we turn them ON
    """
    conn = sqlite3.connect(db_path or config.DB_PATH)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn
