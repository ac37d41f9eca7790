"""
SQLite persistence for enrolled embeddings and attendance records.
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, db_path="data/liveguard.db"):
        self.db_path = str(db_path)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.init_database()

    def get_connection(self):
        """Open a connection with name-based row access."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_database(self):
        """Create tables if they do not exist yet."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            # One row per enrolled embedding; a label may own several
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS gallery_embeddings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    label VARCHAR(100) NOT NULL,
                    embedding BLOB NOT NULL,
                    dimension INTEGER NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_gallery_label
                ON gallery_embeddings(label)
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS attendance (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    student_name VARCHAR(100),
                    outcome VARCHAR(20) NOT NULL,
                    distance REAL,
                    blinks INTEGER,
                    head_movement BOOLEAN,
                    reason VARCHAR(40),
                    created_at TIMESTAMP NOT NULL
                )
            ''')
            conn.commit()
        logger.debug("Database ready at %s", self.db_path)

    # ------------------------------------------------------------------
    # Gallery
    def add_embedding(self, label, embedding):
        vector = np.asarray(embedding, dtype=np.float32).reshape(-1)
        with self.get_connection() as conn:
            cursor = conn.execute(
                'INSERT INTO gallery_embeddings (label, embedding, dimension) VALUES (?, ?, ?)',
                (label, vector.tobytes(), int(vector.size)),
            )
            conn.commit()
            return cursor.lastrowid

    def load_embeddings(self):
        """Return [(label, vector)] in enrollment order."""
        with self.get_connection() as conn:
            rows = conn.execute(
                'SELECT label, embedding, dimension FROM gallery_embeddings ORDER BY id'
            ).fetchall()
        result = []
        for row in rows:
            vector = np.frombuffer(row['embedding'], dtype=np.float32)
            if vector.size != row['dimension']:
                logger.error("Corrupt embedding for %s (size %d, expected %d)",
                             row['label'], vector.size, row['dimension'])
                continue
            result.append((row['label'], vector.copy()))
        return result

    def delete_label(self, label):
        with self.get_connection() as conn:
            cursor = conn.execute('DELETE FROM gallery_embeddings WHERE label = ?', (label,))
            conn.commit()
            return cursor.rowcount

    # ------------------------------------------------------------------
    # Attendance
    def add_attendance(self, outcome, student_name=None, distance=None, blinks=None,
                       head_movement=None, reason=None, created_at=None):
        created_at = created_at or datetime.now()
        with self.get_connection() as conn:
            cursor = conn.execute(
                '''
                INSERT INTO attendance
                    (student_name, outcome, distance, blinks, head_movement, reason, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ''',
                (student_name, outcome, distance, blinks, head_movement, reason,
                 created_at.isoformat(sep=' ')),
            )
            conn.commit()
            return cursor.lastrowid

    def get_attendance(self, outcome=None, limit=None):
        """Attendance rows, newest first."""
        query = 'SELECT * FROM attendance'
        params = []
        if outcome:
            query += ' WHERE outcome = ?'
            params.append(outcome)
        query += ' ORDER BY created_at DESC, id DESC'
        if limit:
            query += ' LIMIT ?'
            params.append(int(limit))
        with self.get_connection() as conn:
            return [dict(row) for row in conn.execute(query, params).fetchall()]
