"""SQLite storage for members and relationships."""

from datetime import date
from pathlib import Path
import sqlite3

from famtree.models import Member, Relationship


def create_database(db_path: Path | str) -> sqlite3.Connection:
    """Create (or open) a SQLite database with member and relationship tables."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS member (
            id TEXT PRIMARY KEY,
            first_name TEXT NOT NULL DEFAULT '',
            last_name TEXT NOT NULL DEFAULT '',
            birth_date TEXT,
            gender TEXT,
            picture_url TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS relationship (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            member1_id TEXT NOT NULL,
            member2_id TEXT NOT NULL,
            relationship_type TEXT NOT NULL
        )
    """)

    conn.commit()
    return conn


def store_data(conn: sqlite3.Connection, members: list[Member], relationships: list[Relationship]):
    """Insert members and relationships into the database."""
    cursor = conn.cursor()

    cursor.executemany(
        """
        INSERT OR REPLACE INTO member
        (id, first_name, last_name, birth_date, gender, picture_url)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        [
            (
                m.id,
                m.first_name,
                m.last_name,
                m.birth_date.isoformat() if m.birth_date else None,
                m.gender,
                m.picture_url,
            )
            for m in members
        ],
    )

    # No foreign keys: dangling references are reported by the layout engine
    cursor.executemany(
        """
        INSERT INTO relationship (member1_id, member2_id, relationship_type)
        VALUES (?, ?, ?)
        """,
        [(r.member1_id, r.member2_id, r.relationship_type) for r in relationships],
    )

    conn.commit()


def load_data(conn: sqlite3.Connection) -> tuple[list[Member], list[Relationship]]:
    """Read members and relationships back in insertion order."""
    cursor = conn.cursor()

    cursor.execute(
        "SELECT id, first_name, last_name, birth_date, gender, picture_url FROM member ORDER BY rowid"
    )
    members = [
        Member(
            id=row[0],
            first_name=row[1] or "",
            last_name=row[2] or "",
            birth_date=date.fromisoformat(row[3]) if row[3] else None,
            gender=row[4],
            picture_url=row[5],
        )
        for row in cursor.fetchall()
    ]

    cursor.execute("SELECT member1_id, member2_id, relationship_type FROM relationship ORDER BY id")
    relationships = [
        Relationship(member1_id=row[0], member2_id=row[1], relationship_type=row[2])
        for row in cursor.fetchall()
    ]

    return members, relationships
