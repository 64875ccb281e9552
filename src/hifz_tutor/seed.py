"""Seed the database with the built-in document catalog."""
import json
from pathlib import Path

from hifz_tutor.db import get_connection
from hifz_tutor.errors import DocumentNotFound
from hifz_tutor.models import Document

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database already holds the built-in documents."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM documents WHERE source = 'seeded'").fetchone()[0]
    conn.close()
    return count > 0


def save_document(db_path: str, document: Document, source: str = "seeded") -> None:
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO documents (slug, name, number, verses, source) VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(slug) DO UPDATE SET name=excluded.name, number=excluded.number,
            verses=excluded.verses, source=excluded.source""",
        (document.slug, document.name, document.number,
         json.dumps(list(document.verses), ensure_ascii=False), source),
    )
    conn.commit()
    conn.close()


def seed_documents(db_path: str) -> None:
    """Insert the documents from documents.json, leaving existing rows alone."""
    data = json.loads((CONTENT_DIR / "documents.json").read_text(encoding="utf-8"))
    conn = get_connection(db_path)
    for doc in data["documents"]:
        conn.execute(
            "INSERT OR IGNORE INTO documents (slug, name, number, verses, source) VALUES (?, ?, ?, ?, 'seeded')",
            (doc["slug"], doc["name"], doc["number"], json.dumps(doc["verses"], ensure_ascii=False)),
        )
    conn.commit()
    conn.close()


def seed_all(db_path: str) -> None:
    if not is_seeded(db_path):
        seed_documents(db_path)


def _row_to_document(row) -> Document:
    return Document(slug=row["slug"], name=row["name"], number=row["number"],
                    verses=tuple(json.loads(row["verses"])))


def list_documents(db_path: str) -> list[Document]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM documents ORDER BY number, slug").fetchall()
    conn.close()
    return [_row_to_document(r) for r in rows]


def get_document(db_path: str, slug: str) -> Document:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM documents WHERE slug = ?", (slug,)).fetchone()
    conn.close()
    if row is None:
        raise DocumentNotFound(slug)
    return _row_to_document(row)
