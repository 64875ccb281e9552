"""Import a document's verses from various file formats."""
import json
import re
from pathlib import Path

from hifz_tutor.db import get_connection
from hifz_tutor.errors import RangeEmpty
from hifz_tutor.models import Document
from hifz_tutor.normalize import normalize_to_ordered_strings
from hifz_tutor.seed import save_document


def _lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def read_raw(file_path: str):
    """Raw verse data from a file: parsed JSON/YAML, or one verse per line/paragraph."""
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md"):
        return _lines(path.read_text(encoding="utf-8"))
    elif suffix == ".json":
        return json.loads(path.read_text(encoding="utf-8"))
    elif suffix in (".yaml", ".yml"):
        import yaml
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return _lines("\n".join(page.extract_text() or "" for page in reader.pages))
    elif suffix == ".docx":
        from docx import Document as DocxDocument
        doc = DocxDocument(file_path)
        return [p.text.strip() for p in doc.paragraphs if p.text.strip()]
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        html = path.read_text(encoding="utf-8")
        return _lines(BeautifulSoup(html, "html.parser").get_text("\n"))
    else:
        # Try reading as plain text
        return _lines(path.read_text(encoding="utf-8"))


def read_verses(file_path: str) -> list[str]:
    return [v for v in normalize_to_ordered_strings(read_raw(file_path)) if v.strip()]


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def _next_number(db_path: str) -> int:
    conn = get_connection(db_path)
    row = conn.execute("SELECT MAX(number) FROM documents").fetchone()
    conn.close()
    return (row[0] or 0) + 1


def import_document(db_path: str, file_path: str, name: str | None = None,
                    number: int | None = None) -> dict:
    """Import a file as a document. Metadata in a JSON/YAML mapping wins over the filename."""
    raw = read_raw(file_path)
    meta = raw if isinstance(raw, dict) else {}
    verses = [v for v in normalize_to_ordered_strings(raw) if v.strip()]
    stem = Path(file_path).stem
    name = name or meta.get("name") or stem.replace("-", " ").replace("_", " ").title()
    slug = meta.get("slug") or slugify(stem)
    if not verses:
        raise RangeEmpty(slug)
    if number is None:
        number = meta.get("number") if isinstance(meta.get("number"), int) else _next_number(db_path)
    save_document(db_path, Document(slug=slug, name=name, number=number, verses=tuple(verses)),
                  source="imported")
    return {"slug": slug, "name": name, "number": number, "verses": len(verses)}
