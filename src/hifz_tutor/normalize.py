"""Normalise verse and translation data from loosely-shaped sources."""
import re

CONTAINER_KEYS = ("ayahs", "ayat", "verses", "data", "items")
TEXT_KEYS = ("text", "content", "value", "translation", "transliteration",
             "en", "en_pickthall", "line", "t", "v")

_NUMERIC_KEY = re.compile(r"^\s*\d+\s*$")


def to_text(value) -> str:
    """Extract a string from any value.

    Strings pass through, lists are joined with spaces, dicts yield their
    first text-like field. Anything else becomes "".
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return " ".join(p for p in (to_text(v) for v in value) if p)
    if isinstance(value, dict):
        for key in TEXT_KEYS:
            if key in value:
                text = to_text(value[key])
                if text:
                    return text
        for v in value.values():
            text = to_text(v)
            if text:
                return text
    return ""


def _unwrap(raw):
    if isinstance(raw, dict):
        for key in CONTAINER_KEYS:
            if key in raw:
                return _unwrap(raw[key])
    # [ {"ayahs": {...}} ]
    if isinstance(raw, list) and len(raw) == 1 and isinstance(raw[0], dict) \
            and any(k in raw[0] for k in CONTAINER_KEYS):
        return _unwrap(raw[0])
    return raw


def normalize_to_ordered_strings(raw) -> list[str]:
    """Turn raw verse data into a list of strings in verse order.

    Handles a list of verses, a dict keyed by verse number (optionally inside
    an ``ayahs``/``verses``/... container) and newline-separated text. Any
    other shape gives an empty list.
    """
    data = _unwrap(raw)
    if isinstance(data, str):
        return [line.strip() for line in data.splitlines() if line.strip()]
    if isinstance(data, (list, tuple)):
        return [to_text(v) for v in data]
    if isinstance(data, dict):
        keys = sorted((k for k in data if isinstance(k, (str, int)) and _NUMERIC_KEY.match(str(k))),
                      key=lambda k: int(k))
        return [to_text(data[k]) for k in keys]
    return []
