"""Rough Arabic to Latin transliteration, used when no transliteration file exists."""
import re

HARAKAT = re.compile("[\u064B-\u0652\u0670\u0653-\u065F]")

LETTERS = {
    "ا": "a", "أ": "a", "إ": "i", "آ": "aa", "ء": "'", "ؤ": "u", "ئ": "i", "ى": "a",
    "ب": "b", "ت": "t", "ث": "th", "ج": "j", "ح": "h", "خ": "kh", "د": "d", "ذ": "dh",
    "ر": "r", "ز": "z", "س": "s", "ش": "sh", "ص": "s", "ض": "d", "ط": "t", "ظ": "z",
    "ع": "‘", "غ": "gh", "ف": "f", "ق": "q", "ك": "k", "ل": "l", "م": "m", "ن": "n",
    "ه": "h", "و": "w", "ي": "y", "ة": "a", "ٱ": "a",
    "ﻻ": "la", "ﻷ": "la", "ﻹ": "li",
}


def transliterate(arabic: str) -> str:
    clean = HARAKAT.sub("", arabic)
    out = "".join(LETTERS.get(ch, ch) for ch in clean)
    return re.sub(r"\s+", " ", out).strip()
