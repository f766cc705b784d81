"""
School abbreviation derivation.

Registration codes embed a short code built from the school's name, e.g.
"Great Pearl Academy" -> "GPA". Names are free text, so each word is folded
to ASCII and stripped of everything but letters before its initial is taken:

    "St. Mary Secondary"       -> "SMS"
    "École Sainte-Thérèse"     -> "ES"
    "Kampala 2nd Boys' School" -> "KNBS"

Words with no letters at all (e.g. "2024", "&") contribute nothing.
"""

import unicodedata

DEFAULT_ABBREVIATION = "SCH"


def _letters(word: str) -> str:
    folded = unicodedata.normalize("NFKD", word).encode("ascii", "ignore").decode("ascii")
    return "".join(ch for ch in folded if ch.isalpha())


def derive_abbreviation(name: str) -> str:
    """Uppercased initials of each word, or DEFAULT_ABBREVIATION if none."""
    initials = []
    for word in name.split():
        letters = _letters(word)
        if letters:
            initials.append(letters[0].upper())
    return "".join(initials) or DEFAULT_ABBREVIATION
