"""Department abbreviation lookup.

Maps course prefixes and common abbreviations ("cse", "Psych", "MKTG") to the
department names the directory uses, so they can be compared against a
record's department label.
"""

import re
from typing import Optional


DEPARTMENT_MAP = {
    # Computer Science & Engineering
    "cs": "Computer Science",
    "cse": "Computer Science",
    "css": "Computer Science",
    "cis": "Computer Science",
    "compsci": "Computer Science",
    "eecs": "Electrical Engineering",
    "ee": "Electrical Engineering",
    "ce": "Computer Engineering",
    "swe": "Software Engineering",
    # Sciences
    "bio": "Biology",
    "biol": "Biology",
    "chem": "Chemistry",
    "phys": "Physics",
    "math": "Mathematics",
    "stat": "Statistics",
    "psych": "Psychology",
    "psy": "Psychology",
    "soc": "Sociology",
    "anthro": "Anthropology",
    # Humanities
    "eng": "English",
    "engl": "English",
    "hist": "History",
    "phil": "Philosophy",
    "rel": "Religion",
    "art": "Art",
    "mus": "Music",
    # Business
    "bus": "Business",
    "mkt": "Marketing",
    "mktg": "Marketing",
    "acc": "Accounting",
    "acct": "Accounting",
    "fin": "Finance",
    "mgmt": "Management",
    "econ": "Economics",
    # Other
    "comm": "Communications",
    "poly": "Political Science",
    "pol": "Political Science",
    "gov": "Political Science",
    "nurs": "Nursing",
    "edu": "Education",
}

_NON_ALPHA = re.compile(r"[^a-z]")


def normalize_department(value: Optional[str]) -> Optional[str]:
    """Return the canonical department name for an abbreviation.

    Unmapped input is returned unchanged; empty input returns None.

    Example:
        >>> normalize_department("CSE")
        'Computer Science'
        >>> normalize_department("Computer Science & Engineering")
        'Computer Science & Engineering'
    """
    if not value:
        return None
    key = _NON_ALPHA.sub("", value.lower())
    return DEPARTMENT_MAP.get(key, value)
