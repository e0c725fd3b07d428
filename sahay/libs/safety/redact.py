"""Pattern-based PII redaction for user text and log lines."""

from __future__ import annotations

import re

RE_EMAIL = re.compile(r"([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")
# At least ten digits with single space or hyphen separators; ISO dates never match.
RE_PHONE = re.compile(r"(?<![\w+])(?!\d{4}-\d{2}-\d{2}\b)(\+?\d(?:[\s-]?\d){9,})\b")
RE_INTRODUCED_NAME = re.compile(
    r"\b((?i:my name is|i am|i'm|call me)\s+)([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)"
)
RE_FULL_NAME = re.compile(r"\b([A-Z][a-z]+)\s+([A-Z][a-z]+)\b")

# Capitalised words that pair up in student writing without naming a person.
NOT_NAME_WORDS = frozenset(
    {
        "Science", "Sciences", "Engineering", "Studies", "University", "College",
        "School", "Institute", "Department", "Mathematics", "Maths", "Physics",
        "Chemistry", "Biology", "Economics", "History", "Literature", "English",
        "Hindi", "Bengali", "Computer", "Political", "Data", "Board", "Exam",
        "Exams", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday",
        "Saturday", "Sunday", "January", "February", "March", "April", "May",
        "June", "July", "August", "September", "October", "November", "December",
        "God", "India", "New", "Delhi", "Mumbai", "Kolkata",
    }
)


def _mask_pii(text: str) -> str:
    """Mask emails and phone numbers; used for request logging."""

    if not text:
        return text
    safe = RE_EMAIL.sub(r"***@***", text)
    safe = RE_PHONE.sub("***", safe)
    return safe


def anonymize_text(text: str) -> str:
    """Replace emails, phone numbers and person names with info-type tokens."""

    if not text:
        return text
    redacted = RE_EMAIL.sub("[EMAIL_ADDRESS]", text)
    redacted = RE_PHONE.sub("[PHONE_NUMBER]", redacted)
    redacted = RE_INTRODUCED_NAME.sub(lambda m: f"{m.group(1)}[PERSON_NAME]", redacted)
    redacted = _redact_full_names(redacted)
    return redacted


def _redact_full_names(text: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        if match.group(1) in NOT_NAME_WORDS or match.group(2) in NOT_NAME_WORDS:
            return match.group(0)
        # A capitalised pair right after sentence punctuation is usually "Today Priya", not a name.
        prefix = text[: match.start()].rstrip()
        if not prefix or prefix[-1] in ".!?\n":
            return match.group(0)
        return "[PERSON_NAME]"

    return RE_FULL_NAME.sub(_replace, text)


__all__ = ["NOT_NAME_WORDS", "RE_EMAIL", "RE_PHONE", "_mask_pii", "anonymize_text"]
