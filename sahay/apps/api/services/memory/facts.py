"""Regex scan for self-descriptions ("my name is", "I live in", "I love")."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Mapping

NAME_STOPWORDS = {
    "also", "interested", "from", "studying",
    "a", "an", "the", "so", "very", "really", "just", "not", "feeling", "going",
    "trying", "learning", "in", "at", "here", "okay", "fine", "good", "tired",
    "sad", "happy", "anxious", "stressed", "worried", "scared", "lonely",
}

_END = r"(?=[.,!?]|\s+and\s+|\s+but\s+|$)"

RE_NAME = re.compile(r"(?:my name is|(?:^|\s)i'm|(?:^|\s)i am|call me)\s+([a-z]+)(?=\s|$|[,.!?])")
RE_FIELD = re.compile(rf"(?:i study|studying|major in|learning)\s+([a-z\s]+?){_END}")
RE_INTERESTS = (
    re.compile(r"i love\s+([^.!?]+?)(?=[.!?]|$)"),
    re.compile(r"i like\s+([^.!?]+?)(?=[.!?]|$)"),
    re.compile(r"(?:interested in|passionate about)\s+([^.!?]+?)(?=[.!?]|$)"),
)
RE_LOCATION = re.compile(rf"(?:i'm from|i live in|from)\s+([a-z\s]+?){_END}")
RE_SPLIT_INTERESTS = re.compile(r"\s+and\s+|,\s*")


@dataclass(frozen=True, slots=True)
class Fact:
    type: str
    value: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def extract_facts(text: str) -> list[Fact]:
    """Return every fact phrase found in ``text``; values are lower-cased."""

    lowered = (text or "").lower()
    if not lowered.strip():
        return []

    facts: list[Fact] = []
    for name in RE_NAME.finditer(lowered):
        if name.group(1) not in NAME_STOPWORDS:
            facts.append(Fact("name", name.group(1), 0.9))
            break

    field = RE_FIELD.search(lowered)
    if field and field.group(1).strip():
        facts.append(Fact("field", field.group(1).strip(), 0.8))

    for pattern in RE_INTERESTS:
        match = pattern.search(lowered)
        if not match:
            continue
        for interest in RE_SPLIT_INTERESTS.split(match.group(1)):
            interest = interest.strip()
            if len(interest) > 2:
                facts.append(Fact("interest", interest, 0.7))

    location = RE_LOCATION.search(lowered)
    if location and location.group(1).strip():
        facts.append(Fact("location", location.group(1).strip(), 0.8))

    return facts


def merge_profile(profile: Mapping[str, Any] | None, facts: Iterable[Fact]) -> dict[str, Any]:
    """Fold facts into a profile dict. Scalars are last-write-wins; interests are de-duplicated."""

    merged: dict[str, Any] = {
        "name": None,
        "field": None,
        "location": None,
        "interests": [],
        **dict(profile or {}),
    }
    interests = list(merged.get("interests") or [])
    for fact in facts:
        if fact.type == "interest":
            if fact.value not in interests:
                interests.append(fact.value)
        elif fact.type in {"name", "field", "location"}:
            merged[fact.type] = fact.value
    merged["interests"] = interests
    return merged


def describe_fact(fact: Fact) -> str:
    labels = {"name": "Name", "field": "Field of Study", "location": "Location", "interest": "Interest"}
    return f"{labels.get(fact.type, fact.type.title())}: {fact.value}"


__all__ = ["Fact", "describe_fact", "extract_facts", "merge_profile"]
