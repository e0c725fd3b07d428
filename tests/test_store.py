from datetime import date, datetime, timezone

import pytest
import pytest_asyncio

from sahay.libs.json_utils import extract_json_block, json_safe
from sahay.libs.safety import _mask_pii, anonymize_text
from sahay.libs.store import MemoryStore, StoreError


@pytest_asyncio.fixture
async def seeded():
    store = MemoryStore()
    await store.set("journals", "a", {"userId": "u1", "mood": "calm", "tags": ["sleep"], "createdAt": "2024-01-01"})
    await store.set("journals", "b", {"userId": "u1", "mood": "sad", "tags": [], "createdAt": "2024-01-03"})
    await store.set("journals", "c", {"userId": "u2", "mood": "calm", "createdAt": "2024-01-02"})
    await store.set("journals", "d", {"userId": "u1", "mood": "calm"})
    return store


def _ids(docs):
    return [doc.id for doc in docs]


@pytest.mark.asyncio
async def test_query_operators(seeded):
    assert _ids(await seeded.query("journals", where=[("mood", "in", ["sad"])])) == ["b"]
    assert _ids(await seeded.query("journals", where=[("tags", "array-contains", "sleep")])) == ["a"]
    assert _ids(await seeded.query("journals", where=[("userId", "!=", "u1")])) == ["c"]
    assert _ids(await seeded.query("journals", where=[("createdAt", ">=", "2024-01-02")])) == ["b", "c"]
    with pytest.raises(StoreError):
        await seeded.query("journals", where=[("mood", "like", "c%")])


@pytest.mark.asyncio
async def test_order_by_drops_unordered_docs_and_limits(seeded):
    docs = await seeded.query("journals", where=[("userId", "==", "u1")], order_by="createdAt")
    assert _ids(docs) == ["b", "a"]
    oldest = await seeded.query("journals", order_by="createdAt", descending=False, limit=1)
    assert _ids(oldest) == ["a"]


@pytest.mark.asyncio
async def test_merge_is_deep_and_reads_are_copies():
    store = MemoryStore()
    await store.set("users/u1/memory", "profile", {"metadata": {"total": 1, "first": "x"}, "name": "asha"})
    await store.set("users/u1/memory", "profile", {"metadata": {"total": 2}}, merge=True)

    doc = await store.get("/users/u1/memory/", "profile")
    assert doc.data == {"metadata": {"total": 2, "first": "x"}, "name": "asha"}
    doc.data["name"] = "changed"
    assert (await store.get("users/u1/memory", "profile")).data["name"] == "asha"

    await store.set("users/u1/memory", "profile", {"name": "ravi"})
    assert (await store.get("users/u1/memory", "profile")).data == {"name": "ravi"}


@pytest.mark.asyncio
async def test_add_list_and_delete():
    store = MemoryStore()
    first = await store.add("moods", {"mood": 4})
    second = await store.add("moods", {"mood": 6})
    assert first != second
    assert await store.list_ids("moods") == [first, second]

    await store.delete("moods", first)
    await store.delete("moods", "missing")
    assert await store.list_ids("moods") == [second]
    assert await store.get("moods", first) is None


def test_json_safe_converts_timestamps():
    stamp = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    assert json_safe({"at": stamp, "days": (date(2024, 5, 1),), "n": 1}) == {
        "at": "2024-05-01T09:30:00+00:00",
        "days": ["2024-05-01"],
        "n": 1,
    }


@pytest.mark.parametrize(
    "blob, expected",
    [
        ('```json\n{"a": 1,}\n```', '{"a": 1}'),
        ('Sure! Here it is: ["x", "y",] Hope that helps', '["x", "y"]'),
        ("no structure", "no structure"),
    ],
)
def test_extract_json_block(blob, expected):
    assert extract_json_block(blob) == expected


def test_mask_pii_for_logs():
    assert _mask_pii("/api/x?email=asha@example.com&phone=9876543210") == "/api/x?email=***@***&phone=***"


def test_anonymize_text_keeps_sentence_starts():
    text = "Today Priya met Rahul Sharma. My name is Kavya Rao."
    assert anonymize_text(text) == "Today Priya met [PERSON_NAME]. My name is [PERSON_NAME]."


def test_anonymize_text_leaves_dates_and_subjects():
    text = "On 2024-10-18 I love Computer Science and met Rahul Sharma"
    assert anonymize_text(text) == "On 2024-10-18 I love Computer Science and met [PERSON_NAME]"


def test_short_digit_runs_are_not_phone_numbers():
    assert _mask_pii("/api/health/history?from=2024-10-18&id=1234567") == "/api/health/history?from=2024-10-18&id=1234567"
    assert anonymize_text("call 98765-43210") == "call [PHONE_NUMBER]"
