import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from vocadrill.application.review.scheduler import calculate_next_review, create_review_item
from vocadrill.domain.constants import MAX_INTERVAL_DAYS
from vocadrill.domain.errors import StorageError
from vocadrill.domain.review.models import StudySession
from vocadrill.infrastructure.adapters.storage import JsonFileReviewRepository


@pytest.fixture
def repo(tmp_path):
    return JsonFileReviewRepository(tmp_path / "store")


def _write_items(repo, records):
    repo.items_path.parent.mkdir(parents=True, exist_ok=True)
    repo.items_path.write_text(json.dumps({"version": 1, "items": records}), encoding="utf-8")


@pytest.mark.asyncio
async def test_missing_files_are_empty(repo):
    assert await repo.load_review_items() == []
    assert await repo.get_study_history() == []


@pytest.mark.asyncio
async def test_items_round_trip(repo, now):
    fresh = create_review_item("w1", "perro", "dog")
    reviewed = calculate_next_review(create_review_item("w2", "año", "year"), 5, now)
    lapsed = replace(
        calculate_next_review(reviewed, 0, now + timedelta(days=1, microseconds=123)), id="w3"
    )

    await repo.save_review_items([fresh, reviewed, lapsed])

    assert await repo.load_review_items() == [fresh, reviewed, lapsed]


@pytest.mark.asyncio
async def test_repeated_id_keeps_first_record(repo, now):
    reviewed = calculate_next_review(create_review_item("w1", "año", "year"), 5, now)
    lapsed = calculate_next_review(reviewed, 0, now + timedelta(days=1))

    await repo.save_review_items([reviewed, lapsed])

    assert await repo.load_review_items() == [reviewed]


@pytest.mark.asyncio
async def test_long_streak_item_saves_and_loads(repo, now):
    item = create_review_item("w1", "siempre", "always")
    for _ in range(30):
        item = calculate_next_review(item, 5, now)

    await repo.save_review_items([item])

    assert await repo.load_review_items() == [item]
    record = json.loads(repo.items_path.read_text(encoding="utf-8"))["items"][0]
    assert record["interval_days"] == MAX_INTERVAL_DAYS


@pytest.mark.asyncio
async def test_oversized_stored_interval_is_capped(repo):
    _write_items(
        repo,
        [{"id": "w1", "interval_days": 10**12, "last_reviewed": "2026-03-14T12:00:00Z"}],
    )

    (item,) = await repo.load_review_items()

    assert item.interval_days == MAX_INTERVAL_DAYS
    assert item.next_review is not None
    await repo.save_review_items([item])


@pytest.mark.asyncio
async def test_saved_document_is_readable(repo, now):
    item = calculate_next_review(create_review_item("w1", "perro", "dog"), 4, now)
    await repo.save_review_items([item])

    document = json.loads(repo.items_path.read_text(encoding="utf-8"))

    assert document["version"] == 1
    record = document["items"][0]
    assert record["id"] == "w1"
    assert record["interval_days"] == 1
    assert datetime.fromisoformat(record["next_review"].replace("Z", "+00:00")) == item.next_review


@pytest.mark.asyncio
async def test_save_replaces_previous_snapshot(repo):
    await repo.save_review_items([create_review_item("a", "1", "1"), create_review_item("b", "2", "2")])
    await repo.save_review_items([create_review_item("b", "2", "2")])

    assert [i.id for i in await repo.load_review_items()] == ["b"]
    assert not list(repo.data_dir.glob("*.tmp"))


@pytest.mark.asyncio
async def test_malformed_fields_are_defaulted(repo):
    _write_items(
        repo,
        [
            {"id": "w1", "term": "gato", "definition": "cat"},
            {
                "id": "w2",
                "term": "sol",
                "definition": "sun",
                "ease_factor": "not a number",
                "interval_days": None,
                "repetitions": -4,
                "lapses": "2",
                "last_reviewed": "yesterday-ish",
            },
            {"id": "w3", "ease_factor": 0.4, "interval_days": 3.7},
        ],
    )

    items = await repo.load_review_items()

    assert [i.id for i in items] == ["w1", "w2", "w3"]
    w1, w2, w3 = items
    assert (w1.ease_factor, w1.interval_days, w1.repetitions, w1.lapses) == (2.5, 0, 0, 0)
    assert (w2.ease_factor, w2.interval_days, w2.repetitions, w2.lapses) == (2.5, 0, 0, 2)
    assert w2.last_reviewed is None
    assert w3.ease_factor == 1.3
    assert w3.interval_days == 3
    assert w3.term == ""


@pytest.mark.asyncio
async def test_unidentifiable_records_are_skipped(repo):
    _write_items(
        repo,
        [
            "garbage",
            {"term": "no id"},
            {"id": "", "term": "empty id"},
            {"id": "ok", "term": "fine"},
            {"id": "ok", "term": "duplicate"},
            {"id": 42, "term": "numeric id"},
        ],
    )

    items = await repo.load_review_items()

    assert [(i.id, i.term) for i in items] == [("ok", "fine"), ("42", "numeric id")]


@pytest.mark.asyncio
async def test_naive_timestamps_are_read_as_utc(repo):
    _write_items(repo, [{"id": "w1", "interval_days": 2, "last_reviewed": "2026-03-01T10:00:00"}])

    (item,) = await repo.load_review_items()

    assert item.last_reviewed == datetime(2026, 3, 1, 10, tzinfo=timezone.utc)
    assert item.next_review == datetime(2026, 3, 3, 10, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_bare_list_layout_is_accepted(repo):
    repo.items_path.parent.mkdir(parents=True)
    repo.items_path.write_text(json.dumps([{"id": "w1"}]), encoding="utf-8")

    assert [i.id for i in await repo.load_review_items()] == ["w1"]


@pytest.mark.asyncio
async def test_corrupt_file_is_a_storage_error(repo):
    repo.items_path.parent.mkdir(parents=True)
    repo.items_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError):
        await repo.load_review_items()


@pytest.mark.asyncio
async def test_unexpected_layout_is_a_storage_error(repo):
    repo.items_path.parent.mkdir(parents=True)
    repo.items_path.write_text(json.dumps({"cards": []}), encoding="utf-8")

    with pytest.raises(StorageError):
        await repo.load_review_items()


@pytest.mark.asyncio
async def test_unwritable_location_is_a_storage_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    repo = JsonFileReviewRepository(blocker / "store")

    with pytest.raises(StorageError):
        await repo.save_review_items([create_review_item("a", "b", "c")])


@pytest.mark.asyncio
async def test_sessions_append_and_sort(repo, now):
    later = StudySession(date=now, items_studied=5, correct_answers=4, average_quality=4.2, mode="quiz")
    earlier = StudySession(date=now - timedelta(days=1), items_studied=3, correct_answers=1, average_quality=2.0)

    await repo.add_study_session(later)
    await repo.add_study_session(earlier)

    assert await repo.get_study_history() == [earlier, later]


@pytest.mark.asyncio
async def test_malformed_sessions_are_skipped(repo):
    repo.history_path.parent.mkdir(parents=True)
    repo.history_path.write_text(
        json.dumps(
            {
                "version": 1,
                "sessions": [
                    {"date": "2026-03-01T09:00:00+00:00", "items_studied": "4", "average_quality": 17},
                    {"items_studied": 3},
                    {"date": "not a date"},
                    7,
                ],
            }
        ),
        encoding="utf-8",
    )

    (session,) = await repo.get_study_history()

    assert session.items_studied == 4
    assert session.correct_answers == 0
    assert session.average_quality == 5.0
    assert session.mode == "flashcard"
