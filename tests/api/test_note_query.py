"""Unit tests for note filtering, ordering and statistics."""

from datetime import UTC, date, datetime, timedelta

from api.models.notes import Note
from api.services import note_query

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def make_note(note_id: str, **fields) -> Note:
    data = {
        "id": note_id,
        "owner_id": "owner-1",
        "content": f"content of {note_id}",
        "created_at": NOW - timedelta(days=1),
        "updated_at": NOW - timedelta(hours=1),
    }
    data.update(fields)
    return Note(**data)


def ids(notes: list[Note]) -> list[str]:
    return [note.id for note in notes]


class TestActiveAndTrash:
    """Partition of a snapshot into active and trashed notes."""

    def test_partition_is_complete_and_disjoint(self):
        notes = [
            make_note("a"),
            make_note("b", deleted_at=NOW),
            make_note("c", pinned=True),
            make_note("d", deleted_at=NOW - timedelta(days=2)),
        ]

        active = set(ids(note_query.active_notes(notes)))
        trashed = set(ids(note_query.trashed_notes(notes)))

        assert active | trashed == {"a", "b", "c", "d"}
        assert active & trashed == set()

    def test_pinned_note_precedes_newer_unpinned_note(self):
        pinned_old = make_note("a", pinned=True, updated_at=NOW - timedelta(days=365))
        unpinned_new = make_note("b", updated_at=NOW - timedelta(minutes=1))

        assert ids(note_query.active_notes([unpinned_new, pinned_old])) == ["a", "b"]
        assert ids(note_query.active_notes([pinned_old, unpinned_new])) == ["a", "b"]

    def test_recency_orders_within_pin_groups(self):
        notes = [
            make_note("old", updated_at=NOW - timedelta(days=3)),
            make_note("pinned-old", pinned=True, updated_at=NOW - timedelta(days=2)),
            make_note("new", updated_at=NOW),
            make_note("pinned-new", pinned=True, updated_at=NOW - timedelta(hours=1)),
        ]

        assert ids(note_query.active_notes(notes)) == ["pinned-new", "pinned-old", "new", "old"]

    def test_equal_keys_keep_input_order(self):
        notes = [make_note(name, updated_at=NOW) for name in ("x", "y", "z")]

        first = note_query.active_notes(notes)
        second = note_query.active_notes(first)

        assert ids(first) == ["x", "y", "z"]
        assert ids(second) == ids(first)

    def test_trash_sorted_by_deletion_time_descending(self):
        notes = [
            make_note("first", deleted_at=NOW - timedelta(days=2)),
            make_note("last", deleted_at=NOW),
            make_note("middle", deleted_at=NOW - timedelta(days=1)),
            make_note("alive"),
        ]

        assert ids(note_query.trashed_notes(notes)) == ["last", "middle", "first"]


class TestSearchAndFilters:
    """Search term and filter behaviour."""

    def test_search_is_case_insensitive_on_title_or_content(self):
        notes = [
            make_note("a", title="Groceries", content="milk"),
            make_note("b", title=None, content="Call the PLUMBER"),
            make_note("c", title="Plans", content="nothing here"),
        ]

        assert ids(note_query.search(notes, "GROC")) == ["a"]
        assert ids(note_query.search(notes, "plumber")) == ["b"]
        assert ids(note_query.search(notes, "pla")) == ["c"]

    def test_empty_search_is_identity(self):
        notes = note_query.active_notes([make_note("a"), make_note("b", pinned=True)])

        assert note_query.search(notes, "") == notes
        assert note_query.search(notes, None) == notes

    def test_search_preserves_sorted_order(self):
        notes = [
            make_note("a", content="report draft", updated_at=NOW - timedelta(days=1)),
            make_note("b", content="final report", updated_at=NOW),
            make_note("c", content="report", pinned=True, updated_at=NOW - timedelta(days=9)),
        ]

        result = note_query.search(note_query.active_notes(notes), "report")

        assert ids(result) == ["c", "b", "a"]

    def test_flag_filters(self):
        notes = [
            make_note("fav", is_favorite=True),
            make_note("pin", pinned=True),
            make_note("plain"),
        ]

        assert ids(note_query.filter_by_flag(notes, "favorites")) == ["fav"]
        assert ids(note_query.filter_by_flag(notes, "pinned")) == ["pin"]
        assert note_query.filter_by_flag(notes, "all") == notes

    def test_tag_filter_is_exact(self):
        notes = [make_note("a", tags=["clase"]), make_note("b", tags=["clases"])]

        assert ids(note_query.filter_by_tag(notes, "clase")) == ["a"]
        assert ids(note_query.filter_by_tag(notes, "Clase")) == []
        assert note_query.filter_by_tag(notes, None) == notes

    def test_priority_filter(self):
        notes = [make_note("a", priority="alta"), make_note("b"), make_note("c", priority="baja")]

        assert ids(note_query.filter_by_priority(notes, "alta")) == ["a"]
        assert ids(note_query.filter_by_priority(notes, "media")) == ["b"]
        assert note_query.filter_by_priority(notes, "all") == notes

    def test_query_notes_composes_filters_then_sort_then_search(self):
        notes = [
            make_note("trashed", tags=["work"], is_favorite=True, deleted_at=NOW),
            make_note(
                "match-old", tags=["work"], is_favorite=True, updated_at=NOW - timedelta(days=2)
            ),
            make_note("match-new", tags=["work"], is_favorite=True, updated_at=NOW),
            make_note("wrong-tag", tags=["home"], is_favorite=True),
            make_note("not-fav", tags=["work"]),
            make_note("low", tags=["work"], is_favorite=True, priority="baja"),
        ]

        result = note_query.query_notes(
            notes, search_term="content", flag="favorites", tag="work", priority="media"
        )

        assert ids(result) == ["match-new", "match-old"]


class TestStats:
    """Dashboard counters."""

    def test_counts(self):
        active = [
            make_note("done", completed=True),
            make_note("soon", due_date=(NOW + timedelta(days=2)).date()),
            make_note("later", due_date=(NOW + timedelta(days=10)).date()),
            make_note("done-soon", completed=True, due_date=(NOW + timedelta(days=1)).date()),
        ]
        trashed = [make_note("gone", deleted_at=NOW)]

        stats = note_query.compute_stats(active, trashed, NOW)

        assert stats.total == 4
        assert stats.completed == 2
        assert stats.pending == 2
        assert stats.due_soon == 1
        assert stats.trashed == 1
        assert stats.total == stats.completed + stats.pending
        assert stats.due_soon <= stats.pending

    def test_overdue_note_is_not_due_soon(self):
        soon = make_note("soon", due_date=(NOW + timedelta(days=2)).date())
        overdue = make_note("overdue", due_date=(NOW - timedelta(days=1)).date())

        stats = note_query.compute_stats([soon, overdue], [], NOW)

        assert stats.due_soon == 1
        assert note_query.is_overdue(overdue, NOW)
        assert not note_query.is_due_soon(overdue, NOW)
        assert not note_query.is_overdue(soon, NOW)

    def test_due_soon_window_is_inclusive_of_three_days(self):
        now = datetime(2026, 10, 19, 0, 0, tzinfo=UTC)
        edge = make_note("edge", due_date=date(2026, 10, 22))
        beyond = make_note("beyond", due_date=date(2026, 10, 23))
        today = make_note("today", due_date=date(2026, 10, 19))

        assert note_query.is_due_soon(edge, now)
        assert note_query.is_due_soon(today, now)
        assert not note_query.is_due_soon(beyond, now)

    def test_due_today_after_midnight_counts_as_overdue(self):
        # Due dates are read as midnight UTC, so by noon they have passed
        note = make_note("today", due_date=NOW.date())

        assert note_query.is_overdue(note, NOW)
        assert not note_query.is_due_soon(note, NOW)

    def test_no_notes(self):
        stats = note_query.compute_stats([], [], NOW)

        assert stats.model_dump() == {
            "total": 0,
            "completed": 0,
            "pending": 0,
            "due_soon": 0,
            "trashed": 0,
        }


class TestDashboardHelpers:
    """Tags, calendar lookup and weekly activity."""

    def test_collect_tags_first_seen_order(self):
        notes = [make_note("a", tags=["work", "urgent"]), make_note("b", tags=["home", "work"])]

        assert note_query.collect_tags(notes) == ["work", "urgent", "home"]

    def test_notes_for_date_matches_start_or_due(self):
        day = date(2026, 10, 25)
        notes = [
            make_note("starts", start_date=day),
            make_note("due", due_date=day),
            make_note("other", due_date=date(2026, 10, 26)),
            make_note("undated"),
        ]

        assert ids(note_query.notes_for_date(notes, day)) == ["starts", "due"]

    def test_weekly_activity_buckets(self):
        today = NOW.date()
        notes = [
            make_note("today", created_at=NOW),
            make_note("today-done", created_at=NOW - timedelta(hours=2), completed=True),
            make_note("six-days", created_at=NOW - timedelta(days=6)),
            make_note("too-old", created_at=NOW - timedelta(days=7)),
        ]

        activity = note_query.weekly_activity(notes, today)

        assert [bucket.day for bucket in activity] == [
            today - timedelta(days=offset) for offset in range(6, -1, -1)
        ]
        assert (activity[-1].total, activity[-1].pending, activity[-1].completed) == (2, 1, 1)
        assert activity[0].total == 1
        assert sum(bucket.total for bucket in activity) == 3
