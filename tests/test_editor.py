import pytest

from eventcheck import errors
from eventcheck.editor import Draft, RecordEditor


class FailingStore:
    def update_attendee(self, id, patch):
        raise errors.PersistenceError("disk full")


class RecordingStore:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def update_attendee(self, id, patch):
        self.calls.append((id, patch))
        return self.result


class TestDraft:
    """Working copies of attendee records"""

    def test_draft_copies_record(self, by_id):
        ava = by_id["REG-1001"]
        draft = Draft.from_attendee(ava)
        assert draft.name == ava.name
        assert draft.payment_status == "paid"
        draft.answers["field_sessions"].append("Dinner")
        assert ava.answers["field_sessions"] == ["Keynote", "Auction"]

    def test_unchanged_draft_has_empty_patch(self, by_id):
        ava = by_id["REG-1001"]
        assert Draft.from_attendee(ava).to_patch(ava) == {}

    def test_patch_contains_only_changes(self, by_id):
        liam = by_id["REG-1002"]
        draft = Draft.from_attendee(liam)
        draft.name = "Liam C."
        draft.set_checked_in(True, now="2025-04-12T19:00:00.000Z")
        assert draft.to_patch(liam) == {
            "name": "Liam C.",
            "checkedInAt": "2025-04-12T19:00:00.000Z",
        }

    def test_set_checked_in_off_clears_timestamp(self, by_id):
        draft = Draft.from_attendee(by_id["REG-1001"])
        assert draft.checked_in
        draft.set_checked_in(False)
        assert draft.checked_in_at is None

    def test_set_checked_in_defaults_to_now(self, by_id):
        draft = Draft.from_attendee(by_id["REG-1002"])
        draft.set_checked_in(True)
        assert draft.checked_in_at.endswith("Z")

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"name": "  "}, "name is required"),
            ({"email": "not-an-address"}, "not a valid address"),
            ({"payment_status": "refunded"}, "unknown payment status"),
            ({"donation_type": "chair"}, "unknown donation type"),
            ({"donated_seats": -1}, "cannot be negative"),
            ({"donated_tables": 1, "donation_type": "seat"}, "require donation type"),
            ({"checked_in_at": "2025-02-01T00:00:00Z"}, "earlier than registration"),
            ({"checked_in_at": "tonight"}, "is not a timestamp"),
        ],
    )
    def test_validation(self, by_id, changes, message):
        draft = Draft.from_attendee(by_id["REG-1002"])
        for attr, value in changes.items():
            setattr(draft, attr, value)
        with pytest.raises(errors.ValidationError, match=message):
            draft.validate()


class TestRecordEditor:
    """Stage, discard and commit"""

    def test_stage_and_discard(self, by_id):
        editor = RecordEditor()
        editor.stage_edit(by_id["REG-1001"])
        assert editor.is_editing
        editor.discard()
        assert not editor.is_editing
        assert editor.original is None

    def test_staging_replaces_previous_draft(self, by_id):
        editor = RecordEditor()
        editor.stage_edit(by_id["REG-1001"]).name = "Changed"
        draft = editor.stage_edit(by_id["REG-1002"])
        assert editor.original.id == "REG-1002"
        assert draft.name == "Liam Carter"

    def test_commit_without_changes_skips_store(self, by_id):
        store = RecordingStore(result=None)
        editor = RecordEditor()
        editor.stage_edit(by_id["REG-1001"])
        assert editor.commit(store) is by_id["REG-1001"]
        assert store.calls == []
        assert not editor.is_editing

    def test_commit_sends_patch(self, by_id):
        updated = by_id["REG-1002"].model_copy(update={"name": "Liam C."})
        store = RecordingStore(result=updated)
        editor = RecordEditor()
        editor.stage_edit(by_id["REG-1002"]).name = "Liam C."
        assert editor.commit(store) is updated
        assert store.calls == [("REG-1002", {"name": "Liam C."})]
        assert not editor.is_editing

    def test_failed_commit_keeps_draft(self, by_id):
        editor = RecordEditor()
        editor.stage_edit(by_id["REG-1002"]).name = "Liam C."
        with pytest.raises(errors.PersistenceError):
            editor.commit(FailingStore())
        assert editor.is_editing
        assert editor.draft.name == "Liam C."

    def test_invalid_draft_not_sent(self, by_id):
        store = RecordingStore(result=None)
        editor = RecordEditor()
        editor.stage_edit(by_id["REG-1002"]).email = "broken"
        with pytest.raises(errors.ValidationError):
            editor.commit(store)
        assert store.calls == []
        assert editor.is_editing

    def test_commit_without_draft(self):
        with pytest.raises(ValueError):
            RecordEditor().commit(RecordingStore(result=None))
