"""Tests for project file persistence — proves load/save is fail-closed."""

import json
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

from revshare.errors import ProjectFileError
from revshare.models.contributor import Contributor, Tier
from revshare.models.payout import PayoutRecord
from revshare.payout.engine import compute
from revshare.persistence.project_file import (
    dump_project,
    load_project,
    parse_project,
    save_project,
    snapshot_filename,
)
from revshare.roster.store import RosterStore


# A document as written by the browser version of the ledger.
LEGACY_DOCUMENT = {
    "project": {"name": "Star Drift", "description": "Space shooter"},
    "members": [
        {
            "id": "lz1abc",
            "name": "Alice",
            "tier": "main",
            "email": "alice@example.com",
            "payment": "paypal:alice",
            "role": "Programming",
            "joinDate": "2025-06-01T10:15:30.123Z",
        },
        {"id": "lz1abd", "name": "Bob", "tier": "fan", "joinDate": "2025-06-02T08:00:00.000Z"},
    ],
    "payouts": [
        {
            "id": "lz9pay",
            "date": "2025-07-01",
            "revenue": 1000,
            "notes": "June sales",
            "mainCount": 1,
            "assistantCount": 10,
            "thanksCount": 0,
            "mainShare": 300,
            "assistantShare": 70.00000000000001,
            "thanksShare": 23.380000000000003,
            "adjustmentApplied": True,
            "members": [{"id": "lz1abc", "name": "Alice", "tier": "main", "amount": 300}],
            "committedAt": "2025-07-01T12:00:00.000Z",
        }
    ],
}


def _store() -> RosterStore:
    store = RosterStore(project_name="Star Drift", project_description="Space shooter")
    store.add_member(Contributor.create(name="Alice", tier="main", member_id="a"))
    store.add_member(Contributor.create(name="Bob", tier="assistant", member_id="b", role="Art"))
    store.add_member(Contributor.create(name="Cleo", tier="thanks", member_id="c"))
    calc = compute(Decimal("100"), store.list_active_contributors())
    store.append_payout_record(PayoutRecord.from_calculation(
        calc, payout_id="p1", payout_date=date(2026, 1, 31), notes="January",
        committed_at=datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc),
    ))
    return store


class TestParseLegacyDocument:
    def test_members_loaded(self) -> None:
        store = parse_project(LEGACY_DOCUMENT)
        alice = store.get_member("lz1abc")
        assert alice.tier is Tier.MAIN
        assert alice.payment_address == "paypal:alice"
        assert alice.join_date == datetime(2025, 6, 1, 10, 15, 30, 123000, tzinfo=timezone.utc)
        assert store.get_member("lz1abd").tier is Tier.FAN

    def test_payouts_loaded(self) -> None:
        record = parse_project(LEGACY_DOCUMENT).get_payout_record("lz9pay")
        assert record.date == date(2025, 7, 1)
        assert record.revenue == Decimal("1000")
        assert record.adjustment_applied is True
        assert record.members[0].amount == Decimal("300")

    def test_loaded_store_is_clean(self) -> None:
        assert parse_project(LEGACY_DOCUMENT).dirty is False

    def test_payouts_ordered_by_commit_instant_across_offsets(self) -> None:
        doc = json.loads(json.dumps(LEGACY_DOCUMENT))
        base = doc["payouts"][0]
        # 10:00+05:00 is 05:00Z, an hour before 06:00Z.
        doc["payouts"] = [
            dict(base, id="late", committedAt="2026-01-01T06:00:00Z"),
            dict(base, id="early", committedAt="2026-01-01T10:00:00+05:00"),
        ]
        store = parse_project(doc)
        assert [r.payout_id for r in store.list_payout_records()] == ["early", "late"]


class TestRejection:
    @pytest.mark.parametrize("missing", ["project", "members", "payouts"])
    def test_missing_top_level_key(self, missing: str) -> None:
        doc = {k: v for k, v in LEGACY_DOCUMENT.items() if k != missing}
        with pytest.raises(ProjectFileError, match=missing):
            parse_project(doc)

    def test_not_an_object(self) -> None:
        with pytest.raises(ProjectFileError):
            parse_project([1, 2, 3])

    def test_bad_tier(self) -> None:
        doc = json.loads(json.dumps(LEGACY_DOCUMENT))
        doc["members"][0]["tier"] = "gold"
        with pytest.raises(ProjectFileError):
            parse_project(doc)

    def test_bad_amount(self) -> None:
        doc = json.loads(json.dumps(LEGACY_DOCUMENT))
        doc["payouts"][0]["revenue"] = "lots"
        with pytest.raises(ProjectFileError):
            parse_project(doc)

    def test_duplicate_member_ids(self) -> None:
        doc = json.loads(json.dumps(LEGACY_DOCUMENT))
        doc["members"][1]["id"] = "lz1abc"
        with pytest.raises(ProjectFileError, match="Duplicate"):
            parse_project(doc)

    @pytest.mark.parametrize("flag", ["false", "true", 0, 1, None])
    def test_adjustment_flag_must_be_boolean(self, flag) -> None:
        doc = json.loads(json.dumps(LEGACY_DOCUMENT))
        doc["payouts"][0]["adjustmentApplied"] = flag
        with pytest.raises(ProjectFileError, match="true or false"):
            parse_project(doc)

    def test_missing_adjustment_flag_defaults_to_false(self) -> None:
        doc = json.loads(json.dumps(LEGACY_DOCUMENT))
        del doc["payouts"][0]["adjustmentApplied"]
        assert parse_project(doc).get_payout_record("lz9pay").adjustment_applied is False

    def test_amount_out_of_range(self) -> None:
        doc = json.loads(json.dumps(LEGACY_DOCUMENT))
        doc["payouts"][0]["revenue"] = "1e30"
        with pytest.raises(ProjectFileError, match="out of range"):
            parse_project(doc)

    def test_invalid_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(ProjectFileError, match="Invalid JSON"):
            load_project(path)

    def test_non_json_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "project.txt"
        path.write_text(json.dumps(LEGACY_DOCUMENT), encoding="utf-8")
        with pytest.raises(ProjectFileError, match="Not a JSON"):
            load_project(path)


class TestSaveAndLoad:
    def test_save_then_load_preserves_precision(self, tmp_path: Path) -> None:
        store = _store()
        path = tmp_path / "project.json"
        save_project(store, path)
        loaded = load_project(path)
        original = store.get_payout_record("p1")
        reloaded = loaded.get_payout_record("p1")
        assert reloaded.main_share == original.main_share
        assert reloaded.thanks_share == original.thanks_share
        assert reloaded.members == original.members
        assert reloaded.committed_at == original.committed_at
        assert loaded.get_member("b").role == "Art"

    def test_save_marks_store_clean(self, tmp_path: Path) -> None:
        store = _store()
        assert store.dirty is True
        save_project(store, tmp_path / "project.json")
        assert store.dirty is False

    def test_saved_document_shape(self) -> None:
        doc = dump_project(_store())
        assert set(doc) == {"project", "members", "payouts"}
        payout = doc["payouts"][0]
        assert payout["mainCount"] == 1
        assert payout["adjustmentApplied"] is False
        assert isinstance(payout["mainShare"], str)
        assert payout["committedAt"] == "2026-02-01T09:30:00Z"

    def test_save_creates_parent_dirs(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "project.json"
        save_project(_store(), path)
        assert path.exists()
        assert not path.with_name("project.json.tmp").exists()


class TestSnapshotFilename:
    def test_sanitises_name_and_stamps_time(self) -> None:
        now = datetime(2026, 3, 1, 12, 30, 5)
        assert snapshot_filename("My Game!", now) == "My_Game__2026-03-01T12-30-05.json"

    def test_blank_name(self) -> None:
        now = datetime(2026, 3, 1, 12, 30, 5)
        assert snapshot_filename("", now) == "project_2026-03-01T12-30-05.json"
