"""Tests for backup/restore report models."""

from mongo_backup.backup.models import RunReport, UnitOutcome, UnitStatus


def test_unit_outcome_constructors():
    ok = UnitOutcome.succeeded("shop", "orders", 12, path="/b/p/shop/orders.json")
    skipped = UnitOutcome.skipped("shop", "users", "connection unavailable: timeout")

    assert ok.ok is True
    assert ok.status == UnitStatus.SUCCEEDED
    assert ok.reason is None
    assert skipped.ok is False
    assert skipped.count is None


def test_unit_outcome_describe():
    assert UnitOutcome.succeeded("shop", "orders", 12).describe() == "✓ shop.orders: 12 documents"
    assert UnitOutcome.skipped("shop", "users", "boom").describe() == "✗ shop.users: skipped (boom)"


def test_run_report_aggregates():
    report = RunReport(operation="restore", project="nightly")
    assert report.restored_any is False
    assert report.finished_at is None

    report.add(UnitOutcome.succeeded("shop", "orders", 0))
    report.add(UnitOutcome.skipped("shop", "users", "boom"))
    report.add(UnitOutcome.succeeded("shop", "items", 5))
    report.finish()

    assert report.restored_any is True
    assert [o.collection for o in report.succeeded] == ["orders", "items"]
    assert [o.collection for o in report.skipped] == ["users"]
    assert report.document_count == 5
    assert report.finished_at >= report.started_at


def test_run_report_serializes():
    report = RunReport(operation="backup", project="nightly")
    report.add(UnitOutcome.succeeded("shop", "orders", 3))

    data = report.model_dump(mode="json")
    assert data["outcomes"][0]["status"] == "succeeded"
    assert data["project"] == "nightly"
