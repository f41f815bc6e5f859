from datetime import datetime, timezone
from decimal import Decimal
import io
from pathlib import Path

import pytest
from PIL import Image
from sqlalchemy.exc import OperationalError

from coastwatch.core.config_env import settings
from coastwatch.models.enums import HazardType, ReportStatus, Urgency
from coastwatch.models.hazard_report import HazardReport
from coastwatch.services import intake, reports_service
from coastwatch.services.storage import LocalBucket, StorageError, get_report_images_bucket
from server import app

from conftest import LONG_DESCRIPTION


def _submit(client, user, files=None, **fields):
    data = {"hazard_type": "High Waves", "description": "Big waves", "location": "North beach"}
    data.update({k: v for k, v in fields.items() if v is not None})
    return client.post("/api/v1/reports", data=data, files=files, headers=user["headers"])


def _insert(db, user_id, created_at, **kw):
    report = HazardReport(
        user_id=user_id,
        hazard_type=kw.get("hazard_type", HazardType.erosion),
        description=kw.get("description", "Dune collapse"),
        location=kw.get("location", "South beach"),
        urgency=kw.get("urgency", Urgency.medium),
        credibility_score=kw.get("credibility_score", Decimal("0.50")),
        latitude=kw.get("latitude"),
        longitude=kw.get("longitude"),
        created_at=created_at,
    )
    db.add(report)
    db.commit()
    return report


def test_submit_minimal_report_uses_defaults(client, citizen):
    resp = _submit(client, citizen)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["hazard_type"] == "High Waves"
    assert data["status"] == "submitted"
    assert data["urgency"] == "medium"
    assert data["credibility_score"] == 0.1
    assert data["image_url"] is None
    assert data["user_id"] == str(citizen["id"])


def test_submit_full_report_scores_all_signals(client, citizen, png_bytes):
    resp = _submit(
        client, citizen,
        files={"image": ("waves.png", png_bytes, "image/png")},
        description=LONG_DESCRIPTION,
        location="",
        latitude="19.0176",
        longitude="72.8562",
        contact_number="+91 5550100",
        urgency="high",
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()
    # 0.1 + 0.3 (фото) + 0.2 (координаты) + 0.1 (описание); соседние отчёты не считаются
    assert data["credibility_score"] == 0.7
    assert data["location"] == "19.017600, 72.856200"
    assert data["urgency"] == "high"
    assert data["contact_number"] == "+91 5550100"

    prefix = f"{settings.MEDIA_URL_PREFIX}/{settings.REPORT_IMAGES_BUCKET}/"
    assert data["image_url"].startswith(prefix)
    key = data["image_url"][len(prefix):]
    stamp, _, name = key.partition("-")
    assert stamp.isdigit() and name == "waves.png"
    stored = Path(settings.MEDIA_ROOT).resolve() / settings.REPORT_IMAGES_BUCKET / key
    assert stored.read_bytes() == png_bytes

    # файл раздаётся как статика
    served = client.get(data["image_url"])
    assert served.status_code == 200
    assert served.content == png_bytes


def test_round_trip_fields(client, citizen):
    created = _submit(
        client, citizen,
        hazard_type="Storm Surge",
        description="Surge over the sea wall",
        location="Harbour road",
        contact_number="12345",
    ).json()
    fetched = client.get(f"/api/v1/reports/{created['id']}", headers=citizen["headers"])
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_missing_required_fields(client, citizen):
    for field in ("hazard_type", "description", "location"):
        resp = _submit(client, citizen, **{field: "  "})
        assert resp.status_code == 422, field
        assert field in resp.json()["detail"]


def test_unknown_hazard_type(client, citizen):
    resp = _submit(client, citizen, hazard_type="Volcano")
    assert resp.status_code == 422


def test_non_image_upload_rejected(client, citizen):
    resp = _submit(client, citizen, files={"image": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 422


def test_upload_failure_aborts_submission(client, citizen, db, png_bytes):
    class BrokenBucket(LocalBucket):
        def upload(self, filename, data):
            raise StorageError("disk full")

    app.dependency_overrides[get_report_images_bucket] = lambda: BrokenBucket("report-images")
    try:
        resp = _submit(client, citizen, files={"image": ("w.png", png_bytes, "image/png")})
    finally:
        app.dependency_overrides.pop(get_report_images_bucket, None)
    assert resp.status_code == 502
    assert "Image upload failed" in resp.json()["detail"]
    assert db.query(HazardReport).count() == 0


def test_citizen_sees_only_own_reports(client, citizen, make_user, authority):
    other = make_user()
    mine = _submit(client, citizen).json()
    _submit(client, other)

    own = client.get("/api/v1/reports", headers=citizen["headers"]).json()
    assert [r["id"] for r in own] == [mine["id"]]

    everything = client.get("/api/v1/reports", headers=authority["headers"]).json()
    assert len(everything) == 2

    foreign_id = next(r["id"] for r in everything if r["id"] != mine["id"])
    foreign = client.get(f"/api/v1/reports/{foreign_id}", headers=citizen["headers"])
    assert foreign.status_code == 404


def test_reports_newest_first(client, db, authority, citizen):
    old = _insert(db, citizen["id"], datetime(2025, 1, 1, tzinfo=timezone.utc))
    new = _insert(db, citizen["id"], datetime(2025, 6, 1, tzinfo=timezone.utc))
    mid = _insert(db, citizen["id"], datetime(2025, 3, 1, tzinfo=timezone.utc))
    ids = [r["id"] for r in client.get("/api/v1/reports", headers=authority["headers"]).json()]
    assert ids == [str(new.id), str(mid.id), str(old.id)]


def test_status_update_requires_authority(client, citizen, authority):
    report = _submit(client, citizen).json()
    url = f"/api/v1/reports/{report['id']}"

    assert client.patch(url, json={"status": "resolved"}, headers=citizen["headers"]).status_code == 403

    resolved = client.patch(url, json={"status": "resolved", "urgency": "high"}, headers=authority["headers"])
    assert resolved.status_code == 200, resolved.text
    assert resolved.json()["status"] == "resolved"
    assert resolved.json()["urgency"] == "high"

    # переходы не ограничены: из resolved обратно в submitted
    back = client.patch(url, json={"status": "submitted"}, headers=authority["headers"])
    assert back.json()["status"] == "submitted"
    assert back.json()["urgency"] == "high"


def test_update_unknown_report(client, authority):
    resp = client.patch(
        "/api/v1/reports/00000000-0000-0000-0000-000000000000",
        json={"status": "dismissed"},
        headers=authority["headers"],
    )
    assert resp.status_code == 404


def test_only_owner_deletes(client, db, citizen, make_user):
    report = _submit(client, citizen).json()
    stranger = make_user()
    url = f"/api/v1/reports/{report['id']}"

    assert client.delete(url, headers=stranger["headers"]).status_code == 404
    assert client.delete(url, headers=citizen["headers"]).status_code == 204
    assert db.query(HazardReport).count() == 0


def _bucket_files():
    bucket_dir = Path(settings.MEDIA_ROOT).resolve() / settings.REPORT_IMAGES_BUCKET
    return set(bucket_dir.iterdir()) if bucket_dir.exists() else set()


def test_image_extension_follows_pillow_format(client, citizen):
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 10, 10)).save(buf, format="GIF")
    resp = _submit(client, citizen, files={"image": ("clip", buf.getvalue(), "image/gif")})
    assert resp.status_code == 201, resp.text
    image_url = resp.json()["image_url"]
    assert image_url.endswith("-clip.gif")

    served = client.get(image_url)
    assert served.status_code == 200
    assert served.headers["content-type"] == "image/gif"


def test_failed_insert_removes_uploaded_image(client, citizen, png_bytes, monkeypatch):
    def db_down(*_a, **_kw):
        raise OperationalError("INSERT", {}, Exception("db down"))

    before = _bucket_files()
    monkeypatch.setattr(intake, "create_report", db_down)
    with pytest.raises(OperationalError):
        _submit(client, citizen, files={"image": ("lost.png", png_bytes, "image/png")})
    assert _bucket_files() == before


def test_owner_edits_details_and_score_follows(client, citizen):
    report = _submit(client, citizen).json()
    assert report["credibility_score"] == 0.1
    url = f"/api/v1/reports/{report['id']}"

    resp = client.patch(url, json={
        "description": LONG_DESCRIPTION,
        "location": "",
        "latitude": 12.5,
        "longitude": 74.25,
        "contact_number": " 555 ",
    }, headers=citizen["headers"])
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["description"] == LONG_DESCRIPTION
    assert data["location"] == "12.500000, 74.250000"
    assert data["contact_number"] == "555"
    # 0.1 + 0.2 (координаты) + 0.1 (описание)
    assert data["credibility_score"] == 0.4
    assert data["status"] == "submitted"

    # координаты убраны: надбавка за них тоже
    cleared = client.patch(url, json={"latitude": None, "longitude": None}, headers=citizen["headers"]).json()
    assert cleared["latitude"] is None
    assert cleared["credibility_score"] == 0.2
    assert cleared["location"] == "12.500000, 74.250000"


def test_owner_cannot_change_urgency(client, citizen):
    report = _submit(client, citizen).json()
    url = f"/api/v1/reports/{report['id']}"
    resp = client.patch(url, json={"description": "Bigger waves", "urgency": "high"}, headers=citizen["headers"])
    assert resp.status_code == 403
    unchanged = client.get(url, headers=citizen["headers"]).json()
    assert unchanged["description"] == "Big waves"
    assert unchanged["urgency"] == "medium"


def test_owner_edit_is_validated(client, citizen):
    report = _submit(client, citizen).json()
    url = f"/api/v1/reports/{report['id']}"
    assert client.patch(url, json={"latitude": 12.5}, headers=citizen["headers"]).status_code == 422
    assert client.patch(url, json={"description": "   "}, headers=citizen["headers"]).status_code == 422


def test_only_owner_edits_details(client, citizen, authority, make_user):
    report = _submit(client, citizen).json()
    url = f"/api/v1/reports/{report['id']}"

    stranger = make_user()
    assert client.patch(url, json={"description": "x"}, headers=stranger["headers"]).status_code == 404
    assert client.patch(url, json={"description": "x"}, headers=authority["headers"]).status_code == 403


def test_update_report_status_keeps_other_fields(db, citizen):
    report = _insert(db, citizen["id"], datetime(2025, 2, 1, tzinfo=timezone.utc), urgency=Urgency.low)
    updated = reports_service.update_report_status(db, report, status=ReportStatus.dismissed)
    assert updated.status == ReportStatus.dismissed
    assert updated.urgency == Urgency.low
