import pytest
from fastapi.testclient import TestClient

from isodump import api
from isodump.main import app
from isodump.services.box_header import encode_header
from isodump.services.dump import render


def build_box(type_code, payload=b"", size=None):
    if size is None:
        return encode_header(type_code, 8 + len(payload)) + payload
    return size.to_bytes(4, "big") + type_code + payload


SEGMENT = build_box(b"moof", build_box(b"mfhd", b"\x00\x00\x00\x00\x00\x00\x00\x01")) + build_box(
    b"mdat", b"media"
)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_inspect_upload(client):
    response = client.post("/api/inspect", content=SEGMENT)

    assert response.status_code == 200
    body = response.json()
    assert [(b["offset"], b["depth"], b["type"], b["size"]) for b in body["boxes"]] == [
        (0, 0, "moof", 24),
        (8, 1, "mfhd", 16),
        (24, 0, "mdat", 13),
    ]
    assert body["end_offset"] == len(SEGMENT)
    assert body["complete"] is True
    assert body["stop_reason"] is None
    assert body["violations"] == []


def test_inspect_upload_with_dump(client):
    response = client.post("/api/inspect", params={"dump": "mdat"}, content=SEGMENT)

    boxes = response.json()["boxes"]
    assert boxes[0]["dump"] is None
    assert boxes[2]["dump"] == render(b"media")


def test_inspect_upload_raw_dump(client):
    response = client.post(
        "/api/inspect", params={"dump": ["mfhd", "mdat"], "raw": "true"}, content=SEGMENT
    )

    boxes = response.json()["boxes"]
    assert boxes[1]["dump"] == "\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01\n"
    assert boxes[2]["dump"] == "media\n"


def test_inspect_truncated_upload(client):
    response = client.post("/api/inspect", content=SEGMENT + b"\x00\x00")

    body = response.json()
    assert body["complete"] is False
    assert body["end_offset"] == len(SEGMENT)
    assert "2 bytes left" in body["stop_reason"]


def test_inspect_reports_violations(client):
    data = build_box(b"moov", build_box(b"trak", b"", size=40))
    body = client.post("/api/inspect", content=data).json()

    assert body["violations"] == [
        {"offset": 8, "depth": 1, "type": "trak", "claimed_size": 40, "boundary": 16}
    ]


def test_inspect_empty_body(client):
    assert client.post("/api/inspect", content=b"").status_code == 400


def test_inspect_bad_dump_type(client):
    response = client.post("/api/inspect", params={"dump": "md"}, content=SEGMENT)
    assert response.status_code == 422


def test_upload_over_declared_limit_is_rejected(client, monkeypatch):
    monkeypatch.setattr(api, "MAX_INSPECT_SIZE", 16)

    response = client.post("/api/inspect", content=SEGMENT)

    assert response.status_code == 413
    assert "16 byte limit" in response.json()["detail"]


def test_streamed_upload_over_limit_is_rejected(client, monkeypatch):
    monkeypatch.setattr(api, "MAX_INSPECT_SIZE", 16)

    def chunks():
        # No content-length, so the limit is enforced while reading
        for start in range(0, len(SEGMENT), 8):
            yield SEGMENT[start : start + 8]

    response = client.post("/api/inspect", content=chunks())

    assert response.status_code == 413


def test_streamed_upload_within_limit(client):
    def chunks():
        yield SEGMENT[:10]
        yield SEGMENT[10:]

    response = client.post("/api/inspect", content=chunks())

    assert response.status_code == 200
    assert response.json()["end_offset"] == len(SEGMENT)


def test_info_lists_containers(client):
    info = client.get("/info").json()

    assert info["container_boxes"]["stsd"] == 8
    assert info["container_boxes"]["avc1"] == 78
    assert info["max_depth"] == 64


def test_stats_count_inspections(client):
    client.post("/api/inspect", content=SEGMENT)

    stats = client.get("/stats").json()

    assert stats["inspections"] == 1
    assert stats["active_tasks"] == 0
