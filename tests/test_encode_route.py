import pytest
from fastapi.testclient import TestClient

import mjpeg_avi.routes.encode as encode_routes
from mjpeg_avi.configs import settings
from mjpeg_avi.main import app
from mjpeg_avi.remuxer.byte_codec import read_u32
from mjpeg_avi.remuxer.frame_source import FrameEncodeError
from mjpeg_avi.utils.base64_utils import decode_base64_frame, encode_frame_to_base64


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(settings, "api_password", None)
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_encode_returns_avi(client, make_jpeg):
    frames = [encode_frame_to_base64(make_jpeg(100)), encode_frame_to_base64(make_jpeg(101), url_safe=True)]
    response = client.post(
        "/avi/encode",
        json={"width": 64, "height": 64, "frame_rate": 10.0, "frames": frames, "filename": "clip.avi"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "video/x-msvideo"
    assert "clip.avi" in response.headers["content-disposition"]
    body = response.content
    assert body[:4] == b"RIFF"
    assert read_u32(body, 4) == len(body) - 8
    assert read_u32(body, 32) == 100_000
    assert read_u32(body, 48) == 2


def test_encode_uses_default_frame_rate(client, monkeypatch, make_jpeg):
    monkeypatch.setattr(settings, "default_frame_rate", 20.0)
    response = client.post(
        "/avi/encode", json={"width": 8, "height": 8, "frames": [encode_frame_to_base64(make_jpeg(10))]}
    )
    assert response.status_code == 200
    assert read_u32(response.content, 32) == 50_000


def test_encode_zero_frames(client):
    response = client.post("/avi/encode", json={"width": 8, "height": 8, "frame_rate": 5})
    assert response.status_code == 200
    assert read_u32(response.content, 48) == 0
    assert response.content[-8:] == b"idx1\x00\x00\x00\x00"


def test_invalid_base64_is_rejected(client):
    response = client.post("/avi/encode", json={"width": 8, "height": 8, "frames": ["!!!not base64!!!"]})
    assert response.status_code == 400


def test_non_jpeg_frames(client):
    payload = {"width": 8, "height": 8, "frames": [encode_frame_to_base64(b"not a jpeg")]}
    assert client.post("/avi/encode", json=payload).status_code == 400

    payload["require_jpeg"] = False
    assert client.post("/avi/encode", json=payload).status_code == 200


def test_invalid_dimensions_fail_validation(client):
    response = client.post("/avi/encode", json={"width": 0, "height": 8, "frames": []})
    assert response.status_code == 422


def test_frame_limit(client, monkeypatch, make_jpeg):
    monkeypatch.setattr(settings, "max_frames_per_request", 1)
    frame = encode_frame_to_base64(make_jpeg(10))
    response = client.post("/avi/encode", json={"width": 8, "height": 8, "frames": [frame, frame]})
    assert response.status_code == 413


def test_api_password(client, monkeypatch):
    monkeypatch.setattr(settings, "api_password", "secret")
    payload = {"width": 8, "height": 8, "frames": []}

    assert client.post("/avi/encode", json=payload).status_code == 403
    assert client.post("/avi/encode?api_password=secret", json=payload).status_code == 200
    assert client.post("/avi/encode", json=payload, headers={"api_password": "secret"}).status_code == 200


def test_base64_helpers_round_trip_without_padding(make_jpeg):
    data = make_jpeg(11)
    encoded = encode_frame_to_base64(data, url_safe=True).rstrip("=")
    assert decode_base64_frame(encoded) == data
    assert decode_base64_frame("@@@@") is None


def _failing_writer(error: Exception, seen_paths: list):
    def _write_avi(path, width, height, frame_rate, payloads):
        seen_paths.append(path)
        assert path.exists()
        raise error

    return _write_avi


def test_write_failure_returns_500_and_removes_temp_file(client, monkeypatch, make_jpeg):
    seen_paths = []
    monkeypatch.setattr(encode_routes, "_write_avi", _failing_writer(OSError(28, "No space left on device"), seen_paths))

    response = client.post(
        "/avi/encode", json={"width": 8, "height": 8, "frames": [encode_frame_to_base64(make_jpeg(10))]}
    )

    assert response.status_code == 500
    assert len(seen_paths) == 1
    assert not seen_paths[0].exists()


def test_frame_encode_failure_returns_400_and_removes_temp_file(client, monkeypatch, make_jpeg):
    seen_paths = []
    monkeypatch.setattr(encode_routes, "_write_avi", _failing_writer(FrameEncodeError("corrupt frame"), seen_paths))

    response = client.post(
        "/avi/encode", json={"width": 8, "height": 8, "frames": [encode_frame_to_base64(make_jpeg(10))]}
    )

    assert response.status_code == 400
    assert "corrupt frame" in response.json()["detail"]
    assert len(seen_paths) == 1
    assert not seen_paths[0].exists()
