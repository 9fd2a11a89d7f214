import json

import httpx
import pytest
from fastapi.testclient import TestClient

from main import app
from modules.storage.dependencies import get_uploader
from modules.storage.errors import StorageConfigurationError, StorageError
from modules.storage.services.ipfs_uploader import PinataUploader


def make_uploader(handler):
    client = httpx.Client(base_url="https://pinata.test", transport=httpx.MockTransport(handler))
    return PinataUploader("jwt-token", client=client)


def test_upload_directory_wraps_files():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers["authorization"]
        seen["body"] = request.read()
        return httpx.Response(200, json={"IpfsHash": "bafydir"})

    cid = make_uploader(handler).upload_directory({"artwork.png": b"\x89PNG"}, name="manifesto-1-artwork")

    assert cid == "bafydir"
    assert seen["path"] == "/pinning/pinFileToIPFS"
    assert seen["auth"] == "Bearer jwt-token"
    assert b'filename="manifesto-1-artwork/artwork.png"' in seen["body"]
    assert b'"cidVersion": 1' in seen["body"]


def test_error_status_raises():
    uploader = make_uploader(lambda request: httpx.Response(401, text="unauthorized"))
    with pytest.raises(StorageError, match="401"):
        uploader.pin_file("a.png", b"x")


def test_invalid_json_raises():
    uploader = make_uploader(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(StorageError):
        uploader.pin_file("a.png", b"x")


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(StorageError):
        make_uploader(handler).pin_file("a.png", b"x")


def test_missing_jwt():
    with pytest.raises(StorageConfigurationError):
        PinataUploader(None)


def test_empty_directory():
    with pytest.raises(StorageError):
        make_uploader(lambda request: httpx.Response(200, json={})).upload_directory({})


def test_pin_endpoint():
    uploader = make_uploader(lambda request: httpx.Response(200, json={"IpfsHash": "bafyfile"}))
    app.dependency_overrides[get_uploader] = lambda: uploader
    try:
        client = TestClient(app)
        resp = client.post("/storage/pin", files={"file": ("art.png", b"\x89PNG", "image/png")})
        empty = client.post("/storage/pin", files={"file": ("art.png", b"", "image/png")})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {"IpfsHash": "bafyfile", "uri": "ipfs://bafyfile"}
    assert empty.status_code == 400


def test_pin_endpoint_upstream_failure():
    uploader = make_uploader(lambda request: httpx.Response(500, text=json.dumps({"error": "down"})))
    app.dependency_overrides[get_uploader] = lambda: uploader
    try:
        resp = TestClient(app).post("/storage/pin", files={"file": ("art.png", b"\x89PNG", "image/png")})
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 502
