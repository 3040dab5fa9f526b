import asyncio

import pytest
import requests

from questcert.services import photos
from questcert.services.photos import read_photo_bytes, resolve_photo


class FakeResponse:
    def __init__(self, status_code=200, content=b"img-bytes"):
        self.status_code = status_code
        self.content = content

    @property
    def ok(self):
        return self.status_code < 400


@pytest.fixture
def no_network(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("unexpected network call")

    monkeypatch.setattr(photos.requests, "get", fail)


@pytest.mark.parametrize("source", [None, "", "   "])
def test_absent_source_does_no_io(source, no_network, monkeypatch):
    monkeypatch.setattr(photos.os.path, "isfile", lambda p: pytest.fail("unexpected file check"))
    assert read_photo_bytes(source) is None
    assert asyncio.run(resolve_photo(source)) is None


def test_remote_photo_success(monkeypatch):
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        return FakeResponse(content=b"\x89PNG remote")

    monkeypatch.setattr(photos.requests, "get", fake_get)
    assert read_photo_bytes("HTTPS://cdn.example.com/a.png") == b"\x89PNG remote"
    assert calls == [("HTTPS://cdn.example.com/a.png", None)]


def test_remote_photo_passes_timeout(monkeypatch):
    seen = {}

    def fake_get(url, timeout=None):
        seen["timeout"] = timeout
        return FakeResponse()

    monkeypatch.setattr(photos.requests, "get", fake_get)
    read_photo_bytes("http://cdn.example.com/a.png", timeout=2.5)
    assert seen["timeout"] == 2.5


def test_remote_photo_bad_status(monkeypatch):
    monkeypatch.setattr(photos.requests, "get", lambda url, timeout=None: FakeResponse(404))
    assert read_photo_bytes("http://cdn.example.com/missing.png") is None


def test_remote_photo_transport_error(monkeypatch):
    def fake_get(url, timeout=None):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(photos.requests, "get", fake_get)
    assert read_photo_bytes("http://unreachable.invalid/a.png") is None


def test_relative_path_resolves_against_base_dir(tmp_path, no_network):
    target = tmp_path / "uploads" / "s1.jpg"
    target.parent.mkdir()
    target.write_bytes(b"local")
    assert read_photo_bytes("uploads/s1.jpg", base_dir=str(tmp_path)) == b"local"
    assert read_photo_bytes("/uploads/s1.jpg", base_dir=str(tmp_path)) == b"local"


def test_relative_path_defaults_to_working_directory(tmp_path, monkeypatch):
    (tmp_path / "me.png").write_bytes(b"cwd")
    monkeypatch.chdir(tmp_path)
    assert read_photo_bytes("me.png") == b"cwd"


def test_absolute_path(tmp_path):
    target = tmp_path / "abs.png"
    target.write_bytes(b"abs")
    assert read_photo_bytes(str(target), base_dir="/nonexistent") == b"abs"


def test_missing_file_and_directory_are_absent(tmp_path):
    assert read_photo_bytes("nope.png", base_dir=str(tmp_path)) is None
    (tmp_path / "folder").mkdir()
    assert read_photo_bytes("folder", base_dir=str(tmp_path)) is None


def test_read_error_is_absent(tmp_path, monkeypatch):
    target = tmp_path / "locked.png"
    target.write_bytes(b"x")

    def deny(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(photos, "open", deny, raising=False)
    assert read_photo_bytes(str(target)) is None


def test_restrict_to_base_blocks_escape(tmp_path):
    root = tmp_path / "uploads"
    root.mkdir()
    (tmp_path / "secret.png").write_bytes(b"secret")
    (root / "ok.png").write_bytes(b"ok")

    assert read_photo_bytes("../secret.png", base_dir=str(root)) == b"secret"
    assert read_photo_bytes("../secret.png", base_dir=str(root), restrict_to_base=True) is None
    assert read_photo_bytes(str(tmp_path / "secret.png"), base_dir=str(root), restrict_to_base=True) is None
    assert read_photo_bytes("ok.png", base_dir=str(root), restrict_to_base=True) == b"ok"


def test_resolve_photo_runs_async(tmp_path):
    (tmp_path / "p.png").write_bytes(b"async")
    assert asyncio.run(resolve_photo("p.png", base_dir=str(tmp_path))) == b"async"


@pytest.mark.parametrize("restrict", [True, False])
def test_null_byte_in_path_is_absent(tmp_path, restrict, no_network):
    assert read_photo_bytes("a\x00b.png", base_dir=str(tmp_path), restrict_to_base=restrict) is None
    assert asyncio.run(resolve_photo("x\x00.png", base_dir=str(tmp_path), restrict_to_base=restrict)) is None
