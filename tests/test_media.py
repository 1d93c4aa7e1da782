"""
Tests for the media store and the concurrent upload helper.
"""
import threading
import time

import cloudinary.uploader
import pytest
from cloudinary.exceptions import Error as CloudinaryError

from errors import UpstreamError
from media import CloudinaryMediaStore, upload_all


class RecordingStore:
    def __init__(self, delays=None, fail=None):
        self.delays = delays or {}
        self.fail = fail
        self.threads = set()

    def upload(self, data, filename):
        self.threads.add(threading.get_ident())
        time.sleep(self.delays.get(filename, 0))
        if filename == self.fail:
            raise UpstreamError(f"Upload of {filename} failed")
        return f"https://cdn.example.com/{filename}"


def test_empty_batch_uploads_nothing():
    assert upload_all(RecordingStore(), []) == []


def test_urls_keep_submission_order():
    store = RecordingStore(delays={"a.png": 0.05, "b.png": 0.01})
    files = [("a.png", b"a"), ("b.png", b"b"), ("c.png", b"c")]

    assert upload_all(store, files, max_workers=3) == [
        "https://cdn.example.com/a.png",
        "https://cdn.example.com/b.png",
        "https://cdn.example.com/c.png",
    ]


def test_uploads_run_concurrently():
    store = RecordingStore(delays={"a.png": 0.05, "b.png": 0.05})

    upload_all(store, [("a.png", b"a"), ("b.png", b"b")], max_workers=2)

    assert len(store.threads) == 2


def test_single_failure_fails_batch():
    store = RecordingStore(fail="b.png")

    with pytest.raises(UpstreamError):
        upload_all(store, [("a.png", b"a"), ("b.png", b"b")])


class TestCloudinaryMediaStore:
    def test_returns_secure_url(self, monkeypatch):
        calls = []

        def fake_upload(file, **options):
            calls.append((file.read(), options))
            return {"secure_url": "https://res.cloudinary.com/demo/image/upload/v1/front.png"}

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
        store = CloudinaryMediaStore("demo", "key", "secret")

        url = store.upload(b"png bytes", "front.png")

        assert url == "https://res.cloudinary.com/demo/image/upload/v1/front.png"
        assert calls == [(b"png bytes", {"resource_type": "auto"})]

    def test_cloudinary_error_becomes_upstream_error(self, monkeypatch):
        monkeypatch.setattr(cloudinary.uploader, "upload", failing_upload)
        store = CloudinaryMediaStore("demo", "key", "secret")

        with pytest.raises(UpstreamError) as excinfo:
            store.upload(b"png bytes", "front.png")

        assert excinfo.value.message == "Upload of front.png failed: Invalid Signature"


def failing_upload(file, **options):
    raise CloudinaryError("Invalid Signature")
