import pytest
import requests

from src.progress_monitor.progress_monitor.core.exceptions import StorageError
from src.progress_monitor.progress_monitor.storage.client import HttpObjectStorage, progress_photo_key, visit_photo_key


class _Response:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")


class _Session:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def put(self, url, data=None, headers=None, timeout=None):
        self.urls.append(url)
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


def test_keys_are_scoped_and_unique():
    a = visit_photo_key("P1", "JE1")
    b = visit_photo_key("P1", "JE1")
    assert a.startswith("visits/P1/JE1/") and a.endswith(".jpg")
    assert a != b
    assert progress_photo_key("P1", "PK1").startswith("progress/P1/PK1/")


def test_put_returns_public_url():
    session = _Session(_Response(200))
    storage = HttpObjectStorage("http://upload/bucket/", public_base_url="https://cdn/bucket", session=session)

    url = storage.put(b"jpeg", key="visits/P1/JE1/x.jpg", content_type="image/jpeg")

    assert url == "https://cdn/bucket/visits/P1/JE1/x.jpg"
    assert session.urls == ["http://upload/bucket/visits/P1/JE1/x.jpg"]


def test_transient_failure_is_retried():
    session = _Session(requests.ConnectionError("reset"), _Response(200))
    storage = HttpObjectStorage("http://upload", session=session)

    assert storage.put(b"jpeg", key="k.jpg", content_type="image/jpeg") == "http://upload/k.jpg"
    assert len(session.urls) == 2


def test_persistent_failure_raises_storage_error():
    session = _Session(_Response(500), _Response(502), _Response(503))
    storage = HttpObjectStorage("http://upload", session=session)

    with pytest.raises(StorageError):
        storage.put(b"jpeg", key="k.jpg", content_type="image/jpeg")
    assert len(session.urls) == 3


def test_empty_upload_is_refused():
    with pytest.raises(StorageError):
        HttpObjectStorage("http://upload", session=_Session()).put(b"", key="k.jpg", content_type="image/jpeg")
