from __future__ import annotations

import pytest
from botocore.exceptions import ClientError
from google.api_core.exceptions import Forbidden, NotFound, RetryError
from hypothesis import given, settings, strategies as st

from seed_vault.common.errors import RemoteCallError
from seed_vault.common.settings import StoreConfig
from seed_vault.storage.object_store import (
    GcsObjectStore,
    LocalObjectStore,
    ObjectNotFoundError,
    S3ObjectStore,
    StorageError,
    build_object_store,
)


class _FakeBody:
    def __init__(self, data: bytes) -> None:
        self._data = data

    def read(self) -> bytes:
        return self._data


class _FakeS3:
    def __init__(self) -> None:
        self._store = {}  # (bucket, key) -> {Body: bytes, ContentType: str}
        self.denied = False

    def put_object(self, *, Bucket: str, Key: str, Body: bytes, ContentType: str):
        if self.denied:
            raise ClientError({"Error": {"Code": "AccessDenied"}}, "PutObject")
        self._store[(Bucket, Key)] = {"Body": Body, "ContentType": ContentType}
        return {"ETag": f'"fake-{len(Body)}"'}

    def get_object(self, *, Bucket: str, Key: str):
        item = self._store.get((Bucket, Key))
        if not item:
            raise ClientError({"Error": {"Code": "NoSuchKey"}}, "GetObject")
        return {"Body": _FakeBody(item["Body"])}


class _FakeBlob:
    def __init__(self, objects: dict, key: tuple[str, str]) -> None:
        self._objects = objects
        self._key = key
        self.content_type = None

    def upload_from_string(self, data: bytes, content_type: str | None = None) -> None:
        if self._key[0] == "forbidden":
            raise Forbidden("no storage.objects.create")
        if self._key[0] == "flaky":
            raise RetryError("Deadline of 120.0s exceeded", ConnectionError("reset by peer"))
        self._objects[self._key] = data
        self.content_type = content_type

    def download_as_bytes(self) -> bytes:
        if self._key[0] == "flaky":
            raise RetryError("Deadline of 120.0s exceeded", ConnectionError("reset by peer"))
        if self._key not in self._objects:
            raise NotFound(f"{self._key[0]}/{self._key[1]}")
        return self._objects[self._key]


class _FakeBucket:
    def __init__(self, objects: dict, name: str) -> None:
        self._objects = objects
        self._name = name

    def blob(self, name: str) -> _FakeBlob:
        return _FakeBlob(self._objects, (self._name, name))


class _FakeGcs:
    def __init__(self) -> None:
        self.objects: dict = {}

    def bucket(self, name: str) -> _FakeBucket:
        return _FakeBucket(self.objects, name)


def test_s3_put_then_get_roundtrip():
    s3 = _FakeS3()
    store = S3ObjectStore(StoreConfig(provider="aws"), s3=s3)

    store.put(b"\x00ciphertext\xff", "b", "seed.bin")
    assert store.get("b", "seed.bin") == b"\x00ciphertext\xff"
    assert s3._store[("b", "seed.bin")]["ContentType"] == "application/octet-stream"


def test_s3_put_overwrites_existing_object():
    store = S3ObjectStore(StoreConfig(provider="aws"), s3=_FakeS3())
    store.put(b"first", "b", "seed.bin")
    store.put(b"second", "b", "seed.bin")
    assert store.get("b", "seed.bin") == b"second"


def test_s3_missing_object_raises_not_found():
    store = S3ObjectStore(StoreConfig(provider="aws"), s3=_FakeS3())
    with pytest.raises(ObjectNotFoundError):
        store.get("b", "seed.bin")


def test_s3_access_denied_raises_storage_error():
    s3 = _FakeS3()
    s3.denied = True
    store = S3ObjectStore(StoreConfig(provider="aws"), s3=s3)
    with pytest.raises(StorageError) as exc:
        store.put(b"x", "b", "seed.bin")
    assert not isinstance(exc.value, ObjectNotFoundError)
    assert isinstance(exc.value, RemoteCallError)
    assert "AccessDenied" in str(exc.value)


def test_gcs_put_then_get_roundtrip():
    gcs = _FakeGcs()
    store = GcsObjectStore(StoreConfig(provider="gcp"), client=gcs)

    store.put(b"ciphertext", "test-bucket", "seed.bin")
    assert gcs.objects == {("test-bucket", "seed.bin"): b"ciphertext"}
    assert store.get("test-bucket", "seed.bin") == b"ciphertext"


def test_gcs_missing_object_raises_not_found():
    store = GcsObjectStore(StoreConfig(provider="gcp"), client=_FakeGcs())
    with pytest.raises(ObjectNotFoundError):
        store.get("test-bucket", "seed.bin")


def test_gcs_forbidden_raises_storage_error():
    store = GcsObjectStore(StoreConfig(provider="gcp"), client=_FakeGcs())
    with pytest.raises(StorageError):
        store.put(b"x", "forbidden", "seed.bin")


def test_gcs_exhausted_retries_raise_storage_error():
    store = GcsObjectStore(StoreConfig(provider="gcp"), client=_FakeGcs())
    with pytest.raises(StorageError) as put_exc:
        store.put(b"x", "flaky", "seed.bin")
    with pytest.raises(StorageError) as get_exc:
        store.get("flaky", "seed.bin")
    assert isinstance(put_exc.value.__cause__, RetryError)
    assert not isinstance(get_exc.value, ObjectNotFoundError)


@settings(max_examples=25, deadline=None)
@given(st.binary(max_size=256))
def test_local_roundtrip_identity(tmp_path_factory: pytest.TempPathFactory, data: bytes):
    root = tmp_path_factory.mktemp("store")
    store = LocalObjectStore(StoreConfig(provider="local", local_root=str(root)))
    store.put(data, "bucket", "seed.bin")
    assert store.get("bucket", "seed.bin") == data
    assert (root / "bucket" / "seed.bin").read_bytes() == data


def test_local_missing_object_raises_not_found(tmp_path):
    store = LocalObjectStore(StoreConfig(provider="local", local_root=str(tmp_path)))
    with pytest.raises(ObjectNotFoundError):
        store.get("bucket", "seed.bin")


@pytest.mark.parametrize(
    "provider,cls",
    [("aws", S3ObjectStore), ("gcp", GcsObjectStore), ("local", LocalObjectStore)],
)
def test_build_object_store(provider: str, cls: type):
    store = build_object_store(StoreConfig(provider=provider))
    assert isinstance(store, cls)
    assert store.provider_name == provider
