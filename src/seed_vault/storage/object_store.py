from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

from seed_vault.common.errors import ConfigurationError, RemoteCallError
from seed_vault.common.settings import StoreConfig


CONTENT_TYPE = "application/octet-stream"


class StorageError(RemoteCallError):
    """Base error for object-store calls."""


class ObjectNotFoundError(StorageError):
    """The requested object does not exist in the bucket."""


@dataclass
class ObjectRef:
    bucket: str
    name: str

    def __str__(self) -> str:
        return f"{self.bucket}/{self.name}"


class ObjectStoreGateway(ABC):
    """
    Narrow capability over an object store.

    - `put` overwrites any existing object with the same name (no versioning,
      no conflict detection).
    - `get` returns the whole object in one call.
    """

    provider_name = "abstract"

    @abstractmethod
    def put(self, data: bytes, bucket: str, object_name: str) -> None:
        """Store `data` as `bucket/object_name`; raises StorageError."""

    @abstractmethod
    def get(self, bucket: str, object_name: str) -> bytes:
        """Fetch `bucket/object_name`; raises ObjectNotFoundError or StorageError."""


# ============================================================
# AWS S3
# ============================================================
class S3ObjectStore(ObjectStoreGateway):
    """
    S3-backed object store via boto3.

    The client is built on first use from the store's own config with the
    default credential chain; pass `s3=` to inject one.
    """

    provider_name = "aws"

    def __init__(self, config: StoreConfig, *, s3: Optional[object] = None) -> None:
        self._config = config
        self._s3 = s3

    def _get_client(self):
        if self._s3 is None:
            self._s3 = boto3.client(
                "s3",
                region_name=self._config.region,
                endpoint_url=self._config.endpoint_url,
            )
        return self._s3

    def put(self, data: bytes, bucket: str, object_name: str) -> None:
        ref = ObjectRef(bucket=bucket, name=object_name)
        try:
            self._get_client().put_object(
                Bucket=ref.bucket,
                Key=ref.name,
                Body=data,
                ContentType=CONTENT_TYPE,
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            raise StorageError(f"S3 PutObject failed for s3://{ref}: {code}") from e
        except BotoCoreError as e:
            raise StorageError(f"S3 PutObject failed for s3://{ref}: {e}") from e

    def get(self, bucket: str, object_name: str) -> bytes:
        ref = ObjectRef(bucket=bucket, name=object_name)
        try:
            resp = self._get_client().get_object(Bucket=ref.bucket, Key=ref.name)
            return resp["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                raise ObjectNotFoundError(f"No such object: s3://{ref}") from e
            raise StorageError(f"S3 GetObject failed for s3://{ref}: {code}") from e
        except BotoCoreError as e:
            raise StorageError(f"S3 GetObject failed for s3://{ref}: {e}") from e


# ============================================================
# Google Cloud Storage
# ============================================================
class GcsObjectStore(ObjectStoreGateway):
    """Google Cloud Storage via `google-cloud-storage`; pass `client=` to inject one."""

    provider_name = "gcp"

    def __init__(self, config: StoreConfig, *, client: Optional[object] = None) -> None:
        self._config = config
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = storage.Client(project=self._config.project)
        return self._client

    def put(self, data: bytes, bucket: str, object_name: str) -> None:
        ref = ObjectRef(bucket=bucket, name=object_name)
        try:
            blob = self._get_client().bucket(ref.bucket).blob(ref.name)
            blob.upload_from_string(data, content_type=CONTENT_TYPE)
        except (GoogleAPIError, GoogleAuthError) as e:
            raise StorageError(f"GCS upload failed for gs://{ref}: {e}") from e

    def get(self, bucket: str, object_name: str) -> bytes:
        ref = ObjectRef(bucket=bucket, name=object_name)
        try:
            blob = self._get_client().bucket(ref.bucket).blob(ref.name)
            return blob.download_as_bytes()
        except NotFound as e:
            raise ObjectNotFoundError(f"No such object: gs://{ref}") from e
        except (GoogleAPIError, GoogleAuthError) as e:
            raise StorageError(f"GCS download failed for gs://{ref}: {e}") from e


# ============================================================
# Local directory
# ============================================================
class LocalObjectStore(ObjectStoreGateway):
    """
    Directory-backed store for local development.

    Objects live at ``<local_root>/<bucket>/<object_name>``; the bucket
    directory is created on first `put`.
    """

    provider_name = "local"

    def __init__(self, config: StoreConfig) -> None:
        self._root = Path(config.local_root)

    def _path(self, ref: ObjectRef) -> Path:
        return self._root / ref.bucket / ref.name

    def put(self, data: bytes, bucket: str, object_name: str) -> None:
        ref = ObjectRef(bucket=bucket, name=object_name)
        path = self._path(ref)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Local write failed for {path}: {e}") from e

    def get(self, bucket: str, object_name: str) -> bytes:
        ref = ObjectRef(bucket=bucket, name=object_name)
        path = self._path(ref)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(f"No such object: {path}") from e
        except OSError as e:
            raise StorageError(f"Local read failed for {path}: {e}") from e


def build_object_store(config: StoreConfig) -> ObjectStoreGateway:
    if config.provider == "aws":
        return S3ObjectStore(config)
    if config.provider == "gcp":
        return GcsObjectStore(config)
    if config.provider == "local":
        return LocalObjectStore(config)
    raise ConfigurationError(f"Unknown storage provider: {config.provider!r}")


__all__ = [
    "ObjectRef",
    "ObjectStoreGateway",
    "S3ObjectStore",
    "GcsObjectStore",
    "LocalObjectStore",
    "StorageError",
    "ObjectNotFoundError",
    "build_object_store",
]
