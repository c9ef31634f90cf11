from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from cryptography.fernet import Fernet, InvalidToken
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import kms as cloud_kms

from .errors import ConfigurationError, RemoteCallError
from .settings import KmsConfig


class KmsError(RemoteCallError):
    """Base error for key-management calls."""


class EncryptionError(KmsError):
    """Encrypt was rejected (unknown key, no permission) or the call failed."""


class DecryptionError(KmsError):
    """Decrypt was rejected (wrong key, corrupt ciphertext) or the call failed."""


def _client_error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code") or "Unknown")


class KeyManagementGateway(ABC):
    """
    Narrow capability over a key-management service.

    Key material stays inside the service; callers only exchange
    plaintext and ciphertext. Every call is a single remote request.
    """

    provider_name = "abstract"

    @abstractmethod
    def encrypt(self, plaintext: bytes, key_id: str) -> bytes:
        """Encrypt `plaintext` under `key_id`; raises EncryptionError."""

    @abstractmethod
    def decrypt(self, ciphertext: bytes, key_id: str) -> bytes:
        """Decrypt `ciphertext` under `key_id`; raises DecryptionError."""


# ============================================================
# AWS KMS
# ============================================================
class AwsKmsGateway(KeyManagementGateway):
    """
    AWS KMS via boto3.

    The client is built on first use from the gateway's own config, using
    the default credential chain. Pass `kms=` to inject a pre-built client.
    """

    provider_name = "aws"

    def __init__(self, config: KmsConfig, *, kms: Optional[object] = None) -> None:
        self._config = config
        self._kms = kms

    def _get_client(self):
        if self._kms is None:
            self._kms = boto3.client(
                "kms",
                region_name=self._config.region,
                endpoint_url=self._config.endpoint_url,
            )
        return self._kms

    def encrypt(self, plaintext: bytes, key_id: str) -> bytes:
        try:
            resp = self._get_client().encrypt(KeyId=key_id, Plaintext=plaintext)
        except ClientError as e:
            raise EncryptionError(
                f"KMS Encrypt failed for key {key_id!r}: {_client_error_code(e)}"
            ) from e
        except BotoCoreError as e:
            raise EncryptionError(f"KMS Encrypt failed for key {key_id!r}: {e}") from e
        return resp["CiphertextBlob"]

    def decrypt(self, ciphertext: bytes, key_id: str) -> bytes:
        try:
            resp = self._get_client().decrypt(KeyId=key_id, CiphertextBlob=ciphertext)
        except ClientError as e:
            raise DecryptionError(
                f"KMS Decrypt failed for key {key_id!r}: {_client_error_code(e)}"
            ) from e
        except BotoCoreError as e:
            raise DecryptionError(f"KMS Decrypt failed for key {key_id!r}: {e}") from e
        return resp["Plaintext"]


# ============================================================
# GCP Cloud KMS
# ============================================================
class GcpKmsGateway(KeyManagementGateway):
    """
    Google Cloud KMS. `key_id` is the full CryptoKey resource name,
    e.g. ``projects/p/locations/global/keyRings/r/cryptoKeys/k``.

    Credentials come from Application Default Credentials when the client
    is first built. Pass `client=` to inject a pre-built client.
    """

    provider_name = "gcp"

    def __init__(self, config: KmsConfig, *, client: Optional[object] = None) -> None:
        self._config = config
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = cloud_kms.KeyManagementServiceClient()
        return self._client

    def encrypt(self, plaintext: bytes, key_id: str) -> bytes:
        try:
            resp = self._get_client().encrypt(request={"name": key_id, "plaintext": plaintext})
        except (GoogleAPIError, GoogleAuthError) as e:
            raise EncryptionError(f"Cloud KMS encrypt failed for key {key_id!r}: {e}") from e
        return bytes(resp.ciphertext)

    def decrypt(self, ciphertext: bytes, key_id: str) -> bytes:
        try:
            resp = self._get_client().decrypt(request={"name": key_id, "ciphertext": ciphertext})
        except (GoogleAPIError, GoogleAuthError) as e:
            raise DecryptionError(f"Cloud KMS decrypt failed for key {key_id!r}: {e}") from e
        return bytes(resp.plaintext)


# ============================================================
# Local: Fernet key file
# ============================================================
def _load_fernet(key_path: str) -> Fernet:
    """Build a Fernet from a file holding a urlsafe base64-encoded 32-byte key,
    as written by `Fernet.generate_key()`."""
    raw = Path(key_path).read_bytes().strip()
    return Fernet(raw)


class LocalKmsGateway(KeyManagementGateway):
    """
    Offline stand-in for a managed KMS, for local development.

    `key_id` is the path of a Fernet key file. The key is read for every
    call and never cached.
    """

    provider_name = "local"

    def __init__(self, config: KmsConfig) -> None:
        self._config = config

    def encrypt(self, plaintext: bytes, key_id: str) -> bytes:
        try:
            fernet = _load_fernet(key_id)
        except (OSError, ValueError) as e:
            raise EncryptionError(f"Cannot load local key {key_id!r}: {e}") from e
        return fernet.encrypt(plaintext)

    def decrypt(self, ciphertext: bytes, key_id: str) -> bytes:
        try:
            fernet = _load_fernet(key_id)
        except (OSError, ValueError) as e:
            raise DecryptionError(f"Cannot load local key {key_id!r}: {e}") from e
        try:
            return fernet.decrypt(ciphertext)
        except InvalidToken as e:
            raise DecryptionError(f"Ciphertext rejected by local key {key_id!r}") from e


def build_kms_gateway(config: KmsConfig) -> KeyManagementGateway:
    if config.provider == "aws":
        return AwsKmsGateway(config)
    if config.provider == "gcp":
        return GcpKmsGateway(config)
    if config.provider == "local":
        return LocalKmsGateway(config)
    raise ConfigurationError(f"Unknown KMS provider: {config.provider!r}")


__all__ = [
    "KeyManagementGateway",
    "AwsKmsGateway",
    "GcpKmsGateway",
    "LocalKmsGateway",
    "KmsError",
    "EncryptionError",
    "DecryptionError",
    "build_kms_gateway",
]
