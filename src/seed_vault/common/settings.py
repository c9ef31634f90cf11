from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError


# Environment variable names
ENV_PROVIDER = "SEED_VAULT_PROVIDER"
ENV_REGION = "SEED_VAULT_REGION"
ENV_KMS_ENDPOINT_URL = "SEED_VAULT_KMS_ENDPOINT_URL"
ENV_S3_ENDPOINT_URL = "SEED_VAULT_S3_ENDPOINT_URL"
ENV_GCP_PROJECT = "SEED_VAULT_GCP_PROJECT"
ENV_LOCAL_ROOT = "SEED_VAULT_LOCAL_ROOT"
ENV_LOG_LEVEL = "SEED_VAULT_LOG_LEVEL"
ENV_LOG_JSON = "SEED_VAULT_LOG_JSON"

DEFAULT_LOCAL_ROOT = ".seed-vault"

# Full Cloud KMS CryptoKey resource names start with this prefix
GCP_KEY_PREFIX = "projects/"

Provider = Literal["aws", "gcp", "local"]


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name)
    return val if val not in (None, "") else default


def _parse_bool(raw: Optional[str]) -> bool:
    if not raw:
        return False
    return raw.strip().lower() in ("1", "true", "yes", "on")


def infer_provider(key_name: str) -> Provider:
    """Guess the provider from the shape of the key reference.

    Cloud KMS keys are addressed by resource name
    (``projects/p/locations/l/keyRings/r/cryptoKeys/k``); anything else is
    treated as an AWS key id, ARN or alias.
    """
    if key_name.startswith(GCP_KEY_PREFIX):
        return "gcp"
    return "aws"


class KmsConfig(BaseModel):
    """Configuration handed to a key-management gateway at construction."""

    provider: Provider = Field(description="Backend serving Encrypt/Decrypt")
    region: Optional[str] = Field(default=None, description="AWS region (aws only)")
    endpoint_url: Optional[str] = Field(default=None, description="Endpoint override (aws only)")


class StoreConfig(BaseModel):
    """Configuration handed to an object-store gateway at construction."""

    provider: Provider = Field(description="Backend serving Put/Get")
    region: Optional[str] = Field(default=None, description="AWS region (aws only)")
    endpoint_url: Optional[str] = Field(default=None, description="Endpoint override (aws only)")
    project: Optional[str] = Field(default=None, description="GCP project (gcp only)")
    local_root: str = Field(default=DEFAULT_LOCAL_ROOT, description="Root directory (local only)")


class Settings(BaseModel):
    """
    Process configuration resolved from the environment.

    Each gateway gets its own config object derived from these settings
    (`kms_config()`, `store_config()`); nothing here holds clients or
    credentials, those are acquired by the gateways themselves.
    """

    provider: Provider
    region: Optional[str] = None
    kms_endpoint_url: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    gcp_project: Optional[str] = None
    local_root: str = DEFAULT_LOCAL_ROOT
    log_level: str = "info"
    log_json: bool = False

    @classmethod
    def from_env(cls, key_name: str) -> "Settings":
        provider = _getenv(ENV_PROVIDER)
        raw = {
            "provider": provider.strip().lower() if provider else infer_provider(key_name),
            "region": _getenv(ENV_REGION),
            "kms_endpoint_url": _getenv(ENV_KMS_ENDPOINT_URL),
            "s3_endpoint_url": _getenv(ENV_S3_ENDPOINT_URL),
            "gcp_project": _getenv(ENV_GCP_PROJECT),
            "local_root": _getenv(ENV_LOCAL_ROOT, DEFAULT_LOCAL_ROOT),
            "log_level": (_getenv(ENV_LOG_LEVEL, "info") or "info").lower(),
            "log_json": _parse_bool(_getenv(ENV_LOG_JSON)),
        }
        try:
            return cls.model_validate(raw)
        except ValidationError as ex:
            raise ConfigurationError(f"Invalid seed-vault configuration: {ex}") from ex

    def kms_config(self) -> KmsConfig:
        return KmsConfig(
            provider=self.provider,
            region=self.region,
            endpoint_url=self.kms_endpoint_url,
        )

    def store_config(self) -> StoreConfig:
        return StoreConfig(
            provider=self.provider,
            region=self.region,
            endpoint_url=self.s3_endpoint_url,
            project=self.gcp_project,
            local_root=self.local_root,
        )
