from __future__ import annotations

import pytest

from seed_vault.common.errors import ConfigurationError
from seed_vault.common.settings import Settings, infer_provider


GCP_KEY = "projects/p/locations/global/keyRings/r/cryptoKeys/k"

_ENV = (
    "SEED_VAULT_PROVIDER",
    "SEED_VAULT_REGION",
    "SEED_VAULT_KMS_ENDPOINT_URL",
    "SEED_VAULT_S3_ENDPOINT_URL",
    "SEED_VAULT_GCP_PROJECT",
    "SEED_VAULT_LOCAL_ROOT",
    "SEED_VAULT_LOG_LEVEL",
    "SEED_VAULT_LOG_JSON",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    "key_name,expected",
    [
        (GCP_KEY, "gcp"),
        ("alias/seed-key", "aws"),
        ("arn:aws:kms:us-east-1:111122223333:key/1234abcd-12ab-34cd-56ef-1234567890ab", "aws"),
        ("1234abcd-12ab-34cd-56ef-1234567890ab", "aws"),
    ],
)
def test_infer_provider(key_name: str, expected: str):
    assert infer_provider(key_name) == expected


def test_defaults_from_empty_env():
    s = Settings.from_env(GCP_KEY)
    assert s.provider == "gcp"
    assert s.region is None
    assert s.local_root == ".seed-vault"
    assert s.log_level == "info"
    assert s.log_json is False


def test_explicit_provider_overrides_inference(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SEED_VAULT_PROVIDER", "LOCAL")
    assert Settings.from_env(GCP_KEY).provider == "local"


def test_empty_values_treated_as_unset(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SEED_VAULT_PROVIDER", "")
    monkeypatch.setenv("SEED_VAULT_REGION", "")
    s = Settings.from_env("alias/k")
    assert s.provider == "aws"
    assert s.region is None


def test_unknown_provider_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SEED_VAULT_PROVIDER", "azure")
    with pytest.raises(ConfigurationError):
        Settings.from_env("alias/k")


def test_gateway_configs_are_split(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SEED_VAULT_REGION", "eu-west-1")
    monkeypatch.setenv("SEED_VAULT_KMS_ENDPOINT_URL", "http://localhost:4566/kms")
    monkeypatch.setenv("SEED_VAULT_S3_ENDPOINT_URL", "http://localhost:4566/s3")
    monkeypatch.setenv("SEED_VAULT_LOG_JSON", "true")
    s = Settings.from_env("alias/k")

    kms_cfg = s.kms_config()
    store_cfg = s.store_config()
    assert kms_cfg.provider == store_cfg.provider == "aws"
    assert kms_cfg.region == store_cfg.region == "eu-west-1"
    assert kms_cfg.endpoint_url == "http://localhost:4566/kms"
    assert store_cfg.endpoint_url == "http://localhost:4566/s3"
    assert s.log_json is True
