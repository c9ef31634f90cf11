from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from seed_vault.common.errors import IntegrityError, RemoteCallError, UsageError
from seed_vault.common.kms import KeyManagementGateway, build_kms_gateway
from seed_vault.common.logging import configure_logging, get_logger
from seed_vault.common.seed import generate_seed
from seed_vault.common.settings import Settings
from seed_vault.storage.object_store import ObjectStoreGateway, build_object_store
from seed_vault.roundtrip.models import RoundTripReport, Stage, check_equal


# Single slot: every run overwrites the previous ciphertext in the bucket
SEED_OBJECT_NAME = "seed.bin"

log = get_logger("seed_vault.roundtrip")


class _Run:
    """Tracks the stage reached so failures can report how far the run got."""

    def __init__(self, key_name: str, bucket_name: str) -> None:
        self.stage = Stage.START
        self._log = log.bind(key_name=key_name, bucket=bucket_name)

    def advance(self, stage: Stage, **fields: Any) -> None:
        self.stage = stage
        self._log.info(stage.value, **fields)

    def abort(self, error: Exception) -> None:
        if isinstance(error, RemoteCallError) and error.stage is None:
            error.stage = self.stage.value
        self._log.error(Stage.ABORTED.value, after=self.stage.value, error=str(error))
        self.stage = Stage.ABORTED


def run_round_trip(
    key_name: str,
    bucket_name: str,
    kms: KeyManagementGateway,
    store: ObjectStoreGateway,
    *,
    seed_factory: Callable[[], bytes] = generate_seed,
) -> RoundTripReport:
    """
    Seal a fresh seed with `kms`, park the ciphertext in `store` and verify
    both round trips.

    Order is fixed: generate, encrypt, decrypt, check seed, upload, download,
    check ciphertext. The first failure stops the run; nothing is retried or
    cleaned up. Raises RemoteCallError (with `.stage` set) for service
    failures and IntegrityError for mismatches.
    """
    run = _Run(key_name, bucket_name)
    run.advance(Stage.START, kms_provider=kms.provider_name, store_provider=store.provider_name)
    try:
        seed = seed_factory()
        run.advance(Stage.SEED_GENERATED, seed_length=len(seed))

        ciphertext = kms.encrypt(seed, key_name)
        run.advance(Stage.ENCRYPTED, ciphertext_length=len(ciphertext))

        decrypted = kms.decrypt(ciphertext, key_name)
        seed_check = check_equal(Stage.DECRYPTED_AND_VERIFIED, seed, decrypted)
        if not seed_check.ok:
            raise IntegrityError(seed_check)
        run.advance(Stage.DECRYPTED_AND_VERIFIED)

        store.put(ciphertext, bucket_name, SEED_OBJECT_NAME)
        run.advance(Stage.UPLOADED, object_name=SEED_OBJECT_NAME)

        downloaded = store.get(bucket_name, SEED_OBJECT_NAME)
        run.advance(Stage.DOWNLOADED, downloaded_length=len(downloaded))

        blob_check = check_equal(Stage.VERIFIED_ROUND_TRIP, ciphertext, downloaded, with_digests=True)
        if not blob_check.ok:
            raise IntegrityError(blob_check)
        run.advance(Stage.VERIFIED_ROUND_TRIP, sha256=blob_check.actual_sha256)
    except (RemoteCallError, IntegrityError) as e:
        run.abort(e)
        raise

    run.advance(Stage.DONE)
    return RoundTripReport(
        key_name=key_name,
        bucket_name=bucket_name,
        object_name=SEED_OBJECT_NAME,
        kms_provider=kms.provider_name,
        store_provider=store.provider_name,
        seed_length=len(seed),
        ciphertext_length=len(ciphertext),
        stage=run.stage,
        checks=[seed_check, blob_check],
    )


def run_once(key_name: str, bucket_name: str, settings: Optional[Settings] = None) -> RoundTripReport:
    """Resolve settings from the environment, build both gateways and run."""
    settings = settings or Settings.from_env(key_name)
    kms = build_kms_gateway(settings.kms_config())
    store = build_object_store(settings.store_config())
    return run_round_trip(key_name, bucket_name, kms, store)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    key_name = (event or {}).get("key_name")
    bucket_name = (event or {}).get("bucket_name")
    if not key_name or not bucket_name:
        raise UsageError("event must carry 'key_name' and 'bucket_name'")

    settings = Settings.from_env(key_name)
    configure_logging(settings.log_level, json_output=True)
    report = run_once(key_name, bucket_name, settings)
    return {
        "ok": True,
        "object": f"{report.bucket_name}/{report.object_name}",
        "provider": report.kms_provider,
        "seed_length": report.seed_length,
        "ciphertext_length": report.ciphertext_length,
        "stage": report.stage.value,
    }
