from datetime import datetime, timezone
from typing import Any, Callable, List

from loguru import logger

try:  # pragma: no cover
    from .errors import PersistenceError, ResponseParseError, ValidationError
    from .filtering import RECENT_MONTHS, filter_recent
    from .models import AccountResult, SyncRecord, TellerAccount
    from .serialization import sync_record_to_dict
    from .store import SyncStore
    from .teller_client import fetch_json
except Exception:  # pragma: no cover
    from errors import PersistenceError, ResponseParseError, ValidationError
    from filtering import RECENT_MONTHS, filter_recent
    from models import AccountResult, SyncRecord, TellerAccount
    from serialization import sync_record_to_dict
    from store import SyncStore
    from teller_client import fetch_json

Fetcher = Callable[[str, str], Any]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_accounts(payload: Any) -> List[TellerAccount]:
    if not isinstance(payload, list):
        raise ResponseParseError("Teller API returned unexpected accounts payload (expected a list)")
    accounts: List[TellerAccount] = []
    for item in payload:
        if not isinstance(item, dict):
            logger.debug(f"Skipping non-object account entry: {item!r}")
            continue
        accounts.append(TellerAccount.model_validate(item))
    return accounts


def sync_accounts(access_token: str | None, *, store: SyncStore, fetch: Fetcher = fetch_json) -> SyncRecord:
    """
    Fetch accounts and their recent transactions for `access_token` and persist the result.

    Any upstream failure aborts the whole sync before anything is stored.
    A failed file write is logged only; the record is still returned.
    """
    if not access_token:
        raise ValidationError("Missing access_token")

    accounts = _parse_accounts(fetch("/accounts", access_token))

    results: List[AccountResult] = []
    for account in accounts:
        link = account.transactions_link
        if not link:
            logger.debug(f"Skipping account {account.account_id}: no transactions link")
            continue
        transactions = fetch(link, access_token)
        if not isinstance(transactions, list):
            raise ResponseParseError(
                f"Teller API returned unexpected transactions payload for account {account.account_id} (expected a list)"
            )
        results.append(
            AccountResult(
                account_id=account.account_id,
                institution=account.institution_name,
                transactions=filter_recent(transactions, RECENT_MONTHS),
            )
        )

    record = SyncRecord(access_token=access_token, timestamp=_now_iso(), accounts=results)

    try:
        store.add(sync_record_to_dict(record))
    except PersistenceError as e:
        logger.error(f"Sync record not persisted: {e}")

    logger.info(f"Sync finished: {len(accounts)} accounts fetched, {len(results)} with transactions")
    return record
