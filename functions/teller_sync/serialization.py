from __future__ import annotations

from typing import Any, Dict

try:  # pragma: no cover
    from .models import AccountResult, SyncRecord
except Exception:  # pragma: no cover
    from models import AccountResult, SyncRecord


def account_result_to_dict(result: AccountResult) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if result.account_id is not None:
        out["accountId"] = result.account_id
    if result.institution is not None:
        out["institution"] = result.institution
    out["transactions"] = list(result.transactions)
    return out


def sync_record_to_dict(record: SyncRecord) -> Dict[str, Any]:
    return {
        "accessToken": record.access_token,
        "timestamp": record.timestamp,
        "accounts": [account_result_to_dict(a) for a in record.accounts],
    }
