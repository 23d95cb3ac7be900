from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

from jinja2 import Environment

_env = Environment(autoescape=True)

_PAGE = _env.from_string(
    """<html><head><title>Teller Sync Data</title>
<style>body{font-family:Arial,sans-serif;margin:20px;}table{border-collapse:collapse;width:100%;}th,td{border:1px solid #ddd;padding:8px;}th{background:#f2f2f2;text-align:left;}pre{white-space:pre-wrap;margin:0}</style>
</head><body>
<h1>Teller Sync Data</h1>
<table>
<tr><th>Timestamp</th><th>Access Token</th><th>Accounts &amp; Transactions</th></tr>
{%- for row in rows %}
<tr><td>{{ row.timestamp }}</td><td>{{ row.access_token }}</td><td><pre>{{ row.accounts }}</pre></td></tr>
{%- endfor %}
</table>
</body></html>
"""
)


def _accounts_cell(accounts: Any) -> str:
    try:
        return json.dumps(accounts, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return "Invalid entry"


def _row(record: Any) -> Dict[str, str]:
    if not isinstance(record, dict):
        return {"timestamp": "", "access_token": "", "accounts": "Invalid entry"}
    return {
        "timestamp": str(record.get("timestamp") or ""),
        "access_token": str(record.get("accessToken") or ""),
        "accounts": _accounts_cell(record.get("accounts")),
    }


def render_admin_page(records: Iterable[Any]) -> str:
    rows: List[Dict[str, str]] = [_row(r) for r in records]
    return _PAGE.render(rows=rows)
