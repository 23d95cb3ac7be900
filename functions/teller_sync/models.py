from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Teller objects are passed through untouched; only the fields the relay reads are typed.
Transaction = Dict[str, Any]


def _str_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


class TellerAccount(BaseModel):
    """An upstream account. Fields are kept as received; accessors ignore unexpected shapes."""

    model_config = ConfigDict(extra="allow")

    id: Any = None
    institution: Any = None
    links: Any = None

    @property
    def account_id(self) -> Optional[str]:
        if isinstance(self.id, (int, float)) and not isinstance(self.id, bool):
            return str(self.id)
        return _str_or_none(self.id)

    @property
    def transactions_link(self) -> Optional[str]:
        if not isinstance(self.links, dict):
            return None
        return _str_or_none(self.links.get("transactions"))

    @property
    def institution_name(self) -> Optional[str]:
        if not isinstance(self.institution, dict):
            return None
        return _str_or_none(self.institution.get("name"))


class SyncRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None
    # Older clients send camelCase.
    accessToken: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self.access_token or self.accessToken or None


class AccountResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_id: Optional[str] = None
    institution: Optional[str] = None
    transactions: List[Transaction] = Field(default_factory=list)


class SyncRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str = Field(min_length=1)
    timestamp: str
    accounts: List[AccountResult] = Field(default_factory=list)
