# essay_corrector/models/account.py
from typing import Literal

from pydantic import BaseModel, ConfigDict

Role = Literal["student", "admin"]


class Account(BaseModel):
    """Roster entry. Records are frozen; a password change produces a new one."""
    model_config = ConfigDict(frozen=True)

    account_id: str
    name: str
    password: str
    role: Role = "student"
    password_changed: bool = False


class AccountView(BaseModel):
    account_id: str
    name: str
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "AccountView":
        return cls(account_id=account.account_id, name=account.name, role=account.role)
