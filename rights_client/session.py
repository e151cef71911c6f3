"""
Client session value.

Sessions are immutable: login, registration and self-deauthorization return a
new Session and the caller threads it into later calls, so concurrent
operations never race on shared session fields.
"""
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Session:
    client_id: str
    account_id: str = ""
    root_document_id: str = ""

    @property
    def is_logged_in(self) -> bool:
        return bool(self.account_id)

    def logged_in(self, account_id: str, root_document_id: str) -> "Session":
        return replace(self, account_id=account_id, root_document_id=root_document_id)

    def anonymous(self) -> "Session":
        return replace(self, account_id="", root_document_id="")
