from typing import Dict, Iterator, List, Optional

from models import ClientAccount


class AccountStore:
    """Per-client balances. Accounts are created lazily and never removed."""

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def all_accounts(self) -> List[ClientAccount]:
        """Return all accounts ordered by client id (for final output)."""
        return [self._accounts[client_id] for client_id in sorted(self._accounts)]

    def __iter__(self) -> Iterator[ClientAccount]:
        return iter(self.all_accounts())

    def __len__(self) -> int:
        return len(self._accounts)
