"""
Account storage.

Accounts are kept in memory and, when a path is configured, persisted to a
JSON file after every change. All methods are thread-safe.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from virtual_assistant.accounts.models import UserAccount

logger = logging.getLogger(__name__)


class AccountError(Exception):
    """Base class for account store errors."""


class DuplicateEmailError(AccountError):
    """An account with this email already exists."""


class UnknownAccountError(AccountError):
    """No account with this id."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountStore:
    """
    Thread-safe account store.

    Usage:
        store = AccountStore()                       # In-memory
        store = AccountStore(Path("accounts.json"))  # Persisted
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path).expanduser() if path else None
        self._accounts: dict[str, UserAccount] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text())
            for item in data:
                account = UserAccount.model_validate(item)
                self._accounts[account.id] = account
            logger.info("Loaded %d accounts from %s", len(self._accounts), self._path)
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            logger.error("Failed to load accounts from %s: %s", self._path, e)

    def _save(self) -> None:
        # Caller holds self._lock
        if self._path is None:
            return
        data = [account.model_dump(mode="json") for account in self._accounts.values()]
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False))
        tmp.replace(self._path)

    def _require(self, user_id: str) -> UserAccount:
        account = self._accounts.get(user_id)
        if account is None:
            raise UnknownAccountError(user_id)
        return account

    def create(self, name: str, email: str, password_hash: str) -> UserAccount:
        """
        Create an account.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        email = normalize_email(email)
        with self._lock:
            if any(a.email == email for a in self._accounts.values()):
                raise DuplicateEmailError(email)
            account = UserAccount(name=name.strip(), email=email, password_hash=password_hash)
            self._accounts[account.id] = account
            self._save()
        logger.info("Created account %s", account.id)
        return account.model_copy(deep=True)

    def get(self, user_id: str) -> Optional[UserAccount]:
        with self._lock:
            account = self._accounts.get(user_id)
            return account.model_copy(deep=True) if account else None

    def find_by_email(self, email: str) -> Optional[UserAccount]:
        email = normalize_email(email)
        with self._lock:
            for account in self._accounts.values():
                if account.email == email:
                    return account.model_copy(deep=True)
        return None

    def update_assistant(
        self,
        user_id: str,
        assistant_name: Optional[str] = None,
        assistant_image: Optional[str] = None,
    ) -> UserAccount:
        """
        Update assistant customization. Empty values leave fields unchanged.

        Raises:
            UnknownAccountError: If the account does not exist
        """
        with self._lock:
            account = self._require(user_id)
            if assistant_name:
                account.assistant_name = assistant_name.strip()
            if assistant_image:
                account.assistant_image = assistant_image
            account.updated_at = datetime.now(timezone.utc)
            self._save()
            return account.model_copy(deep=True)

    def append_history(self, user_id: str, command: str) -> UserAccount:
        """
        Append a command to the account's history.

        Raises:
            UnknownAccountError: If the account does not exist
        """
        with self._lock:
            account = self._require(user_id)
            account.history.append(command)
            account.updated_at = datetime.now(timezone.utc)
            self._save()
            return account.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._accounts)

    def __repr__(self) -> str:
        where = str(self._path) if self._path else "memory"
        return f"AccountStore({len(self)} accounts, {where})"
