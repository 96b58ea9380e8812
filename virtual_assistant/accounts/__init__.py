"""
Accounts: storage, credentials, session tokens and profile images.
"""

from virtual_assistant.accounts.media import MediaUploader
from virtual_assistant.accounts.models import Profile, UserAccount
from virtual_assistant.accounts.security import (
    TokenError,
    hash_password,
    issue_token,
    read_token,
    verify_password,
)
from virtual_assistant.accounts.store import (
    AccountError,
    AccountStore,
    DuplicateEmailError,
    UnknownAccountError,
)

__all__ = [
    "AccountError",
    "AccountStore",
    "DuplicateEmailError",
    "UnknownAccountError",
    "MediaUploader",
    "Profile",
    "UserAccount",
    "TokenError",
    "hash_password",
    "issue_token",
    "read_token",
    "verify_password",
]
