from idea_common.password.dialog import PasswordDialog, PasswordPrompt
from idea_common.password.store import (
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
    StoredPassword,
    generate_service_name,
)

__all__ = [
    "PasswordDialog",
    "PasswordPrompt",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "StoredPassword",
    "generate_service_name",
]
