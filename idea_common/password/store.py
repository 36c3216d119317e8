"""
Manage passwords in a credential store.

Secrets are passed around as bytearrays so that callers can explicitly
clear them from memory when they are no longer needed.
"""

from __future__ import annotations

import base64
import json
import logging
import os
from pathlib import Path
from typing import Protocol

from idea_common.util import xdg_config_home


class CredentialStore(Protocol):
    def get(self, service: str) -> bytearray | None: ...

    def set(self, service: str, secret: bytes | bytearray | None) -> None: ...


def generate_service_name(subsystem: str, key: str) -> str:
    return f"idea-common {subsystem} - {key}"


def default_credentials_path() -> Path:
    return xdg_config_home() / "idea-common" / "credentials.json"


class MemoryCredentialStore:
    """Process-local store; nothing is persisted."""

    def __init__(self) -> None:
        self._data: dict[str, bytearray] = {}

    def get(self, service: str) -> bytearray | None:
        secret = self._data.get(service)
        return bytearray(secret) if secret is not None else None

    def set(self, service: str, secret: bytes | bytearray | None) -> None:
        old = self._data.pop(service, None)
        if old is not None:
            old[:] = bytes(len(old))
        if secret is not None:
            self._data[service] = bytearray(secret)


class FileCredentialStore:
    """
    Store secrets in a JSON file that only the owner can read.

    Secrets are base64 encoded, not encrypted. The file is created with
    mode 0600.
    """

    def __init__(self, path: Path | None = None, logger: logging.Logger | None = None) -> None:
        self._path = path or default_credentials_path()
        self._logger = logger or logging.getLogger(__name__)
        self._data: dict[str, str] = {}
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self._path.exists():
            self._data = {}
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8")) or {}
        except (OSError, ValueError) as e:
            self._logger.warning("Failed to read credentials file %s: %s", self._path, e)
            raw = {}
        if not isinstance(raw, dict):
            self._logger.warning("Ignoring malformed credentials file %s", self._path)
            raw = {}
        self._data = {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def get(self, service: str) -> bytearray | None:
        self.load()
        encoded = self._data.get(service)
        if encoded is None:
            return None
        return bytearray(base64.b64decode(encoded))

    def set(self, service: str, secret: bytes | bytearray | None) -> None:
        self.load()
        if secret is None:
            if self._data.pop(service, None) is None:
                return
        else:
            self._data[service] = base64.b64encode(bytes(secret)).decode("ascii")
        self._save()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(self._data, indent=2, sort_keys=True) + "\n")
        os.chmod(self._path, 0o600)


def default_store() -> CredentialStore:
    return FileCredentialStore()


class StoredPassword:
    """A password kept in a credential store under a fixed key."""

    def __init__(self, key: str, store: CredentialStore | None = None) -> None:
        self._logger = logging.getLogger(__name__)
        self._service = generate_service_name(__name__.rsplit(".", 1)[0], key)
        self._store = store

    @property
    def service(self) -> str:
        return self._service

    @property
    def store(self) -> CredentialStore:
        return self._store if self._store is not None else default_store()

    @property
    def value(self) -> bytearray | None:
        self._logger.debug("Loading password from credential store for %s", self._service)
        return self.store.get(self._service)

    @value.setter
    def value(self, value: str | bytes | bytearray | None) -> None:
        if value is None:
            self._logger.debug("Removing password from credential store for %s", self._service)
            self.store.set(self._service, None)
            return
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._logger.debug("Saving password to credential store for %s", self._service)
        self.store.set(self._service, value)
