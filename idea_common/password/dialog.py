from __future__ import annotations

import getpass
from typing import Callable, Protocol, TextIO


class PasswordPrompt(Protocol):
    def get_password(self) -> bytearray | None: ...


class PasswordDialog:
    """
    Prompt the user for a password on the terminal.

    The input is not echoed. get_password() returns None when the user
    cancels with Ctrl-C or Ctrl-D.
    """

    def __init__(
        self,
        title: str = "Password",
        prompt: str = "Password:",
        *,
        stream: TextIO | None = None,
        reader: Callable[..., str] = getpass.getpass,
    ) -> None:
        self.title = title
        self.prompt = prompt
        self._stream = stream
        self._reader = reader

    def _label(self) -> str:
        label = self.prompt if self.prompt.endswith(":") else f"{self.prompt}:"
        if self.title:
            return f"{self.title} - {label} "
        return f"{label} "

    def get_password(self) -> bytearray | None:
        try:
            text = self._reader(self._label(), stream=self._stream)
        except (EOFError, KeyboardInterrupt):
            return None
        return bytearray(text.encode("utf-8"))
