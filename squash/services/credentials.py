"""
Credential store — holds the single API key used by the AI coach.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Optional

from squash.config import settings


class CredentialStore(ABC):
    """Get, set or delete one named credential string."""

    @abstractmethod
    def get(self) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, value: str) -> None:
        ...

    @abstractmethod
    def delete(self) -> None:
        ...

    @property
    def has_credential(self) -> bool:
        value = self.get()
        return bool(value and value.strip())


class EnvCredentialStore(CredentialStore):
    """Credential held in the process environment."""

    def __init__(self, variable: Optional[str] = None):
        self.variable = variable or settings.OPENAI_API_KEY_ENV

    def get(self) -> Optional[str]:
        return os.environ.get(self.variable) or None

    def set(self, value: str) -> None:
        if not value or not value.strip():
            self.delete()
            return
        os.environ[self.variable] = value.strip()

    def delete(self) -> None:
        os.environ.pop(self.variable, None)


class InMemoryCredentialStore(CredentialStore):
    """Credential that lives only as long as this object."""

    def __init__(self, value: Optional[str] = None):
        self._value: Optional[str] = None
        if value:
            self.set(value)

    def get(self) -> Optional[str]:
        return self._value

    def set(self, value: str) -> None:
        if not value or not value.strip():
            self.delete()
            return
        self._value = value.strip()

    def delete(self) -> None:
        self._value = None
