"""Clases base para fuentes de datos remotas."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class ApiError(Exception):
    """Recoverable failure talking to the remote API."""


class AuthError(ApiError):
    """Login rejected or token missing/expired."""


@dataclass(frozen=True)
class ApiSettings:
    """Base URL and request timeout of a remote source."""

    base_url: str
    timeout: float = 10.0


class DataSource(ABC):
    """Abstract remote data source."""

    def __init__(self, settings: ApiSettings) -> None:
        """Create a data source.

        Args:
            settings: Remote endpoint configuration.
        """
        self._settings = settings

    @abstractmethod
    def validate(self) -> None:
        """Validate the source configuration.

        Raises:
            ValueError: If the configuration cannot work.
        """
