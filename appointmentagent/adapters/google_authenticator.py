"""
Google Calendar authentication using a service account.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class GoogleAuthenticator:
    """
    Loads service-account credentials for the Calendar API.

    The key is taken from raw JSON (typically the ``GOOGLE_CREDENTIALS``
    environment variable) or from a key file. The calendar must be shared
    with the service account's ``client_email``.
    """

    SCOPES = ["https://www.googleapis.com/auth/calendar"]

    def __init__(
        self,
        credentials_json: Optional[str] = None,
        credentials_file: Optional[Path] = None,
    ):
        self.credentials_json = credentials_json
        self.credentials_file = credentials_file
        self._credentials: Optional[service_account.Credentials] = None

    def get_credentials(self) -> service_account.Credentials:
        """
        Return cached credentials, loading them on first use.

        Raises:
            AuthenticationError: If no key is configured or the key is invalid
        """
        if self._credentials is None:
            self._credentials = self._load_credentials()
        return self._credentials

    def _load_credentials(self) -> service_account.Credentials:
        if self.credentials_json:
            info = self._parse_key_json(self.credentials_json, source="GOOGLE_CREDENTIALS")
            try:
                credentials = service_account.Credentials.from_service_account_info(
                    info, scopes=self.SCOPES
                )
            except (GoogleAuthError, ValueError, KeyError) as exc:
                raise AuthenticationError(f"Invalid service account key: {exc}") from exc
            logger.debug("Loaded service account %s from JSON", info.get("client_email"))
            return credentials

        if self.credentials_file:
            if not Path(self.credentials_file).exists():
                raise AuthenticationError(
                    f"Service account key file not found: {self.credentials_file}"
                )
            try:
                credentials = service_account.Credentials.from_service_account_file(
                    str(self.credentials_file), scopes=self.SCOPES
                )
            except (GoogleAuthError, ValueError, KeyError) as exc:
                raise AuthenticationError(
                    f"Invalid service account key file {self.credentials_file}: {exc}"
                ) from exc
            logger.debug("Loaded service account key from %s", self.credentials_file)
            return credentials

        raise AuthenticationError(
            "No Google credentials configured. Set GOOGLE_CREDENTIALS or "
            "GOOGLE_APPLICATION_CREDENTIALS, or credentials_file in config.yaml."
        )

    @staticmethod
    def _parse_key_json(raw: str, source: str) -> Dict[str, Any]:
        try:
            info = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise AuthenticationError(f"{source} is not valid JSON") from exc
        if not isinstance(info, dict):
            raise AuthenticationError(f"{source} must contain a JSON object")
        return info
