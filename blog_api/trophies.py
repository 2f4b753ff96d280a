"""GitHub profile trophy lookup (SVG markup fetched from an external service)."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .errors import TrophyFetchError

logger = logging.getLogger(__name__)

TROPHY_THEME = "darkhub"


class TrophyClient:
    def __init__(self, service_url: str, timeout: float = 30.0, session: Any = None) -> None:
        self.service_url = service_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, username: str) -> str:
        logger.info(f"Fetching GitHub trophies for username: {username}")
        resp = self.session.get(
            self.service_url,
            params={"username": username, "theme": TROPHY_THEME},
            timeout=self.timeout,
        )
        if not resp.ok:
            logger.error(f"Failed to fetch trophies. Status: {resp.status_code}, StatusText: {resp.reason}")
            raise TrophyFetchError("Failed to fetch trophies from GitHub Profile Trophy.")

        logger.info("Fetched trophies successfully")
        return resp.text
