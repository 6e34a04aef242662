#!/usr/bin/env python3
"""
Webhook notifier that reports a job's terminal status to external services.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

import requests

from exceptions import StatusNotificationError
from config import (
    RECORDING_TZ,
    STATUS_WEBHOOK_URLS,
    WEBHOOK_TIMEOUT,
)

from .status import ServiceStatus


class WebhookStatusNotifier:
    """Status handler that POSTs the terminal status to each configured URL."""

    def __init__(
        self,
        call_name: str,
        urls: Optional[List[str]] = None,
        timeout: int = WEBHOOK_TIMEOUT,
        timezone: Any = RECORDING_TZ,
        session: Optional[requests.Session] = None
    ):
        self.call_name = call_name
        self.urls = list(STATUS_WEBHOOK_URLS if urls is None else urls)
        self.timeout = timeout
        self.timezone = timezone
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    def _post(self, url: str, payload: dict) -> None:
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise StatusNotificationError(url, str(e)) from e

    def __call__(self, status: ServiceStatus) -> None:
        """Deliver the status; failures are logged per URL and never raised."""
        payload = {
            'call_name': self.call_name,
            'status': status.value,
            'timestamp': datetime.now(self.timezone).isoformat(),
        }
        for url in self.urls:
            try:
                self._post(url, payload)
                self.logger.info(f"Status {status.name} delivered to {url}")
            except StatusNotificationError as e:
                self.logger.warning(str(e))
