"""
Remote parameters provider.

Reads a JSON object of runtime parameters from ``PARAMS_URL`` once at
construction. An unreachable URL or a payload that is not a JSON object
leaves the provider empty rather than failing startup.
"""

import logging
from typing import Any, Dict, Optional

import requests

from hospital.core.config import get_params_timeout, get_params_url

logger = logging.getLogger(__name__)


class JsonFileConfigProvider:
    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url if url is not None else get_params_url()
        self.timeout = timeout if timeout is not None else get_params_timeout()
        self.session = session or requests.Session()
        self._data: Dict[str, Any] = self._fetch()

    def _fetch(self) -> Dict[str, Any]:
        if not self.url:
            logger.debug("No PARAMS_URL configured; remote parameters disabled")
            return {}
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.warning(
                "Remote parameters unavailable",
                extra={"context": {"url": self.url, "error": str(e)}},
            )
            return {}
        except ValueError as e:
            logger.warning(
                "Remote parameters are not valid JSON",
                extra={"context": {"url": self.url, "error": str(e)}},
            )
            return {}

        if not isinstance(payload, dict):
            logger.warning(
                "Remote parameters payload is not a JSON object",
                extra={"context": {"url": self.url, "type": type(payload).__name__}},
            )
            return {}

        logger.info(
            "Remote parameters loaded",
            extra={"context": {"url": self.url, "keys": len(payload)}},
        )
        return payload

    def get_config_data(self) -> Dict[str, Any]:
        return dict(self._data)

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def close(self) -> None:
        self.session.close()
