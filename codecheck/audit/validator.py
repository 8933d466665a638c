# codecheck/audit/validator.py
import logging
from typing import Any, Dict, List, Optional

import httpx

from codecheck.config import Settings, get_settings
from codecheck.schemas import CheckResult

logger = logging.getLogger(__name__)


class ValidatorUnavailable(Exception):
    """The validator could not be reached or answered with a non-2xx status."""


def _error_lines(payload: Dict[str, Any]) -> List[str]:
    messages = payload["messages"]
    return [
        f"Line {m.get('lastLine')}: {m.get('message')}"
        for m in messages
        if isinstance(m, dict) and m.get("type") == "error"
    ]


class HtmlValidator:
    """Nu HTML checker client; only messages of type 'error' fail a file."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        self._client = client

    async def fetch_messages(self, html: str) -> Dict[str, Any]:
        headers = {
            "Content-Type": "text/html; charset=utf-8",
            "User-Agent": self.settings.USER_AGENT,
        }
        body = html.encode("utf-8")

        try:
            if self._client is not None:
                resp = await self._client.post(self.settings.W3C_VALIDATOR_URL, content=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.settings.VALIDATOR_TIMEOUT_S) as client:
                    resp = await client.post(self.settings.W3C_VALIDATOR_URL, content=body, headers=headers)
        except httpx.HTTPError as exc:
            raise ValidatorUnavailable(f"Failed to validate HTML: {exc}") from exc

        if not resp.is_success:
            raise ValidatorUnavailable(f"Validator responded with status: {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ValidatorUnavailable("Validator returned invalid JSON") from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("messages"), list):
            raise ValidatorUnavailable("Validator returned an unexpected payload")
        return payload

    async def validate(self, html: str) -> CheckResult:
        try:
            payload = await self.fetch_messages(html)
        except ValidatorUnavailable as exc:
            logger.error("Error in W3C validation: %s", exc)
            return CheckResult.failing(f"Error in W3C validation: {exc}")

        errors = _error_lines(payload)
        if not errors:
            return CheckResult.passing("HTML is valid according to W3C")
        return CheckResult.failing("W3C validation errors found", details=errors)
