"""Client for the text-generation service (Anthropic Messages API)."""

import json
from typing import Any, Dict, Optional

import requests

from ..constants import (
    DEFAULT_ENDPOINT, DEFAULT_ANTHROPIC_VERSION, DEFAULT_REQUEST_TIMEOUT
)
from ..errors import ServiceError
from ..utils.helpers import get_nested_value
from ..utils.logging import logger


def find_error(data: Any) -> Optional[Any]:
    """Return the value of the first ``error`` key anywhere in a decoded response."""
    if isinstance(data, dict):
        if data.get("error"):
            return data["error"]
        for value in data.values():
            found = find_error(value)
            if found is not None:
                return found
    elif isinstance(data, list):
        for item in data:
            found = find_error(item)
            if found is not None:
                return found
    return None


def describe_error(error: Any) -> str:
    if isinstance(error, dict):
        message = get_nested_value(error, "message")
        if message:
            return str(message)
        return json.dumps(error)
    return str(error)


def extract_text(response_data: Dict[str, Any]) -> str:
    """Concatenate every content item of text type."""
    content = response_data.get("content")
    if not isinstance(content, list):
        raise ServiceError("Response has no content list")
    return "".join(
        item.get("text", "")
        for item in content
        if isinstance(item, dict) and item.get("type") == "text"
    )


class LLMClient:
    """Handles communication with the generation service."""

    def __init__(self,
                 api_key: Optional[str],
                 endpoint: str = DEFAULT_ENDPOINT,
                 anthropic_version: str = DEFAULT_ANTHROPIC_VERSION,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """Initialize LLM client.

        Args:
            api_key: Key sent in the x-api-key header
            endpoint: Messages API URL
            anthropic_version: Value of the anthropic-version header
            request_timeout: Network timeout for one request in seconds
            session: Optional requests session (used for connection reuse)
        """
        self.api_key = api_key
        self.endpoint = endpoint
        self.anthropic_version = anthropic_version
        self.request_timeout = request_timeout
        self.http = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {
            "content-type": "application/json",
            "anthropic-version": self.anthropic_version,
        }
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    def send_request(self, payload: Dict[str, Any]) -> str:
        """Send one request and return the concatenated reply text.

        One blocking round trip, no retries.

        Raises:
            ServiceError: on transport failure, a non-JSON body, an ``error``
                field in the response, or a non-2xx status.
        """
        logger.debug(f"Sending request to {self.endpoint}:\n{json.dumps(payload, indent=2)}")

        try:
            response = self.http.post(
                self.endpoint,
                headers=self._headers(),
                json=payload,
                timeout=self.request_timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ServiceError(f"Request to {self.endpoint} failed: {e}") from e

        try:
            response_data = response.json()
        except ValueError as e:
            raise ServiceError(
                f"Response from {self.endpoint} is not valid JSON (HTTP {response.status_code})"
            ) from e

        logger.debug(f"Response (HTTP {response.status_code}):\n{json.dumps(response_data, indent=2)}")

        error = find_error(response_data)
        if error is not None:
            raise ServiceError(f"API Error: {describe_error(error)}")

        if not 200 <= response.status_code < 300:
            raise ServiceError(f"API request failed with HTTP status {response.status_code}")

        if not isinstance(response_data, dict):
            raise ServiceError("Response is not a JSON object")

        return extract_text(response_data)


def create_llm_client(config: Dict[str, Any]) -> LLMClient:
    """Create a configured LLM client instance."""
    return LLMClient(
        api_key=config.get("api_key"),
        endpoint=config.get("endpoint", DEFAULT_ENDPOINT),
        anthropic_version=config.get("anthropic_version", DEFAULT_ANTHROPIC_VERSION),
        request_timeout=config.get("request_timeout", DEFAULT_REQUEST_TIMEOUT),
    )
