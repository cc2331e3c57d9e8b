"""HTTP client for the OpenAI-compatible chat-completion endpoint.

One POST per call, no retries. Every failure (transport, non-2xx status,
undecodable or unexpectedly shaped body) is raised as ``CompletionError``.
"""
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx
import structlog
from pydantic import SecretStr

from api.features.conversation.exceptions import CompletionError
from infra.resources import HttpClientResource

logger = structlog.get_logger("bloom.completion")

SUMMARY_INSTRUCTION = (
    "Summarize this conversation in 4-5 words. "
    "Reply with the summary only, without quotes or punctuation at the end."
)


@dataclass
class CompletionResult:
    role: str
    content: str
    created: Optional[int] = None


class CompletionClient:
    """Forwards a message history to the completion endpoint."""

    def __init__(
        self,
        http_client: HttpClientResource,
        api_url: str,
        api_key: Union[SecretStr, str],
    ):
        self.http_client = http_client
        self.api_url = api_url
        self._api_key = (
            api_key.get_secret_value() if isinstance(api_key, SecretStr) else api_key
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def complete(
        self, model: str, messages: List[Dict[str, str]]
    ) -> CompletionResult:
        """Send ``{model, messages}`` and return the first choice."""
        payload = {
            "model": model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
        }
        client = self.http_client.get_client()
        start_time = time.time()
        try:
            resp = await client.post(self.api_url, headers=self._headers(), json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "completion_bad_status",
                status_code=e.response.status_code,
                model=model,
            )
            raise CompletionError(
                f"endpoint returned HTTP {e.response.status_code}",
                {"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.warning("completion_transport_failed", error=str(e), model=model)
            raise CompletionError("transport failure", {"error": type(e).__name__}) from e
        except ValueError as e:
            logger.warning("completion_invalid_json", error=str(e), model=model)
            raise CompletionError("response body is not valid JSON") from e

        result = self._parse(data)
        logger.info(
            "completion_performance",
            model=model,
            messages=len(messages),
            processing_time_ms=(time.time() - start_time) * 1000,
        )
        return result

    async def summarize(self, model: str, messages: List[Dict[str, str]]) -> str:
        """Ask the model for a 4-5 word title of the conversation so far."""
        prompt = list(messages) + [{"role": "user", "content": SUMMARY_INSTRUCTION}]
        result = await self.complete(model, prompt)
        summary = result.content.strip().strip("\"'").strip()
        if not summary:
            raise CompletionError("summary response was empty")
        return summary

    @staticmethod
    def _parse(data: Any) -> CompletionResult:
        if not isinstance(data, dict):
            raise CompletionError("response body is not a JSON object")
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise CompletionError("response has no choices")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise CompletionError("first choice has no message content")

        created = data.get("created")
        return CompletionResult(
            role=message.get("role") or "assistant",
            content=message["content"],
            created=created if isinstance(created, int) else None,
        )
