"""Async AI completion client for OpenRouter chat completions.

Wraps the OpenAI SDK's AsyncOpenAI client pointed at OpenRouter's
OpenAI-compatible endpoint. One client instance serves one provider
credential and can be shared by any number of concurrent research tasks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from company_research import constants
from company_research.exceptions import (
    ConnectivityError,
    MalformedResponseError,
    ProviderError,
)
from company_research.logging_config import get_structured_logger
from company_research.settings import ResearchSettings

slogger = get_structured_logger(__name__)


@dataclass
class CompletionResult:
    """Text content of one chat completion plus metadata."""

    text: str
    model: str
    total_tokens: Optional[int] = None


class CompletionClient:
    """Thin wrapper around AsyncOpenAI pointed at OpenRouter.

    Usage:
        client = CompletionClient(api_key="sk-or-...")
        result = await client.complete(system_prompt, user_prompt, temperature=0.2)
        result.text  # response content

    Errors are normalized to ProviderError (HTTP error status),
    ConnectivityError (no response) and MalformedResponseError (no content).
    """

    def __init__(
        self,
        api_key: str,
        model: str = constants.DEFAULT_MODEL,
        base_url: str = constants.DEFAULT_BASE_URL,
        timeout: float = constants.DEFAULT_TIMEOUT,
        referer: str = constants.DEFAULT_REFERER,
        app_title: str = constants.DEFAULT_APP_TITLE,
    ):
        """Initialize the completion client.

        Args:
            api_key: Provider credential, sent as a bearer token
            model: Default model id for completions
            base_url: OpenAI-compatible API root (default: OpenRouter)
            timeout: Per-request timeout in seconds
            referer: HTTP-Referer attribution header
            app_title: X-Title attribution header
        """
        self.model = model
        self._base_url = base_url
        self._timeout = timeout
        self._app_title = app_title

        self._client = AsyncOpenAI(
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
            default_headers={"HTTP-Referer": referer, "X-Title": app_title},
        )

    @classmethod
    def from_settings(cls, api_key: str, settings: ResearchSettings) -> "CompletionClient":
        """Build a client from research settings."""
        return cls(
            api_key=api_key,
            model=settings.model,
            base_url=settings.base_url,
            timeout=settings.timeout,
            referer=settings.referer,
            app_title=settings.app_title,
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        model_override: Optional[str] = None,
        title_suffix: Optional[str] = None,
        credential: Optional[str] = None,
    ) -> CompletionResult:
        """Run one chat completion.

        Args:
            system_prompt: System message content
            user_prompt: User message content
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response
            model_override: Use this model instead of the client default
            title_suffix: Appended to the X-Title header for this request
            credential: Send this API key instead of the client default

        Returns:
            CompletionResult with the reply text

        Raises:
            ConnectivityError: Timeout or no connection to the provider
            ProviderError: Provider returned a non-success HTTP status
            MalformedResponseError: Success response without message content
        """
        model = model_override or self.model
        extra_headers = None
        if title_suffix:
            extra_headers = {"X-Title": f"{self._app_title} - {title_suffix}"}

        client = self._client.with_options(api_key=credential) if credential else self._client

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                extra_headers=extra_headers,
            )

        except APITimeoutError as e:
            raise ConnectivityError(
                f"Provider request timed out after {self._timeout}s"
            ) from e

        except APIConnectionError as e:
            raise ConnectivityError(
                f"Could not get response from provider at {self._base_url}: {e}"
            ) from e

        except APIStatusError as e:
            status = e.status_code
            body = e.body if e.body is not None else str(e)
            raise ProviderError(
                f"Provider API error (HTTP {status}): {body}",
                status_code=status,
                body=body,
            ) from e

        text = _extract_content(response)
        actual_model = getattr(response, "model", None) or model
        total_tokens = getattr(getattr(response, "usage", None), "total_tokens", None)

        slogger.ai_activity(
            title_suffix or "completion",
            "succeeded",
            {"model": actual_model, "tokens": total_tokens},
        )

        return CompletionResult(text=text.strip(), model=actual_model, total_tokens=total_tokens)

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        await self._client.close()

    async def __aenter__(self) -> "CompletionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def _extract_content(response) -> str:
    """Return choices[0].message.content or raise MalformedResponseError."""
    # OpenRouter can report upstream failures in a 200 body
    error = getattr(response, "error", None)
    if isinstance(error, dict):
        status = error.get("code")
        raise ProviderError(
            f"Provider API error ({status}): {error.get('message', error)}",
            status_code=status if isinstance(status, int) else None,
            body=error,
        )

    choices = getattr(response, "choices", None)
    if not choices:
        raise MalformedResponseError("malformed content: response has no choices")

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if not isinstance(content, str):
        raise MalformedResponseError("malformed content: response message has no text")

    return content
