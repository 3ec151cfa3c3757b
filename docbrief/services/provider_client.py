"""Single-provider calls with bounded retry."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import httpx
from openai import AsyncOpenAI
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from docbrief.core.config import Settings
from docbrief.core.errors import ProviderError
from docbrief.core.logging import get_logger
from docbrief.services.providers import ProviderKind, ProviderSpec

logger = get_logger(__name__)

# Seconds per attempt number
LOADING_BACKOFF = 2.0
ERROR_BACKOFF = 1.0


class ModelLoadingError(Exception):
    """Provider reported that the requested model is still loading."""


def backoff_seconds(retry_state: RetryCallState) -> float:
    """Attempt-scaled delay; a loading model waits twice as long as an error."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    base = LOADING_BACKOFF if isinstance(exc, ModelLoadingError) else ERROR_BACKOFF
    return base * retry_state.attempt_number


class ProviderClient:
    """Issues generation requests to Hugging Face and OpenAI.

    Args:
        settings: Process-wide settings (API keys, URLs, timeout, retries)
        transport: Optional httpx transport, used by tests to stub the network
        sleep: Coroutine used for backoff between attempts
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._sleep = sleep

    @property
    def max_retries(self) -> int:
        return self._settings.provider_max_retries

    async def invoke(self, provider: ProviderSpec, payload: Any) -> Any:
        """Call one provider, retrying transient failures.

        Returns:
            The provider's decoded JSON response

        Raises:
            ProviderError: If the key is missing or every attempt failed
        """
        if not self._api_key(provider):
            raise ProviderError(provider.name, "missing API key")

        call = self._call_huggingface if provider.kind == ProviderKind.HUGGINGFACE else self._call_openai
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(Exception),
            stop=stop_after_attempt(self.max_retries),
            wait=backoff_seconds,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    number = attempt.retry_state.attempt_number
                    try:
                        result = await call(provider, payload)
                    except ModelLoadingError:
                        logger.warning(
                            "Provider %s: model loading, attempt %d/%d",
                            provider.name,
                            number,
                            self.max_retries,
                        )
                        raise
                    except Exception as exc:
                        logger.warning(
                            "Provider %s: attempt %d/%d failed - %s",
                            provider.name,
                            number,
                            self.max_retries,
                            exc,
                        )
                        raise
                    logger.info(
                        "Provider %s: attempt %d/%d succeeded",
                        provider.name,
                        number,
                        self.max_retries,
                    )
        except Exception as exc:
            raise ProviderError(provider.name, f"{type(exc).__name__}: {exc}") from exc

        return result

    def _api_key(self, provider: ProviderSpec) -> str:
        if provider.kind == ProviderKind.HUGGINGFACE:
            return self._settings.huggingface_api_key
        return self._settings.openai_api_key

    async def _call_huggingface(self, provider: ProviderSpec, payload: Any) -> Any:
        async with httpx.AsyncClient(
            base_url=self._settings.huggingface_base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {self._settings.huggingface_api_key}",
                "Accept": "application/json",
            },
            timeout=self._settings.provider_timeout,
            transport=self._transport,
        ) as client:
            response = await client.post(f"/{provider.model}", json={"inputs": payload})

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("error"):
            message = str(data["error"])
            if "loading" in message.lower():
                raise ModelLoadingError(message)
            raise ValueError(f"Provider reported error: {message}")

        response.raise_for_status()
        if data is None:
            raise ValueError("Provider returned a non-JSON response.")
        return data

    async def _call_openai(self, provider: ProviderSpec, payload: dict[str, Any]) -> dict[str, Any]:
        http_client = None
        if self._transport is not None:
            http_client = httpx.AsyncClient(
                transport=self._transport, timeout=self._settings.provider_timeout
            )
        async with AsyncOpenAI(
            api_key=self._settings.openai_api_key,
            base_url=self._settings.openai_base_url,
            timeout=self._settings.provider_timeout,
            max_retries=0,
            http_client=http_client,
        ) as client:
            completion = await client.chat.completions.create(
                model=provider.model,
                messages=payload["messages"],
                max_tokens=payload["max_tokens"],
            )
        return completion.model_dump()
