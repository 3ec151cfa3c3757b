import json
import unittest

import httpx

from docbrief.core.config import Settings
from docbrief.core.errors import ProviderError
from docbrief.models.generation import GenerationTask
from docbrief.services.provider_client import ProviderClient
from docbrief.services.providers import build_provider_table

SETTINGS = Settings(openai_api_key="sk-test", huggingface_api_key="hf-test")
TABLE = build_provider_table(SETTINGS)
HF_SUMMARY = TABLE[GenerationTask.SUMMARIZE][0]
OPENAI_QUIZ = TABLE[GenerationTask.QUIZ][0]

LOADING = {"error": "Model facebook/bart-large-cnn is currently loading", "estimated_time": 20.0}


def completion(content: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-3.5-turbo",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class ProviderClientTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list = []
        self.sleeps: list[float] = []

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def _sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    def client(self, settings: Settings = SETTINGS) -> ProviderClient:
        return ProviderClient(settings, transport=httpx.MockTransport(self._handler), sleep=self._sleep)


class TestHuggingFaceCalls(ProviderClientTestCase):
    async def test_posts_inputs_with_bearer_auth(self) -> None:
        self.responses = [httpx.Response(200, json=[{"summary_text": "ok"}])]

        result = await self.client().invoke(HF_SUMMARY, "hello")

        self.assertEqual(result, [{"summary_text": "ok"}])
        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(
            str(request.url),
            "https://api-inference.huggingface.co/models/facebook/bart-large-cnn",
        )
        self.assertEqual(request.headers["Authorization"], "Bearer hf-test")
        self.assertEqual(json.loads(request.content), {"inputs": "hello"})
        self.assertEqual(self.sleeps, [])

    async def test_repeated_loading_retries_max_times_then_raises(self) -> None:
        self.responses = [httpx.Response(503, json=LOADING)]

        with self.assertRaises(ProviderError) as ctx:
            await self.client().invoke(HF_SUMMARY, "hello")

        self.assertEqual(ctx.exception.provider, "huggingface-summary")
        self.assertEqual(len(self.requests), SETTINGS.provider_max_retries)
        self.assertEqual(self.sleeps, [2.0, 4.0])
        self.assertEqual(self.sleeps, sorted(self.sleeps))

    async def test_max_retries_is_configurable(self) -> None:
        self.responses = [httpx.Response(503, json=LOADING)]
        settings = Settings(huggingface_api_key="hf-test", provider_max_retries=5)

        with self.assertRaises(ProviderError):
            await self.client(settings).invoke(HF_SUMMARY, "hello")

        self.assertEqual(len(self.requests), 5)
        self.assertEqual(self.sleeps, [2.0, 4.0, 6.0, 8.0])

    async def test_other_errors_use_shorter_backoff(self) -> None:
        self.responses = [
            httpx.Response(500, text="upstream exploded"),
            httpx.Response(200, json={"error": "Input is too long"}),
            httpx.Response(200, json=[{"summary_text": "finally"}]),
        ]

        result = await self.client().invoke(HF_SUMMARY, "hello")

        self.assertEqual(result, [{"summary_text": "finally"}])
        self.assertEqual(self.sleeps, [1.0, 2.0])

    async def test_loading_then_success(self) -> None:
        self.responses = [
            httpx.Response(503, json=LOADING),
            httpx.Response(200, json=[{"summary_text": "warm"}]),
        ]

        result = await self.client().invoke(HF_SUMMARY, "hello")

        self.assertEqual(result, [{"summary_text": "warm"}])
        self.assertEqual(self.sleeps, [2.0])

    async def test_timeout_is_wrapped_in_provider_error(self) -> None:
        self.responses = [httpx.ReadTimeout("timed out")]

        with self.assertRaises(ProviderError) as ctx:
            await self.client().invoke(HF_SUMMARY, "hello")

        self.assertIsInstance(ctx.exception.__cause__, httpx.ReadTimeout)
        self.assertEqual(len(self.requests), 3)

    async def test_missing_key_fails_without_network(self) -> None:
        self.responses = [httpx.Response(200, json=[{"summary_text": "ok"}])]

        with self.assertRaises(ProviderError):
            await self.client(Settings(openai_api_key="sk-test")).invoke(HF_SUMMARY, "hello")

        self.assertEqual(self.requests, [])


class TestOpenAICalls(ProviderClientTestCase):
    async def test_chat_completion_is_returned_as_dict(self) -> None:
        self.responses = [httpx.Response(200, json=completion("[]"))]
        payload = OPENAI_QUIZ.prepare("Some document text")

        result = await self.client().invoke(OPENAI_QUIZ, payload)

        self.assertEqual(result["choices"][0]["message"]["content"], "[]")
        body = json.loads(self.requests[0].content)
        self.assertEqual(body["model"], "gpt-3.5-turbo")
        self.assertEqual(body["max_tokens"], 1000)
        self.assertEqual(body["messages"][0]["role"], "system")
        self.assertIn("Some document text", body["messages"][1]["content"])
        self.assertEqual(self.requests[0].headers["Authorization"], "Bearer sk-test")

    async def test_server_errors_are_retried_then_raised(self) -> None:
        self.responses = [httpx.Response(500, json={"error": {"message": "boom"}})]

        with self.assertRaises(ProviderError):
            await self.client().invoke(OPENAI_QUIZ, OPENAI_QUIZ.prepare("text"))

        self.assertEqual(len(self.requests), 3)
        self.assertEqual(self.sleeps, [1.0, 2.0])


if __name__ == "__main__":
    unittest.main()
