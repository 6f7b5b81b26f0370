"""
OpenAI chat completion calls for keto analysis.

The only I/O boundary of the pipeline. Configuration is injected through the
constructor so tests can pass a fake client.
"""
import logging

import openai
from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ketometer.core.config import Settings
from ketometer.core.errors import MalformedJSON, UpstreamTimeout, UpstreamUnavailable
from ketometer.core.logger import logger, log_ai_call, log_error
from ketometer.services.image_service import images_to_content
from ketometer.services.prompt_builder import Prompt


# Only transient errors are retried: rate limits and connection failures.
# APITimeoutError subclasses APIConnectionError but is not retried, so a
# request never waits longer than one timeout.
RETRYABLE_ERRORS = (openai.RateLimitError, openai.APIConnectionError)
NON_RETRYABLE_ERRORS = (openai.APITimeoutError,)


class ModelInvoker:
    """Sends a built prompt to OpenAI and returns the raw JSON text."""

    def __init__(
        self,
        api_key: str,
        text_model: str = "gpt-4o-mini",
        vision_model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        connect_timeout: float = 10.0,
        max_attempts: int = 2,
        retry_wait=None,
        client: AsyncOpenAI = None,
    ):
        self.text_model = text_model
        self.vision_model = vision_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        # Per-call timeout. A stalled response fails the request instead of hanging it.
        self.timeout = openai.Timeout(timeout, connect=connect_timeout)
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)
        # Retries are handled by tenacity, not the SDK
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelInvoker":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            text_model=settings.OPENAI_TEXT_MODEL,
            vision_model=settings.OPENAI_VISION_MODEL,
            temperature=settings.TEMPERATURE_ANALYSIS,
            max_tokens=settings.OPENAI_MAX_TOKENS,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
            connect_timeout=settings.OPENAI_CONNECT_TIMEOUT_SECONDS,
            max_attempts=settings.OPENAI_MAX_ATTEMPTS,
        )

    def model_for(self, prompt: Prompt) -> str:
        """Vision model whenever images are attached."""
        return self.vision_model if prompt.images else self.text_model

    def build_messages(self, prompt: Prompt) -> list[dict]:
        if prompt.images:
            user_content = [
                {"type": "text", "text": prompt.user},
                *images_to_content(prompt.images),
            ]
        else:
            user_content = prompt.user

        return [
            {"role": "system", "content": prompt.system},
            {"role": "user", "content": user_content},
        ]

    async def _create(self, model: str, messages: list[dict]):
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=(
                retry_if_exception_type(RETRYABLE_ERRORS)
                & retry_if_not_exception_type(NON_RETRYABLE_ERRORS)
            ),
            before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self.client.chat.completions.create(
                    model=model,
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    response_format={"type": "json_object"},
                    timeout=self.timeout,
                )

    async def invoke(self, prompt: Prompt) -> str:
        """
        Call OpenAI with JSON output enforced.

        Retries RateLimitError / APIConnectionError up to max_attempts
        in total with exponential backoff.

        Args:
            prompt: System and user instructions plus images

        Returns:
            Raw response text, expected to be a JSON object

        Raises:
            UpstreamTimeout: If the call exceeded the timeout
            UpstreamUnavailable: If OpenAI could not be reached or returned an error status
            MalformedJSON: If the completion carried no content
        """
        model = self.model_for(prompt)
        operation = f"Vision API ({len(prompt.images)} images)" if prompt.images else "Chat API"
        log_ai_call(operation, model)

        try:
            response = await self._create(model, self.build_messages(prompt))
        except openai.APITimeoutError as e:
            log_error("OpenAI call", e)
            raise UpstreamTimeout("Analysis service timed out")
        except openai.APIStatusError as e:
            log_error("OpenAI call", e)
            raise UpstreamUnavailable(f"OpenAI API error: status {e.status_code}")
        except openai.APIError as e:
            log_error("OpenAI call", e)
            raise UpstreamUnavailable("Could not reach analysis service")

        if not response.choices or not response.choices[0].message.content:
            raise MalformedJSON("Empty response from OpenAI")

        logger.info(f"{operation} call successful")
        return response.choices[0].message.content
