import asyncio
import json
import re
import structlog
from typing import Optional, Dict, Any, List
from enum import Enum

import openai
import anthropic
import google.generativeai as genai

from ..exceptions import LLMServiceError

logger = structlog.get_logger(__name__)

JSON_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


def extract_json(text: str) -> Dict[str, Any]:
    """
    Pull a JSON object out of a model response.

    Tries the raw text, then a fenced ```json block, then the outermost
    {...} span. Returns an empty dict when nothing parses.
    """
    if not text:
        return {}

    candidates = [text.strip()]
    block = JSON_BLOCK_PATTERN.search(text)
    if block:
        candidates.append(block.group(1).strip())
    obj = JSON_OBJECT_PATTERN.search(text)
    if obj:
        candidates.append(obj.group(0))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return {}


class LLMService:
    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        google_api_key: Optional[str] = None,
        openai_model_name: str = "gpt-4o-mini",
        anthropic_model_name: str = "claude-3-haiku-20240307",
        google_model_name: str = "gemini-2.5-flash",
        openai_image_model_name: str = "gpt-image-1",
        preferred_provider: Optional[LLMProvider] = LLMProvider.GOOGLE
    ):
        self.openai_model_name = openai_model_name
        self.anthropic_model_name = anthropic_model_name
        self.google_model_name = google_model_name
        self.openai_image_model_name = openai_image_model_name
        self.preferred_provider = preferred_provider

        # Initialize clients
        self.openai_client = None
        self.anthropic_client = None
        self.google_client = None

        if openai_api_key:
            try:
                self.openai_client = openai.OpenAI(api_key=openai_api_key)
                logger.info("OpenAI client initialized")
            except Exception as e:
                logger.warning("Failed to initialize OpenAI client", error=str(e))

        if anthropic_api_key:
            try:
                self.anthropic_client = anthropic.Anthropic(api_key=anthropic_api_key)
                logger.info("Anthropic client initialized")
            except Exception as e:
                logger.warning("Failed to initialize Anthropic client", error=str(e))

        if google_api_key:
            try:
                genai.configure(api_key=google_api_key)
                self.google_client = genai.GenerativeModel(self.google_model_name)
                logger.info("Google Gemini client initialized")
            except Exception as e:
                logger.warning("Failed to initialize Google Gemini client", error=str(e))

    async def generate_with_fallback(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        preferred_provider: Optional[LLMProvider] = None
    ) -> str:
        """
        Generate response with automatic fallback between providers.

        The preferred provider (argument, else the service default) is tried
        first, then Google Gemini, OpenAI and Anthropic in that order.
        """
        preferred_provider = preferred_provider or self.preferred_provider

        if preferred_provider and self._is_provider_available(preferred_provider):
            try:
                return await self._generate_with_provider(
                    preferred_provider, system_prompt, user_prompt, temperature, max_tokens
                )
            except LLMServiceError as e:
                logger.warning(f"{preferred_provider} failed, trying fallbacks", error=str(e))

        providers_to_try = [LLMProvider.GOOGLE, LLMProvider.OPENAI, LLMProvider.ANTHROPIC]
        if preferred_provider:
            providers_to_try = [p for p in providers_to_try if p != preferred_provider]

        for provider in providers_to_try:
            if self._is_provider_available(provider):
                try:
                    logger.info(f"Attempting generation with {provider}")
                    return await self._generate_with_provider(
                        provider, system_prompt, user_prompt, temperature, max_tokens
                    )
                except LLMServiceError as e:
                    logger.warning(f"{provider} failed, trying next provider", error=str(e))
                    continue

        raise LLMServiceError("All LLM providers failed. Please check API keys and try again.")

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096
    ) -> Dict[str, Any]:
        response = await self.generate_with_fallback(system_prompt, user_prompt, temperature, max_tokens)
        return extract_json(response)

    async def _generate_with_provider(
        self,
        provider: LLMProvider,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int
    ) -> str:
        """Generate response with specific provider."""

        if provider == LLMProvider.OPENAI:
            return await self._generate_openai(system_prompt, user_prompt, temperature, max_tokens)
        elif provider == LLMProvider.ANTHROPIC:
            return await self._generate_anthropic(system_prompt, user_prompt, temperature, max_tokens)
        elif provider == LLMProvider.GOOGLE:
            return await self._generate_google(system_prompt, user_prompt, temperature, max_tokens)
        else:
            raise LLMServiceError(f"Unknown provider: {provider}")

    async def _generate_openai(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        """Generate using OpenAI GPT."""
        if not self.openai_client:
            raise LLMServiceError("OpenAI client not available")

        try:
            response = await asyncio.to_thread(
                self.openai_client.chat.completions.create,
                model=self.openai_model_name,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ]
            )
            result = response.choices[0].message.content or ""
            logger.info("OpenAI generation completed", model=self.openai_model_name, response_length=len(result))
            return result

        except openai.AuthenticationError as e:
            raise LLMServiceError(f"OpenAI authentication failed: {str(e)}")
        except openai.RateLimitError as e:
            raise LLMServiceError(f"OpenAI rate limit exceeded: {str(e)}")
        except Exception as e:
            raise LLMServiceError(f"OpenAI generation failed: {str(e)}")

    async def _generate_anthropic(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        """Generate using Anthropic Claude."""
        if not self.anthropic_client:
            raise LLMServiceError("Anthropic client not available")

        try:
            response = await asyncio.to_thread(
                self.anthropic_client.messages.create,
                model=self.anthropic_model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": user_prompt}
                ]
            )
            result = response.content[0].text
            logger.info("Anthropic generation completed", model=self.anthropic_model_name, response_length=len(result))
            return result

        except Exception as e:
            raise LLMServiceError(f"Anthropic generation failed: {str(e)}")

    async def _generate_google(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        """Generate using Google Gemini."""
        if not self.google_client:
            raise LLMServiceError("Google client not available")

        try:
            generation_config = genai.types.GenerationConfig(
                temperature=temperature,
                max_output_tokens=max_tokens
            )

            full_prompt = f"{system_prompt}\n\n---\n\n{user_prompt}"

            response = await asyncio.to_thread(
                self.google_client.generate_content,
                full_prompt,
                generation_config=generation_config
            )
            result = response.text or ""
            logger.info("Google generation completed", model=self.google_model_name, response_length=len(result))
            return result

        except Exception as e:
            raise LLMServiceError(f"Google generation failed: {str(e)}")

    def generate_image(self, prompt: str, size: str = "1024x1536") -> str:
        """Generate an image with the OpenAI image API and return it base64-encoded."""
        if not self.openai_client:
            raise LLMServiceError("OpenAI client not available for image generation")

        try:
            response = self.openai_client.images.generate(
                model=self.openai_image_model_name,
                prompt=prompt,
                size=size,
                n=1
            )
        except Exception as e:
            raise LLMServiceError(f"Image generation failed: {str(e)}")

        b64 = response.data[0].b64_json if response.data else None
        if not b64:
            raise LLMServiceError("Image generation returned no data")
        logger.info("OpenAI image generation completed", model=self.openai_image_model_name, size=size)
        return b64

    def supports_image_generation(self) -> bool:
        return self.openai_client is not None

    def _is_provider_available(self, provider: LLMProvider) -> bool:
        """Check if provider is available (has client initialized)."""
        if provider == LLMProvider.OPENAI:
            return self.openai_client is not None
        elif provider == LLMProvider.ANTHROPIC:
            return self.anthropic_client is not None
        elif provider == LLMProvider.GOOGLE:
            return self.google_client is not None
        return False

    def get_available_providers(self) -> List[LLMProvider]:
        """Get list of available LLM providers."""
        return [p for p in LLMProvider if self._is_provider_available(p)]
