"""
AI Service for interacting with Ollama LLM, Claude (Anthropic), and GPT-4 (OpenAI).
"""

import json
import os
import re
from typing import Dict, List, Optional, Type, TypeVar

import ollama
from pydantic import BaseModel, ValidationError

from resumechat.config import Settings
from resumechat.exceptions import AIServiceError
from resumechat.utils.logger import get_logger


logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_JSON_FINDER = re.compile(r"\{.*\}", re.S)


class AIService:
    """Service for AI/LLM interactions using Ollama, Claude, or GPT-4."""

    def __init__(self, settings: Settings):
        """
        Initialize AI Service.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.model = settings.ai_settings.model
        self.temperature = settings.ai_settings.temperature
        self.max_tokens = settings.ai_settings.max_tokens

        # Check which AI provider to use based on model name
        self.provider = self._determine_provider(self.model)

        # Initialize API clients if needed
        self.anthropic_client = None
        self.openai_client = None

        if self.provider == "anthropic":
            try:
                from anthropic import Anthropic
                api_key = os.getenv("ANTHROPIC_API_KEY")
                if not api_key:
                    logger.warning("⚠️ ANTHROPIC_API_KEY not found. Add it to .env file.")
                    self._fall_back_to_ollama()
                else:
                    self.anthropic_client = Anthropic(api_key=api_key)
                    logger.info(f"✅ Initialized Claude API with model: {self.model}")
            except ImportError:
                logger.warning("⚠️ anthropic package not installed. Run: pip install anthropic")
                self._fall_back_to_ollama()

        elif self.provider == "openai":
            try:
                from openai import OpenAI
                api_key = os.getenv("OPENAI_API_KEY")
                if not api_key:
                    logger.warning("⚠️ OPENAI_API_KEY not found. Add it to .env file.")
                    self._fall_back_to_ollama()
                else:
                    self.openai_client = OpenAI(api_key=api_key)
                    logger.info(f"✅ Initialized OpenAI API with model: {self.model}")
            except ImportError:
                logger.warning("⚠️ openai package not installed. Run: pip install openai")
                self._fall_back_to_ollama()

        else:
            logger.info(f"✅ Initialized Ollama with model: {self.model}")

    @staticmethod
    def _determine_provider(model: str) -> str:
        """Determine which AI provider to use based on model name."""
        if model.startswith("claude"):
            return "anthropic"
        elif model.startswith("gpt-"):
            return "openai"
        else:
            return "ollama"

    def _fall_back_to_ollama(self) -> None:
        logger.warning("   Falling back to Ollama...")
        self.provider = "ollama"
        self.model = "llama3.1"

    def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        history: Optional[List[Dict[str, str]]] = None,
        json_mode: bool = False
    ) -> str:
        """
        Generate completion using configured AI provider.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Optional temperature override
            max_tokens: Maximum tokens to generate
            history: Earlier chat turns as ``{"role", "content"}`` dicts
            json_mode: Ask the provider for a JSON object

        Returns:
            Generated text response

        Raises:
            AIServiceError: If the provider call fails
        """
        temp = self.temperature if temperature is None else temperature
        tokens = max_tokens or self.max_tokens
        messages = list(history or [])
        messages.append({"role": "user", "content": prompt})

        try:
            if self.provider == "anthropic":
                return self._generate_anthropic(messages, system_prompt, temp, tokens)
            elif self.provider == "openai":
                return self._generate_openai(messages, system_prompt, temp, tokens, json_mode)
            else:
                return self._generate_ollama(messages, system_prompt, temp, json_mode)

        except Exception as e:
            logger.error(f"❌ AI generation error ({self.provider}/{self.model}): {str(e)}")
            raise AIServiceError(f"AI generation failed: {e}") from e

    def _generate_ollama(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        json_mode: bool = False
    ) -> str:
        """Generate completion using Ollama."""
        if system_prompt:
            messages = [{"role": "system", "content": system_prompt}] + messages

        kwargs = {"format": "json"} if json_mode else {}
        response = ollama.chat(
            model=self.model,
            messages=messages,
            options={"temperature": temperature},
            **kwargs
        )

        return response['message']['content'].strip()

    def _generate_anthropic(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4000
    ) -> str:
        """Generate completion using Claude (Anthropic)."""
        if not self.anthropic_client:
            raise RuntimeError("Anthropic client not initialized")

        response = self.anthropic_client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt if system_prompt else "You are a helpful AI career assistant.",
            messages=messages
        )

        return response.content[0].text.strip()

    def _generate_openai(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
        json_mode: bool = False
    ) -> str:
        """Generate completion using OpenAI GPT."""
        if not self.openai_client:
            raise RuntimeError("OpenAI client not initialized")

        if system_prompt:
            messages = [{"role": "system", "content": system_prompt}] + messages

        kwargs = {"response_format": {"type": "json_object"}} if json_mode else {}
        response = self.openai_client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )

        return response.choices[0].message.content.strip()

    def generate_structured(
        self,
        prompt: str,
        schema: Type[SchemaT],
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        history: Optional[List[Dict[str, str]]] = None
    ) -> SchemaT:
        """
        Generate a response constrained to a pydantic schema.

        The JSON schema is appended to the system prompt, the provider is put
        in JSON mode where it has one, and the answer is validated.

        Raises:
            AIServiceError: If the answer is not valid JSON for ``schema``
        """
        schema_prompt = (
            "Output ONLY valid JSON conforming to this schema (no markdown fences):\n\n"
            + json.dumps(schema.model_json_schema(), indent=2)
        )
        full_system = f"{system_prompt}\n\n{schema_prompt}" if system_prompt else schema_prompt

        raw = self.generate_completion(
            prompt,
            system_prompt=full_system,
            temperature=temperature,
            history=history,
            json_mode=True
        )

        try:
            return schema.model_validate(self.parse_json_response(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"❌ Model answer does not match {schema.__name__}: {e}")
            logger.debug(f"Raw answer: {raw[:1000]}")
            raise AIServiceError(f"Model returned an invalid {schema.__name__}") from e

    @staticmethod
    def parse_json_response(raw: str) -> dict:
        """Parse a JSON object out of a model answer, tolerating fences and chatter."""
        payload = _FENCE_RE.sub("", raw.strip())
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            if m := _JSON_FINDER.search(payload):
                return json.loads(m.group())
            raise

    @staticmethod
    def clean_ai_commentary(text: str) -> str:
        """Remove common AI commentary patterns from responses."""
        patterns = [
            r'^Here is the (generated|rewritten|updated|tailored).*?:\s*',
            r'^Here are the (generated|rewritten|updated|tailored).*?:\s*',
            r"^Here's the (generated|rewritten|updated|tailored).*?:\s*",
            r"^Here is your .*?:\s*",
            r"^Here's your .*?:\s*",
            r'^I have (generated|rewritten|updated|tailored).*?:\s*',
            r"^I've (generated|rewritten|updated|tailored).*?:\s*",
        ]

        for pattern in patterns:
            text = re.sub(pattern, '', text, flags=re.IGNORECASE | re.MULTILINE)

        return text.strip()
