"""
Language-model proxy operations for CodeWire.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

import anthropic

from codewire.config import get_api_key, get_config
from codewire.errors import MissingCredentialError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

TRANSLATE_PROMPT = """Translate the following English tech article title into {language} and write a practical summary for engineers (2-3 sentences) in {language}.

Title: {title}
{description}
Reply with this JSON object only, no other text:
{{"title": "translated title", "summary": "summary in 2-3 sentences"}}"""

ANSWER_PROMPT = """You are an experienced software engineer. Answer the following question practically, in {language}.

Question: {title}
{body}
{tags}
Include concrete code examples or references where useful, in about 400 characters."""

_FENCE = re.compile(r'```(?:json)?\n?')

def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences around a model reply."""
    return _FENCE.sub('', text or '').strip()


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def first_text_block(response: Any) -> str:
    """
    Extract the text of the first content block of a Messages API reply.

    Accepts an SDK ``Message`` or its plain JSON form.

    Returns:
        The text, or "" when the reply does not have the expected shape
    """
    content = _field(response, 'content')
    if not isinstance(content, (list, tuple)) or not content:
        return ''
    block = content[0]
    if _field(block, 'type') != 'text':
        return ''
    text = _field(block, 'text')
    return text if isinstance(text, str) else ''


class LanguageModelClient:
    """
    Thin wrapper around the Anthropic Messages API.

    Both operations check their input and the credential before making a
    network call. SDK errors surface as UpstreamError.
    """
    def __init__(self, api_key: Optional[str] = None, client: Optional[anthropic.AsyncAnthropic] = None):
        """
        Initialize the LanguageModelClient.

        Args:
            api_key: Credential; read from ANTHROPIC_API_KEY when omitted
            client: SDK client; one is created on first use when omitted
        """
        self.api_key = api_key if api_key is not None else get_api_key()
        self._client = client
        self._owns_client = client is None
        self.model = get_config('llm.model')
        self.language = get_config('llm.target_language', 'Japanese')

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        """
        Lazy initialization of the SDK client.

        Returns:
            anthropic.AsyncAnthropic: The API client
        """
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._require_key(),
                base_url=get_config('llm.base_url'),
                timeout=get_config('fetch.timeout_seconds', 30),
                max_retries=get_config('llm.max_retries', 2),
            )
        return self._client

    async def close(self):
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    def _require_key(self) -> str:
        if not self.api_key:
            raise MissingCredentialError("ANTHROPIC_API_KEY is not configured")
        return self.api_key

    async def complete(self, prompt: str, max_tokens: int) -> Any:
        """
        Send one user message and return the SDK reply.

        Raises:
            MissingCredentialError: If no API key is configured
            UpstreamError: If the call fails
        """
        self._require_key()
        try:
            return await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{'role': 'user', 'content': prompt}],
            )
        except anthropic.APIError as e:
            logger.warning(f"Anthropic API error: {e}")
            raise UpstreamError(f"Anthropic API error: {e}") from e

    async def translate(self, title: Optional[str], description: Optional[str] = None) -> Dict[str, str]:
        """
        Translate an article title and summarise it.

        Args:
            title: The article title; required
            description: Optional article description for context

        Returns:
            {"title": ..., "summary": ...}

        Raises:
            ValidationError: If the title is missing
            MissingCredentialError: If no API key is configured
            UpstreamError: If the call fails or the reply is not a JSON object
        """
        if not title:
            raise ValidationError("title is required")
        self._require_key()

        prompt = TRANSLATE_PROMPT.format(
            language=self.language,
            title=title,
            description=f"Description: {description}\n" if description else '',
        )
        response = await self.complete(prompt, get_config('llm.translate_max_tokens', 400))
        raw = strip_code_fences(first_text_block(response))

        try:
            parsed = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Translation reply was not JSON: {raw[:80]!r}")
            raise UpstreamError("Translation reply was not valid JSON") from e
        if not isinstance(parsed, dict):
            raise UpstreamError("Translation reply was not a JSON object")

        return {'title': str(parsed.get('title') or ''), 'summary': str(parsed.get('summary') or '')}

    async def ask_ai(self, title: Optional[str], body: Optional[str] = None,
                     tags: Optional[List[str]] = None) -> str:
        """
        Ask the model to answer a Q&A question.

        Returns:
            The answer text; "" if the reply has no text block

        Raises:
            ValidationError: If the title is missing
            MissingCredentialError: If no API key is configured
            UpstreamError: If the call fails
        """
        if not title:
            raise ValidationError("title is required")
        self._require_key()

        prompt = ANSWER_PROMPT.format(
            language=self.language,
            title=title,
            body=f"Details: {body}" if body else '',
            tags=f"Tags: {', '.join(str(t) for t in tags)}" if tags else '',
        )
        response = await self.complete(prompt, get_config('llm.answer_max_tokens', 800))
        return first_text_block(response)
