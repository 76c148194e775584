"""
Query Interpreter

Turns a free-text product query into a structured intent through a forced
function call, validates it and normalizes it with the lookup tables in
``shopsearch.services.normalization``.
"""

from __future__ import annotations

import json

from pydantic import ValidationError as PydanticValidationError

from shopsearch.core.config import settings
from shopsearch.core.exceptions import DecodeError, UpstreamError, ValidationError
from shopsearch.core.logging import get_logger
from shopsearch.llm.prompts import (
    INTENT_SYSTEM_PROMPT,
    INTENT_USER_TEMPLATE,
    SUGGESTION_SYSTEM_PROMPT,
    SUGGESTION_USER_TEMPLATE,
    PromptStore,
)
from shopsearch.llm.protocol import ChatClientProtocol
from shopsearch.llm.schemas import ChatMessage
from shopsearch.schemas.search import EnhancedIntent, ParsedIntent
from shopsearch.services.normalization import (
    COLOR_NORMALIZATION,
    PRODUCT_TYPE_SYNONYMS,
    SIZE_NORMALIZATION,
    normalize,
)

logger = get_logger(__name__)


class QueryInterpreter:
    """Free text -> ParsedIntent -> EnhancedIntent."""

    def __init__(self, *, chat_client: ChatClientProtocol, prompts: PromptStore) -> None:
        self.chat_client = chat_client
        self.prompts = prompts

    async def parse(self, text: str) -> ParsedIntent:
        """
        Parse a query with the configured function-calling schema.

        Raises:
            UpstreamError: call failed, no choices, or no function call
            DecodeError: arguments are not a valid intent
        """
        schema = self.prompts.function_schema
        completion = await self.chat_client.chat(
            [
                ChatMessage(role="system", content=INTENT_SYSTEM_PROMPT),
                ChatMessage(role="user", content=INTENT_USER_TEMPLATE.format(query=text)),
            ],
            functions=[schema],
            function_call={"name": schema.name},
            temperature=settings.intent_temperature,
            max_tokens=settings.openai_max_tokens,
        )

        if not completion.choices:
            raise UpstreamError("no choices in function calling response")
        call = completion.choices[0].message.function_call
        if call is None or not call.arguments:
            raise UpstreamError("no function call in response")

        try:
            arguments = json.loads(call.arguments)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"function arguments are not valid JSON: {exc}") from exc
        if not isinstance(arguments, dict):
            raise DecodeError("function arguments are not an object")

        try:
            intent = ParsedIntent.model_validate(
                {key: value for key, value in arguments.items() if value is not None}
            )
        except PydanticValidationError as exc:
            raise DecodeError(f"function arguments do not match intent: {exc}") from exc

        logger.debug("query_parsed", query=text, intent=intent.model_dump(exclude_none=True))
        return intent

    @staticmethod
    def validate(intent: ParsedIntent) -> None:
        """
        Raises:
            ValidationError: empty product_type, inverted or negative price bounds
        """
        if not intent.product_type:
            raise ValidationError("product_type is required")
        if (
            intent.price_min is not None
            and intent.price_max is not None
            and intent.price_min > intent.price_max
        ):
            raise ValidationError("price_min cannot be greater than price_max")
        if intent.price_min is not None and intent.price_min < 0:
            raise ValidationError("price_min cannot be negative")
        if intent.price_max is not None and intent.price_max < 0:
            raise ValidationError("price_max cannot be negative")

    @staticmethod
    def enhance(intent: ParsedIntent) -> EnhancedIntent:
        data = intent.model_dump()
        data["product_type"] = normalize(intent.product_type, PRODUCT_TYPE_SYNONYMS)
        data["color"] = normalize(intent.color, COLOR_NORMALIZATION)
        data["size"] = normalize(intent.size, SIZE_NORMALIZATION)
        return EnhancedIntent.model_validate(data)

    @staticmethod
    def get_search_query(intent: ParsedIntent) -> str:
        return intent.product_type or ""

    async def get_suggestions(self, query: str, limit: int = 5) -> list[str]:
        """
        LLM search suggestions; defaults derived from the query when the call
        fails or the answer is not a JSON array of strings.
        """
        try:
            completion = await self.chat_client.chat(
                [
                    ChatMessage(role="system", content=SUGGESTION_SYSTEM_PROMPT),
                    ChatMessage(role="user", content=SUGGESTION_USER_TEMPLATE.format(query=query)),
                ],
                temperature=settings.suggestion_temperature,
                max_tokens=500,
            )
        except UpstreamError as exc:
            logger.warning("suggestions_upstream_failed", query=query, error=exc.message)
            return self.default_suggestions(query, limit)

        content = completion.choices[0].message.content if completion.choices else None
        try:
            suggestions = json.loads(content or "")
        except json.JSONDecodeError as exc:
            logger.warning("suggestions_parse_failed", query=query, error=str(exc))
            return self.default_suggestions(query, limit)

        if not isinstance(suggestions, list) or not all(isinstance(s, str) for s in suggestions):
            logger.warning("suggestions_not_string_array", query=query)
            return self.default_suggestions(query, limit)

        return suggestions[:limit]

    @staticmethod
    def default_suggestions(query: str, limit: int = 5) -> list[str]:
        return [f"{query} {suffix}" for suffix in settings.suggestion_fallback_suffixes[:limit]]
