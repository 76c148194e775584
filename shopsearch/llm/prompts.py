"""
LLM Prompt Templates
Function-calling schema, system prompts and the variant template, plus the
PromptStore that lets the schema/template be replaced at runtime.
"""

from __future__ import annotations

import copy
import json
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from shopsearch.core.exceptions import ValidationError
from shopsearch.core.logging import get_logger
from shopsearch.llm.schemas import FunctionDefinition

logger = get_logger(__name__)


INTENT_SYSTEM_PROMPT = """
You are a product search query parser for an online shop.
Analyse the user's natural-language query and extract:
- the product type the user is looking for
- attributes such as color, brand, size, material and style
- filters such as price range, occasion and gender

Only extract what the query states. Never guess or add values that are not
mentioned. Keep extracted values in the language of the query.
""".strip()

INTENT_USER_TEMPLATE = "Parse this product search query: {query}"

SUGGESTION_SYSTEM_PROMPT = """
You are a product search suggestion assistant. Given a partial query,
produce 5 complete search suggestions.

Requirements:
1. Each suggestion is a complete, natural query in the language of the input
2. Cover different product attributes and price ranges
3. Suggestions are practical and common
4. Each suggestion has at most 20 characters

Return the suggestions as a JSON array of strings.
""".strip()

SUGGESTION_USER_TEMPLATE = "Generate search suggestions for this query fragment: {query}"


DEFAULT_FUNCTION_SCHEMA: dict[str, Any] = {
    "function_name": "parse_product_query",
    "description": "Extract the product type, attributes and filters from a shopping query",
    "parameters": {
        "type": "object",
        "properties": {
            "product_type": {
                "type": "string",
                "description": "Product category the user wants, e.g. jeans, T-shirt, smartphone",
            },
            "color": {"type": "string", "description": "Requested color"},
            "brand": {"type": "string", "description": "Requested brand"},
            "size": {"type": "string", "description": "Requested size, e.g. S, M, L, XL"},
            "material": {"type": "string", "description": "Requested material"},
            "style": {"type": "string", "description": "Requested style"},
            "occasion": {"type": "string", "description": "Occasion of use"},
            "gender": {"type": "string", "description": "Target gender"},
            "price_min": {"type": "number", "description": "Minimum price"},
            "price_max": {"type": "number", "description": "Maximum price"},
            "filters": {
                "type": "object",
                "description": "Other exact-match conditions as key/value pairs",
                "additionalProperties": {"type": ["string", "number", "boolean"]},
            },
        },
        "required": ["product_type"],
    },
}


DEFAULT_VARIANT_PROMPT = """
Generate {variant_count} different natural-language descriptions of the
product below, the way different shoppers might search for it.

Product name: {product_name}
Category: {category}
Color: {color}
Price: {price}
Brand: {brand}
Size: {size}
Material: {material}
Description: {description}

Rules:
- Every description must mention the product name or its category
- Vary wording, word order and the attributes emphasised
- Each description is between 5 and 100 characters
- Write in the language of the product name

Return only a JSON array of strings.
""".strip()


class PromptStore:
    """Holds the active function schema and variant template.

    Values start from the configured files when present, otherwise from the
    built-in defaults. Updates apply immediately and are written back to the
    configured file path when there is one.
    """

    MIN_PROMPT_LENGTH = 10

    def __init__(
        self,
        *,
        function_schema_path: str | None = None,
        variant_prompt_path: str | None = None,
    ) -> None:
        self._schema_path = Path(function_schema_path) if function_schema_path else None
        self._prompt_path = Path(variant_prompt_path) if variant_prompt_path else None
        self._lock = threading.Lock()
        self._function_schema = self._load_schema()
        self._variant_prompt = self._load_prompt()

    @property
    def function_schema(self) -> FunctionDefinition:
        with self._lock:
            return self._function_schema

    @property
    def variant_prompt(self) -> str:
        with self._lock:
            return self._variant_prompt

    def update_function_schema(self, schema: dict[str, Any]) -> FunctionDefinition:
        if not (schema.get("function_name") or schema.get("name")):
            raise ValidationError("Function name is required")
        if not schema.get("parameters"):
            raise ValidationError("Parameters are required")

        try:
            definition = FunctionDefinition.model_validate(schema)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid function schema: {exc.errors()[0]['msg']}") from exc

        if self._schema_path is not None:
            self._schema_path.parent.mkdir(parents=True, exist_ok=True)
            self._schema_path.write_text(
                json.dumps(
                    definition.model_dump(by_alias=True), ensure_ascii=False, indent=2
                ),
                encoding="utf-8",
            )
        with self._lock:
            self._function_schema = definition
        logger.info("function_schema_updated", function_name=definition.name)
        return definition

    def update_variant_prompt(self, prompt: str) -> str:
        if len(prompt.strip()) < self.MIN_PROMPT_LENGTH:
            raise ValidationError("Prompt is too short")

        if self._prompt_path is not None:
            self._prompt_path.parent.mkdir(parents=True, exist_ok=True)
            self._prompt_path.write_text(prompt, encoding="utf-8")
        with self._lock:
            self._variant_prompt = prompt
        logger.info("variant_prompt_updated", length=len(prompt))
        return prompt

    def _load_schema(self) -> FunctionDefinition:
        if self._schema_path is not None and self._schema_path.is_file():
            raw = json.loads(self._schema_path.read_text(encoding="utf-8"))
            logger.info("function_schema_loaded", path=str(self._schema_path))
            return FunctionDefinition.model_validate(raw)
        return FunctionDefinition.model_validate(copy.deepcopy(DEFAULT_FUNCTION_SCHEMA))

    def _load_prompt(self) -> str:
        if self._prompt_path is not None and self._prompt_path.is_file():
            logger.info("variant_prompt_loaded", path=str(self._prompt_path))
            return self._prompt_path.read_text(encoding="utf-8")
        return DEFAULT_VARIANT_PROMPT
