"""Runtime-editable prompt configuration"""

from typing import Any

from pydantic import Field

from shopsearch.schemas.base import BaseSchema


class FunctionSchemaConfig(BaseSchema):
    function_name: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class VariantPromptConfig(BaseSchema):
    prompt: str
