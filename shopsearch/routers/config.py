"""Prompt configuration router"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from shopsearch.core.dependencies import get_prompt_store
from shopsearch.llm.prompts import PromptStore
from shopsearch.schemas.config import FunctionSchemaConfig, VariantPromptConfig


router = APIRouter(prefix="/config", tags=["config"])


def _schema_response(store: PromptStore) -> FunctionSchemaConfig:
    definition = store.function_schema
    return FunctionSchemaConfig(
        function_name=definition.name,
        description=definition.description,
        parameters=definition.parameters,
    )


@router.get(
    "/function-schema",
    response_model=FunctionSchemaConfig,
    summary="Current function-calling schema",
)
async def get_function_schema(
    store: PromptStore = Depends(get_prompt_store),
) -> FunctionSchemaConfig:
    return _schema_response(store)


@router.put(
    "/function-schema",
    response_model=FunctionSchemaConfig,
    summary="Replace the function-calling schema",
)
async def update_function_schema(
    schema: dict[str, Any] = Body(...),
    store: PromptStore = Depends(get_prompt_store),
) -> FunctionSchemaConfig:
    store.update_function_schema(schema)
    return _schema_response(store)


@router.get(
    "/variant-prompt",
    response_model=VariantPromptConfig,
    summary="Current variant prompt template",
)
async def get_variant_prompt(
    store: PromptStore = Depends(get_prompt_store),
) -> VariantPromptConfig:
    return VariantPromptConfig(prompt=store.variant_prompt)


@router.put(
    "/variant-prompt",
    response_model=VariantPromptConfig,
    summary="Replace the variant prompt template",
)
async def update_variant_prompt(
    payload: VariantPromptConfig,
    store: PromptStore = Depends(get_prompt_store),
) -> VariantPromptConfig:
    return VariantPromptConfig(prompt=store.update_variant_prompt(payload.prompt))
