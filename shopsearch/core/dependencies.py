"""
Service wiring and common FastAPI dependencies

One ServiceContainer is built per application and kept on ``app.state``;
route dependencies read services from it.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from shopsearch.core.config import settings
from shopsearch.llm.embedder import CachedEmbeddingService, EmbeddingCache
from shopsearch.llm.factory import get_chat_client, get_embedding_client
from shopsearch.llm.prompts import PromptStore
from shopsearch.llm.protocol import ChatClientProtocol, EmbeddingClientProtocol
from shopsearch.services.product_service import ProductService
from shopsearch.services.query_interpreter import QueryInterpreter
from shopsearch.services.retrieval import RetrievalService
from shopsearch.services.search_service import SearchService
from shopsearch.services.variant_generator import VariantGenerator
from shopsearch.vectorstore.factory import get_vectorstore
from shopsearch.vectorstore.protocol import VectorStoreProtocol


@dataclass
class ServiceContainer:
    chat_client: ChatClientProtocol
    embedding_client: EmbeddingClientProtocol
    embedding_cache: EmbeddingCache
    embedder: CachedEmbeddingService
    vectorstore: VectorStoreProtocol
    prompts: PromptStore
    interpreter: QueryInterpreter
    generator: VariantGenerator
    retrieval: RetrievalService
    search: SearchService
    products: ProductService

    async def aclose(self) -> None:
        await self.chat_client.aclose()
        await self.embedding_client.aclose()
        await self.vectorstore.aclose()


def build_services(
    *,
    chat_client: ChatClientProtocol | None = None,
    embedding_client: EmbeddingClientProtocol | None = None,
    vectorstore: VectorStoreProtocol | None = None,
    prompts: PromptStore | None = None,
) -> ServiceContainer:
    """Wire every service once; backends default to the configured factories."""
    chat_client = chat_client or get_chat_client()
    embedding_client = embedding_client or get_embedding_client()
    vectorstore = vectorstore or get_vectorstore()
    prompts = prompts or PromptStore(
        function_schema_path=settings.function_schema_path,
        variant_prompt_path=settings.variant_prompt_path,
    )

    cache = EmbeddingCache()
    embedder = CachedEmbeddingService(embedding_client, cache)
    interpreter = QueryInterpreter(chat_client=chat_client, prompts=prompts)
    generator = VariantGenerator(
        chat_client=chat_client,
        embedder=embedder,
        prompts=prompts,
        vectorstore=vectorstore,
    )
    retrieval = RetrievalService(vectorstore=vectorstore)

    return ServiceContainer(
        chat_client=chat_client,
        embedding_client=embedding_client,
        embedding_cache=cache,
        embedder=embedder,
        vectorstore=vectorstore,
        prompts=prompts,
        interpreter=interpreter,
        generator=generator,
        retrieval=retrieval,
        search=SearchService(interpreter=interpreter, embedder=embedder, retrieval=retrieval),
        products=ProductService(vectorstore=vectorstore, generator=generator),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_search_service(request: Request) -> SearchService:
    return get_services(request).search


def get_product_service(request: Request) -> ProductService:
    return get_services(request).products


def get_prompt_store(request: Request) -> PromptStore:
    return get_services(request).prompts
