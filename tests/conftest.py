import pytest

from shopsearch.core.dependencies import ServiceContainer, build_services
from shopsearch.llm.mock import MockChatClient, MockEmbeddingClient
from shopsearch.llm.prompts import PromptStore
from shopsearch.schemas.product import Product, ProductCreate
from shopsearch.vectorstore.mock import MockVectorStore


@pytest.fixture
def sample_product() -> Product:
    return ProductCreate(
        name="Slim Jeans",
        category="jeans",
        description="Stretch denim with a slim cut",
        price=59.9,
        currency="USD",
        brand="Levis",
        color="blue",
        size="M",
        attributes={"fit": "slim"},
    ).to_product()


@pytest.fixture
def mock_services() -> ServiceContainer:
    """Container wired to the in-process chat, embedding and store backends."""
    return build_services(
        chat_client=MockChatClient(),
        embedding_client=MockEmbeddingClient(dimension=64),
        vectorstore=MockVectorStore(collection="test-products"),
        prompts=PromptStore(),
    )
