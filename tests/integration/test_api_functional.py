import asyncio

from fastapi.testclient import TestClient

from rag_mcp_agent.api.main import UPLOAD_FAILED_MESSAGE, UPLOAD_OK_MESSAGE, create_app
from rag_mcp_agent.runtime import build_runtime
from rag_mcp_agent.types import Document


class _ExplodingStore:
    def add(self, documents: list[Document]) -> None:
        raise RuntimeError("vector database unavailable")

    def similarity_search(self, query: str, k: int = 4) -> list[Document | None]:
        return []


def test_api_ingest_verify_and_agent_offline(test_settings) -> None:
    client = TestClient(create_app(build_runtime(test_settings)))

    assert client.get("/health").json() == {
        "status": "ok",
        "llm_configured": False,
        "agent_mode": "offline",
    }

    missing = client.get("/api/ingest/nothing_here.pdf")
    assert missing.status_code == 200
    assert missing.text == "File Not Found"
    nul_name = client.get("/api/ingest/a%00b.pdf")
    assert nul_name.status_code == 200
    assert nul_name.text == "File Not Found"

    ingested = client.get("/api/ingest")
    assert ingested.text == "FAQ data ingested successfully"
    assert client.get("/api/ingest/notes.txt").text == "FAQ data ingested successfully"

    verified = client.post("/api/verify-ingest", json={"query": "Gift cards never expire."})
    assert verified.status_code == 200
    assert verified.text == "Gift cards never expire."

    answer = client.post("/api/agent", json={"query": "Gift cards never expire."})
    assert answer.status_code == 200
    assert "Gift cards never expire." in answer.text

    info = client.get("/api/agent").json()
    assert info["toolCallbackCount"] == 1
    assert info["tools"] == [
        {"name": "GetCurrentTimeTool", "description": "Get the current time for a specified country"}
    ]
    assert info["advisors"] == ["SimpleLoggerAdvisor", "QuestionAnswerAdvisor"]
    assert info["vectorStoreClass"].endswith("InMemoryVectorStore")


def test_upload_stores_pages_and_reports_success(test_settings, pdf_factory) -> None:
    runtime = build_runtime(test_settings)
    client = TestClient(create_app(runtime))

    response = client.post(
        "/api/upload",
        files={"file": ("policy.pdf", pdf_factory(["Price match within 14 days."]), "application/pdf")},
    )

    assert response.status_code == 200
    assert response.text == UPLOAD_OK_MESSAGE
    assert len(runtime.vector_store) == 1


def test_upload_failures_become_generic_500(test_settings) -> None:
    client = TestClient(create_app(build_runtime(test_settings, vector_store=_ExplodingStore())))

    store_failure = client.post(
        "/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")}
    )
    parse_failure = client.post(
        "/api/upload", files={"file": ("photo.png", b"\x89PNG", "image/png")}
    )

    for response in (store_failure, parse_failure):
        assert response.status_code == 500
        assert response.text == UPLOAD_FAILED_MESSAGE


def test_startup_ingests_default_document(test_settings) -> None:
    runtime = build_runtime(test_settings.model_copy(update={"ingest_on_startup": True}))

    with TestClient(create_app(runtime)):
        assert len(runtime.vector_store) == 2


def test_startup_ingestion_failure_does_not_stop_the_app(test_settings) -> None:
    runtime = build_runtime(
        test_settings.model_copy(update={"ingest_on_startup": True}),
        vector_store=_ExplodingStore(),
    )

    with TestClient(create_app(runtime)) as client:
        assert client.get("/health").status_code == 200


def test_agent_requires_query_field(test_settings) -> None:
    client = TestClient(create_app(build_runtime(test_settings)))

    assert client.post("/api/agent", json={}).status_code == 422


def test_app_with_remote_tools_is_created_inside_a_running_loop(test_settings, mcp_provider) -> None:
    async def _factory():
        return create_app(build_runtime(test_settings, mcp_provider=mcp_provider))

    app = asyncio.run(_factory())

    with TestClient(app) as client:
        info = client.get("/api/agent").json()

    assert info["toolCallbackCount"] == 3
    assert info["remoteToolCount"] == 2
    assert {"name": "get_me", "description": "Get the authenticated GitHub user"} in info["tools"]
