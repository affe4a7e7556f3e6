from collections.abc import Callable
from contextlib import asynccontextmanager
from pathlib import Path
from types import SimpleNamespace

import pytest

from rag_mcp_agent.agent.remote_tools import McpToolProvider
from rag_mcp_agent.config import Settings
from rag_mcp_agent.types import Document


def build_pdf(pages: list[str]) -> bytes:
    """Minimal single-font PDF with one text line per page ("" gives a blank page)."""

    objects = [
        "<< /Type /Catalog /Pages 2 0 R >>",
        "<< /Type /Pages /Kids [{}] /Count {} >>".format(
            " ".join(f"{4 + 2 * i} 0 R" for i in range(len(pages))), len(pages)
        ),
        "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for i, text in enumerate(pages):
        content = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET" if text else ""
        objects.append(
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
        )
        objects.append(f"<< /Length {len(content)} >>\nstream\n{content}\nendstream")

    out = b"%PDF-1.4\n"
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1")
    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n".encode("latin-1")
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode("latin-1")
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF\n"
    ).encode("latin-1")
    return out


class StubVectorStore:
    """Records batch writes and replays canned search results."""

    def __init__(self, results: list[Document | None] | None = None) -> None:
        self.results = list(results or [])
        self.batches: list[list[Document]] = []
        self.queries: list[tuple[str, int]] = []

    def add(self, documents: list[Document]) -> None:
        self.batches.append(list(documents))

    def similarity_search(self, query: str, k: int = 4) -> list[Document | None]:
        self.queries.append((query, k))
        return list(self.results)


class FakeMcpSession:
    """Answers `list_tools` and `call_tool` like a GitHub MCP server would."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    async def list_tools(self) -> SimpleNamespace:
        return SimpleNamespace(
            tools=[
                SimpleNamespace(
                    name="get_me",
                    description="Get the authenticated GitHub user",
                    inputSchema={"type": "object", "properties": {}},
                ),
                SimpleNamespace(name="list_issues", description=None, inputSchema=None),
            ]
        )

    async def call_tool(self, name: str, arguments: dict) -> SimpleNamespace:
        self.calls.append((name, arguments))
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text='{"login": "octocat"}')],
            isError=False,
        )


@pytest.fixture
def pdf_factory() -> Callable[[list[str]], bytes]:
    return build_pdf


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "docs"
    directory.mkdir()
    (directory / "online_shopping_faq.pdf").write_bytes(
        build_pdf(["Returns are accepted within 30 days.", "Shipping takes 5 business days."])
    )
    (directory / "notes.txt").write_text("Gift cards never expire.", encoding="utf-8")
    return directory


@pytest.fixture
def test_settings(docs_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key=None,
        mcp_server_url=None,
        mcp_server_api_key=None,
        docs_dir=docs_dir,
        ingest_on_startup=False,
        vector_store="memory",
    )


@pytest.fixture
def stub_store() -> Callable[..., StubVectorStore]:
    def _make(results: list[Document | None] | None = None) -> StubVectorStore:
        return StubVectorStore(results)

    return _make


@pytest.fixture
def mcp_session() -> FakeMcpSession:
    return FakeMcpSession()


@pytest.fixture
def mcp_provider(mcp_session: FakeMcpSession) -> McpToolProvider:
    @asynccontextmanager
    async def _open():
        yield mcp_session

    return McpToolProvider("https://api.githubcopilot.com/mcp/", session_opener=_open)
