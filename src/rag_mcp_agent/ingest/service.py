"""Ingestion service: load a document, store its pages, verify retrieval."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from rag_mcp_agent.ingest.parser import ParserRegistry
from rag_mcp_agent.obs.logger import get_logger
from rag_mcp_agent.retrieval.vector_store import VectorStore

logger = get_logger(__name__)

CONFIDENCE_THRESHOLD = 0.8


class IngestStatus(str, Enum):
    INGESTED = "FAQ data ingested successfully"
    NOT_FOUND = "File Not Found"


class IngestionService:
    """Coordinates reader and vector store stages.

    Named documents are resolved inside `docs_dir`. Every ingestion is a single
    batch `add` on the vector store; nothing is deduplicated, so ingesting the
    same document twice stores it twice.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        parser_registry: ParserRegistry,
        *,
        docs_dir: str | Path,
        default_document: str,
    ) -> None:
        self._vector_store = vector_store
        self._parser_registry = parser_registry
        self._docs_dir = Path(docs_dir)
        self._default_document = default_document

    def ingest_document(self, file_name: str | None = None) -> IngestStatus:
        """Ingest a document from the documents directory by name.

        A missing or blank name falls back to the default document. Exceptions
        raised while reading or storing are left to the caller.
        """

        logger.info("File to be ingested : %s", file_name)
        if not file_name or not file_name.strip():
            file_name = self._default_document

        path = self._resolve(file_name)
        if path is None:
            logger.info("File not found : %s", file_name)
            return IngestStatus.NOT_FOUND

        documents = self._parser_registry.parse_path(path)
        self._vector_store.add(documents)
        logger.info("Ingested %d page(s) from %s", len(documents), path.name)
        return IngestStatus.INGESTED

    def ingest_bytes(self, data: bytes, filename: str) -> int:
        """Ingest uploaded content; the reader is picked by `filename`'s extension."""

        documents = self._parser_registry.parse_bytes(data, filename)
        self._vector_store.add(documents)
        logger.info("Ingested %d page(s) from upload %s", len(documents), filename)
        return len(documents)

    def verify(self, query: str) -> str:
        """Join the texts of high-confidence matches for `query` with newlines.

        Only results scoring strictly above 0.8 are kept, in the order the
        vector store returned them. Returns an empty string when none qualify.
        """

        results = self._vector_store.similarity_search(query)
        return "\n".join(
            result.text
            for result in results
            if result is not None
            and result.score is not None
            and result.score > CONFIDENCE_THRESHOLD
        )

    def _resolve(self, file_name: str) -> Path | None:
        base = self._docs_dir.resolve()
        try:
            candidate = (base / file_name).resolve()
            if not candidate.is_relative_to(base) or not candidate.is_file():
                return None
        except (OSError, ValueError):
            # names the filesystem cannot represent, e.g. an embedded NUL byte
            return None
        return candidate
