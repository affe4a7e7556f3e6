"""Vector store interfaces and concrete adapters."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from math import sqrt
from typing import Any, Protocol, cast

from rag_mcp_agent.ingest.embedder import Embedder
from rag_mcp_agent.types import Document


class VectorStore(Protocol):
    """Minimal vector store contract consumed by ingestion and retrieval."""

    def add(self, documents: list[Document]) -> None:
        """Store a batch of documents. Never deduplicates."""

    def similarity_search(self, query: str, k: int = 4) -> list[Document | None]:
        """Return up to `k` documents ranked by similarity, each carrying a score."""


@dataclass(slots=True)
class _StoredVector:
    entry_id: str
    document: Document
    embedding: list[float]


class InMemoryVectorStore:
    """Deterministic vector store used for tests and local prototyping.

    Every `add` appends new entries, so ingesting the same content twice
    leaves both copies retrievable.
    """

    def __init__(self, embedder: Embedder) -> None:
        self._embedder = embedder
        self._entries: list[_StoredVector] = []

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, documents: list[Document]) -> None:
        embeddings = self._embedder.embed_documents([doc.text for doc in documents])
        for document, embedding in zip(documents, embeddings, strict=True):
            self._entries.append(
                _StoredVector(entry_id=str(uuid.uuid4()), document=document, embedding=embedding)
            )

    def similarity_search(self, query: str, k: int = 4) -> list[Document | None]:
        query_embedding = self._embedder.embed_query(query)
        ranked = sorted(
            (
                (entry, _cosine_similarity(query_embedding, entry.embedding))
                for entry in self._entries
            ),
            key=lambda item: item[1],
            reverse=True,
        )
        return [replace(entry.document, score=score) for entry, score in ranked[:k]]


class FaissVectorStoreAdapter:
    """FAISS adapter via LangChain community integration.

    Keeps the same contract as `InMemoryVectorStore` so it can be swapped in
    through `Settings.vector_store`.
    """

    def __init__(self, embedder: Embedder) -> None:
        try:
            from langchain_community.vectorstores import FAISS
            from langchain_core.embeddings import Embeddings
        except Exception as exc:  # pragma: no cover - import path is environment-dependent
            raise RuntimeError(
                "FAISS dependencies are not available. Install langchain-community/faiss-cpu."
            ) from exc

        class _EmbeddingAdapter(Embeddings):
            def __init__(self, adapter_embedder: Embedder) -> None:
                self._embedder = adapter_embedder

            def embed_documents(self, texts: list[str]) -> list[list[float]]:
                return cast(list[list[float]], self._embedder.embed_documents(texts))

            def embed_query(self, text: str) -> list[float]:
                return cast(list[float], self._embedder.embed_query(text))

        self._faiss_cls = FAISS
        self._embeddings = _EmbeddingAdapter(embedder)
        self._index: Any | None = None

    def add(self, documents: list[Document]) -> None:
        if not documents:
            return
        texts = [doc.text for doc in documents]
        metadatas = [{**doc.metadata, "doc_id": doc.doc_id} for doc in documents]
        ids = [str(uuid.uuid4()) for _ in documents]

        if self._index is None:
            self._index = self._faiss_cls.from_texts(
                texts, self._embeddings, metadatas=metadatas, ids=ids
            )
            return
        self._index.add_texts(texts, metadatas=metadatas, ids=ids)

    def similarity_search(self, query: str, k: int = 4) -> list[Document | None]:
        if self._index is None:
            return []
        docs_and_scores = self._index.similarity_search_with_relevance_scores(query, k=k)
        results: list[Document | None] = []
        for rank, (doc, score) in enumerate(docs_and_scores, start=1):
            metadata = dict(doc.metadata)
            results.append(
                Document(
                    doc_id=str(metadata.pop("doc_id", f"faiss-{rank}")),
                    text=doc.page_content,
                    metadata=metadata,
                    score=None if score is None else float(score),
                )
            )
        return results


def _cosine_similarity(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = sqrt(sum(x * x for x in a))
    norm_b = sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return numerator / (norm_a * norm_b)
