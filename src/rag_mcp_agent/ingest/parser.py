"""Document readers that turn raw files into page-level `Document` chunks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from io import BytesIO
from pathlib import Path

from pypdf import PdfReader

from rag_mcp_agent.types import Document


class Parser(ABC):
    """Base reader interface used by the ingestion service."""

    extensions: tuple[str, ...] = ()

    @abstractmethod
    def parse(self, data: bytes, *, source: str) -> list[Document]:
        """Split raw file content into ordered documents."""


class PdfPageParser(Parser):
    """One document per PDF page, in page order.

    Pages without extractable text are skipped; the remaining documents keep
    their original 1-based `page_number`.
    """

    extensions = (".pdf",)

    def parse(self, data: bytes, *, source: str) -> list[Document]:
        reader = PdfReader(BytesIO(data))
        total_pages = len(reader.pages)
        stem = Path(source).stem
        documents: list[Document] = []

        for page_number, page in enumerate(reader.pages, start=1):
            text = (page.extract_text() or "").strip()
            if not text:
                continue
            documents.append(
                Document(
                    doc_id=f"{stem}-page-{page_number:04d}",
                    text=text,
                    metadata={
                        "source": source,
                        "page_number": page_number,
                        "total_pages": total_pages,
                    },
                )
            )
        return documents


class TextParser(Parser):
    """Plain text and markdown files become a single document."""

    extensions = (".txt", ".md", ".markdown")

    def parse(self, data: bytes, *, source: str) -> list[Document]:
        text = data.decode("utf-8").strip()
        if not text:
            return []
        return [
            Document(
                doc_id=Path(source).stem,
                text=text,
                metadata={"source": source, "format": Path(source).suffix.lstrip(".").lower()},
            )
        ]


class ParserRegistry:
    """Maps file extension to parser implementation."""

    def __init__(self, parsers: list[Parser] | None = None) -> None:
        self._parsers: dict[str, Parser] = {}
        for parser in parsers or [PdfPageParser(), TextParser()]:
            self.register(parser)

    def register(self, parser: Parser) -> None:
        for extension in parser.extensions:
            self._parsers[extension.lower()] = parser

    def parse_bytes(self, data: bytes, filename: str) -> list[Document]:
        suffix = Path(filename).suffix.lower()
        parser = self._parsers.get(suffix)
        if parser is None:
            raise ValueError(f"No parser registered for extension: {suffix or filename}")
        return parser.parse(data, source=filename)

    def parse_path(self, path: str | Path) -> list[Document]:
        file_path = Path(path)
        return self.parse_bytes(file_path.read_bytes(), file_path.name)
