"""Chunking of document text for embedding."""

import re

from tentacle.domain.records import DocumentChunk

PARAGRAPH_BREAK_RE = re.compile(r"\n\n+")


class DocumentChunker:
    """Splits a document's plain text into overlapping, title-prefixed chunks."""

    def __init__(self, target_chars: int = 800, overlap_chars: int = 200):
        """Initialize the chunker.

        Args:
            target_chars: Size a chunk body may reach before a new chunk is started
            overlap_chars: Number of trailing characters of a chunk repeated at the start
                of the next one
        """
        self.target_chars = target_chars
        self.overlap_chars = overlap_chars

    def chunk(self, title: str, body: str) -> list[DocumentChunk]:
        """Split ``body`` into chunks, each prefixed with ``title``.

        Args:
            title: Document title
            body: Plain text, paragraphs separated by blank lines

        Returns:
            At least one chunk. An empty body gives a single chunk holding only the title.
        """
        title = title.strip()
        body = body.strip()

        if not body:
            return [DocumentChunk(text=title, index=0)]
        if len(body) <= self.target_chars:
            return [DocumentChunk(text=self._with_title(title, body), index=0)]

        bodies = self._pack_paragraphs(self._split_on_paragraphs(body))
        if not bodies:
            bodies = [body]
        return [
            DocumentChunk(text=self._with_title(title, chunk_body), index=index)
            for index, chunk_body in enumerate(bodies)
        ]

    @staticmethod
    def _split_on_paragraphs(text: str) -> list[str]:
        paragraphs = (p.strip() for p in PARAGRAPH_BREAK_RE.split(text))
        return [p for p in paragraphs if p]

    def _pack_paragraphs(self, paragraphs: list[str]) -> list[str]:
        """Greedily join paragraphs into bodies no larger than the target, when possible."""
        bodies = []
        current = ""

        for paragraph in paragraphs:
            candidate = f"{current}\n\n{paragraph}" if current else paragraph
            if len(candidate) > self.target_chars and current:
                bodies.append(current)
                overlap = self._tail(current)
                current = f"{overlap}\n\n{paragraph}" if overlap else paragraph
            else:
                current = candidate

        if current:
            bodies.append(current)
        return bodies

    def _tail(self, text: str) -> str:
        if self.overlap_chars <= 0:
            return ""
        return text[-self.overlap_chars :]

    @staticmethod
    def _with_title(title: str, body: str) -> str:
        return f"{title}\n\n{body}" if title else body
