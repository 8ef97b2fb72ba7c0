"""Raw document text sources for command-line sessions.

Responsibilities:
- Read plain-text documents and text-based PDFs into one raw string.
- Report unreadable or empty inputs as document source errors.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import DocumentSourceError


class TextSource:
    """Load raw document text by file suffix."""

    _PLAIN_TEXT_SUFFIXES = frozenset({".txt", ".md", ".text", ""})

    def read(self, path: Path) -> str:
        """Return raw text for `path`.

        Raises:
            DocumentSourceError: If the file is missing, unsupported, or has no text.
        """

        if not path.exists():
            raise DocumentSourceError(
                operation="read",
                detail=f"Input document not found: `{path}`.",
                hint="Pass an existing `.txt`, `.md`, or `.pdf` path.",
            )

        suffix = path.suffix.lower()
        if suffix == ".pdf":
            text = "\n".join(self.read_pdf_pages(path))
        elif suffix in self._PLAIN_TEXT_SUFFIXES:
            text = self._read_plain_text(path)
        else:
            raise DocumentSourceError(
                operation="read",
                detail=f"Unsupported document type `{suffix}` for `{path}`.",
                hint="Convert the document to `.txt` or a text-based `.pdf` first.",
            )

        if not text.strip():
            raise DocumentSourceError(
                operation="read",
                detail=f"No extractable text found in `{path}`.",
                hint="Only text-based PDFs are supported; scanned pages need OCR first.",
            )
        return text

    def read_pdf_pages(self, path: Path) -> list[str]:
        """Extract per-page text with `pypdf`."""

        try:
            from pypdf import PdfReader
            from pypdf.errors import PdfReadError
        except ImportError as exc:
            raise DocumentSourceError(
                operation="read",
                detail="The `pypdf` package is required for PDF input but was not found.",
            ) from exc

        try:
            reader = PdfReader(str(path))
        except (PdfReadError, OSError) as exc:
            raise DocumentSourceError(
                operation="read",
                detail=f"Failed to open PDF `{path}`: {exc}",
            ) from exc

        pages: list[str] = []
        for page in reader.pages:
            extracted_text = page.extract_text()
            pages.append((extracted_text or "").replace("\f", "\n").strip())
        return pages

    def _read_plain_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentSourceError(
                operation="read",
                detail=f"Document `{path}` is not valid UTF-8 text.",
                hint="Re-save the file with UTF-8 encoding.",
            ) from exc
