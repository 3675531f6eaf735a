"""File ingestion: upload attached files and extract their text"""

import io
import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Optional

import pdfplumber
from pydantic import BaseModel

from jurisai.errors import IngestionError
from jurisai.utils.config import get_settings

logger = logging.getLogger(__name__)

FULL_TEXT_SCHEMA = {
    "type": "object",
    "properties": {
        "full_text": {"type": "string"},
    },
}

SUPPORTED_SUFFIXES = {".pdf", ".docx", ".txt", ".md"}


class FileReference(BaseModel):
    """Where an uploaded file lives"""
    file_id: str
    filename: str
    location: str
    mime_type: str = "application/octet-stream"
    remote: bool = False


class ExtractionResult(BaseModel):
    status: str
    output: dict = {}
    details: Optional[str] = None

    @property
    def full_text(self) -> str:
        return self.output.get("full_text", "") if self.status == "success" else ""


def parse_pdf(content: bytes) -> str:
    """Extract text from a PDF, page by page"""
    text_parts = []
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text() or ""
            if page_text.strip():
                text_parts.append(page_text)
    return "\n\n".join(text_parts)


def parse_docx(content: bytes) -> str:
    from docx import Document

    doc = Document(io.BytesIO(content))
    paragraphs = [p.text for p in doc.paragraphs if p.text.strip()]
    return "\n\n".join(paragraphs)


def parse_text(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


PARSERS = {
    ".pdf": parse_pdf,
    ".docx": parse_docx,
    ".txt": parse_text,
    ".md": parse_text,
}


class FileIngestion:
    """Uploads to the local upload directory, or to a remote bucket when one is given.

    `remote` is any object with upload_file(path, content, mime_type) and
    download_file(path), e.g. SupabaseStore.
    """

    def __init__(self, upload_dir: Optional[str] = None, remote=None):
        self.upload_dir = Path(upload_dir or get_settings().upload_dir)
        self.remote = remote

    def upload(self, content: bytes, filename: str) -> FileReference:
        suffix = Path(filename).suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise IngestionError(f"Unsupported file type: {suffix or filename}")

        file_id = str(uuid.uuid4())
        stored_name = f"{file_id}{suffix}"
        mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        try:
            if self.remote is not None:
                location = self.remote.upload_file(stored_name, content, mime_type)
            else:
                self.upload_dir.mkdir(parents=True, exist_ok=True)
                path = self.upload_dir / stored_name
                path.write_bytes(content)
                location = str(path)
        except Exception as e:
            logger.error(f"Upload of {filename} failed: {e}")
            raise IngestionError(f"Failed to upload {filename}: {e}") from e

        logger.info(f"Uploaded {filename} as {stored_name}")
        return FileReference(
            file_id=file_id,
            filename=filename,
            location=location,
            mime_type=mime_type,
            remote=self.remote is not None,
        )

    def extract_text(self, file_ref: FileReference, extraction_schema: Optional[dict] = None) -> ExtractionResult:
        """Extract full text. Only schemas asking for `full_text` are supported."""
        schema = extraction_schema or FULL_TEXT_SCHEMA
        if "full_text" not in schema.get("properties", {}):
            return ExtractionResult(status="error", details="Extraction schema must request full_text")

        parser = PARSERS.get(Path(file_ref.filename).suffix.lower())
        if parser is None:
            return ExtractionResult(status="error", details=f"Unsupported file type: {file_ref.filename}")

        try:
            if file_ref.remote:
                content = self.remote.download_file(file_ref.location)
            else:
                content = Path(file_ref.location).read_bytes()
            text = parser(content)
        except Exception as e:
            logger.warning(f"Text extraction failed for {file_ref.filename}: {e}")
            return ExtractionResult(status="error", details=str(e))

        if not text.strip():
            return ExtractionResult(status="error", details="No text could be extracted")
        return ExtractionResult(status="success", output={"full_text": text})

    def ingest(self, content: bytes, filename: str) -> str:
        """Upload then extract; returns the text or raises IngestionError."""
        result = self.extract_text(self.upload(content, filename))
        if result.status != "success":
            raise IngestionError(f"Failed to process {filename}: {result.details}")
        return result.full_text


def get_ingestion(mode: str = None) -> FileIngestion:
    """Factory: remote bucket in supabase mode, local directory otherwise."""
    if mode is None:
        mode = get_settings().db_mode
    if mode == "supabase":
        from jurisai.db.supabase import SupabaseStore

        return FileIngestion(remote=SupabaseStore())
    return FileIngestion()
