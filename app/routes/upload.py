"""File upload route preparing input for ANALYZE_FILE jobs."""

import base64
import logging

from fastapi import APIRouter, File, HTTPException, UploadFile

from app.agents.file import PDF_MIME_TYPE
from app.services.pdf_parser import extract_text_from_pdf

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])

TEXT_EXTENSIONS = (".txt", ".md", ".text")


@router.post("/upload-file")
async def upload_file(file: UploadFile = File(...)):
    """
    Read an uploaded file.

    PDFs are returned as a base64 data URL (`fileData`) for attachment-based
    analysis, plus extracted text (`content`) when extraction succeeds. Text
    files are returned as `content`.
    """
    file_content = await file.read()
    filename = file.filename or "upload"
    filename_lower = filename.lower()

    if filename_lower.endswith(".pdf"):
        encoded = base64.b64encode(file_content).decode("ascii")
        try:
            content = extract_text_from_pdf(file_content)
        except ValueError as e:
            logger.warning(f"No text extracted from {filename}: {e}")
            content = None
        return {
            "filename": filename,
            "fileType": PDF_MIME_TYPE,
            "fileData": f"data:{PDF_MIME_TYPE};base64,{encoded}",
            "content": content,
        }

    if filename_lower.endswith(TEXT_EXTENSIONS):
        try:
            content = file_content.decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="File must be UTF-8 encoded text")
        if not content.strip():
            raise HTTPException(status_code=400, detail="File contains no text")
        return {"filename": filename, "fileType": "text/plain", "content": content}

    raise HTTPException(
        status_code=400,
        detail="Unsupported file type. Only PDF and text files are supported.",
    )
