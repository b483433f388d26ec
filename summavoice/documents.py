# summavoice/documents.py
"""Uploaded documents: storing them temporarily and pulling their text out."""
import io
import logging
import os
import shutil
import time
import uuid
import zipfile

import fitz  # PyMuPDF
import mammoth
import pytesseract
from fastapi import UploadFile
from PIL import Image

from summavoice import config
from summavoice.errors import ApiError

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOC = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT = "text/plain"
ALLOWED_MIME_TYPES = {PDF, DOC, DOCX, TXT}

# below this many characters a PDF is treated as scanned and OCR is attempted
OCR_THRESHOLD = 100

if config.TESSERACT_CMD:
    pytesseract.pytesseract.tesseract_cmd = config.TESSERACT_CMD


def upload_filename(original_name):
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"upload-{int(time.time() * 1000)}-{uuid.uuid4()}{ext}"


def save_upload(upload: UploadFile) -> str:
    """Validate an uploaded document and copy it into the uploads directory."""
    if upload.content_type not in ALLOWED_MIME_TYPES:
        raise ApiError(400, "Invalid file type. Only PDF, DOC, DOCX, and TXT files are allowed.")

    os.makedirs(config.UPLOADS_DIR, exist_ok=True)
    path = os.path.join(config.UPLOADS_DIR, upload_filename(upload.filename))
    with open(path, "wb") as buffer:
        shutil.copyfileobj(upload.file, buffer)

    if os.path.getsize(path) > config.MAX_UPLOAD_SIZE:
        cleanup(path)
        limit_mb = config.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ApiError(400, f"File size is too large. Maximum size is {limit_mb}MB.")
    logger.info("Stored upload %s as %s", upload.filename, path)
    return path


def cleanup(path):
    if path and os.path.exists(path):
        try:
            os.remove(path)
        except OSError:
            logger.exception("Could not remove upload %s", path)


def _ocr_pdf(doc, path):
    parts = []
    for page_num in range(len(doc)):
        page = doc.load_page(page_num)
        pix = page.get_pixmap(dpi=300)
        img = Image.open(io.BytesIO(pix.tobytes("png")))
        try:
            parts.append(pytesseract.image_to_string(img))
        except pytesseract.TesseractNotFoundError as exc:
            raise ApiError(500, "Tesseract is not installed or not in PATH") from exc
        logger.debug("OCR processed page %d/%d of %s", page_num + 1, len(doc), path)
    return "\n".join(parts)


def extract_pdf_text(path):
    """Returns (text, page_count); scanned PDFs go through Tesseract when OCR is enabled."""
    try:
        doc = fitz.open(path)
    except (fitz.FileDataError, RuntimeError) as exc:
        raise ApiError(400, "Could not read the PDF file") from exc

    with doc:
        text = "".join(page.get_text("text") for page in doc)
        page_count = doc.page_count
        if config.OCR_ENABLED and len(text.strip()) < OCR_THRESHOLD and page_count:
            logger.info("No substantial embedded text in %s, attempting OCR", path)
            text = _ocr_pdf(doc, path)
    return text, page_count


def extract_word_text(path):
    with open(path, "rb") as docx_file:
        try:
            result = mammoth.extract_raw_text(docx_file)
        except (zipfile.BadZipFile, ValueError, KeyError, OSError) as exc:
            raise ApiError(400, "Could not read the Word document") from exc
    for message in result.messages:
        logger.debug("mammoth: %s", message)
    return result.value


def extract_text(path, mimetype):
    """Returns (text, page_count) for a stored upload; page_count is None outside PDFs."""
    if mimetype == PDF:
        return extract_pdf_text(path)
    if mimetype in (DOC, DOCX):
        return extract_word_text(path), None
    if mimetype == TXT:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read(), None
    raise ApiError(400, "Unsupported file type")
