import os
import time
from uuid import UUID

import aiofiles
from fastapi import HTTPException, UploadFile

from app.config import UPLOADS_DIR, MAX_UPLOAD_SIZE_MB

QUIZ_PDF_DIR = os.path.join(UPLOADS_DIR, "quiz-pdfs")
QUIZ_ANSWER_DIR = os.path.join(UPLOADS_DIR, "quiz-answers")

MAX_UPLOAD_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024


def clean_filename(filename: str) -> str:
    """
    Strips directories and spaces from a client-supplied filename.
    Example:
    "../My Answers.pdf" -> "My_Answers.pdf"
    """
    return os.path.basename(filename or "upload").replace(" ", "_")


async def save_upload(file: UploadFile, target_dir: str, url_prefix: str, owner_id: UUID) -> str:
    """
    Writes an uploaded file under ``target_dir`` and returns its relative URL.
    Example:
    quiz-answers/<owner>_<ns>_answers.pdf -> /uploads/quiz-answers/<owner>_<ns>_answers.pdf
    """
    content = await file.read()
    if not content:
        raise HTTPException(400, "Uploaded file is empty")
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(400, f"File exceeds the {MAX_UPLOAD_SIZE_MB} MB limit")

    os.makedirs(target_dir, exist_ok=True)

    filename = f"{owner_id}_{time.time_ns()}_{clean_filename(file.filename)}"
    fs_path = os.path.join(target_dir, filename)

    async with aiofiles.open(fs_path, "wb") as f:
        await f.write(content)

    return f"{url_prefix}/{filename}"


def delete_upload_safely(file_url: str, target_dir: str):
    if not file_url:
        return

    file_path = os.path.join(target_dir, os.path.basename(file_url))

    if os.path.exists(file_path):
        os.remove(file_path)
