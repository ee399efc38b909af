"""
File Upload Utility - Store uploaded files on local disk.

Upload kinds:
- Candidate profile picture (JPEG/PNG/GIF/WebP) -> uploads/candidate_images/
- Candidate resume (PDF only)             -> uploads/candidate_pdfs/
- Company logo (JPEG/PNG)                 -> uploads/

Max file size: settings.max_upload_mb (5MB by default)
Stored paths are relative to the working directory and served under /uploads.
"""

import logging
import os
import uuid
from typing import Callable, Optional
from fastapi import UploadFile, HTTPException

from jobboard.core.config import get_settings

logger = logging.getLogger(__name__)

CANDIDATE_IMAGES_DIR = "candidate_images"
CANDIDATE_PDFS_DIR = "candidate_pdfs"
LOGO_EXTENSIONS = {'.jpeg', '.jpg', '.png'}
LOGO_CONTENT_TYPES = {'image/jpeg', 'image/jpg', 'image/png'}
# Raster formats only; uploads are served back as-is
PROFILE_PIC_EXTENSIONS = LOGO_EXTENSIONS | {'.gif', '.webp'}
PROFILE_PIC_CONTENT_TYPES = LOGO_CONTENT_TYPES | {'image/gif', 'image/webp'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def check_profile_pic(filename: str, content_type: str) -> None:
    if get_file_extension(filename) not in PROFILE_PIC_EXTENSIONS or content_type not in PROFILE_PIC_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Profile picture must be an image (jpeg, jpg, png, gif, webp)")


def check_resume(filename: str, content_type: str) -> None:
    if content_type != 'application/pdf':
        raise HTTPException(status_code=400, detail="Resume must be a PDF")


def check_logo(filename: str, content_type: str) -> None:
    if get_file_extension(filename) not in LOGO_EXTENSIONS or content_type not in LOGO_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Images only (jpeg, jpg, png)")


async def save_upload(file: UploadFile, check: Callable[[str, str], None], subdir: str = "") -> str:
    """
    Validate and store an uploaded file under a unique name.

    Args:
        file: FastAPI UploadFile
        check: Type check for this upload kind (raises HTTPException)
        subdir: Folder inside the upload directory

    Returns:
        Stored path (e.g. "uploads/candidate_pdfs/3f2a9c0d....pdf")

    Raises:
        HTTPException on validation errors
    """
    settings = get_settings()

    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    check(file.filename, file.content_type or '')

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.max_upload_mb}MB"
        )

    target_dir = os.path.join(settings.upload_dir, subdir) if subdir else settings.upload_dir
    os.makedirs(target_dir, exist_ok=True)

    stored_name = f"{uuid.uuid4().hex}{get_file_extension(file.filename)}"
    path = os.path.join(target_dir, stored_name).replace(os.sep, '/')
    with open(path, 'wb') as out:
        out.write(content)

    logger.debug(f"Stored upload {file.filename} as {path}")
    return path


def delete_file(path: Optional[str]) -> bool:
    """Remove a stored upload. Missing files are not an error."""
    if not path:
        return False
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Could not delete {path}: {e}")
        return False
