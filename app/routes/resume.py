from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, Request
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.user import User
from app.middleware.auth import get_current_user
from app.middleware.rate_limit import limiter, UPLOAD_LIMIT
from app.schemas.profile import ResumeRecord
from app.services.errors import UnsupportedFileType
from app.services.profile_store import load_resume, save_profile
from app.services.resume_parser import resume_parser
from app.utils.logger import logger

router = APIRouter()

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
PREVIEW_CHARS = 500


class ResumeTextRequest(BaseModel):
    text: Optional[str] = None


@router.post("/upload")
@limiter.limit(UPLOAD_LIMIT)
async def upload_resume(
    request: Request,
    resume: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Upload a PDF, DOCX/DOC or plain text resume and store its text

    Rate limited to 5 uploads per minute per IP address.
    """
    contents = await resume.read()
    if not contents:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if len(contents) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File too large. Maximum size is 10MB")

    logger.info(f"[Resume] Received file: {resume.filename}, Content-Type: {resume.content_type}, Size: {len(contents)}")

    try:
        text = resume_parser.extract_text(contents, resume.content_type)
    except UnsupportedFileType as e:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {e.mime_type}")
    except Exception as e:
        logger.error(f"[Resume] Parsing failed: {type(e).__name__}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error processing resume")

    record = ResumeRecord(text=text, file_name=resume.filename, uploaded_at=datetime.utcnow())
    await save_profile(db, current_user, resume=record)

    preview = text[:PREVIEW_CHARS] + ("..." if len(text) > PREVIEW_CHARS else "")
    return {
        "message": "Resume uploaded successfully",
        "resume": {**record.to_json(), "text": preview},
    }


@router.get("")
async def get_resume(current_user: User = Depends(get_current_user)):
    record = load_resume(current_user)
    if not record or not record.text:
        raise HTTPException(status_code=404, detail="No resume found")
    return record.to_json()


@router.put("/text")
async def update_resume_text(
    body: ResumeTextRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Replace the stored resume text with manually entered text"""
    if not body.text or not body.text.strip():
        raise HTTPException(status_code=400, detail="Resume text is required")

    existing = load_resume(current_user)
    record = ResumeRecord(
        text=body.text,
        file_name=existing.file_name if existing and existing.file_name else "manual-entry.txt",
        uploaded_at=datetime.utcnow(),
    )
    await save_profile(db, current_user, resume=record)
    return {"message": "Resume updated successfully"}
