"""Local filesystem storage for request attachments (visa documents)."""
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.core.config import settings
from travel_portal.models.visa import VisaDocument
from travel_portal.services import audit as audit_svc

logger = logging.getLogger(__name__)

VISA_DOCUMENT_DIR = "visa-documents"

_EXTENSIONS = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}
_SAFE = re.compile(r"[^A-Za-z0-9_.-]")


class UploadRejected(Exception):
    """File failed size/type validation (HTTP 400)."""


class DocumentNotFound(Exception):
    pass


# ─── Validation ───

def validate_upload(content: bytes, content_type: str | None) -> None:
    if not content:
        raise UploadRejected("Empty file.")
    if len(content) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise UploadRejected(f"File too large. Maximum size is {limit_mb:g}MB.")
    if content_type not in settings.allowed_upload_types:
        raise UploadRejected("Invalid file type. Only PDF, JPEG, PNG and WebP files are allowed.")


def build_file_name(owner_id: str, document_type: str, original_name: str | None, content_type: str, when: datetime | None = None) -> str:
    """`{owner}_{document_type}_{timestamp}{ext}`; the extension follows the client name when present."""
    ext = os.path.splitext(original_name or "")[1].lower() or _EXTENSIONS.get(content_type, "")
    stamp = int((when or datetime.now(timezone.utc)).timestamp() * 1000)
    return _SAFE.sub("_", f"{owner_id}_{document_type}_{stamp}") + ext


# ─── Disk ───

def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def ensure_upload_dirs() -> None:
    """Create the upload tree. Called on startup."""
    (upload_root() / VISA_DOCUMENT_DIR).mkdir(parents=True, exist_ok=True)


def save_file(subdir: str, file_name: str, content: bytes) -> str:
    target_dir = upload_root() / subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / file_name
    path.write_bytes(content)
    logger.info("Stored %s (%d bytes)", path, len(content))
    return str(path)


def remove_file(path: str) -> None:
    try:
        Path(path).unlink()
    except FileNotFoundError:
        logger.warning("Upload %s already gone from disk.", path)


# ─── Visa documents ───

async def store_visa_document(
    db: AsyncSession,
    visa_id: str,
    content: bytes,
    file_name: str | None,
    content_type: str | None,
    document_type: str,
    user,
) -> VisaDocument:
    validate_upload(content, content_type)
    stored_name = build_file_name(visa_id, document_type, file_name, content_type)
    path = save_file(VISA_DOCUMENT_DIR, stored_name, content)

    document = VisaDocument(
        visa_id=visa_id,
        document_type=document_type,
        file_name=file_name or stored_name,
        file_path=path,
        content_type=content_type,
        size_bytes=len(content),
        uploaded_by=user.id,
    )
    db.add(document)
    audit_svc.log(
        db,
        action="visa.document_uploaded",
        entity_type="visa",
        entity_id=visa_id,
        actor_id=user.id,
        actor_email=user.email,
        after={"document_type": document_type, "file_name": document.file_name, "size_bytes": len(content)},
    )
    try:
        await db.commit()
    except Exception:
        remove_file(path)
        raise
    return document


async def list_visa_documents(db: AsyncSession, visa_id: str) -> list[VisaDocument]:
    return list(
        (
            await db.execute(
                select(VisaDocument)
                .where(VisaDocument.visa_id == visa_id)
                .order_by(VisaDocument.created_at.asc())
            )
        ).scalars().all()
    )


async def delete_visa_document(db: AsyncSession, visa_id: str, document_id: uuid.UUID, user) -> None:
    document = (
        await db.execute(
            select(VisaDocument).where(VisaDocument.id == document_id, VisaDocument.visa_id == visa_id)
        )
    ).scalar_one_or_none()
    if document is None:
        raise DocumentNotFound(f"Document '{document_id}' not found for visa application '{visa_id}'.")
    path = document.file_path
    audit_svc.log(
        db,
        action="visa.document_deleted",
        entity_type="visa",
        entity_id=visa_id,
        actor_id=user.id,
        actor_email=user.email,
        before={"document_type": document.document_type, "file_name": document.file_name},
    )
    await db.delete(document)
    await db.commit()
    remove_file(path)
