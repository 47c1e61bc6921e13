"""Visa application endpoints, including supporting-document uploads."""
import logging
import uuid
from typing import Annotated

from fastapi import Depends, File, Form, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.api.request_routes import build_request_router, domain_errors
from travel_portal.core.deps import get_current_user
from travel_portal.db.session import get_session
from travel_portal.schemas.visa import (
    VisaCreate,
    VisaDetail,
    VisaDocumentOut,
    VisaListResponse,
    VisaOut,
    VisaUpdate,
)
from travel_portal.services import requests as request_svc
from travel_portal.services import uploads

logger = logging.getLogger(__name__)


async def _documents(db: AsyncSession, visa) -> dict:
    docs = await uploads.list_visa_documents(db, visa.id)
    return {"documents": [VisaDocumentOut.model_validate(d) for d in docs]}


router = build_request_router(
    "visa",
    create_schema=VisaCreate,
    update_schema=VisaUpdate,
    out_schema=VisaOut,
    detail_schema=VisaDetail,
    list_schema=VisaListResponse,
    detail_extras=_documents,
)


# ─── Documents ───

@router.get("/{visa_id}/documents", response_model=list[VisaDocumentOut], summary="List visa documents")
async def list_documents(
    visa_id: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(get_current_user),
):
    with domain_errors():
        await request_svc.get_request(db, "visa", visa_id, current_user)
    return [VisaDocumentOut.model_validate(d) for d in await uploads.list_visa_documents(db, visa_id)]


@router.post(
    "/{visa_id}/documents",
    response_model=VisaDocumentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a supporting document (PDF/JPEG/PNG/WebP, max 5MB)",
)
async def upload_document(
    visa_id: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(get_current_user),
    file: UploadFile = File(..., description="Document file"),
    document_type: str = Form(default="passport_copy"),
):
    content = await file.read()
    with domain_errors():
        visa = await request_svc.get_request(db, "visa", visa_id, current_user)
        request_svc.ensure_documents_open("visa", visa)
        document = await uploads.store_visa_document(
            db,
            visa_id,
            content,
            file.filename,
            file.content_type,
            document_type,
            current_user,
        )
    return VisaDocumentOut.model_validate(document)


@router.delete(
    "/{visa_id}/documents/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a visa document",
)
async def delete_document(
    visa_id: str,
    document_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(get_current_user),
):
    with domain_errors():
        visa = await request_svc.get_request(db, "visa", visa_id, current_user)
        request_svc.ensure_documents_open("visa", visa)
        await uploads.delete_visa_document(db, visa_id, document_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
