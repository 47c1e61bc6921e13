"""Router factory for the per-module request endpoints.

Every module (trf, claims, visa, transport, accommodation) exposes the same
CRUD + workflow surface; only the schemas differ. Domain errors raised by the
services are translated to HTTP status codes here.
"""
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.core.config import settings
from travel_portal.core.deps import get_current_user
from travel_portal.core.limiter import limiter
from travel_portal.db.session import get_session
from travel_portal.schemas.common import (
    ActionRequest,
    ActionResult,
    ApprovalStepOut,
    CancelRequest,
    ProcessRequest,
    WorkflowStepOut,
)
from travel_portal.services import requests as request_svc
from travel_portal.services.modules import get_module
from travel_portal.services.notifications import dispatch_status_change, submitted_event, transition_event
from travel_portal.services.uploads import DocumentNotFound, UploadRejected
from travel_portal.workflow.definitions import CANCEL
from travel_portal.workflow.engine import WorkflowError

logger = logging.getLogger(__name__)

DetailExtras = Callable[[AsyncSession, Any], Awaitable[dict[str, Any]]]


@contextmanager
def domain_errors() -> Iterator[None]:
    """Translate service exceptions into HTTPException."""
    try:
        yield
    except (request_svc.RequestNotFound, DocumentNotFound) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except request_svc.PermissionDenied as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    except (WorkflowError, request_svc.RequestNotEditable, request_svc.InvalidChanges, UploadRejected) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except request_svc.DuplicateSubmission as exc:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(exc),
            headers={"Retry-After": str(exc.retry_after)},
        )


def build_request_router(
    module: str,
    *,
    create_schema: type,
    update_schema: type,
    out_schema: type,
    detail_schema: type,
    list_schema: type,
    detail_extras: DetailExtras | None = None,
) -> APIRouter:
    config = get_module(module)
    label = config.label.lower()
    router = APIRouter()

    # ─── Create ───

    async def create_request(
        request: Request,
        body: create_schema,
        background_tasks: BackgroundTasks,
        db: Annotated[AsyncSession, Depends(get_session)],
        current_user=Depends(get_current_user),
        draft: bool = Query(default=False, description="Save without submitting"),
    ):
        with domain_errors():
            row = await request_svc.create_request(db, module, body.to_payload(), current_user, draft=draft)
        if not draft:
            background_tasks.add_task(dispatch_status_change, submitted_event(module, row))
        return out_schema.model_validate(row)

    # slowapi keys limits by module and function name; one counter per request module.
    create_request.__name__ = create_request.__qualname__ = f"create_{module}_request"
    router.post(
        "",
        response_model=out_schema,
        status_code=status.HTTP_201_CREATED,
        summary=f"Submit a {label}",
    )(limiter.limit(settings.SUBMIT_RATE_LIMIT)(create_request))

    # ─── List ───

    @router.get("", response_model=list_schema, summary=f"List {label}s")
    async def list_requests(
        db: Annotated[AsyncSession, Depends(get_session)],
        current_user=Depends(get_current_user),
        status_filter: str | None = Query(default=None, alias="status"),
        mine: bool = Query(default=False, description="Only my own requests"),
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    ):
        rows, total = await request_svc.list_requests(
            db, module, current_user, status=status_filter, page=page, page_size=page_size, mine_only=mine
        )
        return list_schema(
            items=[out_schema.model_validate(r) for r in rows],
            total=total,
            page=page,
            page_size=page_size,
        )

    # ─── Detail ───

    @router.get("/{request_id}", response_model=detail_schema, summary=f"Get a {label} with its approval history")
    async def get_request(
        request_id: str,
        db: Annotated[AsyncSession, Depends(get_session)],
        current_user=Depends(get_current_user),
    ):
        with domain_errors():
            detail = await request_svc.get_request_detail(db, module, request_id, current_user)
        extras = await detail_extras(db, detail.request) if detail_extras else {}
        return detail_schema(
            **out_schema.model_validate(detail.request).model_dump(),
            workflow_history=[WorkflowStepOut.model_validate(h) for h in detail.history],
            approval_steps=[ApprovalStepOut.model_validate(s) for s in detail.steps],
            available_actions=detail.available_actions,
            **extras,
        )

    # ─── Update ───

    @router.put("/{request_id}", response_model=out_schema, summary=f"Edit (and resubmit) a {label}")
    async def update_request(
        request_id: str,
        body: update_schema,
        background_tasks: BackgroundTasks,
        db: Annotated[AsyncSession, Depends(get_session)],
        current_user=Depends(get_current_user),
        submit: bool = Query(default=True, description="Resubmit a draft or rejected request"),
    ):
        with domain_errors():
            row, resubmitted = await request_svc.update_request(
                db, module, request_id, body.to_payload(exclude_unset=True), current_user, submit=submit
            )
        if resubmitted:
            background_tasks.add_task(dispatch_status_change, submitted_event(module, row))
        return out_schema.model_validate(row)

    # ─── Delete ───

    @router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT, summary=f"Delete a {label}")
    async def delete_request(
        request_id: str,
        db: Annotated[AsyncSession, Depends(get_session)],
        current_user=Depends(get_current_user),
    ):
        with domain_errors():
            await request_svc.delete_request(db, module, request_id, current_user)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # ─── Workflow ───

    async def _apply(db, request_id, action, user, background_tasks, comments=None, details=None) -> ActionResult:
        with domain_errors():
            row, transition = await request_svc.apply_action(
                db, module, request_id, action, user, comments=comments, details=details
            )
        background_tasks.add_task(
            dispatch_status_change, transition_event(module, row, transition, user.name, comments)
        )
        return ActionResult(
            id=row.id,
            previous_status=transition.previous_status,
            status=transition.next_status,
            message=f"{config.label} {row.id} is now '{transition.next_status}'.",
        )

    @router.post("/{request_id}/action", response_model=ActionResult, summary=f"Approve, reject or cancel a {label}")
    async def act_on_request(
        request_id: str,
        body: ActionRequest,
        background_tasks: BackgroundTasks,
        db: Annotated[AsyncSession, Depends(get_session)],
        current_user=Depends(get_current_user),
    ):
        return await _apply(db, request_id, body.action, current_user, background_tasks, comments=body.comments)

    @router.post("/{request_id}/process", response_model=ActionResult, summary=f"Start or complete processing of a {label}")
    async def process_request(
        request_id: str,
        body: ProcessRequest,
        background_tasks: BackgroundTasks,
        db: Annotated[AsyncSession, Depends(get_session)],
        current_user=Depends(get_current_user),
    ):
        return await _apply(
            db, request_id, body.action, current_user, background_tasks,
            comments=body.comments, details=body.details,
        )

    @router.post("/{request_id}/cancel", response_model=ActionResult, summary=f"Cancel a {label}")
    async def cancel_request(
        request_id: str,
        background_tasks: BackgroundTasks,
        db: Annotated[AsyncSession, Depends(get_session)],
        current_user=Depends(get_current_user),
        body: CancelRequest | None = None,
    ):
        return await _apply(
            db, request_id, CANCEL, current_user, background_tasks,
            comments=body.comments if body else None,
        )

    return router
