"""Shared route dependencies and outcome -> HTTP mapping"""

from fastapi import Depends, HTTPException, Request

from jurisai.api.session_store import WorkspaceEntry, WorkspaceStore
from jurisai.db.base import EntityStore
from jurisai.errors import ActionValidationError, CollaboratorError, RecordNotFoundError
from jurisai.services.workspace import ActionOutcome, FailureKind, OutcomeStatus

FAILURE_CODES = {
    FailureKind.VALIDATION: 422,
    FailureKind.NOT_FOUND: 404,
    FailureKind.COLLABORATOR: 502,
}


def get_entity_store(request: Request) -> EntityStore:
    return request.app.state.entity_store


def get_invoker(request: Request):
    return request.app.state.invoker


def get_ingestion_service(request: Request):
    return request.app.state.ingestion


def get_workspaces(request: Request) -> WorkspaceStore:
    return request.app.state.workspaces


async def get_workspace(
    workspace_id: str,
    workspaces: WorkspaceStore = Depends(get_workspaces),
) -> WorkspaceEntry:
    entry = await workspaces.get(workspace_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Workspace not found or expired")
    return entry


def check_outcome(outcome: ActionOutcome) -> ActionOutcome:
    """Raise the HTTPException matching a failed, skipped or stale outcome."""
    if outcome.status == OutcomeStatus.SUCCEEDED:
        return outcome
    if outcome.status == OutcomeStatus.FAILED:
        code = FAILURE_CODES.get(outcome.failure, 500)
        raise HTTPException(status_code=code, detail=outcome.message)
    if outcome.status == OutcomeStatus.SKIPPED:
        raise HTTPException(
            status_code=409, detail=outcome.message or f"'{outcome.control}' is already in progress"
        )
    raise HTTPException(status_code=409, detail="Superseded by a newer request")


def raise_http(e: Exception):
    """Translate a service exception raised outside the workspace runner."""
    if isinstance(e, ActionValidationError):
        raise HTTPException(status_code=422, detail=str(e)) from e
    if isinstance(e, RecordNotFoundError):
        raise HTTPException(status_code=404, detail=str(e)) from e
    if isinstance(e, CollaboratorError):
        raise HTTPException(status_code=502, detail=str(e)) from e
    raise e
