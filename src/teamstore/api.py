"""HTTP surface for the team file store."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, List, Literal, Optional

from fastapi import FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import pydantic
from pydantic import BaseModel, Field

from teamstore.errors import (
    AccessDeniedError,
    ExternalStoreError,
    IndexUnavailableError,
    NotFoundError,
    TeamStoreError,
    ValidationError,
)
from teamstore.manager import TeamFileStore
from teamstore.models import ItemType, TeamFolderItem, Tier
from teamstore.permissions import effective_permissions
from teamstore.store.codec import item_to_document
from teamstore.util.mime import decode_data_url
from teamstore.util.time import to_rfc3339

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[TeamStoreError], int], ...] = (
    (IndexUnavailableError, 503),
    (NotFoundError, 404),
    (AccessDeniedError, 403),
    (ValidationError, 400),
    (ExternalStoreError, 502),
)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class ShareFileRequest(BaseModel):
    teamId: str
    fileName: str
    sharedBy: str
    content: Optional[str] = None
    url: Optional[str] = None
    fileType: Optional[str] = None
    parentId: Optional[str] = None
    description: str = ""
    tags: List[str] = Field(default_factory=list)


class UpdateFileRequest(BaseModel):
    userId: str
    fileName: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    content: Optional[str] = None
    fileType: Optional[str] = None


class PermissionRequest(BaseModel):
    fileId: str
    userId: str
    targetUserId: str
    permission: Tier
    action: Literal["grant", "revoke"]
    itemType: ItemType = ItemType.FILE


class CreateFolderRequest(BaseModel):
    teamId: str
    folderName: str
    createdBy: str
    parentId: Optional[str] = None
    description: str = ""


class MoveItemRequest(BaseModel):
    itemId: str
    itemType: ItemType
    userId: str
    newParentId: Optional[str] = None


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def item_to_json(item: TeamFolderItem, user_id: Optional[str] = None) -> dict[str, Any]:
    """Wire form of an item; timestamps as RFC3339, plus the caller's capabilities."""
    out = {
        k: to_rfc3339(v) if isinstance(v, datetime) else v
        for k, v in item_to_document(item).items()
    }
    if item.is_folder:
        out["itemType"] = ItemType.FOLDER.value
    if user_id is not None:
        out["userPermissions"] = effective_permissions(item, user_id).to_dict()
    return out


def _parse(model: type[BaseModel], body: dict[str, Any]) -> Any:
    try:
        return model(**body)
    except pydantic.ValidationError as exc:
        fields = [".".join(str(p) for p in e["loc"]) for e in exc.errors()]
        raise ValidationError(
            f"Invalid or missing parameters: {', '.join(fields)}",
            cause=exc,
        ) from exc


def _decode_content(content: str) -> bytes:
    try:
        return decode_data_url(content)
    except ValueError as exc:
        raise ValidationError("content is not valid base64", cause=exc) from exc


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(store: TeamFileStore) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        store.close()

    app = FastAPI(
        title="teamstore",
        description="Team file and folder store",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(TeamStoreError)
    async def handle_store_error(request: Request, exc: TeamStoreError) -> JSONResponse:
        status = 500
        for error_type, code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                status = code
                break
        if status >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        body: dict[str, Any] = {"error": str(exc)}
        if isinstance(exc, IndexUnavailableError):
            body["remediationUrl"] = exc.details.get("remediation_url")
        return JSONResponse(status_code=status, content=body)

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        missing = [".".join(str(p) for p in e["loc"][1:]) for e in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={"error": f"Invalid or missing parameters: {', '.join(missing)}"},
        )

    @app.options("/api/{path:path}")
    def preflight(path: str) -> Response:
        return Response(status_code=200)

    # ----------------------------
    # Files
    # ----------------------------
    @app.get("/api/files")
    def get_files(
        userId: str,
        teamId: Optional[str] = None,
        fileId: Optional[str] = None,
    ) -> dict[str, Any]:
        if fileId:
            item = store.get_item(fileId, userId, ItemType.FILE)
            return {"file": item_to_json(item, userId)}
        if not teamId:
            raise ValidationError("Team ID and User ID are required")
        files = store.list_team_files(teamId, userId)
        return {"files": [item_to_json(f, userId) for f in files]}

    @app.post("/api/files", status_code=201)
    def post_files(body: dict[str, Any], response: Response, action: Optional[str] = None) -> dict[str, Any]:
        if action == "permission":
            req = _parse(PermissionRequest, body)
            item = store.change_permission(
                req.fileId,
                req.itemType,
                req.userId,
                req.targetUserId,
                req.permission,
                req.action,
            )
            response.status_code = 200
            return {"file": item_to_json(item, req.userId),
                    "message": "Permissions updated successfully"}

        req = _parse(ShareFileRequest, body)
        item = store.share_file(
            req.teamId,
            req.sharedBy,
            req.fileName,
            data=_decode_content(req.content) if req.content is not None else None,
            url=req.url,
            file_type=req.fileType,
            parent_id=req.parentId,
            description=req.description,
            tags=req.tags,
        )
        return {"file": item_to_json(item, req.sharedBy), "message": "File shared successfully"}

    @app.put("/api/files")
    def put_files(body: UpdateFileRequest, fileId: str) -> dict[str, Any]:
        item = store.update_file(
            fileId,
            body.userId,
            name=body.fileName,
            description=body.description,
            tags=body.tags,
            data=_decode_content(body.content) if body.content is not None else None,
            file_type=body.fileType,
        )
        return {"file": item_to_json(item, body.userId), "message": "File updated successfully"}

    @app.delete("/api/files")
    def delete_files(fileId: str, userId: str) -> dict[str, Any]:
        store.delete_file(fileId, userId)
        return {"message": "File deleted successfully"}

    # ----------------------------
    # Folders
    # ----------------------------
    @app.get("/api/folders")
    def get_folders(teamId: str, userId: str, parentId: Optional[str] = None) -> dict[str, Any]:
        items = store.list_contents(teamId, userId, parentId or None)
        return {"items": [item_to_json(i, userId) for i in items]}

    @app.post("/api/folders", status_code=201)
    def post_folders(body: CreateFolderRequest) -> dict[str, Any]:
        folder = store.create_folder(
            body.teamId,
            body.folderName,
            body.createdBy,
            parent_id=body.parentId,
            description=body.description,
        )
        return {"folder": item_to_json(folder, body.createdBy)}

    @app.delete("/api/folders")
    def delete_folders(
        folderId: str,
        userId: str,
        deleteContents: bool = Query(False),
    ) -> dict[str, Any]:
        deleted = store.delete_folder(folderId, userId, delete_contents=deleteContents)
        return {"deleted": deleted}

    @app.get("/api/folders/breadcrumbs")
    def get_breadcrumbs(teamId: str, userId: str, folderId: Optional[str] = None) -> dict[str, Any]:
        crumbs = store.build_breadcrumbs(teamId, folderId or None, userId)
        return {"breadcrumbs": [{"id": c.id, "name": c.name, "path": c.path} for c in crumbs]}

    @app.post("/api/items/move")
    def move_item(body: MoveItemRequest) -> dict[str, Any]:
        item = store.move_item(body.itemId, body.itemType, body.newParentId, body.userId)
        return {"item": item_to_json(item, body.userId)}

    return app
