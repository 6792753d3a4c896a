"""
FastAPI application for the property lifecycle engine.

Routes:
- GET    /health                              - Health check
- GET    /properties/{id}/stages              - Stage report for a workflow
- GET    /properties/{id}/progress            - Document progress for a workflow
- GET    /properties/{id}/documents/{key}/lock - Whether a document slot is locked
- POST   /properties/{id}/report              - Render the stage report as PDF
- GET    /permissions/templates               - Role template catalogue
- POST   /permissions/preview                 - Apply one editor action to a state
- POST   /permissions/assign                  - Assign a state to users for a scope
- GET    /permissions                         - List grants for a scope
- GET    /permissions/{user_id}/access        - Effective level for one section
- DELETE /permissions/{user_id}               - Remove a grant

Production deployment configuration via environment variables.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from lifecycle.engine import LifecycleEngine
from lifecycle.errors import InvalidEnumValue, PermissionAssignmentError
from lifecycle.permissions import (
    AssignedUser,
    PermissionRepository,
    PermissionState,
    action_from_dict,
    classify_state,
    get_all_role_templates,
    get_permission_repository,
    reduce,
    resolve_permission,
)
from lifecycle.stages import WorkflowType
from reporting.progress_report import ProgressReportGenerator
from utils.config import Config


logger = logging.getLogger(__name__)


# =============================================================================
# API Request/Response Models
# =============================================================================

class SectionPermissionInput(BaseModel):
    """One section record of a permission state."""
    section: str
    level: str = "none"
    details: Dict[str, str] = {}


class PreviewRequest(BaseModel):
    """Current editor state plus the action to apply to it."""
    sections: List[SectionPermissionInput] = []
    action: Dict[str, Any]


class AssignUserInput(BaseModel):
    user_id: str
    email: str


class AssignRequest(BaseModel):
    """Request body for assigning one permission state to several users."""
    users: List[AssignUserInput] = []
    sections: List[SectionPermissionInput] = []
    property_id: Optional[str] = None  # None assigns globally
    assigned_by: Optional[str] = None


def _state_from_input(sections: List[SectionPermissionInput]) -> PermissionState:
    return PermissionState.from_list([section.model_dump() for section in sections])


def _state_payload(state: PermissionState) -> Dict[str, Any]:
    return {"sections": state.to_list(), "role": classify_state(state)}


def _parse_workflow(workflow: str) -> WorkflowType:
    try:
        return WorkflowType.parse(workflow)
    except InvalidEnumValue as e:
        raise HTTPException(status_code=422, detail=str(e))


def create_app(
    engine: Optional[LifecycleEngine] = None,
    repository: Optional[PermissionRepository] = None,
    config: Optional[Config] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()
    engine = engine or LifecycleEngine()
    if repository is None:
        repository = get_permission_repository(str(config.resolved_permissions_path))
    report_generator = ProgressReportGenerator(
        output_dir=Path(config.reports_dir),
        catalogue=engine.catalogue,
    )

    app = FastAPI(
        title="Property Lifecycle Engine",
        description="Stage gating and permission cascades for property workflows",
        version="0.1.0",
        debug=config.debug,
    )

    @app.get("/health", include_in_schema=False)
    def health():
        """Health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    # =========================================================================
    # Stage Routes
    # =========================================================================

    @app.get("/properties/{property_id}/stages")
    def get_stage_report(property_id: str, workflow: str = Query("direct_addition")):
        report = engine.evaluate(property_id, _parse_workflow(workflow))
        return report.to_dict(engine.catalogue)

    @app.get("/properties/{property_id}/progress")
    def get_progress(property_id: str, workflow: str = Query("direct_addition")):
        progress = engine.get_progress(property_id, _parse_workflow(workflow))
        return progress.to_dict()

    @app.get("/properties/{property_id}/documents/{doc_key}/lock")
    def get_document_lock(property_id: str, doc_key: str, workflow: str = Query("direct_addition")):
        locked = engine.is_document_locked(property_id, doc_key, _parse_workflow(workflow))
        return {"doc_key": doc_key, "is_locked": locked}

    @app.post("/properties/{property_id}/report")
    def generate_stage_report(property_id: str, workflow: str = Query("direct_addition")):
        """
        Render the stage report as a PDF under the configured reports directory.

        Returns:
            - success: true with the filename and number of stages rendered
        """
        report = engine.evaluate(property_id, _parse_workflow(workflow))
        result = report_generator.generate_report(report)
        logger.info("Generated stage report %s", result.path)
        return {
            "success": True,
            "filename": result.path.name,
            "stages_included": result.stages_included,
        }

    # =========================================================================
    # Permission Routes
    # =========================================================================

    @app.get("/permissions/templates")
    def list_templates():
        return {"templates": get_all_role_templates()}

    @app.post("/permissions/preview")
    def preview_permissions(request_data: PreviewRequest):
        """Apply one editor action and return the resulting state; nothing is saved."""
        try:
            state = _state_from_input(request_data.sections)
            state = reduce(state, action_from_dict(request_data.action))
        except InvalidEnumValue as e:
            raise HTTPException(status_code=422, detail=str(e))
        return _state_payload(state)

    @app.post("/permissions/assign")
    def assign_permissions(request_data: AssignRequest):
        try:
            state = _state_from_input(request_data.sections)
            grants = repository.assign(
                [AssignedUser(user.user_id, user.email) for user in request_data.users],
                state,
                property_id=request_data.property_id,
                assigned_by=request_data.assigned_by,
            )
        except InvalidEnumValue as e:
            raise HTTPException(status_code=422, detail=str(e))
        except PermissionAssignmentError as e:
            raise HTTPException(status_code=400, detail=e.errors)

        return {
            "success": True,
            "assigned": len(grants),
            "role": classify_state(state),
        }

    @app.get("/permissions")
    def list_permissions(scope: Optional[str] = Query(None, description="'global' or a property ID")):
        grants = repository.load_grants(scope)
        return {
            "grants": [
                {**grant.to_dict(), "role": classify_state(grant.state)}
                for grant in grants
            ]
        }

    @app.get("/permissions/{user_id}/access")
    def get_access(
        user_id: str,
        section: str,
        detail: Optional[str] = None,
        property_id: Optional[str] = None,
    ):
        try:
            level = resolve_permission(
                repository.load_grants(),
                user_id,
                section,
                detail=detail,
                property_id=property_id,
            )
        except InvalidEnumValue as e:
            raise HTTPException(status_code=422, detail=str(e))
        return {"user_id": user_id, "section": section, "detail": detail, "level": level.value}

    @app.delete("/permissions/{user_id}")
    def delete_permission(user_id: str, property_id: Optional[str] = None):
        if not repository.delete_grant(user_id, property_id):
            raise HTTPException(status_code=404, detail="Permission grant not found")
        return {"success": True}

    return app


# Create app instance for uvicorn
app = create_app()
