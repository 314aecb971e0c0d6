# Path: api/app.py
# Purpose: Expose a FastAPI application over the badge collection and discovery pipeline.
# Layer: api.
# Details: Health, badge listing/lookup/deletion, discovery from a raw image body, stats, repair, and export.

from dataclasses import asdict
from typing import Any, Dict, Optional

from config.log import configure_logging
from core.discovery.service import BadgeService
from core.errors import NotFound, StorageError
from core.models.domain import (
    AlreadyExists,
    BadgeRecord,
    DiscoveryFailure,
    DiscoveryResult,
    DiscoveryStep,
    DiscoverySuccess,
)


def _badge_payload(badge: BadgeRecord) -> Dict[str, Any]:
    return badge.to_dict()


def _discovery_payload(result: DiscoveryResult) -> Dict[str, Any]:
    if isinstance(result, DiscoverySuccess):
        return {"status": result.status, "badge": _badge_payload(result.badge)}
    if isinstance(result, AlreadyExists):
        return {
            "status": result.status,
            "animalName": result.animal_name,
            "existingBadge": _badge_payload(result.existing_badge),
        }
    if isinstance(result, DiscoveryFailure):
        return {"status": result.status, "step": result.step.value, "error": str(result.error)}
    return {"status": result.status}


def create_app(service: Optional[BadgeService] = None, log_level: str = "INFO"):  # type: ignore[override]
    """Create a FastAPI app instance configured with the provided badge service."""

    configure_logging(log_level)

    from fastapi import FastAPI, HTTPException, Request, Response
    from fastapi.concurrency import run_in_threadpool

    app = FastAPI(title="Animal Dex API", version="0.1.0")

    def _service() -> BadgeService:
        if service is None:
            raise HTTPException(status_code=500, detail="Badge service is not configured.")
        return service

    @app.get("/health")
    def health() -> Dict[str, str]:
        """Return a simple health status payload."""

        return {"status": "ok"}

    @app.get("/badges")
    def list_badges(
        search: Optional[str] = None,
        sort_by: str = "date",
        sort_order: Optional[str] = None,
        limit: Optional[int] = None,
    ):
        badges = _service().get_filtered_badges(search=search, sort_by=sort_by, sort_order=sort_order, limit=limit)
        return {"badges": [_badge_payload(badge) for badge in badges], "totalCount": len(badges)}

    @app.get("/badges/{badge_id}")
    def get_badge(badge_id: str):
        badge = _service().get_badge_by_id(badge_id)
        if badge is None:
            raise HTTPException(status_code=404, detail=f"Badge {badge_id} not found.")
        return _badge_payload(badge)

    @app.get("/badges/{badge_id}/image")
    def get_badge_image(badge_id: str):
        try:
            data = _service().storage.read_badge_image(badge_id)
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except StorageError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return Response(content=data, media_type="image/png")

    @app.delete("/badges/{badge_id}")
    def delete_badge(badge_id: str):
        svc = _service()
        if svc.get_badge_by_id(badge_id) is None:
            raise HTTPException(status_code=404, detail=f"Badge {badge_id} not found.")
        if not svc.delete_badge(badge_id):
            raise HTTPException(status_code=500, detail=f"Badge {badge_id} could not be deleted.")
        return {"deleted": badge_id}

    @app.post("/discover")
    async def discover(request: Request):
        """Run discovery on the raw image bytes sent as the request body."""

        photo = await request.body()
        if not photo:
            raise HTTPException(status_code=400, detail="Request body must contain image bytes.")
        result = await run_in_threadpool(_service().discover_animal, photo)
        payload = _discovery_payload(result)
        if isinstance(result, DiscoveryFailure):
            upstream = result.step in (DiscoveryStep.IDENTIFY, DiscoveryStep.GENERATE)
            raise HTTPException(status_code=502 if upstream else 500, detail=payload)
        return payload

    @app.get("/stats")
    def collection_stats():
        return asdict(_service().get_collection_stats())

    @app.get("/storage/stats")
    def storage_stats():
        return asdict(_service().storage.get_storage_stats())

    @app.post("/storage/repair")
    def repair_storage():
        return asdict(_service().storage.repair())

    @app.get("/storage/health")
    def storage_health():
        report = _service().check_storage_health()
        return {
            "isHealthy": report.is_healthy,
            "message": report.message,
            "stats": asdict(report.stats) if report.stats else None,
        }

    @app.get("/export")
    def export():
        return _service().export_collection().to_dict()

    return app
