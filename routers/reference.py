from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from routers.admin_user import get_current_admin, AdminUser
from routers.deps import get_category_service, get_location_service
from services.reference_service import ReferenceService


class NameCreate(BaseModel):
    name: Optional[str] = None


def build_reference_router(prefix: str, label: str, get_service: Callable) -> APIRouter:
    """
    Categories and locations expose the same three routes:
    list / add (soft-fail on duplicates -> 409, added=false) / delete.
    """
    router = APIRouter(prefix=prefix, tags=[f"{label.lower()}s"])

    @router.get("")
    def list_names(service: ReferenceService = Depends(get_service)):
        return service.list()

    @router.post("", status_code=201)
    def add_name(
        payload: NameCreate,
        current_admin: AdminUser = Depends(get_current_admin),
        service: ReferenceService = Depends(get_service),
    ):
        if not service.add(payload.name):
            return JSONResponse(
                status_code=409,
                content={"added": False, "error": f"{label} already exists"},
            )
        return {"added": True, "message": f"{label} added successfully"}

    @router.delete("/{name:path}")
    def delete_name(
        name: str,
        current_admin: AdminUser = Depends(get_current_admin),
        service: ReferenceService = Depends(get_service),
    ):
        if not service.delete(name):
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return {"message": f"{label} deleted successfully"}

    return router


category_router = build_reference_router("/api/categories", "Category", get_category_service)
location_router = build_reference_router("/api/locations", "Location", get_location_service)
