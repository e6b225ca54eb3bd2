from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from core.config import COMMENT_MAX_LENGTH
from routers.admin_user import get_current_admin, AdminUser
from routers.deps import get_complaint_service
from services.complaint_service import ComplaintService
from services.image_payload import validate_images


class ComplaintCreate(BaseModel):
    # submitter info is optional (anonymous complaints are allowed)
    student_name: Optional[str] = None
    email: Optional[str] = None

    # blank values are rejected by the service with a 400
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None

    # data URLs, already compressed in the browser
    images: List[str] = Field(default_factory=list)


class ComplaintStatusUpdate(BaseModel):
    status: Optional[str] = None


class SupportToggle(BaseModel):
    user_identifier: Optional[str] = None


class CommentCreate(BaseModel):
    name: Optional[str] = None
    text: Optional[str] = Field(default=None, max_length=COMMENT_MAX_LENGTH)


router = APIRouter(prefix="/api/complaints", tags=["complaints"])


# complaint list (newest first, optional filters)
@router.get("")
def list_complaints(
    status: Optional[str] = None,
    category: Optional[str] = None,
    location: Optional[str] = None,
    search: Optional[str] = None,
    service: ComplaintService = Depends(get_complaint_service),
):
    return service.list(status=status, category=category, location=location, search=search)


@router.post("", status_code=201)
def submit_complaint(
    payload: ComplaintCreate,
    service: ComplaintService = Depends(get_complaint_service),
):
    """
    - validates image payloads (type allow-list, size ceiling)
    - status always starts as `pending`
    """
    validate_images(payload.images)
    complaint_id = service.submit(payload.model_dump())
    return {"id": complaint_id, "message": "Complaint added successfully"}


@router.get("/{complaint_id}")
def get_complaint(
    complaint_id: str,
    service: ComplaintService = Depends(get_complaint_service),
):
    return service.get(complaint_id)


@router.put("/{complaint_id}/status")
def update_complaint_status(
    complaint_id: str,
    payload: ComplaintStatusUpdate,
    current_admin: AdminUser = Depends(get_current_admin),
    service: ComplaintService = Depends(get_complaint_service),
):
    service.update_status(complaint_id, payload.status)
    return {
        "message": "Status updated successfully",
        "id": complaint_id,
        "status": payload.status.strip(),
    }


@router.delete("/{complaint_id}")
def delete_complaint(
    complaint_id: str,
    current_admin: AdminUser = Depends(get_current_admin),
    service: ComplaintService = Depends(get_complaint_service),
):
    service.delete(complaint_id)
    return {"message": "Complaint deleted successfully", "id": complaint_id}


# support (upvote) toggle
@router.post("/{complaint_id}/support")
def toggle_support(
    complaint_id: str,
    payload: SupportToggle,
    service: ComplaintService = Depends(get_complaint_service),
):
    is_supported = service.toggle_support(complaint_id, payload.user_identifier)
    return {
        "is_supported": is_supported,
        "support_count": service.support_count(complaint_id),
    }


@router.get("/{complaint_id}/support/{user_identifier:path}")
def check_support(
    complaint_id: str,
    user_identifier: str,
    service: ComplaintService = Depends(get_complaint_service),
):
    return {"is_supported": service.has_supported(complaint_id, user_identifier)}


@router.post("/{complaint_id}/comments", status_code=201)
def add_comment(
    complaint_id: str,
    payload: CommentCreate,
    service: ComplaintService = Depends(get_complaint_service),
):
    comment_id = service.add_comment(complaint_id, payload.name, payload.text)
    return {"id": comment_id, "message": "Comment added successfully"}
