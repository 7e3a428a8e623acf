from fastapi import APIRouter, Depends, Header, Response, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.schemas.project import (
    MyReviewOut,
    ProjectCreate,
    ProjectEnvelope,
    ProjectListOut,
    ProjectSubmitResponse,
    ProjectUpdate,
    ProjectUpdateResponse,
    ReviewCreate,
    ReviewListOut,
    ReviewSubmitResponse,
)
from app.schemas.user import MessageOut
from app.services import project_service
from app.middleware.auth_middleware import AuthIdentity, get_current_user, get_optional_user

router = APIRouter(prefix="/projects", tags=["projects"])


def _viewer_id(identity: Optional[AuthIdentity]) -> Optional[int]:
    return identity.id if identity else None


@router.get("", response_model=ProjectListOut)
def list_projects(
    section: Optional[str] = None,
    group: Optional[str] = None,
    db: Session = Depends(get_db),
    viewer: Optional[AuthIdentity] = Depends(get_optional_user),
):
    return {"projects": project_service.list_projects(db, section=section, group=group, viewer_id=_viewer_id(viewer))}


@router.post("", response_model=ProjectSubmitResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    project, already_submitted = project_service.create_project(db, current_user.id, data, submission_key=idempotency_key)
    message = "Project already submitted" if already_submitted else "Project created successfully"
    return {"message": message, "project": project, "already_submitted": already_submitted}


@router.get("/{project_id}", response_model=ProjectEnvelope)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[AuthIdentity] = Depends(get_optional_user),
):
    return {"project": project_service.get_project(db, project_id, viewer_id=_viewer_id(viewer))}


@router.put("/{project_id}", response_model=ProjectUpdateResponse)
def update_project(
    project_id: int,
    data: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    project = project_service.update_project(db, project_id, current_user.id, data)
    return {"message": "Project updated successfully", "project": project}


@router.delete("/{project_id}", response_model=MessageOut)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    project_service.delete_project(db, project_id, current_user.id)
    return {"message": "Project deleted successfully"}


@router.post("/{project_id}/reviews", response_model=ReviewSubmitResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    project_id: int,
    data: ReviewCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    review, created = project_service.submit_review(db, project_id, current_user.id, data)
    if not created:
        response.status_code = status.HTTP_200_OK
        return {"message": "Review updated successfully", "review": review}
    return {"message": "Review added successfully", "review": review}


@router.get("/{project_id}/reviews", response_model=ReviewListOut)
def list_reviews(project_id: int, db: Session = Depends(get_db)):
    return {"reviews": project_service.list_reviews(db, project_id)}


@router.get("/{project_id}/my-review", response_model=MyReviewOut)
def get_my_review(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    return {"review": project_service.get_my_review(db, project_id, current_user.id)}
