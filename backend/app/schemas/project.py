"""Project / Review 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Any, Optional, List
from datetime import datetime


class ProjectCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    section: Optional[str] = None
    group_number: Optional[str] = None
    full_name: Optional[str] = None
    matricule: Optional[str] = None
    drive_link: Optional[str] = None
    submission_key: Optional[str] = None


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    section: Optional[str] = None
    group_number: Optional[str] = None
    full_name: Optional[str] = None
    matricule: Optional[str] = None
    drive_link: Optional[str] = None


class ProjectOut(BaseModel):
    id: int
    title: str
    description: str
    section: Optional[str] = None
    group_number: Optional[str] = None
    full_name: Optional[str] = None
    matricule: Optional[str] = None
    drive_link: Optional[str] = None
    author_id: int
    author_name: Optional[str] = None
    avg_rating: float = 0
    review_count: int = 0
    is_mine: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class ProjectListOut(BaseModel):
    projects: List[ProjectOut]


class ProjectEnvelope(BaseModel):
    project: ProjectOut


class ProjectSubmitResponse(BaseModel):
    message: str
    project: ProjectOut
    already_submitted: bool = False


class ProjectUpdateResponse(BaseModel):
    message: str
    project: ProjectOut


class ReviewCreate(BaseModel):
    # 정수 여부/범위는 서비스 레이어에서 검증한다 (bool, 실수 거부).
    rating: Any = None
    comment: Optional[str] = None


class ReviewOut(BaseModel):
    id: int
    project_id: int
    reviewer_id: int
    rating: int
    comment: Optional[str] = None
    username: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReviewSubmitResponse(BaseModel):
    message: str
    review: ReviewOut


class ReviewListOut(BaseModel):
    reviews: List[ReviewOut]


class MyReviewOut(BaseModel):
    review: Optional[ReviewOut] = None
