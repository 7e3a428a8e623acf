"""Project Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

import logging
from datetime import datetime, timedelta
from typing import Any, List, Optional

from pydantic import HttpUrl, TypeAdapter, ValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.models.project import Project, Review
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectUpdate, ReviewCreate
from app.utils.errors import BadRequest, Forbidden, NotFound

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10
MIN_RATING = 1
MAX_RATING = 5
CLASSIFICATION_FIELDS = ("section", "group_number", "full_name", "matricule")

_http_url = TypeAdapter(HttpUrl)


def _validate_title(value: Optional[str]) -> str:
    text = (value or "").strip()
    if len(text) < MIN_TITLE_LENGTH:
        raise BadRequest(f"Title must be at least {MIN_TITLE_LENGTH} characters")
    return text


def _validate_description(value: Optional[str]) -> str:
    text = (value or "").strip()
    if len(text) < MIN_DESCRIPTION_LENGTH:
        raise BadRequest(f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters")
    return text


def _validate_drive_link(value: Optional[str]) -> str:
    text = (value or "").strip()
    if not text:
        raise BadRequest("Drive link is required")
    if any(ch.isspace() for ch in text):
        raise BadRequest("Drive link must be a valid URL")
    try:
        _http_url.validate_python(text)
    except ValidationError:
        raise BadRequest("Drive link must be a valid URL")
    return text


def _optional_text(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None


def _parse_rating(value: Any) -> int:
    # bool은 int의 subclass이므로 먼저 거른다.
    if isinstance(value, bool):
        rating = None
    elif isinstance(value, int):
        rating = value
    elif isinstance(value, str) and value.strip().isdecimal():
        rating = int(value.strip())
    else:
        rating = None
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        raise BadRequest(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def _aggregate_query(db: Session):
    review_stats = (
        db.query(
            Review.project_id.label("project_id"),
            func.avg(Review.rating).label("avg_rating"),
            func.count(Review.id).label("review_count"),
        )
        .group_by(Review.project_id)
        .subquery()
    )
    return (
        db.query(
            Project,
            User.username,
            func.coalesce(review_stats.c.avg_rating, 0),
            func.coalesce(review_stats.c.review_count, 0),
        )
        .join(User, User.id == Project.author_id)
        .outerjoin(review_stats, review_stats.c.project_id == Project.id)
    )


def _to_out(row, viewer_id: Optional[int]) -> dict:
    project, author_name, avg_rating, review_count = row
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "section": project.section,
        "group_number": project.group_number,
        "full_name": project.full_name,
        "matricule": project.matricule,
        "drive_link": project.drive_link,
        "author_id": project.author_id,
        "author_name": author_name,
        "avg_rating": float(avg_rating or 0),
        "review_count": int(review_count or 0),
        "is_mine": viewer_id is not None and project.author_id == viewer_id,
        "created_at": project.created_at,
    }


def list_projects(
    db: Session,
    section: Optional[str] = None,
    group: Optional[str] = None,
    author_id: Optional[int] = None,
    viewer_id: Optional[int] = None,
) -> List[dict]:
    q = _aggregate_query(db)
    if section:
        q = q.filter(Project.section == section)
    if group:
        q = q.filter(Project.group_number == group)
    if author_id is not None:
        q = q.filter(Project.author_id == author_id)
    rows = q.order_by(Project.created_at.desc(), Project.id.desc()).all()
    return [_to_out(row, viewer_id) for row in rows]


def get_project(db: Session, project_id: int, viewer_id: Optional[int] = None) -> dict:
    row = _aggregate_query(db).filter(Project.id == project_id).first()
    if not row:
        raise NotFound("Project not found")
    return _to_out(row, viewer_id)


def _get_owned_project(db: Session, project_id: int, user_id: int, action: str) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFound("Project not found")
    if project.author_id != user_id:
        logger.warning("[projects] user %s tried to %s project %s owned by %s", user_id, action, project_id, project.author_id)
        raise Forbidden(f"You can only {action} your own projects")
    return project


def find_recent_duplicate(
    db: Session,
    author_id: int,
    title: str,
    description: str,
    submission_key: Optional[str] = None,
) -> Optional[Project]:
    if submission_key:
        keyed = (
            db.query(Project)
            .filter(Project.author_id == author_id, Project.submission_key == submission_key)
            .first()
        )
        if keyed:
            return keyed

    cutoff = datetime.utcnow() - timedelta(seconds=settings.DUPLICATE_SUBMISSION_WINDOW_SECONDS)
    return (
        db.query(Project)
        .filter(
            Project.author_id == author_id,
            Project.title == title,
            Project.description == description,
            Project.created_at >= cutoff,
        )
        .order_by(Project.created_at.desc(), Project.id.desc())
        .first()
    )


def create_project(
    db: Session,
    author_id: int,
    data: ProjectCreate,
    submission_key: Optional[str] = None,
) -> tuple[dict, bool]:
    """프로젝트를 생성한다. 반환값의 두 번째 요소는 기존 제출물을 돌려준 경우 True."""
    title = _validate_title(data.title)
    description = _validate_description(data.description)
    drive_link = _validate_drive_link(data.drive_link)
    key = _optional_text(submission_key) or _optional_text(data.submission_key)

    if not db.query(User.id).filter(User.id == author_id).first():
        raise NotFound("User not found")

    duplicate = find_recent_duplicate(db, author_id, title, description, key)
    if duplicate:
        logger.info("[projects] duplicate submission by user %s absorbed (project %s)", author_id, duplicate.id)
        return get_project(db, duplicate.id, viewer_id=author_id), True

    project = Project(
        title=title,
        description=description,
        author_id=author_id,
        drive_link=drive_link,
        submission_key=key,
        **{field: _optional_text(getattr(data, field)) for field in CLASSIFICATION_FIELDS},
    )
    db.add(project)
    try:
        db.commit()
    except IntegrityError:
        # 같은 submission_key로 동시에 들어온 요청
        db.rollback()
        duplicate = find_recent_duplicate(db, author_id, title, description, key)
        if duplicate is None:
            raise
        logger.info("[projects] concurrent duplicate by user %s resolved to project %s", author_id, duplicate.id)
        return get_project(db, duplicate.id, viewer_id=author_id), True
    db.refresh(project)
    logger.info("[projects] user %s created project %s", author_id, project.id)
    return get_project(db, project.id, viewer_id=author_id), False


def update_project(db: Session, project_id: int, user_id: int, data: ProjectUpdate) -> dict:
    project = _get_owned_project(db, project_id, user_id, "edit")
    payload = data.model_dump(exclude_unset=True)

    if "title" in payload:
        project.title = _validate_title(payload["title"])
    if "description" in payload:
        project.description = _validate_description(payload["description"])
    if "drive_link" in payload:
        project.drive_link = _validate_drive_link(payload["drive_link"])
    for field in CLASSIFICATION_FIELDS:
        if field in payload:
            setattr(project, field, _optional_text(payload[field]))

    db.commit()
    logger.info("[projects] user %s updated project %s", user_id, project_id)
    return get_project(db, project_id, viewer_id=user_id)


def delete_project(db: Session, project_id: int, user_id: int) -> None:
    project = _get_owned_project(db, project_id, user_id, "delete")
    # 리뷰 삭제와 프로젝트 삭제를 하나의 트랜잭션으로 커밋
    removed_reviews = db.query(Review).filter(Review.project_id == project_id).delete(synchronize_session=False)
    db.delete(project)
    db.commit()
    logger.info("[projects] user %s deleted project %s (%s reviews)", user_id, project_id, removed_reviews)


def _get_review(db: Session, review_id: int) -> Review:
    return db.query(Review).options(joinedload(Review.reviewer)).filter(Review.id == review_id).first()


def submit_review(db: Session, project_id: int, reviewer_id: int, data: ReviewCreate) -> tuple[Review, bool]:
    """리뷰를 upsert 한다. 두 번째 요소는 새로 생성된 경우 True."""
    rating = _parse_rating(data.rating)
    comment = _optional_text(data.comment)

    if not db.query(Project.id).filter(Project.id == project_id).first():
        raise NotFound("Project not found")

    existing = (
        db.query(Review)
        .filter(Review.project_id == project_id, Review.reviewer_id == reviewer_id)
        .first()
    )
    if existing:
        existing.rating = rating
        existing.comment = comment
        db.commit()
        return _get_review(db, existing.id), False

    review = Review(project_id=project_id, reviewer_id=reviewer_id, rating=rating, comment=comment)
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        review = (
            db.query(Review)
            .filter(Review.project_id == project_id, Review.reviewer_id == reviewer_id)
            .first()
        )
        if review is None:
            raise
        review.rating = rating
        review.comment = comment
        db.commit()
        return _get_review(db, review.id), False
    return _get_review(db, review.id), True


def list_reviews(db: Session, project_id: int) -> List[Review]:
    return (
        db.query(Review)
        .options(joinedload(Review.reviewer))
        .filter(Review.project_id == project_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )


def get_my_review(db: Session, project_id: int, reviewer_id: int) -> Optional[Review]:
    return (
        db.query(Review)
        .options(joinedload(Review.reviewer))
        .filter(Review.project_id == project_id, Review.reviewer_id == reviewer_id)
        .first()
    )
