"""Project / Review 도메인의 SQLAlchemy 모델 정의입니다."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    section = Column(String(50))
    group_number = Column(String(50))
    full_name = Column(String(200))
    matricule = Column(String(50))
    drive_link = Column(String(1000))
    submission_key = Column(String(100))  # client idempotency key
    # 중복 제출 판정 구간과 같은 UTC naive 시각
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    author = relationship("User", back_populates="projects")
    reviews = relationship("Review", back_populates="project")

    __table_args__ = (
        UniqueConstraint("author_id", "submission_key", name="uq_project_author_submission_key"),
        Index("idx_project_author_created", "author_id", "created_at"),
        Index("idx_project_section_group", "section", "group_number"),
    )


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    project = relationship("Project", back_populates="reviews")
    reviewer = relationship("User", back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("project_id", "reviewer_id", name="uq_review_project_reviewer"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
        Index("idx_review_project", "project_id"),
    )

    @property
    def username(self):
        return self.reviewer.username if self.reviewer else None

    @property
    def profile_picture(self):
        return self.reviewer.profile_picture if self.reviewer else None
