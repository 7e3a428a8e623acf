"""Seed the database with demo users, projects and reviews."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401

from app.models.user import User
from app.models.project import Project, Review
from app.services.auth_service import hash_password

DEMO_PASSWORD = "secret1"


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        users = [
            User(username="alice", email="alice@example.com", full_name="Alice Benali",
                 bio="L3 data science", password=hash_password(DEMO_PASSWORD)),
            User(username="bachir", email="bachir@example.com", full_name="Bachir Haddad",
                 password=hash_password(DEMO_PASSWORD)),
            User(username="chahrazed", email="chahrazed@example.com", full_name="Chahrazed Amrani",
                 password=hash_password(DEMO_PASSWORD)),
        ]
        db.add_all(users)
        db.flush()

        projects = [
            Project(title="Student Dropout Prediction",
                    description="Gradient boosting model predicting first-year dropout from enrolment data.",
                    author_id=users[0].id, section="A", group_number="1",
                    full_name="Alice Benali", matricule="202031000001",
                    drive_link="https://drive.google.com/drive/folders/demo-dropout"),
            Project(title="Campus Bus Tracker",
                    description="Realtime bus position dashboard built on GPS feeds and a small REST API.",
                    author_id=users[1].id, section="B", group_number="3",
                    full_name="Bachir Haddad", matricule="202031000002",
                    drive_link="https://drive.google.com/drive/folders/demo-bus"),
        ]
        db.add_all(projects)
        db.flush()

        db.add_all([
            Review(project_id=projects[0].id, reviewer_id=users[1].id, rating=5, comment="Clear and well documented."),
            Review(project_id=projects[0].id, reviewer_id=users[2].id, rating=4),
            Review(project_id=projects[1].id, reviewer_id=users[0].id, rating=4, comment="Nice dashboard."),
        ])
        db.commit()
        print(f"Seeded {len(users)} users, {len(projects)} projects. Password for all users: {DEMO_PASSWORD}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
