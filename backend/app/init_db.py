# backend/app/init_db.py
"""
Create all tables and seed the catalogue rows the platform expects.

Seeding is idempotent: rows are matched by name and only missing ones
are inserted, so the script can run on every deploy.

Usage:
    python -m app.init_db
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from . import models  # noqa: F401  (registers every table on Base.metadata)
from .core.enums import SubscriptionPeriod
from .database import Base, SessionLocal, engine
from .models.achievement import Achievement
from .models.points import PointsPackage
from .models.subscription import SubscriptionPlan

logger = logging.getLogger(__name__)

DEFAULT_ACHIEVEMENTS: List[Dict[str, Any]] = [
    {
        "name": "First Steps",
        "description": "Complete your first lesson",
        "icon": "footprints",
        "points_rewarded": 10,
        "criteria": {"lessons_completed": 1},
    },
    {
        "name": "Course Finisher",
        "description": "Complete your first course",
        "icon": "graduation-cap",
        "points_rewarded": 50,
        "criteria": {"courses_completed": 1},
    },
    {
        "name": "Dedicated Learner",
        "description": "Complete five courses",
        "icon": "medal",
        "points_rewarded": 200,
        "criteria": {"courses_completed": 5},
    },
    {
        "name": "Helpful Reviewer",
        "description": "Write your first review",
        "icon": "star",
        "points_rewarded": 15,
        "criteria": {"reviews_written": 1},
    },
    {
        "name": "Tutoring Regular",
        "description": "Attend three tutoring appointments",
        "icon": "users",
        "points_rewarded": 75,
        "criteria": {"appointments_attended": 3},
    },
]

DEFAULT_POINTS_PACKAGES: List[Dict[str, Any]] = [
    {"name": "Starter", "description": "A small top-up", "points": 100, "price": 9.99, "bonus_points": 0},
    {"name": "Standard", "description": "Most learners pick this one", "points": 500, "price": 44.99, "bonus_points": 50},
    {"name": "Premium", "description": "Best value per point", "points": 1200, "price": 99.99, "bonus_points": 200},
]

DEFAULT_SUBSCRIPTION_PLANS: List[Dict[str, Any]] = [
    {
        "name": "Basic",
        "description": "Access to the core catalogue",
        "price": 9.99,
        "period": SubscriptionPeriod.MONTHLY.value,
        "featured_benefit": "Unlimited course previews",
        "benefits": ["Unlimited course previews", "Monthly points bonus"],
        "is_popular": False,
    },
    {
        "name": "Pro",
        "description": "For committed learners",
        "price": 19.99,
        "period": SubscriptionPeriod.MONTHLY.value,
        "featured_benefit": "Discounted tutoring",
        "benefits": ["Everything in Basic", "Discounted tutoring", "Priority support"],
        "is_popular": True,
    },
    {
        "name": "Pro Yearly",
        "description": "Pro billed once a year",
        "price": 199.99,
        "period": SubscriptionPeriod.YEARLY.value,
        "featured_benefit": "Two months free",
        "benefits": ["Everything in Pro", "Two months free"],
        "is_popular": False,
    },
]


def _seed(db: Session, model: Any, rows: List[Dict[str, Any]]) -> int:
    existing = {name for (name,) in db.query(model.name).all()}
    created = 0
    for row in rows:
        if row["name"] in existing:
            continue
        db.add(model(**row))
        created += 1
    return created


def seed_defaults(db: Session) -> Dict[str, int]:
    """Insert missing default achievements, points packages and plans."""
    counts = {
        "achievements": _seed(db, Achievement, DEFAULT_ACHIEVEMENTS),
        "points_packages": _seed(db, PointsPackage, DEFAULT_POINTS_PACKAGES),
        "subscription_plans": _seed(db, SubscriptionPlan, DEFAULT_SUBSCRIPTION_PLANS),
    }
    db.commit()
    return counts


def init_db() -> None:
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        counts = seed_defaults(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    logger.info("Tables created, seeded %s", counts)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    init_db()
