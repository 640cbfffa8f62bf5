from app.init_db import DEFAULT_POINTS_PACKAGES, seed_defaults
from app.models.points import PointsPackage


def test_seeding_is_idempotent(db):
    first = seed_defaults(db)
    second = seed_defaults(db)

    assert first == {"achievements": 5, "points_packages": 3, "subscription_plans": 3}
    assert second == {"achievements": 0, "points_packages": 0, "subscription_plans": 0}
    assert db.query(PointsPackage).count() == len(DEFAULT_POINTS_PACKAGES)


def test_existing_rows_are_kept(db, points_package):
    counts = seed_defaults(db)

    assert counts["points_packages"] == 2
    assert db.query(PointsPackage).filter_by(name="Standard").count() == 1
