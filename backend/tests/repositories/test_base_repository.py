import pytest

from app.core.exceptions import RepositoryException
from app.models.user import User
from app.repositories.base_repository import BaseRepository


def _user_payload(suffix: str) -> dict:
    return {
        "name": f"Repo {suffix}",
        "email": f"base-repo-{suffix}@example.com",
        "hashed_password": "x",
    }


class TestBaseRepository:
    def test_crud_helpers(self, db):
        repo = BaseRepository(db, User)

        created = repo.create(**_user_payload("create"))
        assert len(created.id) == 26

        assert repo.get_by_id(created.id) is not None
        assert repo.exists(email=created.email) is True
        assert repo.count(email=created.email) == 1
        assert repo.find_one_by(email=created.email).id == created.id

        updated = repo.update(created.id, name="Updated", not_a_column="ignored")
        assert updated.name == "Updated"
        assert repo.update("01HZZZZZZZZZZZZZZZZZZZZZZZ", name="Nobody") is None

        assert repo.delete(created.id) is True
        assert repo.delete(created.id) is False

    def test_bulk_create_and_delete_where(self, db):
        repo = BaseRepository(db, User)
        repo.bulk_create([_user_payload("bulk-1"), _user_payload("bulk-2"), _user_payload("keep")])

        removed = repo.delete_where(User.email.like("base-repo-bulk-%"))

        assert removed == 2
        assert [u.name for u in repo.get_all()] == ["Repo keep"]

    def test_integrity_error_is_wrapped(self, db):
        repo = BaseRepository(db, User)
        repo.create(**_user_payload("dup"))
        db.commit()

        with pytest.raises(RepositoryException):
            repo.create(**_user_payload("dup"))
