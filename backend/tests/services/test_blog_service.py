"""BlogService: posts, taxonomy links, pagination and two-level comments."""

import pytest

from app.core.constants import DELETED_COMMENT_PLACEHOLDER
from app.core.enums import NotificationType
from app.core.exceptions import ForbiddenException, ValidationException
from app.models.blog import BlogCategory, BlogComment, BlogTag
from app.models.notification import Notification
from app.schemas.blog import BlogPostCreate, BlogPostUpdate
from app.services.blog_service import BlogService, estimate_read_time


@pytest.fixture
def category(db):
    row = BlogCategory(name="Study tips", slug="study-tips")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def tag(db):
    row = BlogTag(name="Exams", slug="exams")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def post(db, teacher):
    return BlogService(db).create_post(
        teacher, BlogPostCreate(title="How to revise", content="Spread it out. " * 10, published=True)
    )


def test_read_time_rounds_up():
    assert estimate_read_time("word " * 200) == 1
    assert estimate_read_time("word " * 201) == 2


class TestPosts:
    def test_create_published_post(self, db, teacher, category, tag):
        post = BlogService(db).create_post(
            teacher,
            BlogPostCreate(
                title="Memory tricks",
                content="word " * 450,
                published=True,
                category_ids=[category.id],
                tag_ids=[tag.id],
            ),
        )

        assert post.published_at is not None
        assert post.read_time == 3
        assert [c.slug for c in post.categories] == ["study-tips"]
        assert [t.slug for t in post.tags] == ["exams"]

    def test_draft_has_no_publish_date(self, db, teacher):
        post = BlogService(db).create_post(teacher, BlogPostCreate(title="Draft", content="Soon"))
        assert post.published is False
        assert post.published_at is None

    def test_unknown_category_rejected(self, db, teacher):
        with pytest.raises(ValidationException) as exc:
            BlogService(db).create_post(
                teacher, BlogPostCreate(title="T", content="C", category_ids=["01HZZZZZZZZZZZZZZZZZZZZZZZ"])
            )
        assert exc.value.message == "Some categories do not exist"

    def test_title_and_content_required(self, db, teacher):
        with pytest.raises(ValidationException):
            BlogService(db).create_post(teacher, BlogPostCreate(title="Only a title"))

    def test_publishing_later_stamps_date(self, db, teacher):
        service = BlogService(db)
        post = service.create_post(teacher, BlogPostCreate(title="Draft", content="Soon"))

        updated = service.update_post(teacher, post.id, BlogPostUpdate(published=True, content="word " * 401))

        assert updated.published_at is not None
        assert updated.read_time == 3

    def test_only_author_or_admin_updates(self, db, teacher, student, admin, post):
        service = BlogService(db)
        with pytest.raises(ForbiddenException) as exc:
            service.update_post(student, post.id, BlogPostUpdate(title="Hijacked"))
        assert exc.value.message == "You can only update your own blog posts"

        assert service.update_post(admin, post.id, BlogPostUpdate(title="Edited")).title == "Edited"

    def test_tag_links_replaced(self, db, teacher, tag, post):
        updated = BlogService(db).update_post(teacher, post.id, BlogPostUpdate(tag_ids=[tag.id]))
        assert [t.id for t in updated.tags] == [tag.id]

    def test_pagination_and_filters(self, db, teacher, tag):
        service = BlogService(db)
        for n in range(3):
            service.create_post(teacher, BlogPostCreate(title=f"Post {n}", content="Body", published=True))
        service.create_post(teacher, BlogPostCreate(title="Hidden draft", content="Body"))
        service.create_post(
            teacher, BlogPostCreate(title="Exam season", content="Body", published=True, tag_ids=[tag.id])
        )

        page = service.list_published(page=2, limit=3)
        assert page["pagination"] == {"page": 2, "limit": 3, "total_count": 4, "total_pages": 2}
        assert len(page["posts"]) == 1

        assert [p.title for p in service.list_published(tag_id=tag.id)["posts"]] == ["Exam season"]
        assert service.list_published(search="draft")["pagination"]["total_count"] == 0

    def test_delete_post_removes_comments(self, db, teacher, student, post):
        service = BlogService(db)
        service.add_comment(student, post.id, "Nice")

        service.delete_post(teacher, post.id)

        assert db.query(BlogComment).count() == 0


class TestComments:
    def test_comment_notifies_author(self, db, teacher, student, post):
        BlogService(db).add_comment(student, post.id, "Helpful, thanks")

        notification = db.query(Notification).filter_by(user_id=teacher.id).one()
        assert notification.type == NotificationType.BLOG_COMMENT.value
        assert notification.link.startswith(f"/blog/posts/{post.id}#comment-")

    def test_own_comment_does_not_notify(self, db, teacher, post):
        BlogService(db).add_comment(teacher, post.id, "Edit: fixed a typo")
        assert db.query(Notification).count() == 0

    def test_reply_notifies_parent_author(self, db, teacher, student, other_student, post):
        service = BlogService(db)
        parent = service.add_comment(student, post.id, "Question?")

        service.add_comment(other_student, post.id, "Answer.", parent_id=parent.id)

        assert db.query(Notification).filter_by(user_id=student.id, title="New Reply").count() == 1

    def test_only_two_levels(self, db, student, other_student, post):
        service = BlogService(db)
        parent = service.add_comment(student, post.id, "Top")
        reply = service.add_comment(other_student, post.id, "Reply", parent_id=parent.id)

        with pytest.raises(ValidationException) as exc:
            service.add_comment(student, post.id, "Too deep", parent_id=reply.id)
        assert exc.value.message == "Cannot reply to a reply (only 2 levels allowed)"

    def test_empty_comment(self, db, student, post):
        with pytest.raises(ValidationException):
            BlogService(db).add_comment(student, post.id, "  ")

    def test_comment_with_replies_is_soft_deleted(self, db, student, other_student, post):
        service = BlogService(db)
        parent = service.add_comment(student, post.id, "Original")
        service.add_comment(other_student, post.id, "Reply", parent_id=parent.id)

        result = service.delete_comment(student, parent.id)

        assert result is not None
        assert result.content == DELETED_COMMENT_PLACEHOLDER
        assert db.query(BlogComment).count() == 2

    def test_leaf_comment_is_removed(self, db, student, post):
        service = BlogService(db)
        comment = service.add_comment(student, post.id, "Bye")

        assert service.delete_comment(student, comment.id) is None
        assert db.query(BlogComment).count() == 0

    def test_post_author_may_delete_comments(self, db, teacher, student, post):
        service = BlogService(db)
        comment = service.add_comment(student, post.id, "Spam")
        assert service.delete_comment(teacher, comment.id) is None

    def test_stranger_cannot_delete(self, db, student, other_student, post):
        service = BlogService(db)
        comment = service.add_comment(student, post.id, "Mine")
        with pytest.raises(ForbiddenException):
            service.delete_comment(other_student, comment.id)
