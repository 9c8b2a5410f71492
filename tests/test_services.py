"""Tests for the service layer."""

import pytest

from quillpress.errors import Conflict, NotFound, Unauthorized, ValidationError
from quillpress.extensions import db
from quillpress.models import Category
from quillpress.models.user import ROLE_ADMIN
from quillpress.services import auth as auth_svc
from quillpress.services import blog as blog_svc


class TestAuthService:
    """Test cases for authentication service."""

    def test_authenticate_success(self, app, test_user):
        user, error = auth_svc.authenticate('reader@example.com', 'userpassword')
        assert user.id == test_user.id
        assert error is None

    def test_authenticate_wrong_password(self, app, test_user):
        user, error = auth_svc.authenticate('reader@example.com', 'nope')
        assert user is None
        assert error == 'Invalid credentials'

    def test_authenticate_unknown_email(self, app):
        user, error = auth_svc.authenticate('ghost@example.com', 'whatever')
        assert user is None
        assert error == 'Invalid credentials'

    def test_register_user(self, app):
        user = auth_svc.register_user(name='New', email='New@Example.com', password='secret1')
        assert user.email == 'new@example.com'
        assert user.role == 'user'
        assert user.password_hash != 'secret1'
        assert auth_svc.authenticate('new@example.com', 'secret1')[0].id == user.id

    def test_register_admin_role(self, app):
        user = auth_svc.register_user(name='Boss', email='boss@example.com', password='secret1', role=ROLE_ADMIN)
        assert user.is_admin

    def test_register_duplicate_email(self, app, test_user):
        with pytest.raises(Conflict, match='Email already registered'):
            auth_svc.register_user(name='Dup', email='READER@example.com', password='secret1')


class TestCategoryService:

    def test_create_derives_slug(self, app):
        cat = blog_svc.create_category({'name': '  Café Culture ', 'description': ''})
        assert cat.name == 'Café Culture'
        assert cat.slug == 'cafe-culture'
        assert cat.description is None
        assert cat.post_count == 0

    def test_create_requires_name(self, app):
        with pytest.raises(ValidationError) as exc:
            blog_svc.create_category({})
        assert exc.value.message == 'Please provide a category name'
        assert exc.value.errors[0]['path'] == 'name'

    def test_create_name_too_long(self, app):
        with pytest.raises(ValidationError):
            blog_svc.create_category({'name': 'x' * 51})

    def test_create_unsluggable_name(self, app):
        with pytest.raises(ValidationError, match='letters or numbers'):
            blog_svc.create_category({'name': '!!!'})

    def test_create_duplicate(self, app, test_category):
        with pytest.raises(Conflict):
            blog_svc.create_category({'name': 'Test Category'})

    def test_create_accent_variant_conflicts(self, app):
        blog_svc.create_category({'name': 'Cafe'})
        with pytest.raises(Conflict, match='already exists'):
            blog_svc.create_category({'name': 'Café'})

    def test_rename_onto_existing_slug(self, app, test_category):
        blog_svc.create_category({'name': 'Other'})
        with pytest.raises(Conflict):
            blog_svc.update_category(test_category.hex_id, {'name': 'other'})
        db.session.refresh(test_category)
        assert test_category.name == 'Test Category'

    def test_get_missing(self, app):
        with pytest.raises(NotFound, match='Category not found'):
            blog_svc.get_category('missing')

    def test_update_partial(self, app, test_category):
        cat = blog_svc.update_category(test_category.hex_id, {'description': 'Changed'})
        assert cat.name == 'Test Category'
        assert cat.slug == 'test-category'
        assert cat.description == 'Changed'

    def test_update_rename_changes_slug(self, app, test_category):
        cat = blog_svc.update_category(test_category.hex_id, {'name': 'Fresh Name'})
        assert cat.slug == 'fresh-name'

    def test_update_description_too_long(self, app, test_category):
        with pytest.raises(ValidationError) as exc:
            blog_svc.update_category(test_category.hex_id, {'description': 'd' * 201})
        assert exc.value.errors[0]['path'] == 'description'
        db.session.refresh(test_category)
        assert test_category.description == 'A test category'

    def test_update_rejects_non_object(self, app, test_category):
        with pytest.raises(ValidationError, match='JSON object'):
            blog_svc.update_category(test_category.hex_id, ['name'])

    def test_delete_empty(self, app, test_category):
        blog_svc.delete_category(test_category.hex_id)
        assert db.session.query(Category).count() == 0

    def test_delete_with_posts_blocked(self, app, test_post, test_category):
        with pytest.raises(Conflict, match='Cannot delete category with existing posts'):
            blog_svc.delete_category(test_category.hex_id)

    def test_delete_blocked_by_count_alone(self, app, test_category):
        test_category.post_count = 1
        db.session.commit()
        with pytest.raises(Conflict):
            blog_svc.delete_category(test_category.hex_id)


class TestPostService:
    """Test cases for post operations."""

    def test_create_post(self, app, test_category, test_admin_user):
        post = blog_svc.create_post(
            {'title': 'Hello', 'content': 'World', 'category': test_category.hex_id, 'tags': 'a, b, a'},
            test_admin_user,
        )
        assert list(post.tags) == ['a', 'b']
        assert post.author_id == test_admin_user.id
        db.session.refresh(test_category)
        assert test_category.post_count == 1

    def test_create_post_missing_fields(self, app, test_admin_user):
        with pytest.raises(ValidationError) as exc:
            blog_svc.create_post({}, test_admin_user)
        messages = [e['msg'] for e in exc.value.errors]
        assert messages == ['Please provide a title', 'Please provide content', 'Please provide a category']
        assert exc.value.message == 'Please provide a title'

    def test_create_post_unknown_category(self, app, test_admin_user):
        with pytest.raises(NotFound, match='Category not found'):
            blog_svc.create_post({'title': 'T', 'content': 'C', 'category': 'missing'}, test_admin_user)

    def test_create_post_tag_too_long(self, app, test_category, test_admin_user):
        with pytest.raises(ValidationError, match='50 characters'):
            blog_svc.create_post(
                {'title': 'T', 'content': 'C', 'category': test_category.hex_id, 'tags': ['x' * 51]},
                test_admin_user,
            )

    def test_view_post_counts_views(self, app, test_post):
        assert blog_svc.view_post(test_post.hex_id).view_count == 1
        assert blog_svc.view_post(test_post.hex_id).view_count == 2

    def test_view_missing_post(self, app):
        with pytest.raises(NotFound, match='Post not found'):
            blog_svc.view_post('missing')

    def test_search_requires_query(self, app):
        with pytest.raises(ValidationError, match='Please provide a search query'):
            blog_svc.search_posts('')

    def test_update_by_author(self, app, test_post, test_admin_user):
        post = blog_svc.update_post(test_post.hex_id, {'title': 'Edited'}, test_admin_user)
        assert post.title == 'Edited'
        assert post.content == 'This is a test post about Flask and SQLAlchemy.'
        assert list(post.tags) == ['python', 'flask']

    def test_update_by_other_user_rejected(self, app, test_post, test_user):
        with pytest.raises(Unauthorized, match='Not authorized to modify this post'):
            blog_svc.update_post(test_post.hex_id, {'title': 'Hijack'}, test_user)

    def test_update_moves_category(self, app, test_post, test_category, test_admin_user):
        other = blog_svc.create_category({'name': 'Other'})
        blog_svc.update_post(test_post.hex_id, {'category': other.hex_id}, test_admin_user)
        db.session.refresh(test_category)
        db.session.refresh(other)
        assert test_category.post_count == 0
        assert other.post_count == 1

    def test_update_unknown_category(self, app, test_post, test_admin_user):
        with pytest.raises(NotFound):
            blog_svc.update_post(test_post.hex_id, {'category': 'missing'}, test_admin_user)

    def test_update_blank_title_rejected(self, app, test_post, test_admin_user):
        with pytest.raises(ValidationError, match='Please provide a title'):
            blog_svc.update_post(test_post.hex_id, {'title': '   '}, test_admin_user)

    def test_delete_post(self, app, test_post, test_category, test_admin_user):
        blog_svc.delete_post(test_post.hex_id, test_admin_user)
        db.session.refresh(test_category)
        assert test_category.post_count == 0
        with pytest.raises(NotFound):
            blog_svc.get_post(test_post.hex_id)

    def test_delete_by_other_user_rejected(self, app, test_post, test_user):
        with pytest.raises(Unauthorized):
            blog_svc.delete_post(test_post.hex_id, test_user)

    def test_admin_can_modify_any_post(self, app, test_category, test_user, test_admin_user):
        post = blog_svc.create_post(
            {'title': 'Guest', 'content': 'Post', 'category': test_category.hex_id},
            test_user,
        )
        blog_svc.delete_post(post.hex_id, test_admin_user)
        db.session.refresh(test_category)
        assert test_category.post_count == 0

    def test_add_comment(self, app, test_post, test_user):
        comment = blog_svc.add_comment(test_post.hex_id, {'content': ' Great read '}, test_user)
        assert comment.content == 'Great read'
        assert comment.user.id == test_user.id
        assert [c.hex_id for c in test_post.comments] == [comment.hex_id]

    def test_add_comment_empty(self, app, test_post, test_user):
        with pytest.raises(ValidationError, match='Please provide comment content'):
            blog_svc.add_comment(test_post.hex_id, {'content': ''}, test_user)

    def test_add_comment_missing_post(self, app, test_user):
        with pytest.raises(NotFound):
            blog_svc.add_comment('missing', {'content': 'hi'}, test_user)

    def test_recount(self, app, test_post, test_category):
        test_category.post_count = 5
        db.session.commit()
        drifted = blog_svc.recount_post_counts()
        assert [(c.hex_id, s, a) for c, s, a in drifted] == [(test_category.hex_id, 5, 1)]
