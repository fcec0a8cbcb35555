import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from database import DEFAULT_SETTINGS, NotFoundError


def test_create_assigns_id_and_timestamps(store):
    doc = store.skills.create({"name": "Python", "category": "Languages", "level": 90, "order": 1})
    assert ObjectId.is_valid(doc["id"])
    assert "_id" not in doc
    assert doc["created_at"] and doc["updated_at"]
    assert store.skills.get(doc["id"])["name"] == "Python"


def test_projects_sorted_featured_then_order(store):
    store.projects.create({"title": "plain", "featured": False, "order": 0})
    store.projects.create({"title": "second", "featured": True, "order": 2})
    store.projects.create({"title": "first", "featured": True, "order": 1})
    assert [p["title"] for p in store.projects.list()] == ["first", "second", "plain"]


def test_featured_projects_capped_at_six(store):
    for i in range(8):
        store.projects.create({"title": f"p{i}", "featured": True, "order": i})
    store.projects.create({"title": "hidden", "featured": False, "order": 0})
    featured = store.featured_projects()
    assert [p["title"] for p in featured] == [f"p{i}" for i in range(6)]


def test_skills_sorted_by_category_order_name(store):
    store.skills.create({"name": "Vue", "category": "Frontend", "order": 2})
    store.skills.create({"name": "Docker", "category": "DevOps", "order": 1})
    store.skills.create({"name": "React", "category": "Frontend", "order": 1})
    store.skills.create({"name": "Angular", "category": "Frontend", "order": 1})
    names = [s["name"] for s in store.skills.list()]
    assert names == ["Docker", "Angular", "React", "Vue"]


def test_get_missing_or_malformed_id_returns_none(store):
    assert store.projects.get(str(ObjectId())) is None
    assert store.projects.get("not-an-id") is None


def test_update_merges_and_refreshes_updated_at(store):
    doc = store.technologies.create({"name": "React", "category": "Framework", "order": 1})
    before = store.technologies.get(doc["id"])["updated_at"]
    updated = store.technologies.update(doc["id"], {"order": 5})
    assert updated["name"] == "React"
    assert updated["order"] == 5
    assert updated["updated_at"] >= before


def test_update_missing_raises(store):
    with pytest.raises(NotFoundError):
        store.projects.update(str(ObjectId()), {"title": "x"})


@pytest.mark.parametrize("id", [str(ObjectId()), "garbage"])
def test_delete_missing_raises(store, id):
    with pytest.raises(NotFoundError) as exc:
        store.certifications.delete(id)
    assert exc.value.entity == "Certification"


def test_delete_removes_row(store):
    doc = store.skills.create({"name": "Go", "category": "Languages"})
    store.skills.delete(doc["id"])
    assert store.skills.get(doc["id"]) is None


def test_blog_slug_is_unique(store):
    store.blog_posts.create({"title": "A", "slug": "same", "published": True})
    with pytest.raises(DuplicateKeyError):
        store.blog_posts.create({"title": "B", "slug": "same", "published": True})


def test_featured_posts_only_published(store):
    store.blog_posts.create({"title": "draft", "slug": "draft", "published": False, "featured": True})
    for i in range(4):
        store.blog_posts.create({"title": f"p{i}", "slug": f"p{i}", "published": True, "featured": True})
    featured = store.featured_posts()
    assert len(featured) == 3
    assert all(p["published"] for p in featured)


def test_view_post_increments_published_only(store):
    store.blog_posts.create({"title": "Live", "slug": "live", "published": True, "views": 0})
    store.blog_posts.create({"title": "Draft", "slug": "draft", "published": False, "views": 0})
    assert store.view_post("live")["views"] == 1
    assert store.view_post("live")["views"] == 2
    assert store.view_post("draft") is None
    assert store.view_post("missing") is None
    assert store.post_by_slug("draft")["views"] == 0


def test_settings_created_with_defaults_once(store):
    first = store.get_settings()
    second = store.get_settings()
    assert first["id"] == second["id"] == "default"
    assert first["site_name"] == DEFAULT_SETTINGS["site_name"]
    assert store.db["settings"].count_documents({}) == 1


def test_update_settings_before_first_read(store):
    settings = store.update_settings({"site_name": "Ramy", "enable_analytics": True})
    assert settings["site_name"] == "Ramy"
    assert settings["enable_analytics"] is True
    assert settings["maintenance_mode"] is False
    assert store.get_settings()["site_name"] == "Ramy"
    assert store.db["settings"].count_documents({}) == 1


def test_mark_contact_read(store):
    doc = store.contacts.create({"name": "A", "email": "a@b.c", "message": "hi", "read": False})
    assert store.mark_contact_read(doc["id"])["read"] is True
    assert store.contacts.count({"read": False}) == 0
