import pytest

import config
from admin_forms import (
    AdminClient,
    AdminListScreen,
    BlogPostForm,
    CertificationForm,
    ContactForm,
    FileUploadForm,
    ProjectForm,
    SettingsForm,
    SkillForm,
    TagEditor,
)


@pytest.fixture
def api(client):
    return AdminClient(client)


@pytest.fixture
def logged_in(api):
    api.login(config.ADMIN_EMAIL, config.ADMIN_PASSWORD)
    return api


def test_tag_editor_add_and_remove():
    editor = TagEditor()
    assert editor.add("Docker")
    assert not editor.add("Docker")
    assert not editor.add("   ")
    assert editor.add(" Kubernetes ")
    assert editor.items == ["Docker", "Kubernetes"]
    editor.remove("Docker")
    editor.remove("missing")
    assert editor.items == ["Kubernetes"]


def test_project_form_create(logged_in):
    form = ProjectForm(title="Shop", description="Online store")
    form.technologies.add("Next.js")
    form.technologies.add("Stripe")

    record = form.submit(logged_in)
    assert record["technologies"] == ["Next.js", "Stripe"]
    assert record["image"] is None
    assert form.redirect_to == "/admin/projects"
    assert form.toasts[-1].description == "Project created successfully"
    assert form.loading is False


def test_project_form_edit_round_trip(logged_in):
    created = ProjectForm(title="Shop", description="Online store", technologies=["Go"]).submit(logged_in)

    form = ProjectForm.from_record(logged_in.get("projects", created["id"]))
    assert form.editing
    assert form.technologies.items == ["Go"]
    form.title = "Shop v2"
    form.technologies.remove("Go")

    record = form.submit(logged_in)
    assert record["title"] == "Shop v2"
    assert record["technologies"] == []
    assert form.toasts[-1].description == "Project updated successfully"


def test_form_failure_keeps_state_and_shows_error(api):
    form = ProjectForm(title="Shop", description="Online store")
    assert form.submit(api) is None
    assert form.redirect_to is None
    assert form.title == "Shop"
    assert form.toasts[-1].variant == "destructive"
    assert form.toasts[-1].description == "Failed to create project"


def test_skill_form_clamps_level(logged_in):
    form = SkillForm(name="Rust", category="Languages")
    form.set_level(140)
    assert form.level == 100
    form.set_level(-5)
    assert form.level == 0
    assert form.submit(logged_in)["level"] == 0


def test_certification_form(logged_in):
    form = CertificationForm(name="CKA", issuer="CNCF", issue_date="2023-08-20T00:00:00Z")
    record = form.submit(logged_in)
    assert record["credential_url"] is None
    assert CertificationForm.from_record(record).issue_date.year == 2023


def test_blog_form_slug_follows_title_until_edited(logged_in):
    form = BlogPostForm()
    form.set_title("Hello World")
    assert form.slug == "hello-world"
    form.set_title("Hello World Again")
    assert form.slug == "hello-world-again"

    form.slug = "custom"
    form.set_title("Something Else")
    assert form.slug == "custom"

    form.content = "word " * 250
    assert form.read_time == 2
    form.excerpt = "x"
    record = form.submit(logged_in)
    assert record["slug"] == "custom"
    assert record["read_time"] == 2


def test_settings_form(logged_in):
    form = SettingsForm.load(logged_in)
    assert form.site_name == "Portfolio"
    form.site_name = "Ramy Bouchareb"
    form.enable_analytics = True
    record = form.submit(logged_in)
    assert record["site_name"] == "Ramy Bouchareb"
    assert form.redirect_to is None
    assert form.toasts[-1].description == "Settings saved successfully"


def test_contact_form_success_resets_fields(api, store):
    form = ContactForm(name="Ada", email="ada@example.com", message="Hello")
    assert form.submit(api)
    assert form.sent
    assert form.message == ""
    assert store.contacts.count() == 1


def test_contact_form_reports_server_message(api, store):
    form = ContactForm(name="Ada", email="ada@example.com")
    assert not form.submit(api)
    assert form.toasts[-1].description == "Name, email, and message are required"
    assert form.name == "Ada"
    assert store.contacts.count() == 0


def test_file_upload_form(logged_in, app):
    app.state.max_upload_bytes = 4
    form = FileUploadForm()
    assert form.upload(logged_in, "ok.txt", b"abc")["filename"].endswith("-ok.txt")
    assert form.upload(logged_in, "big.txt", b"abcdef") is None
    assert form.toasts[-1].description == "File size must be less than 4 bytes"
    form.remove(form.uploaded[0]["filename"])
    assert form.uploaded == []


def test_list_screen_search_and_delete(logged_in):
    for title in ("Docker tips", "React hooks"):
        BlogPostForm(title=title, slug="", excerpt="x", content="y", tags=["devops"]).submit(logged_in)

    screen = AdminListScreen(resource="blog", label="post", search_fields=["title", "excerpt", "tags"])
    screen.load(logged_in)
    assert len(screen.items) == 2
    screen.search = "react"
    assert [p["title"] for p in screen.filtered()] == ["React hooks"]
    screen.search = "DEVOPS"
    assert len(screen.filtered()) == 2

    target = screen.items[0]["id"]
    assert screen.delete(logged_in, target)
    assert target not in [p["id"] for p in screen.items]
    assert not screen.delete(logged_in, target)
    assert screen.toasts[-1].variant == "destructive"
