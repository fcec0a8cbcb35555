"""
Admin panel form state.

Forms hold the fields of one record while it is being created or edited and
talk to the HTTP API through an `AdminClient`. Nothing is applied locally
before the server answers: a successful submit sets `redirect_to`, a failed
one leaves the fields as they were and queues an error toast.
"""

import logging
from datetime import datetime
from typing import ClassVar, List, Optional

import httpx
from pydantic import BaseModel, Field, model_validator

from content import reading_time, slugify

logger = logging.getLogger(__name__)

SKILL_CATEGORIES = [
    "Frontend",
    "Backend",
    "Database",
    "DevOps",
    "Mobile",
    "Tools",
    "Languages",
    "Frameworks",
    "Cloud",
    "Other",
]

UI_STATE = {"id", "loading", "toasts", "redirect_to"}


class Toast(BaseModel):
    title: str
    description: str
    variant: str = "default"


def _error_detail(exc: httpx.HTTPError, fallback: str) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            detail = exc.response.json().get("detail")
        except ValueError:
            detail = None
        if isinstance(detail, str):
            return detail
    return fallback


class AdminClient:
    """Thin wrapper over the JSON API; any `httpx.Client` pointed at it works."""

    def __init__(self, http: httpx.Client):
        self.http = http

    def _json(self, resp: httpx.Response):
        resp.raise_for_status()
        return resp.json()

    def login(self, email: str, password: str) -> dict:
        # the session cookie is kept by the underlying client
        return self._json(self.http.post("/api/auth/login", json={"email": email, "password": password}))

    def logout(self) -> None:
        self._json(self.http.post("/api/auth/logout"))

    def list(self, resource: str) -> list:
        return self._json(self.http.get(f"/api/{resource}"))

    def get(self, resource: str, id: str) -> dict:
        return self._json(self.http.get(f"/api/{resource}/{id}"))

    def create(self, resource: str, payload: dict) -> dict:
        return self._json(self.http.post(f"/api/{resource}", json=payload))

    def update(self, resource: str, id: str, payload: dict) -> dict:
        return self._json(self.http.put(f"/api/{resource}/{id}", json=payload))

    def delete(self, resource: str, id: str) -> dict:
        return self._json(self.http.delete(f"/api/{resource}/{id}"))

    def get_settings(self) -> dict:
        return self._json(self.http.get("/api/settings"))

    def update_settings(self, payload: dict) -> dict:
        return self._json(self.http.put("/api/settings", json=payload))

    def send_contact(self, payload: dict) -> dict:
        return self._json(self.http.post("/api/contact", json=payload))

    def upload(self, filename: str, content: bytes) -> dict:
        return self._json(self.http.post("/api/files", files={"file": (filename, content)}))


class TagEditor(BaseModel):
    """Ordered list of distinct strings (tags, technologies)."""

    items: List[str] = []

    @model_validator(mode="before")
    @classmethod
    def _from_list(cls, value):
        if isinstance(value, (list, tuple)):
            return {"items": list(value)}
        if value is None:
            return {"items": []}
        return value

    def add(self, value: str) -> bool:
        value = (value or "").strip()
        if not value or value in self.items:
            return False
        self.items.append(value)
        return True

    def remove(self, value: str) -> None:
        self.items = [item for item in self.items if item != value]


class EntityForm(BaseModel):
    resource: ClassVar[str]
    label: ClassVar[str]
    nullable: ClassVar[tuple] = ()

    id: Optional[str] = None
    loading: bool = False
    toasts: List[Toast] = []
    redirect_to: Optional[str] = None

    @classmethod
    def from_record(cls, record: dict):
        fields = set(cls.model_fields) - UI_STATE
        return cls(id=record.get("id"), **{k: v for k, v in record.items() if k in fields and v is not None})

    @property
    def editing(self) -> bool:
        return self.id is not None

    def payload(self) -> dict:
        data = self.model_dump(mode="json", exclude=UI_STATE)
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, TagEditor):
                data[name] = list(value.items)
        for name in self.nullable:
            if data.get(name) == "":
                data[name] = None
        return data

    def notify(self, title: str, description: str, variant: str = "default") -> None:
        self.toasts.append(Toast(title=title, description=description, variant=variant))

    def _send(self, client: AdminClient) -> dict:
        if self.editing:
            return client.update(self.resource, self.id, self.payload())
        return client.create(self.resource, self.payload())

    def submit(self, client: AdminClient) -> Optional[dict]:
        verb = "update" if self.editing else "create"
        self.loading = True
        try:
            record = self._send(client)
        except httpx.HTTPError as e:
            logger.warning("failed to %s %s: %s", verb, self.label, e)
            self.notify("Error", f"Failed to {verb} {self.label}", "destructive")
            return None
        finally:
            self.loading = False

        self.notify("Success", f"{self.label.capitalize()} {verb}d successfully")
        self.redirect_to = f"/admin/{self.resource}"
        return record


class ProjectForm(EntityForm):
    resource: ClassVar[str] = "projects"
    label: ClassVar[str] = "project"
    nullable: ClassVar[tuple] = ("image", "github_url", "live_url")

    title: str = ""
    description: str = ""
    long_description: str = ""
    image: str = ""
    github_url: str = ""
    live_url: str = ""
    technologies: TagEditor = Field(default_factory=TagEditor)
    featured: bool = False
    order: int = 0


class SkillForm(EntityForm):
    resource: ClassVar[str] = "skills"
    label: ClassVar[str] = "skill"
    nullable: ClassVar[tuple] = ("icon",)

    name: str = ""
    category: str = ""
    level: int = 50
    icon: str = ""
    color: str = "#3b82f6"
    order: int = 0

    def set_level(self, value: int) -> None:
        self.level = max(0, min(100, int(value)))


class TechnologyForm(EntityForm):
    resource: ClassVar[str] = "technologies"
    label: ClassVar[str] = "technology"
    nullable: ClassVar[tuple] = ("description", "icon", "color", "website")

    name: str = ""
    category: str = ""
    description: str = ""
    icon: str = ""
    color: str = ""
    website: str = ""
    featured: bool = False
    order: int = 0


class CertificationForm(EntityForm):
    resource: ClassVar[str] = "certifications"
    label: ClassVar[str] = "certification"
    nullable: ClassVar[tuple] = ("description", "credential_id", "credential_url", "image")

    name: str = ""
    issuer: str = ""
    description: str = ""
    credential_id: str = ""
    credential_url: str = ""
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    image: str = ""
    featured: bool = False
    order: int = 0


class BlogPostForm(EntityForm):
    resource: ClassVar[str] = "blog"
    label: ClassVar[str] = "post"
    nullable: ClassVar[tuple] = ("image",)

    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    tags: TagEditor = Field(default_factory=TagEditor)
    published: bool = False
    featured: bool = False
    image: str = ""

    def set_title(self, title: str) -> None:
        # the slug tracks the title until someone edits it by hand
        if not self.slug or self.slug == slugify(self.title):
            self.slug = slugify(title)
        self.title = title

    @property
    def read_time(self) -> int:
        return reading_time(self.content)


class SettingsForm(EntityForm):
    resource: ClassVar[str] = "settings"
    label: ClassVar[str] = "settings"

    site_name: str = ""
    site_description: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    github_url: str = ""
    linkedin_url: str = ""
    twitter_url: str = ""
    meta_title: str = ""
    meta_description: str = ""
    meta_keywords: str = ""
    enable_analytics: bool = False
    maintenance_mode: bool = False

    @classmethod
    def load(cls, client: AdminClient) -> "SettingsForm":
        return cls.from_record(client.get_settings())

    def _send(self, client: AdminClient) -> dict:
        return client.update_settings(self.payload())

    def submit(self, client: AdminClient) -> Optional[dict]:
        record = super().submit(client)
        self.redirect_to = None
        if record is not None:
            self.toasts[-1] = Toast(title="Success", description="Settings saved successfully")
        return record


class ContactForm(BaseModel):
    """The public contact form."""

    name: str = ""
    email: str = ""
    subject: str = ""
    message: str = ""
    sent: bool = False
    toasts: List[Toast] = []

    def submit(self, client: AdminClient) -> bool:
        try:
            client.send_contact(
                {"name": self.name, "email": self.email, "subject": self.subject, "message": self.message}
            )
        except httpx.HTTPError as e:
            detail = _error_detail(e, "Failed to send message. Please try again.")
            self.toasts.append(Toast(title="Error", description=detail, variant="destructive"))
            return False
        self.toasts.append(Toast(title="Success", description="Message sent successfully!"))
        self.name = self.email = self.subject = self.message = ""
        self.sent = True
        return True


class FileUploadForm(BaseModel):
    uploading: bool = False
    uploaded: List[dict] = []
    toasts: List[Toast] = []

    def upload(self, client: AdminClient, filename: str, content: bytes) -> Optional[dict]:
        self.uploading = True
        try:
            result = client.upload(filename, content)
        except httpx.HTTPError as e:
            detail = _error_detail(e, "Failed to upload file")
            self.toasts.append(Toast(title="Error", description=detail, variant="destructive"))
            return None
        finally:
            self.uploading = False
        self.uploaded.insert(0, result)
        self.toasts.append(Toast(title="Success", description="File uploaded successfully"))
        return result

    def remove(self, filename: str) -> None:
        # only forgets the entry on screen, the file stays on disk
        self.uploaded = [f for f in self.uploaded if f["filename"] != filename]


class AdminListScreen(BaseModel):
    """A list screen: load a collection, search it, delete from it."""

    resource: str
    label: str
    search_fields: List[str] = ["title", "name"]
    items: List[dict] = []
    search: str = ""
    loading: bool = True
    toasts: List[Toast] = []

    def load(self, client: AdminClient) -> None:
        self.loading = True
        try:
            self.items = client.list(self.resource)
        except httpx.HTTPError as e:
            logger.warning("failed to load %s: %s", self.resource, e)
            self.toasts.append(
                Toast(title="Error", description=f"Failed to fetch {self.resource}", variant="destructive")
            )
        finally:
            self.loading = False

    def _matches(self, item: dict, term: str) -> bool:
        for name in self.search_fields:
            value = item.get(name)
            if isinstance(value, str) and term in value.lower():
                return True
            if isinstance(value, list) and any(term in str(v).lower() for v in value):
                return True
        return False

    def filtered(self) -> List[dict]:
        term = self.search.lower()
        if not term:
            return list(self.items)
        return [item for item in self.items if self._matches(item, term)]

    def delete(self, client: AdminClient, id: str) -> bool:
        try:
            client.delete(self.resource, id)
        except httpx.HTTPError as e:
            logger.warning("failed to delete %s %s: %s", self.label, id, e)
            self.toasts.append(Toast(title="Error", description=f"Failed to delete {self.label}", variant="destructive"))
            return False
        self.items = [item for item in self.items if item.get("id") != id]
        self.toasts.append(Toast(title="Success", description=f"{self.label.capitalize()} deleted successfully"))
        return True
