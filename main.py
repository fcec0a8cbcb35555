import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Request, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import DuplicateKeyError, PyMongoError

import config
import pages
from analytics import mock_analytics
from auth import authenticate, create_session_token, optional_admin, require_admin
from content import reading_time, slugify
from database import NotFoundError, Store, StoreUnavailable
from deps import get_store
from gists import GistClient
from schemas import (
    BlogPostCreate,
    BlogPostUpdate,
    CertificationCreate,
    CertificationUpdate,
    ContactCreate,
    ContactRead,
    LoginRequest,
    ProjectCreate,
    ProjectUpdate,
    Session,
    SettingsUpdate,
    SkillCreate,
    SkillUpdate,
    TechnologyCreate,
    TechnologyUpdate,
    Token,
)
from uploads import UploadTooLarge, save_upload

logger = logging.getLogger(__name__)

CONTACT_REQUIRED = "Name, email, and message are required"

api = APIRouter(prefix="/api")


def _changes(model) -> dict:
    return model.model_dump(exclude_unset=True)


def _found(doc: Optional[dict], label: str) -> dict:
    if doc is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return doc


# ====
# Auth
# ====
@api.post("/auth/login", response_model=Token)
def login(data: LoginRequest, response: Response):
    session = authenticate(data.email, data.password)
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_session_token(session)
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        token,
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return Token(access_token=token)


@api.post("/auth/logout")
def logout(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return {"ok": True}


@api.get("/auth/session", response_model=Session)
def current_session(session: Session = Depends(require_admin)):
    return session


# ========
# Projects
# ========
@api.get("/projects")
def list_projects(store: Store = Depends(get_store)):
    return store.projects.list()


@api.get("/projects/featured")
def list_featured_projects(store: Store = Depends(get_store)):
    return store.featured_projects()


@api.post("/projects", status_code=201, dependencies=[Depends(require_admin)])
def create_project(project: ProjectCreate, store: Store = Depends(get_store)):
    return store.projects.create(project)


@api.get("/projects/{id}")
def get_project(id: str, store: Store = Depends(get_store)):
    return _found(store.projects.get(id), "Project")


@api.put("/projects/{id}", dependencies=[Depends(require_admin)])
def update_project(id: str, project: ProjectUpdate, store: Store = Depends(get_store)):
    return store.projects.update(id, _changes(project))


@api.delete("/projects/{id}", dependencies=[Depends(require_admin)])
def delete_project(id: str, store: Store = Depends(get_store)):
    store.projects.delete(id)
    return {"message": "Project deleted"}


# ======
# Skills
# ======
@api.get("/skills")
def list_skills(store: Store = Depends(get_store)):
    return store.skills.list()


@api.post("/skills", status_code=201, dependencies=[Depends(require_admin)])
def create_skill(skill: SkillCreate, store: Store = Depends(get_store)):
    return store.skills.create(skill)


@api.get("/skills/{id}")
def get_skill(id: str, store: Store = Depends(get_store)):
    return _found(store.skills.get(id), "Skill")


@api.put("/skills/{id}", dependencies=[Depends(require_admin)])
def update_skill(id: str, skill: SkillUpdate, store: Store = Depends(get_store)):
    return store.skills.update(id, _changes(skill))


@api.delete("/skills/{id}", dependencies=[Depends(require_admin)])
def delete_skill(id: str, store: Store = Depends(get_store)):
    store.skills.delete(id)
    return {"message": "Skill deleted"}


# ============
# Technologies
# ============
@api.get("/technologies")
def list_technologies(store: Store = Depends(get_store)):
    return store.technologies.list()


@api.get("/technologies/featured")
def list_featured_technologies(store: Store = Depends(get_store)):
    return store.featured_technologies()


@api.post("/technologies", status_code=201, dependencies=[Depends(require_admin)])
def create_technology(technology: TechnologyCreate, store: Store = Depends(get_store)):
    return store.technologies.create(technology)


@api.get("/technologies/{id}")
def get_technology(id: str, store: Store = Depends(get_store)):
    return _found(store.technologies.get(id), "Technology")


@api.put("/technologies/{id}", dependencies=[Depends(require_admin)])
def update_technology(id: str, technology: TechnologyUpdate, store: Store = Depends(get_store)):
    return store.technologies.update(id, _changes(technology))


@api.delete("/technologies/{id}", dependencies=[Depends(require_admin)])
def delete_technology(id: str, store: Store = Depends(get_store)):
    store.technologies.delete(id)
    return {"message": "Technology deleted successfully"}


# ==============
# Certifications
# ==============
@api.get("/certifications")
def list_certifications(store: Store = Depends(get_store)):
    return store.certifications.list()


@api.get("/certifications/featured")
def list_featured_certifications(store: Store = Depends(get_store)):
    return store.featured_certifications()


@api.post("/certifications", status_code=201, dependencies=[Depends(require_admin)])
def create_certification(certification: CertificationCreate, store: Store = Depends(get_store)):
    return store.certifications.create(certification)


@api.get("/certifications/{id}")
def get_certification(id: str, store: Store = Depends(get_store)):
    return _found(store.certifications.get(id), "Certification")


@api.put("/certifications/{id}", dependencies=[Depends(require_admin)])
def update_certification(id: str, certification: CertificationUpdate, store: Store = Depends(get_store)):
    return store.certifications.update(id, _changes(certification))


@api.delete("/certifications/{id}", dependencies=[Depends(require_admin)])
def delete_certification(id: str, store: Store = Depends(get_store)):
    store.certifications.delete(id)
    return {"message": "Certification deleted"}


# ====
# Blog
# ====
def _post_slug(value: str) -> str:
    slug = slugify(value)
    if not slug:
        raise HTTPException(status_code=400, detail="Slug must contain letters or digits")
    return slug


@api.get("/blog")
def list_blog_posts(store: Store = Depends(get_store), session: Optional[Session] = Depends(optional_admin)):
    # drafts are only listed for the admin
    if session is not None:
        return store.blog_posts.list()
    return store.published_posts()


@api.get("/blog/featured")
def list_featured_blog_posts(store: Store = Depends(get_store)):
    return store.featured_posts()


@api.post("/blog", status_code=201, dependencies=[Depends(require_admin)])
def create_blog_post(post: BlogPostCreate, store: Store = Depends(get_store)):
    data = post.model_dump()
    data["slug"] = _post_slug(post.slug or post.title)
    data["read_time"] = reading_time(post.content)
    data["views"] = 0
    return store.blog_posts.create(data)


@api.get("/blog/{id}")
def get_blog_post(id: str, store: Store = Depends(get_store)):
    return _found(store.blog_posts.get(id), "Post")


@api.put("/blog/{id}", dependencies=[Depends(require_admin)])
def update_blog_post(id: str, post: BlogPostUpdate, store: Store = Depends(get_store)):
    data = _changes(post)
    if data.get("slug") is not None:
        data["slug"] = _post_slug(data["slug"])
    if data.get("content") is not None:
        data["read_time"] = reading_time(data["content"])
    return store.blog_posts.update(id, data)


@api.delete("/blog/{id}", dependencies=[Depends(require_admin)])
def delete_blog_post(id: str, store: Store = Depends(get_store)):
    store.blog_posts.delete(id)
    return {"message": "Post deleted"}


# ========
# Settings
# ========
@api.get("/settings")
def get_settings(store: Store = Depends(get_store)):
    return store.get_settings()


@api.put("/settings", dependencies=[Depends(require_admin)])
def update_settings(settings: SettingsUpdate, store: Store = Depends(get_store)):
    return store.update_settings(_changes(settings))


# =======
# Contact
# =======
@api.post("/contact", status_code=201)
def create_contact(contact: ContactCreate, store: Store = Depends(get_store)):
    data = contact.model_dump()
    data["subject"] = data.get("subject") or ""
    data["read"] = False
    doc = store.contacts.create(data)
    logger.info("contact message from %s", contact.email)
    return {"message": "Message sent successfully", "id": doc["id"]}


@api.get("/contact", dependencies=[Depends(require_admin)])
def list_contacts(store: Store = Depends(get_store)):
    return store.contacts.list()


@api.get("/contact/{id}", dependencies=[Depends(require_admin)])
def get_contact(id: str, store: Store = Depends(get_store)):
    return _found(store.contacts.get(id), "Contact")


@api.put("/contact/{id}/read", dependencies=[Depends(require_admin)])
def mark_contact_read(id: str, body: ContactRead, store: Store = Depends(get_store)):
    return store.mark_contact_read(id, body.read)


# =====================
# Files / analytics
# =====================
@api.post("/files", status_code=201, dependencies=[Depends(require_admin)])
async def upload_file(request: Request, file: UploadFile = File(...)):
    state = request.app.state
    try:
        return await save_upload(file, state.upload_dir, state.max_upload_bytes)
    except UploadTooLarge as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))


@api.get("/analytics", dependencies=[Depends(require_admin)])
def get_analytics():
    return mock_analytics()


# ==============
# Error handling
# ==============
def _failure_message(request: Request) -> str:
    route = request.scope.get("route")
    if route is None:
        return "Request failed"
    if not route.path.startswith("/api"):
        return "Failed to load page"
    verb, _, noun = route.name.partition("_")
    verb = {"list": "fetch", "get": "fetch", "mark": "update"}.get(verb, verb)
    return f"Failed to {verb} {noun.replace('_', ' ')}".strip()


async def validation_error_handler(request: Request, exc: RequestValidationError):
    route = request.scope.get("route")
    if route is not None and route.name == "create_contact":
        message = CONTACT_REQUIRED
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"detail": message, "errors": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]


async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    return JSONResponse(status_code=409, content={"detail": "Slug already exists"})


async def store_error_handler(request: Request, exc: Exception):
    message = _failure_message(request)
    logger.error("%s: %s", message, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": message})


# ==================
# FastAPI app config
# ==================
def create_app(store: Optional[Store] = None, gist_client: Optional[GistClient] = None,
               upload_dir: Optional[str] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "store", None) is None:
            owned = Store.connect(config.DATABASE_URL, config.DATABASE_NAME)
            app.state.store = owned
        os.makedirs(app.state.upload_dir, exist_ok=True)
        yield
        if owned is not None:
            owned.close()

    app = FastAPI(title="Portfolio API", lifespan=lifespan)
    app.state.store = store
    app.state.gist_client = gist_client or GistClient(config.GITHUB_API_URL)
    app.state.upload_dir = upload_dir or config.UPLOAD_DIR
    app.state.max_upload_bytes = config.MAX_UPLOAD_BYTES

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
    app.add_exception_handler(StoreUnavailable, store_error_handler)
    app.add_exception_handler(Exception, store_error_handler)

    @app.get("/health")
    def health(request: Request):
        current = request.app.state.store
        ok = current is not None and current.ping()
        return {"backend": "running", "database": "connected" if ok else "not-available"}

    app.include_router(api)
    app.include_router(pages.router)

    app.mount("/files", StaticFiles(directory=app.state.upload_dir, check_dir=False), name="files")
    return app


logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
