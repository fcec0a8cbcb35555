"""
Public page composers.

Each page reads what it needs from the store (independent reads run
concurrently) and returns the view data its template renders.
"""

import asyncio
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.concurrency import run_in_threadpool

import config
from auth import require_admin
from content import (
    EXPIRED,
    EXPIRING_SOON,
    certification_status,
    filter_posts,
    group_by_category,
    post_tags,
)
from database import Store
from deps import get_gist_client, get_store
from gists import GistClient, gist_stats

router = APIRouter(tags=["Pages"])

STATIC_PAGES = ["", "/about", "/projects", "/skills", "/certifications", "/blog", "/contact", "/gists"]


async def _gather(*reads):
    return await asyncio.gather(*(run_in_threadpool(r) for r in reads))


async def home_page(store: Store) -> dict:
    featured_projects, settings, featured_posts, technologies = await _gather(
        store.featured_projects,
        store.get_settings,
        store.featured_posts,
        store.technologies.list,
    )
    return {
        "settings": settings,
        "featured_projects": featured_projects,
        "featured_posts": featured_posts,
        "technologies": technologies,
    }


async def about_page(store: Store) -> dict:
    settings, skills, technologies, certifications = await _gather(
        store.get_settings,
        store.skills.list,
        store.featured_technologies,
        store.featured_certifications,
    )
    return {
        "settings": settings,
        "skills": group_by_category(skills),
        "technologies": technologies,
        "certifications": certifications,
    }


async def projects_page(store: Store) -> dict:
    projects = await run_in_threadpool(store.projects.list)
    return {
        "projects": projects,
        "featured": [p for p in projects if p.get("featured")],
        "others": [p for p in projects if not p.get("featured")],
    }


async def skills_page(store: Store) -> dict:
    skills = await run_in_threadpool(store.skills.list)
    return {"categories": group_by_category(skills), "total": len(skills)}


async def certifications_page(store: Store, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    certifications = await run_in_threadpool(store.certifications.list)

    active, expired = [], []
    for cert in certifications:
        cert = dict(cert, status=certification_status(cert, now))
        (expired if cert["status"] == EXPIRED else active).append(cert)

    return {
        "active": active,
        "expired": expired,
        "stats": {
            "active": len(active),
            "featured": sum(1 for c in certifications if c.get("featured")),
            "expiring_soon": sum(1 for c in active if c["status"] == EXPIRING_SOON),
        },
    }


async def blog_index_page(store: Store, search: Optional[str] = None, tag: Optional[str] = None) -> dict:
    posts = await run_in_threadpool(store.published_posts)
    matching = filter_posts(posts, search, tag)
    return {
        "posts": matching,
        "featured": [p for p in matching if p.get("featured")],
        "recent": [p for p in matching if not p.get("featured")],
        "tags": post_tags(posts),
        "search": search or "",
        "tag": tag,
    }


async def blog_post_page(store: Store, slug: str) -> Optional[dict]:
    post = await run_in_threadpool(store.view_post, slug)
    if post is None:
        return None
    return {"post": post}


async def contact_page(store: Store) -> dict:
    settings = await run_in_threadpool(store.get_settings)
    return {
        "settings": settings,
        "contact": {k: settings.get(k) for k in ("email", "phone", "location")},
    }


async def gists_page(client: GistClient, username: str) -> dict:
    gists = await client.fetch_gists(username)
    return {"username": username, "gists": gists, "stats": gist_stats(gists)}


async def admin_dashboard(store: Store) -> dict:
    projects, skills, posts, technologies, certifications, unread = await _gather(
        store.projects.list,
        store.skills.list,
        store.blog_posts.list,
        store.technologies.list,
        store.certifications.list,
        lambda: store.contacts.count({"read": False}),
    )

    activity = [
        {"type": "blog", "title": "Blog post published", "description": p["title"], "time": p.get("created_at")}
        for p in posts[:2]
    ] + [
        {"type": "project", "title": "Project updated", "description": p["title"], "time": p.get("updated_at")}
        for p in projects[:2]
    ]

    return {
        "stats": {
            "projects": len(projects),
            "featured_projects": sum(1 for p in projects if p.get("featured")),
            "skills": len(skills),
            "blog_posts": sum(1 for p in posts if p.get("published")),
            "drafts": sum(1 for p in posts if not p.get("published")),
            "technologies": len(technologies),
            "certifications": len(certifications),
            "total_views": sum(p.get("views", 0) for p in posts),
            "unread_messages": unread,
        },
        "recent_activity": activity[:4],
    }


def render_sitemap(base_url: str, posts: list) -> bytes:
    base_url = base_url.rstrip("/")
    today = datetime.now(timezone.utc).date().isoformat()
    urlset = ET.Element("urlset", xmlns="http://www.sitemaps.org/schemas/sitemap/0.9")

    for route in STATIC_PAGES:
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = f"{base_url}{route}"
        ET.SubElement(url, "lastmod").text = today
        ET.SubElement(url, "changefreq").text = "daily" if route == "" else "weekly"
        ET.SubElement(url, "priority").text = "1.0" if route == "" else "0.8"

    for post in posts:
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = f"{base_url}/blog/{post['slug']}"
        updated = post.get("updated_at")
        ET.SubElement(url, "lastmod").text = updated.date().isoformat() if updated else today
        ET.SubElement(url, "changefreq").text = "monthly"
        ET.SubElement(url, "priority").text = "0.6"

    return ET.tostring(urlset, encoding="utf-8", xml_declaration=True)


# ======
# Routes
# ======
@router.get("/")
async def home(store: Store = Depends(get_store)):
    return await home_page(store)


@router.get("/about")
async def about(store: Store = Depends(get_store)):
    return await about_page(store)


@router.get("/projects")
async def projects(store: Store = Depends(get_store)):
    return await projects_page(store)


@router.get("/skills")
async def skills(store: Store = Depends(get_store)):
    return await skills_page(store)


@router.get("/certifications")
async def certifications(store: Store = Depends(get_store)):
    return await certifications_page(store)


@router.get("/blog")
async def blog(q: Optional[str] = None, tag: Optional[str] = None, store: Store = Depends(get_store)):
    return await blog_index_page(store, q, tag)


@router.get("/blog/{slug}")
async def blog_post(slug: str, store: Store = Depends(get_store)):
    page = await blog_post_page(store, slug)
    if page is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return page


@router.get("/contact")
async def contact(store: Store = Depends(get_store)):
    return await contact_page(store)


@router.get("/gists")
async def gists(client: GistClient = Depends(get_gist_client)):
    return await gists_page(client, config.GITHUB_USERNAME)


@router.get("/admin", dependencies=[Depends(require_admin)])
async def admin(store: Store = Depends(get_store)):
    return await admin_dashboard(store)


@router.get("/sitemap.xml", include_in_schema=False)
async def sitemap(store: Store = Depends(get_store)):
    posts = await run_in_threadpool(store.published_posts)
    return Response(content=render_sitemap(config.SITE_URL, posts), media_type="application/xml")
