import asyncio

import httpx

from gists import GistClient, gist_stats, normalize_gist

API = "https://api.github.test"


def listing(*ids):
    return [{"id": i, "url": f"{API}/gists/{i}", "files": {}} for i in ids]


def detail(id, language="Python", comments=0):
    return {
        "id": id,
        "description": f"gist {id}",
        "files": {f"{id}.py": {"filename": f"{id}.py", "language": language, "content": "print(1)", "size": 8}},
        "public": True,
        "html_url": f"https://gist.github.test/{id}",
        "comments": comments,
    }


def run(client, username="octocat"):
    return asyncio.run(client.fetch_gists(username))


def test_fetches_full_content_for_each_gist():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        assert request.headers["User-Agent"] == "Portfolio-Website"
        if request.url.path == "/users/octocat/gists":
            return httpx.Response(200, json=listing("a", "b"))
        return httpx.Response(200, json=detail(request.url.path.rsplit("/", 1)[1]))

    gists = run(GistClient(API, transport=httpx.MockTransport(handler)))
    assert [g["id"] for g in gists] == ["a", "b"]
    assert gists[0]["files"]["a.py"]["content"] == "print(1)"
    assert set(seen) == {"/users/octocat/gists", "/gists/a", "/gists/b"}


def test_failed_gist_is_dropped():
    def handler(request):
        if request.url.path == "/users/octocat/gists":
            return httpx.Response(200, json=listing("a", "bad", "c"))
        if request.url.path.endswith("/bad"):
            return httpx.Response(502)
        return httpx.Response(200, json=detail(request.url.path.rsplit("/", 1)[1]))

    gists = run(GistClient(API, transport=httpx.MockTransport(handler)))
    assert [g["id"] for g in gists] == ["a", "c"]


def test_transport_error_on_one_gist_is_dropped():
    def handler(request):
        if request.url.path == "/users/octocat/gists":
            return httpx.Response(200, json=listing("a", "b"))
        if request.url.path.endswith("/a"):
            raise httpx.ConnectError("boom", request=request)
        return httpx.Response(200, json=detail("b"))

    gists = run(GistClient(API, transport=httpx.MockTransport(handler)))
    assert [g["id"] for g in gists] == ["b"]


def test_listing_failure_gives_empty_list():
    def handler(request):
        return httpx.Response(403, json={"message": "rate limited"})

    assert run(GistClient(API, transport=httpx.MockTransport(handler))) == []


def test_listing_that_is_not_a_list_gives_empty_list():
    def handler(request):
        return httpx.Response(200, json={"message": "Not Found", "documentation_url": "https://docs.github.test"})

    assert run(GistClient(API, transport=httpx.MockTransport(handler))) == []


def test_normalize_fills_defaults():
    gist = normalize_gist({"id": "x", "files": {"notes": {"size": 3}}})
    assert gist["description"] == "No description"
    assert gist["files"]["notes"] == {"filename": "notes", "language": "text", "content": "", "size": 3}
    assert gist["forks"] == 0


def test_gist_stats():
    gists = [normalize_gist(detail("a", "Python", 2)), normalize_gist(detail("b", "YAML", 1)),
             normalize_gist(detail("c", "Python"))]
    assert gist_stats(gists) == {"total": 3, "forks": 0, "comments": 3, "languages": 2}
