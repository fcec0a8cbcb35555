from fastapi import Request

from database import Store
from gists import GistClient


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_gist_client(request: Request) -> GistClient:
    return request.app.state.gist_client
