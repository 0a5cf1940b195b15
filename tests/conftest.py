"""shared fixtures: an in-memory Gitea package API served through httpx.MockTransport."""
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gitea_resource.domain.models import Source
from gitea_resource.registry.client import GiteaClient

BASE_URL = "https://gitea.example.com/"
OWNER = "acme"
PACKAGE = "widget"
TOKEN = "s3cret-token"


class FakeGitea:
    """minimal stand-in for the Gitea generic package endpoints."""

    def __init__(self, token: str = TOKEN):
        self.token = token
        self.packages: List[dict] = []
        self.files: Dict[Tuple[str, str], Dict[str, bytes]] = {}
        self.requests: List[httpx.Request] = []
        # path -> status code to answer with
        self.failing: Dict[str, int] = {}
        # paths that raise a connection error
        self.unreachable: set = set()

    def add_version(self, id: int, name: str, version: str, files: Optional[Dict[str, bytes]] = None):
        self.packages.append({"id": id, "name": name, "version": version, "type": "generic"})
        self.files[(name, version)] = dict(files or {})

    def uploads(self) -> List[str]:
        return [r.url.path for r in self.requests if r.method == "PUT"]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.failing:
            return httpx.Response(self.failing[path], text="boom")
        if request.headers.get("authorization") != f"token {self.token}":
            return httpx.Response(401, json={"message": "unauthorized"})

        parts = path.strip("/").split("/")

        # /api/v1/packages/{owner}
        if parts[:3] == ["api", "v1", "packages"] and len(parts) == 4:
            query = request.url.params.get("q", "")
            return httpx.Response(200, json=[p for p in self.packages if query in p["name"]])

        # /api/v1/packages/{owner}/generic/{package}/{version}/files
        if parts[:3] == ["api", "v1", "packages"] and len(parts) == 8 and parts[7] == "files":
            key = (parts[5], parts[6])
            if key not in self.files:
                return httpx.Response(404, json={"message": "package does not exist"})
            listing = [
                {"id": i, "name": name, "size": len(content)}
                for i, (name, content) in enumerate(self.files[key].items())
            ]
            return httpx.Response(200, json=listing)

        # /api/packages/{owner}/generic/{package}/{version}/{file}
        if parts[:2] == ["api", "packages"] and len(parts) == 7:
            key = (parts[4], parts[5])
            name = parts[6]
            if request.method == "GET":
                if name not in self.files.get(key, {}):
                    return httpx.Response(404, text="not found")
                return httpx.Response(200, content=self.files[key][name])
            if request.method == "PUT":
                if key not in self.files:
                    next_id = max((p["id"] for p in self.packages), default=0) + 1
                    self.add_version(next_id, key[0], key[1])
                if name in self.files[key]:
                    return httpx.Response(409, text="file already exists")
                self.files[key][name] = request.content
                return httpx.Response(201)

        return httpx.Response(404, text="no route")


@pytest.fixture
def fake_gitea():
    return FakeGitea()


@pytest.fixture
def source():
    return Source(uri=BASE_URL, owner=OWNER, token=TOKEN, package=PACKAGE)


@pytest.fixture
def client(fake_gitea):
    """GiteaClient talking to the fake registry, with tiny chunks to exercise streaming."""
    client = GiteaClient(BASE_URL, TOKEN, chunk_size=4, transport=fake_gitea.transport())
    yield client
    client.close()
