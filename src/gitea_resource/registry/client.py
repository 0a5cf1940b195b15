import logging
import os
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional, Type, TypeVar, TYPE_CHECKING

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..config import DEFAULT_CHUNK_SIZE, Settings
from ..domain.errors import (
    ApiError,
    AuthHeaderError,
    CommunicationError,
    InvalidInputError,
    LocalFileIOError,
    UrlParseError,
)
from ..domain.models import Source
from .endpoints import PackageFileEndpoint, PackageUploadEndpoint

if TYPE_CHECKING:
    from rich.progress import TaskID

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# how much of an error response body ends up in the error message
ERROR_BODY_LIMIT = 200


def build_auth_header(token: str) -> Dict[str, str]:
    """
    build the token auth header.

    raises:
        AuthHeaderError: if the token holds characters a header value cannot carry
    """
    value = f"token {token}"
    for char in value:
        code = ord(char)
        if char != "\t" and (code < 0x20 or code > 0x7E):
            # never echo the token itself
            raise AuthHeaderError("error setting auth header: token contains characters invalid in a header value")
    return {"Authorization": value}


def parse_base_url(uri: str) -> httpx.URL:
    """parse the registry base uri, always ending in a slash so endpoint paths join below it."""
    try:
        url = httpx.URL(uri)
    except httpx.InvalidURL as e:
        raise UrlParseError(f"failed to parse url '{uri}': {e}", cause=e) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise UrlParseError(f"failed to parse url '{uri}': expected an absolute http(s) url")

    if not url.path.endswith("/"):
        url = url.copy_with(path=url.path + "/")
    return url


class GiteaClient:
    """authenticated client for the Gitea package API.

    one instance lives for a single resource invocation; the underlying
    connection pool is reused across calls and closed with the client.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = parse_base_url(base_url)
        self.chunk_size = chunk_size

        options = {"headers": build_auth_header(token)}
        if timeout is not None:
            options["timeout"] = timeout
        if transport is not None:
            options["transport"] = transport
        self.client = httpx.Client(**options)

    @classmethod
    def from_source(
        cls,
        source: Source,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "GiteaClient":
        settings = settings or Settings()
        return cls(
            source.uri,
            source.token.get_secret_value(),
            chunk_size=settings.chunk_size,
            timeout=settings.timeout,
            transport=transport,
        )

    def __repr__(self) -> str:
        return f"GiteaClient(base_url='{self.base_url}')"

    def __enter__(self) -> "GiteaClient":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.client.close()

    def url_for(self, endpoint) -> httpx.URL:
        try:
            return self.base_url.join(endpoint.path.lstrip("/"))
        except httpx.InvalidURL as e:
            raise UrlParseError(f"failed to join '{endpoint.path}' onto '{self.base_url}': {e}", cause=e) from e

    def query(self, endpoint, model: Type[T]) -> List[T]:
        """
        run a list endpoint and parse its JSON array body.

        args:
            endpoint: one of the list endpoints
            model: pydantic model of a single array element

        returns:
            list of parsed records in the order the registry sent them
        """
        url = self.url_for(endpoint)
        logger.debug(f"{endpoint.method} {url}")

        try:
            response = self.client.request(endpoint.method, url, params=endpoint.params)
        except httpx.RequestError as e:
            raise CommunicationError(f"failed to talk to the gitea api: {e}", cause=e) from e

        self._check_status(response, endpoint)

        try:
            return TypeAdapter(List[model]).validate_json(response.content)
        except ValidationError as e:
            raise ApiError(
                f"unexpected response from {endpoint.path}: {e}",
                status_code=response.status_code,
                cause=e,
            ) from e

    def download(
        self,
        endpoint: PackageFileEndpoint,
        destination: Path,
        progress=None,
        task_id: Optional["TaskID"] = None,
    ) -> Path:
        """
        stream a package file to `destination / endpoint.file`.

        args:
            endpoint: the file to fetch
            destination: existing directory to write into
            progress: optional Progress instance for tracking the download
            task_id: optional task id for updating progress

        returns:
            path of the written file
        """
        name = endpoint.file
        if name in (".", "..") or Path(name).name != name:
            raise InvalidInputError(f"Refusing to write '{name}' outside of '{destination}'")

        target = Path(destination) / name
        url = self.url_for(endpoint)
        logger.debug(f"{endpoint.method} {url} -> {target}")

        try:
            with self.client.stream(endpoint.method, url, params=endpoint.params) as response:
                # check before creating the file so a failed request leaves nothing behind
                self._check_status(response, endpoint)

                if progress and task_id is not None and "content-length" in response.headers:
                    progress.update(task_id, total=int(response.headers["content-length"]))

                try:
                    with open(target, "wb") as f:
                        downloaded = 0
                        for chunk in response.iter_bytes(self.chunk_size):
                            f.write(chunk)
                            downloaded += len(chunk)
                            if progress and task_id is not None:
                                progress.update(task_id, completed=downloaded)
                except OSError as e:
                    raise LocalFileIOError(f"Failed to write file '{target}': {e}", cause=e) from e
        except httpx.RequestError as e:
            raise CommunicationError(f"failed to talk to the gitea api: {e}", cause=e) from e

        return target

    def upload(
        self,
        endpoint: PackageUploadEndpoint,
        source: Path,
        progress=None,
        task_id: Optional["TaskID"] = None,
    ):
        """
        stream a local file as the body of an upload request.

        args:
            endpoint: where to put the file
            source: local file to send
            progress: optional Progress instance for tracking the upload
            task_id: optional task id for updating progress
        """
        url = self.url_for(endpoint)
        logger.debug(f"{endpoint.method} {url} <- {source}")

        try:
            f = open(source, "rb")
            size = os.fstat(f.fileno()).st_size
        except OSError as e:
            raise LocalFileIOError(f"Could not open file '{source}': {e}", cause=e) from e

        with f:
            if progress and task_id is not None:
                progress.update(task_id, total=size)

            try:
                response = self.client.request(
                    endpoint.method,
                    url,
                    params=endpoint.params,
                    content=self._read_chunks(f, progress, task_id),
                    # an explicit length keeps httpx from switching to chunked encoding
                    headers={"Content-Length": str(size)},
                )
            except httpx.RequestError as e:
                raise CommunicationError(f"failed to talk to the gitea api: {e}", cause=e) from e
            except OSError as e:
                raise LocalFileIOError(f"Failed to read file '{source}': {e}", cause=e) from e

        self._check_status(response, endpoint)

    def _read_chunks(self, f: BinaryIO, progress=None, task_id: Optional["TaskID"] = None) -> Iterator[bytes]:
        sent = 0
        while True:
            chunk = f.read(self.chunk_size)
            if not chunk:
                break
            sent += len(chunk)
            if progress and task_id is not None:
                progress.update(task_id, completed=sent)
            yield chunk

    def _check_status(self, response: httpx.Response, endpoint):
        if response.is_success:
            return

        # streamed responses have not read their body yet
        response.read()
        body = response.text[:ERROR_BODY_LIMIT].strip()
        message = f"api error: {endpoint.method} {endpoint.path} returned {response.status_code}"
        if body:
            message = f"{message}: {body}"
        raise ApiError(message, status_code=response.status_code)
