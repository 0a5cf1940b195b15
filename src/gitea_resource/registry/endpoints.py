"""endpoint templates for the Gitea generic package API.

list endpoints live under `/api/v1/`, file transfer endpoints under `/api/`.
"""

from typing import ClassVar, Dict
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

# TODO: make the package type configurable once non-generic packages are supported
PACKAGE_TYPE = "generic"


def _segment(value: str) -> str:
    return quote(value, safe="")


class _Endpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: ClassVar[str] = "GET"

    owner: str = Field(min_length=1)
    package: str = Field(min_length=1)

    @property
    def path(self) -> str:
        raise NotImplementedError

    @property
    def params(self) -> Dict[str, str]:
        return {}


class PackagesEndpoint(_Endpoint):
    """list packages of an owner whose name contains `package`."""

    @property
    def path(self) -> str:
        return f"/api/v1/packages/{_segment(self.owner)}"

    @property
    def params(self) -> Dict[str, str]:
        return {"type": PACKAGE_TYPE, "q": self.package}


class PackageFilesEndpoint(_Endpoint):
    """list the files of one package version."""
    version: str = Field(min_length=1)

    @property
    def path(self) -> str:
        return (
            f"/api/v1/packages/{_segment(self.owner)}/{PACKAGE_TYPE}/"
            f"{_segment(self.package)}/{_segment(self.version)}/files"
        )


class PackageFileEndpoint(_Endpoint):
    """download a single file of a package version."""
    version: str = Field(min_length=1)
    file: str = Field(min_length=1)

    @property
    def path(self) -> str:
        return (
            f"/api/packages/{_segment(self.owner)}/{PACKAGE_TYPE}/"
            f"{_segment(self.package)}/{_segment(self.version)}/{_segment(self.file)}"
        )


class PackageUploadEndpoint(PackageFileEndpoint):
    """upload a single file to a package version."""
    method: ClassVar[str] = "PUT"
