"""client and endpoint templates for the Gitea package registry."""
from .client import GiteaClient, build_auth_header, parse_base_url
from .endpoints import (
    PackagesEndpoint,
    PackageFilesEndpoint,
    PackageFileEndpoint,
    PackageUploadEndpoint,
)

__all__ = [
    "GiteaClient",
    "build_auth_header",
    "parse_base_url",
    "PackagesEndpoint",
    "PackageFilesEndpoint",
    "PackageFileEndpoint",
    "PackageUploadEndpoint",
]
