from typing import List

from ..domain.models import CheckParams, Package, Version
from ..registry.client import GiteaClient
from ..registry.endpoints import PackagesEndpoint
from ..resolution.versions import resolve_versions


class CheckService:
    """discovers package versions the pipeline has not seen yet."""

    def __init__(self, client: GiteaClient):
        self.client = client

    def check(self, params: CheckParams) -> List[Version]:
        source = params.source
        endpoint = PackagesEndpoint(owner=source.owner, package=source.package)

        # FIXME: this loads every matching package in one go; paginate once
        # owners with many versions show up
        packages = self.client.query(endpoint, Package)

        return resolve_versions(packages, source.package, params.version)
