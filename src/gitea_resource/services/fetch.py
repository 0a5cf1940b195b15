from pathlib import Path

from ..domain.errors import ResourceError
from ..domain.models import FetchParams, PackageFile, VersionOutput
from ..registry.client import GiteaClient
from ..registry.endpoints import PackageFileEndpoint, PackageFilesEndpoint
from ..ui.progress import ProgressManager


class FetchService:
    """downloads every file of a package version (the `in` step)."""

    def __init__(self, client: GiteaClient, progress_manager: ProgressManager = None):
        self.client = client
        self.progress_manager = progress_manager or ProgressManager()

    def fetch(self, params: FetchParams, destination: Path) -> VersionOutput:
        """
        download all files of `params.version` into `destination`.

        files are fetched one at a time; the first failure aborts the fetch
        and files already written are left in place.

        raises:
            ResourceError: if the file listing or any download fails
        """
        source = params.source
        version = params.version.version

        endpoint = PackageFilesEndpoint(owner=source.owner, package=source.package, version=version)
        try:
            files = self.client.query(endpoint, PackageFile)
        except ResourceError as e:
            raise e.with_context(f"Could not find files for '{source.package}' at '{version}'") from e

        for file in files:
            self.progress_manager.print(f"Fetching {file.name}")
            file_endpoint = PackageFileEndpoint(
                owner=source.owner,
                package=source.package,
                version=version,
                file=file.name,
            )
            try:
                with self.progress_manager.transfer(file.name) as (progress, task_id):
                    self.client.download(file_endpoint, destination, progress, task_id)
            except ResourceError as e:
                raise e.with_context(f"Failed downloading '{file.name}'") from e

        self.progress_manager.print("Finished fetching files")

        return VersionOutput(version=params.version)
