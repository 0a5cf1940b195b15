import logging
from pathlib import Path
from typing import Optional, Set

from ..domain.errors import (
    ApiError,
    InvalidInputError,
    MissingSourceFileError,
    ResourceError,
)
from ..domain.models import PackageFile, PublishParams, Version, VersionOutput
from ..registry.client import GiteaClient
from ..registry.endpoints import PackageFilesEndpoint, PackageUploadEndpoint
from ..ui.progress import ProgressManager

logger = logging.getLogger(__name__)


class PublishService:
    """uploads local files as a package version (the `out` step)."""

    def __init__(self, client: GiteaClient, progress_manager: ProgressManager = None):
        self.client = client
        self.progress_manager = progress_manager or ProgressManager()

    def publish(self, params: PublishParams, sources: Optional[Path] = None) -> VersionOutput:
        """
        upload every file in `params.params.files` under `params.params.version`.

        files that already exist for the version are skipped, whatever
        `skip_if_exists` says. uploads happen one at a time and the first
        failure aborts the publish; earlier uploads stay in the registry.

        args:
            params: parsed `out` parameters
            sources: directory relative file paths are resolved against

        returns:
            the published version

        raises:
            InvalidInputError: if no files were given or a path has no base name
            MissingSourceFileError: if a file to upload is missing
            ResourceError: if an upload fails
        """
        step = params.params
        if not step.files:
            raise InvalidInputError("Must specify at least one file to upload")

        source = params.source
        existing = self._existing_files(params)

        for file in step.files:
            filename = self._basename(file)

            if filename in existing:
                self.progress_manager.print(
                    f"Skipping {filename} because it already exists for version {step.version}"
                )
                continue

            target = Path(file)
            if sources is not None:
                target = Path(sources) / target
            if not target.is_file():
                raise MissingSourceFileError(f"File '{file}' is not a file or does not exist")

            self.progress_manager.print(f"Uploading {filename}")
            endpoint = PackageUploadEndpoint(
                owner=source.owner,
                package=source.package,
                version=step.version,
                file=filename,
            )
            try:
                with self.progress_manager.transfer(filename) as (progress, task_id):
                    self.client.upload(endpoint, target, progress, task_id)
            except ResourceError as e:
                raise e.with_context(f"Failed to upload file '{target}'") from e

        self.progress_manager.print("Finished uploading files")

        return VersionOutput(version=Version(version=step.version))

    def _existing_files(self, params: PublishParams) -> Set[str]:
        """names of files already stored for the target version, empty if they cannot be listed."""
        source = params.source
        endpoint = PackageFilesEndpoint(
            owner=source.owner,
            package=source.package,
            version=params.params.version,
        )
        try:
            files = self.client.query(endpoint, PackageFile)
        except ResourceError as e:
            # the registry rejects overwrites anyway, so carry on as if nothing exists
            if isinstance(e, ApiError) and e.status_code == 404:
                logger.debug(f"version {params.params.version} has no files yet")
            else:
                logger.warning(f"could not list existing files for {params.params.version}: {e}")
            return set()
        return {f.name for f in files}

    def _basename(self, file: str) -> str:
        name = Path(file).name
        if not name or name == "..":
            raise InvalidInputError(f"Could not determine basename for {file}")
        return name
