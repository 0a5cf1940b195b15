from typing import Iterable, List, Optional

from ..domain.models import Package, Version


def filter_exact(packages: Iterable[Package], package_name: str) -> List[Package]:
    """keep only packages named exactly `package_name`.

    the registry search matches substrings, so `foo` also returns `foo-bar`.
    """
    return [p for p in packages if p.name == package_name]


def _ordered_versions(packages: Iterable[Package]) -> List[Version]:
    # ids are assumed to never decrease with creation time, so we sort on them
    # instead of comparing timestamps
    return [Version(version=p.version) for p in sorted(packages, key=lambda p: p.id)]


def resolve_versions(
    packages: Iterable[Package],
    package_name: str,
    previous: Optional[Version] = None,
) -> List[Version]:
    """
    compute the versions `check` reports, oldest first.

    args:
        packages: everything the registry returned for the package query
        package_name: the exact package name to keep
        previous: the last version the pipeline already knows about

    returns:
        versions newer than `previous`; `[previous]` if nothing is newer; the
        full history when there is no previous version or it no longer exists
    """
    candidates = filter_exact(packages, package_name)

    if previous is None:
        return _ordered_versions(candidates)

    cutoff = next((p for p in candidates if p.version == previous.version), None)
    if cutoff is None:
        # previous version is gone upstream, report the whole history again
        return _ordered_versions(candidates)

    newer = [p for p in candidates if p.id > cutoff.id]
    if not newer:
        # the previous version is still the latest
        return [previous]

    return _ordered_versions(newer)
