"""concourse resource for Gitea generic packages."""

__version__ = "0.1.0"
