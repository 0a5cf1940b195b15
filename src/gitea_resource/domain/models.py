from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError
from typing import List, Optional

from .errors import InvalidInputError


class Source(BaseModel):
    """the registry and package every operation acts against."""
    model_config = ConfigDict(frozen=True)

    uri: str = Field(min_length=1)
    owner: str = Field(min_length=1)
    token: SecretStr
    package: str = Field(min_length=1)


class Version(BaseModel):
    version: str = Field(min_length=1)


class Package(BaseModel):
    """a package version record as returned by the registry."""
    model_config = ConfigDict(extra="ignore")

    id: int = Field(ge=0)
    version: str = Field(min_length=1)
    name: str


class PackageFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)


def _parse(model: type, text: str, label: str):
    try:
        return model.model_validate_json(text)
    except ValidationError as e:
        raise InvalidInputError(f"Failed to deserialize {label} input: {e}", cause=e) from e


class CheckParams(BaseModel):
    source: Source
    version: Optional[Version] = None

    @classmethod
    def parse(cls, text: str) -> "CheckParams":
        return _parse(cls, text, "check")


class GetStepParams(BaseModel):
    """step params for `in`; none are used yet."""
    pass


class FetchParams(BaseModel):
    source: Source
    version: Version
    params: GetStepParams = Field(default_factory=GetStepParams)

    @classmethod
    def parse(cls, text: str) -> "FetchParams":
        return _parse(cls, text, "in")


class PutStepParams(BaseModel):
    # parsed for compatibility, existing files are always skipped
    skip_if_exists: bool = False
    version: str = Field(min_length=1)
    files: List[str]


class PublishParams(BaseModel):
    source: Source
    params: PutStepParams

    @classmethod
    def parse(cls, text: str) -> "PublishParams":
        return _parse(cls, text, "out")


class VersionOutput(BaseModel):
    """output of `in` and `out`: the version that was fetched or published."""
    version: Version
