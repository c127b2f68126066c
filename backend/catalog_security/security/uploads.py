"""File upload validation.

Only declared metadata is checked: the size and the content type the client
claims. File bytes are never opened, so a renamed executable declared as
``application/pdf`` passes. Callers that need content-based verification
must add it after this check.
"""

import logging
import os
from dataclasses import dataclass
from typing import ClassVar, FrozenSet, Optional, Union

from fastapi import UploadFile
from pydantic import BaseModel, Field

from catalog_security.config import SecuritySettings, settings


logger = logging.getLogger(__name__)

TYPE_NOT_PERMITTED = "File type not permitted"


class UploadCandidate(BaseModel):
    """A file offered for acceptance, described by its declared metadata."""

    model_config = {"frozen": True}

    size: int = Field(ge=0)
    content_type: str = ""
    filename: Optional[str] = None


@dataclass(frozen=True)
class Valid:
    """The upload may be accepted."""

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Invalid:
    """The upload must be refused, with a user-facing reason."""

    reason: str
    ok: ClassVar[bool] = False


UploadVerdict = Union[Valid, Invalid]


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a MIME type and drop parameters such as ``; charset=``."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


@dataclass(frozen=True)
class UploadPolicy:
    """Size ceiling and content-type allow-list for uploads."""

    max_size: int
    allowed_types: FrozenSet[str]

    def __post_init__(self):
        if self.max_size < 1:
            raise ValueError("max_size must be positive")
        object.__setattr__(
            self,
            "allowed_types",
            frozenset(normalize_content_type(t) for t in self.allowed_types),
        )

    @classmethod
    def from_settings(cls, config: Optional[SecuritySettings] = None) -> "UploadPolicy":
        config = config or settings
        return cls(config.max_upload_bytes, config.allowed_upload_types)

    @property
    def too_large_reason(self) -> str:
        megabytes = self.max_size // (1024 * 1024)
        if megabytes:
            return f"File too large (max {megabytes} MB)"
        return f"File too large (max {self.max_size} bytes)"


def validate_upload(candidate: UploadCandidate, policy: Optional[UploadPolicy] = None) -> UploadVerdict:
    """
    Check an upload against the policy.

    The size check runs before the type check and the first failure wins.

    Args:
        candidate: Declared upload metadata
        policy: Upload policy, built from settings when omitted

    Returns:
        Valid or Invalid
    """
    policy = policy or UploadPolicy.from_settings()

    if candidate.size > policy.max_size:
        logger.debug("Upload refused: %s bytes over %s", candidate.size, policy.max_size)
        return Invalid(policy.too_large_reason)

    if normalize_content_type(candidate.content_type) not in policy.allowed_types:
        logger.debug("Upload refused: content type %r", candidate.content_type)
        return Invalid(TYPE_NOT_PERMITTED)

    return Valid()


def candidate_from_upload(file: UploadFile) -> UploadCandidate:
    """
    Build an UploadCandidate from a FastAPI upload.

    When the client did not declare a size, the spooled file is measured
    by seeking to its end; its content is not read.
    """
    size = getattr(file, "size", None)
    if size is None:
        position = file.file.tell()
        file.file.seek(0, os.SEEK_END)
        size = file.file.tell()
        file.file.seek(position)

    return UploadCandidate(
        size=size,
        content_type=file.content_type or "",
        filename=file.filename,
    )
