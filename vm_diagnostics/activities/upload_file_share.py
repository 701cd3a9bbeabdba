"""Upload file-share activity: copy a local file into an Azure file share.

The destination path follows these rules:

- empty path → the source file name at the share root;
- a path ending with ``/`` names a directory → the source file name
  inside it;
- otherwise, if a directory with that path exists → the source file
  name inside it;
- otherwise the path names the destination file itself.

An existing destination file is only replaced when ``force`` is set.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from azure.core.exceptions import AzureError, HttpResponseError

from vm_diagnostics.core.constants import STORAGE_RESOURCE_NAME_RE
from vm_diagnostics.core.exceptions import (
    DiagnosticsError,
    InvalidArgumentError,
    PermanentError,
    TransientError,
)

if TYPE_CHECKING:
    from azure.storage.fileshare import ShareClient

logger = logging.getLogger("vm_diagnostics.activities.upload_file_share")


class FileShareUploadError(DiagnosticsError):
    """Raised when the file service rejects an upload."""

    default_stage = "upload_file_share"
    default_code = "FILE_UPLOAD_FAILED"


class TransientFileShareUploadError(FileShareUploadError, TransientError):
    """Network failure or a 5xx response. Retryable."""


class PermanentFileShareUploadError(FileShareUploadError, PermanentError):
    """Request rejected by the file service. Not retryable."""


def validate_share_name(name: str) -> None:
    """Check *name* against the file share naming rules.

    Raises:
        InvalidArgumentError: If *name* is not 3-63 lowercase letters,
            digits or single hyphens starting and ending with a letter
            or digit.
    """
    if not name or not STORAGE_RESOURCE_NAME_RE.match(name):
        msg = f"Invalid file share name: {name!r}"
        raise InvalidArgumentError(msg, argument="share_name", stage="upload_file_share")


def split_share_path(path: str) -> tuple[tuple[str, ...], bool]:
    """Split a cloud path into segments.

    Backslashes are treated as separators.

    Returns:
        ``(segments, is_directory)`` where *is_directory* is ``True``
        when the path ends with a separator.

    Raises:
        InvalidArgumentError: If a segment is ``.`` or ``..``.
    """
    normalised = (path or "").replace("\\", "/")
    parts = tuple(p for p in normalised.split("/") if p)
    for part in parts:
        if part in (".", ".."):
            msg = f"Relative segment {part!r} is not allowed in path {path!r}"
            raise InvalidArgumentError(msg, argument="path", stage="upload_file_share")
    return parts, bool(parts) and normalised.endswith("/")


def resolve_destination(
    default_file_name: str,
    parts: tuple[str, ...],
    is_directory: bool,
    directory_exists: bool,
) -> str:
    """Return the destination file path inside the share."""
    if not parts:
        return default_file_name
    joined = "/".join(parts)
    if is_directory or directory_exists:
        return f"{joined}/{default_file_name}"
    return joined


def upload_file_to_share(
    share_client: ShareClient,
    source: Path | str,
    path: str = "",
    *,
    force: bool = False,
) -> str:
    """Upload *source* into the share and return the destination path.

    Args:
        share_client: An ``azure.storage.fileshare.ShareClient``.
        source: Local file to upload.
        path: Destination directory or file path inside the share.
        force: Replace an existing destination file.

    Raises:
        InvalidArgumentError: If *source* does not exist, *path* is
            invalid, or the destination exists and *force* is not set.
        FileShareUploadError: If the file service rejects a request.
    """
    validate_share_name(share_client.share_name)

    local_file = Path(source)
    if not local_file.is_file():
        msg = f"Source file not found: {local_file}"
        raise InvalidArgumentError(msg, argument="source", stage="upload_file_share")

    parts, is_directory = split_share_path(path)

    try:
        directory_exists = False
        if parts and not is_directory:
            directory_exists = _directory_exists(share_client, "/".join(parts))

        destination = resolve_destination(local_file.name, parts, is_directory, directory_exists)
        file_client = share_client.get_file_client(destination)

        if not force and file_client.exists():
            msg = f"File {destination!r} already exists; use force to overwrite"
            raise InvalidArgumentError(
                msg,
                argument="path",
                stage="upload_file_share",
                code="RESOURCE_ALREADY_EXISTS",
            )

        with local_file.open("rb") as stream:
            file_client.upload_file(stream, length=local_file.stat().st_size)
    except AzureError as exc:
        status = getattr(exc, "status_code", None) if isinstance(exc, HttpResponseError) else None
        msg = f"Failed to upload {local_file.name} to share (status={status}): {exc}"
        if status is None or status >= 500:
            raise TransientFileShareUploadError(msg) from exc
        raise PermanentFileShareUploadError(msg) from exc

    logger.info(
        "Uploaded file to share | destination=%s | force=%s",
        destination,
        force,
    )
    return destination


def _directory_exists(share_client: ShareClient, directory_path: str) -> bool:
    """Return whether *directory_path* exists in the share.

    A 400 without error details means the path cannot name a directory
    (e.g. it walks through an existing file).
    """
    try:
        return bool(share_client.get_directory_client(directory_path).exists())
    except HttpResponseError as exc:
        if exc.status_code == 400 and getattr(exc, "error_code", None) is None:
            msg = f"Invalid cloud path: {directory_path!r}"
            raise InvalidArgumentError(
                msg, argument="path", stage="upload_file_share", code="INVALID_RESOURCE"
            ) from exc
        raise
