"""Upload blob activity: copy a local file into Blob Storage.

Each upload lands in the upload container under a fresh GUID name so
that repeated uploads never collide; the container is created on first
use.  The returned URL is what callers hand to the service that
consumes the package.
"""

from __future__ import annotations

import contextlib
import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from azure.core.exceptions import (
    AzureError,
    HttpResponseError,
    ResourceExistsError,
    ServiceRequestError,
    ServiceResponseError,
)

from vm_diagnostics.core.config import DiagnosticsConfig
from vm_diagnostics.core.constants import DEFAULT_UPLOAD_CONTAINER
from vm_diagnostics.core.exceptions import (
    DiagnosticsError,
    InvalidArgumentError,
    PermanentError,
    TransientError,
)
from vm_diagnostics.models.connection_string import StorageEndpoints

if TYPE_CHECKING:
    from azure.storage.blob import BlobServiceClient

logger = logging.getLogger("vm_diagnostics.activities.upload_blob")


class BlobUploadError(DiagnosticsError):
    """Raised when a blob upload fails."""

    default_stage = "upload_blob"
    default_code = "BLOB_UPLOAD_FAILED"


class TransientBlobUploadError(BlobUploadError, TransientError):
    """Network failure or a 5xx / 408 / 429 response. Retryable."""


class PermanentBlobUploadError(BlobUploadError, PermanentError):
    """Request rejected by the storage service. Not retryable."""


_RETRYABLE_STATUS = frozenset({408, 429})


def upload_file_to_blob(
    blob_service_client: BlobServiceClient,
    file_path: Path | str,
    *,
    container: str = DEFAULT_UPLOAD_CONTAINER,
    blob_name: str | None = None,
) -> str:
    """Upload *file_path* and return the URL of the new blob.

    Args:
        blob_service_client: An ``azure.storage.blob.BlobServiceClient``.
        file_path: Local file to upload.
        container: Destination container, created if missing.
        blob_name: Blob name; a new GUID when omitted.

    Raises:
        InvalidArgumentError: If *file_path* is not an existing file.
        BlobUploadError: If the storage service rejects the upload.
    """
    path = Path(file_path)
    if not path.is_file():
        msg = f"Source file not found: {path}"
        raise InvalidArgumentError(msg, argument="file_path", stage="upload_blob")

    name = blob_name or str(uuid.uuid4())

    try:
        container_client = blob_service_client.get_container_client(container)
        with contextlib.suppress(ResourceExistsError):
            container_client.create_container()

        blob_client = container_client.get_blob_client(name)
        with path.open("rb") as stream:
            blob_client.upload_blob(stream, overwrite=True)
    except AzureError as exc:
        raise _wrap_azure_error(exc, f"{container}/{name}") from exc

    logger.info(
        "Uploaded file to blob | container=%s | blob=%s | size=%d bytes",
        container,
        name,
        path.stat().st_size,
    )

    return str(blob_client.url)


def upload_package(
    storage_account_name: str | None,
    storage_account_key: str | None,
    file_path: Path | str,
    *,
    blob_endpoint: str | None = None,
    endpoint_suffix: str | None = None,
    container: str | None = None,
    config: DiagnosticsConfig | None = None,
) -> str:
    """Upload *file_path* using account-key credentials.

    Arguments left empty fall back to *config* (the account, endpoint
    suffix and upload container). The blob endpoint defaults to the
    account's public endpoint.

    Raises:
        InvalidArgumentError: If the account name or key is empty, or the
            file does not exist.
        BlobUploadError: If the storage service rejects the upload.
    """
    from azure.storage.blob import BlobServiceClient

    cfg = config or DiagnosticsConfig()
    account_name = storage_account_name or cfg.storage_account_name
    account_key = storage_account_key or cfg.storage_account_key

    if not account_name:
        msg = "Storage account name is required"
        raise InvalidArgumentError(msg, argument="storage_account_name", stage="upload_blob")
    if not account_key:
        msg = "Storage account key is required"
        raise InvalidArgumentError(msg, argument="storage_account_key", stage="upload_blob")

    account_url = blob_endpoint or StorageEndpoints.default_for(
        account_name, endpoint_suffix or cfg.endpoint_suffix
    ).blob
    client = BlobServiceClient(
        account_url,
        credential={"account_name": account_name, "account_key": account_key},
    )
    return upload_file_to_blob(client, file_path, container=container or cfg.upload_container)


def _wrap_azure_error(exc: AzureError, target: str) -> BlobUploadError:
    if isinstance(exc, ServiceRequestError | ServiceResponseError):
        return TransientBlobUploadError(f"Network failure uploading {target}: {exc}")

    status = getattr(exc, "status_code", None) if isinstance(exc, HttpResponseError) else None
    msg = f"Failed to upload {target} (status={status}): {exc.message}"
    if status is not None and (status >= 500 or status in _RETRYABLE_STATUS):
        return TransientBlobUploadError(msg)
    return PermanentBlobUploadError(msg)
