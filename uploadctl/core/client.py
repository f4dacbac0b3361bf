"""HTTP client for the storage server REST API.

Provides bearer-token authentication, status mapping, and streaming multipart
uploads with progress and cooperative cancellation.
"""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from uploadctl.core.exceptions import (
    AuthenticationError,
    ContentReadError,
    NetworkError,
    ResourceNotFoundError,
    ServerError,
    ServerUnreachableError,
    TimeoutError,
    TransferAborted,
)
from uploadctl.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from uploadctl.core.validation import validate_server_url
from uploadctl.models.entries import ContentHandle
from uploadctl.models.progress import FailureKind, TransferResult
from uploadctl.models.remote import RemoteFile, RemoteFolder
from uploadctl.uploaders.common import guess_content_type
from uploadctl.uploaders.constants import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_TRANSFER_TIMEOUT_SECONDS,
    FOLDERS_ENDPOINT,
    TRANSFER_CHUNK_SIZE,
    UPLOAD_ENDPOINT,
)
from uploadctl.uploaders.watchdog import classify_failure

# =============================================================================
# StorageClient
# =============================================================================


@dataclass
class StorageClient:
    """HTTP client for the storage server API."""

    base_url: str
    token: str | None = None
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    verify_ssl: bool = True
    transport: httpx.BaseTransport | None = field(default=None, repr=False)
    _client: httpx.Client | None = field(init=False, default=None, repr=False)
    _client_lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        with self._client_lock:
            if self._client is None:
                headers = {"Accept": "application/json"}
                if self.token:
                    headers["Authorization"] = f"Bearer {self.token}"
                self._client = httpx.Client(
                    base_url=self.base_url,
                    headers=headers,
                    timeout=self.timeout,
                    verify=self.verify_ssl,
                    follow_redirects=True,
                    transport=self.transport,
                )
            return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> StorageClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Execute an HTTP request and map failures to typed errors.

        Raises:
            AuthenticationError: On 401/403.
            ResourceNotFoundError: On 404.
            ServerError: On any other 4xx/5xx.
            ServerUnreachableError: If the connection cannot be opened.
            TimeoutError: If the request times out.
            NetworkError: On any other transport failure.
        """
        client = self._get_client()
        request_timeout = timeout or self.timeout

        try:
            resp = client.request(method, path, params=params, json=json, timeout=request_timeout)
        except httpx.ConnectError as e:
            raise ServerUnreachableError(self.base_url) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(f"{self.base_url}{path}", request_timeout) from e
        except httpx.HTTPError as e:
            raise NetworkError(self.base_url, str(e)) from e

        if resp.status_code in (401, 403):
            raise AuthenticationError(self.base_url, "Invalid token or permission denied")
        if resp.status_code == 404:
            raise ResourceNotFoundError("resource", path)
        if resp.status_code >= 400:
            raise ServerError(resp.status_code, _error_message(resp), path)

        return resp

    def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """GET request."""
        return self._request("GET", path, params=params, timeout=timeout)

    def post(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """POST request."""
        return self._request("POST", path, params=params, json=json, timeout=timeout)

    # =========================================================================
    # Folders
    # =========================================================================

    def create_directory(self, name: str, parent_id: str) -> RemoteFolder:
        """Create a folder under ``parent_id``.

        Returns:
            The created folder.

        Raises:
            ServerError: If the response carries no usable folder record.
        """
        resp = self.post(FOLDERS_ENDPOINT, json={"name": name, "parent_id": parent_id})
        try:
            folder = RemoteFolder.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as e:
            raise ServerError(resp.status_code, f"Malformed folder response: {e}", FOLDERS_ENDPOINT)

        if folder.parent_id is None:
            folder.parent_id = parent_id
        if not folder.name:
            folder.name = name
        return folder

    def list_root_folders(self) -> list[RemoteFolder]:
        """List the folders visible at the top level."""
        resp = self.get(FOLDERS_ENDPOINT)
        data = resp.json()
        items = data if isinstance(data, list) else data.get("folders", [])
        return [RemoteFolder.model_validate(item) for item in items]

    def home_folder_id(self) -> str:
        """ID of the user's home folder (first top-level folder).

        Raises:
            ResourceNotFoundError: If the server lists no folders.
        """
        folders = self.list_root_folders()
        if not folders:
            raise ResourceNotFoundError("folder", "home")
        return folders[0].id

    # =========================================================================
    # Transfers
    # =========================================================================

    def transfer(
        self,
        handle: ContentHandle,
        target_directory_id: str,
        file_name: str,
        on_progress: Callable[[int], None],
        cancel: threading.Event,
        timeout: float = DEFAULT_TRANSFER_TIMEOUT_SECONDS,
    ) -> TransferResult:
        """Upload one file as a streamed multipart request.

        The body generator reports bytes sent after each chunk and checks
        ``cancel`` before reading the next one.

        Returns:
            TransferResult; quota and server failures are classified from the
            response.

        Raises:
            TransferAborted: If ``cancel`` was set mid-transfer.
        """
        boundary = os.urandom(16).hex()
        content_type = (
            DEFAULT_CONTENT_TYPE if handle.size == 0 else guess_content_type(file_name)
        )
        body = _multipart_body(
            boundary=boundary,
            fields={"folder_id": target_directory_id},
            file_name=file_name,
            content_type=content_type,
            handle=handle,
            on_progress=on_progress,
            cancel=cancel,
        )

        client = self._get_client()
        try:
            resp = client.post(
                UPLOAD_ENDPOINT,
                content=body,
                headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
                timeout=timeout,
            )
        except httpx.TimeoutException:
            return TransferResult.timeout(FailureKind.TIMEOUT, f"Timeout after {timeout:g}s")
        except httpx.HTTPError as e:
            return TransferResult.failure(NetworkError(self.base_url, str(e)).message)
        except OSError as e:
            return TransferResult.failure(ContentReadError(file_name, str(e)).message)

        if resp.is_success:
            return TransferResult.success(_parse_file_record(resp), resp.status_code)
        return classify_failure(resp.status_code, resp.text)

    # =========================================================================
    # Convenience Methods
    # =========================================================================

    def ping(self) -> dict[str, Any]:
        """Check server connectivity and token validity.

        Returns:
            Dict with server info.

        Raises:
            ServerUnreachableError: If server is unreachable.
            AuthenticationError: If the token is rejected.
        """
        start = time.time()
        folders = self.list_root_folders()
        latency = int((time.time() - start) * 1000)

        return {
            "url": self.base_url,
            "status": "ok",
            "folders": len(folders),
            "home_folder": folders[0].id if folders else None,
            "latency_ms": latency,
        }


# =============================================================================
# Helpers
# =============================================================================


def _error_message(resp: httpx.Response) -> str:
    """Server error text: the JSON ``error`` field, else the raw body."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return resp.text[:200]


def _parse_file_record(resp: httpx.Response) -> RemoteFile | Any:
    if not resp.content:
        return None
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    try:
        return RemoteFile.model_validate(data)
    except PydanticValidationError:
        return data


def _multipart_body(
    *,
    boundary: str,
    fields: dict[str, str],
    file_name: str,
    content_type: str,
    handle: ContentHandle,
    on_progress: Callable[[int], None],
    cancel: threading.Event,
) -> Iterator[bytes]:
    """Yield a multipart/form-data body with the file part last."""
    safe_name = file_name.replace('"', "%22").replace("\r", "").replace("\n", "")
    head = b"".join(
        f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n{value}\r\n'.encode()
        for name, value in fields.items()
    )
    head += (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="file"; filename="{safe_name}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode()
    yield head

    sent = 0
    with handle.open() as f:
        while True:
            if cancel.is_set():
                raise TransferAborted(file_name)
            chunk = f.read(TRANSFER_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
            sent += len(chunk)
            on_progress(sent)

    if sent == 0:
        on_progress(0)
    yield f"\r\n--{boundary}--\r\n".encode()
