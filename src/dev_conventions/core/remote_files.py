"""Fetching convention files from a remote GitHub repository.

Architecture:
- RemoteFiles: Abstract base class defining the interface
- GitHubRemoteFiles: Production implementation using httpx
- FakeRemoteFiles (tests/fakes/remote_files.py): In-memory implementation
"""

import base64
import binascii
import logging
from abc import ABC, abstractmethod

import httpx

logger = logging.getLogger(__name__)

RAW_BASE_URL = "https://raw.githubusercontent.com"
API_BASE_URL = "https://api.github.com"


class RemoteFileError(Exception):
    """Raised when a remote file cannot be retrieved."""


class RemoteFiles(ABC):
    """Abstract interface for reading files from a hosted repository."""

    @abstractmethod
    def fetch_file(self, repo_path: str, ref: str, path: str) -> str:
        """Return the text content of `path` at `ref` in `owner/repo`.

        Raises:
            RemoteFileError: If the file cannot be retrieved or is empty
        """
        ...


class GitHubRemoteFiles(RemoteFiles):
    """Fetch files from GitHub.

    raw.githubusercontent.com is tried first; when it is unavailable (blocked
    proxies, non-200 responses, empty bodies) the contents API is used and its
    base64 payload decoded.
    """

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client(follow_redirects=True, timeout=30.0)

    def fetch_file(self, repo_path: str, ref: str, path: str) -> str:
        raw_url = f"{RAW_BASE_URL}/{repo_path}/{ref}/{path}"
        try:
            response = self._client.get(raw_url)
            if response.status_code == 200 and response.text:
                return response.text
            logger.debug("Raw URL returned %s for %s", response.status_code, raw_url)
        except httpx.HTTPError as e:
            logger.debug("Raw URL failed for %s: %s", raw_url, e)

        return self._fetch_from_api(repo_path, ref, path)

    def _fetch_from_api(self, repo_path: str, ref: str, path: str) -> str:
        api_url = f"{API_BASE_URL}/repos/{repo_path}/contents/{path}"
        try:
            response = self._client.get(api_url, params={"ref": ref})
            data = response.json()
        except httpx.HTTPError as e:
            raise RemoteFileError(f"API request failed for {path}: {e}") from e
        except ValueError as e:
            raise RemoteFileError(f"API returned invalid JSON for {path}") from e

        if not isinstance(data, dict):
            raise RemoteFileError(f"Unexpected API response for {path}")
        if "message" in data:
            raise RemoteFileError(f"Failed to fetch {path}: {data['message']}")

        encoded = data.get("content")
        if not isinstance(encoded, str):
            raise RemoteFileError(f"No content in API response for {path}")

        try:
            content = base64.b64decode(encoded).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise RemoteFileError(f"Failed to decode content for {path}") from e

        if not content:
            raise RemoteFileError(f"Empty content for {path}")
        return content
