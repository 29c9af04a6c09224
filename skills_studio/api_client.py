"""
Studio Client - Skills Studio REST API wrapper with bounded timeouts
"""

import base64
import logging
import re

import requests

from skills_studio.errors import NetworkError
from skills_studio.models import ArtifactContent, Library

logger = logging.getLogger(__name__)

API_PREFIX = "/api/skills-studio"

FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


# ── Id encoding ───────────────────────────────────────────────────────────────

def encode_id(artifact_id: str) -> str:
    """URL-safe token for an opaque artifact id: base64, +→-, /→_, no padding."""
    token = base64.b64encode(artifact_id.encode("utf-8")).decode("ascii")
    return token.replace("+", "-").replace("/", "_").rstrip("=")


def decode_id(token: str) -> str:
    """Exact inverse of encode_id."""
    std = token.replace("-", "+").replace("_", "/")
    std += "=" * (-len(std) % 4)
    return base64.b64decode(std).decode("utf-8")


class StudioClient:

    def __init__(self, base_url: str = "http://localhost:3344",
                 load_timeout: float = 10, save_timeout: float = 15):
        self._base         = base_url.rstrip("/")
        self._load_timeout = load_timeout
        self._save_timeout = save_timeout

    @classmethod
    def from_config(cls, config) -> "StudioClient":
        load_timeout, save_timeout = config.get_timeouts()
        return cls(config.get_base_url(), load_timeout, save_timeout)

    @property
    def base_url(self) -> str:
        return self._base

    @property
    def _headers(self) -> dict:
        return {"Accept": "application/json"}

    def _url(self, path: str) -> str:
        return f"{self._base}{API_PREFIX}{path}"

    # ── Core request ─────────────────────────────────────────────────────────

    def _send(self, method: str, path: str, *, params: dict | None = None,
              json: dict | None = None, timeout: float | None = None):
        """Send a request and return the response if it succeeded. Raises NetworkError."""
        url = self._url(path)
        if timeout is None:
            timeout = self._load_timeout
        try:
            resp = requests.request(
                method, url, headers=self._headers, params=params,
                json=json, timeout=timeout,
            )
        except requests.Timeout as e:
            logger.error("Timeout after %ss: %s %s", timeout, method, url)
            raise NetworkError(f"Request timed out after {timeout:g}s") from e
        except requests.RequestException as e:
            logger.error("Request failed: %s %s: %s", method, url, e)
            raise NetworkError(f"Cannot reach server: {e}") from e

        if not resp.ok:
            message = f"HTTP {resp.status_code}"
            try:
                body = resp.json()
                if isinstance(body, dict) and body.get("error"):
                    message = str(body["error"])
            except ValueError:
                pass
            logger.warning("%s %s -> %s: %s", method, url, resp.status_code, message)
            raise NetworkError(message, status=resp.status_code)
        return resp

    def _request(self, method: str, path: str, **kw):
        """Send a request and return the decoded JSON body. Raises NetworkError."""
        resp = self._send(method, path, **kw)
        try:
            return resp.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {self._url(path)}",
                               status=resp.status_code) from e

    # ── Library / artifacts ──────────────────────────────────────────────────

    def fetch_library(self) -> Library:
        return Library.from_api(self._request("GET", "/library") or {})

    def fetch_artifact_content(self, artifact_id: str) -> ArtifactContent:
        data = self._request("GET", f"/artifact/{encode_id(artifact_id)}")
        return ArtifactContent.from_api(data or {})

    def save_artifact_content(self, artifact_id: str, content: str) -> dict:
        return self._request(
            "PUT", f"/artifact/{encode_id(artifact_id)}",
            json={"rawContent": content}, timeout=self._save_timeout,
        )

    def delete_artifact(self, artifact_id: str) -> dict:
        return self._request(
            "DELETE", f"/artifact/{encode_id(artifact_id)}", timeout=self._save_timeout,
        )

    def validate_artifact(self, content: str, artifact_type: str) -> dict:
        return self._request(
            "POST", "/validate", json={"rawContent": content, "type": artifact_type},
        )

    # ── Sub-files ────────────────────────────────────────────────────────────

    def fetch_sub_file(self, artifact_id: str, path: str) -> str:
        data = self._request(
            "GET", f"/artifact/{encode_id(artifact_id)}/file", params={"path": path},
        )
        return (data or {}).get("content") or ""

    def save_sub_file(self, artifact_id: str, path: str, content: str) -> dict:
        return self._request(
            "PUT", f"/artifact/{encode_id(artifact_id)}/file",
            json={"path": path, "content": content}, timeout=self._save_timeout,
        )

    def create_sub_file(self, artifact_id: str, path: str, content: str = "",
                        is_dir: bool = False) -> dict:
        return self._request(
            "POST", f"/artifact/{encode_id(artifact_id)}/file",
            json={"path": path, "content": content, "isDir": is_dir},
            timeout=self._save_timeout,
        )

    def delete_sub_file(self, artifact_id: str, path: str) -> dict:
        return self._request(
            "DELETE", f"/artifact/{encode_id(artifact_id)}/file",
            json={"path": path}, timeout=self._save_timeout,
        )

    # ── Bundled skills and export ────────────────────────────────────────────

    def install_bundled(self, dir_name: str) -> dict:
        return self._request(
            "POST", "/install", json={"dirName": dir_name}, timeout=self._save_timeout,
        )

    def uninstall_bundled(self, dir_name: str) -> dict:
        return self._request(
            "DELETE", "/install", json={"dirName": dir_name}, timeout=self._save_timeout,
        )

    def export_artifact(self, artifact_id: str) -> tuple[str | None, bytes]:
        """(file name suggested by the server or None, archive bytes)."""
        resp = self._send("GET", f"/export/{encode_id(artifact_id)}",
                          timeout=self._save_timeout)
        disposition = resp.headers.get("Content-Disposition", "")
        match = FILENAME_RE.search(disposition)
        return (match.group(1) if match else None), resp.content
