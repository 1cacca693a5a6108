"""Fetch remote templates as archives and unpack them into a staging directory."""

from __future__ import annotations

import logging
import os
import ssl
import zipfile
from pathlib import Path
from urllib.parse import quote

import httpx
import truststore

from scaffold_cli.errors import DownloadError
from scaffold_cli.template.source import TemplateSource

logger = logging.getLogger(__name__)

ssl_context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

# Providers without an API lookup for the default branch fall back to this ref.
FALLBACK_REF = "main"


def _github_token(cli_token: str | None = None) -> str | None:
    """Return sanitized GitHub token (cli arg takes precedence) or None."""
    return ((cli_token or os.getenv("GH_TOKEN") or os.getenv("GITHUB_TOKEN") or "").strip()) or None


def _github_auth_headers(cli_token: str | None = None) -> dict:
    """Return Authorization header dict only when a non-empty token exists."""
    token = _github_token(cli_token)
    return {"Authorization": f"Bearer {token}"} if token else {}


def archive_url(source: TemplateSource) -> str:
    """Return the zip archive URL for a remote source."""
    owner, name = (source.repo or "").split("/", 1)
    if source.provider == "github":
        # The zipball endpoint serves the default branch when no ref is given.
        url = f"https://api.github.com/repos/{owner}/{name}/zipball"
        return f"{url}/{quote(source.ref, safe='')}" if source.ref else url
    ref = source.ref or FALLBACK_REF
    if source.provider == "gitlab":
        return f"https://gitlab.com/{owner}/{name}/-/archive/{quote(ref, safe='')}/{name}.zip"
    if source.provider == "bitbucket":
        return f"https://bitbucket.org/{owner}/{name}/get/{quote(ref, safe='')}.zip"
    raise DownloadError(f"Unsupported provider: {source.provider}")


def make_client(*, skip_tls: bool = False) -> httpx.Client:
    return httpx.Client(verify=False if skip_tls else ssl_context)


def _fetch_archive(
    client: httpx.Client,
    url: str,
    zip_path: Path,
    headers: dict,
) -> int:
    try:
        with client.stream("GET", url, timeout=60, follow_redirects=True, headers=headers) as response:
            if response.status_code != 200:
                response.read()
                body_sample = response.text[:400]
                raise DownloadError(
                    f"Download failed with {response.status_code} for {url}\nBody (truncated): {body_sample}"
                )
            size = 0
            with open(zip_path, "wb") as f:
                for chunk in response.iter_bytes(chunk_size=8192):
                    f.write(chunk)
                    size += len(chunk)
            return size
    except httpx.HTTPError as exc:
        raise DownloadError(f"Error downloading {url}: {exc}") from exc


def _extract_archive(zip_path: Path, dest: Path) -> Path:
    """Extract *zip_path* into *dest*, flattening a single top-level directory."""
    try:
        with zipfile.ZipFile(zip_path, "r") as zip_ref:
            zip_ref.extractall(dest)
    except zipfile.BadZipFile as exc:
        raise DownloadError(f"Downloaded archive is not a valid zip file: {exc}") from exc

    extracted_items = list(dest.iterdir())
    # Handle GitHub-style ZIP with a single root directory
    if len(extracted_items) == 1 and extracted_items[0].is_dir():
        return extracted_items[0]
    return dest


def download_template(
    source: TemplateSource,
    staging_dir: Path,
    *,
    client: httpx.Client | None = None,
    github_token: str | None = None,
) -> Path:
    """Download *source* into *staging_dir* and return the template root.

    *staging_dir* must already exist and belong to the caller, who is also
    responsible for removing it. The archive itself is deleted here.

    Raises:
        DownloadError: On network failures, non-200 responses, a corrupt
            archive, or a missing subdirectory.
    """
    if source.is_local:
        raise DownloadError(f"Not a remote source: {source.raw}")

    url = archive_url(source)
    headers = _github_auth_headers(github_token) if source.provider == "github" else {}
    owns_client = client is None
    if client is None:
        client = make_client()

    zip_path = staging_dir / "template.zip"
    extract_dir = staging_dir / "template"
    extract_dir.mkdir()
    logger.debug("Fetching %s from %s", source.reference, url)

    try:
        size = _fetch_archive(client, url, zip_path, headers)
        logger.debug("Downloaded %s bytes for %s", f"{size:,}", source.reference)
        root = _extract_archive(zip_path, extract_dir)
    finally:
        if owns_client:
            client.close()
        if zip_path.exists():
            zip_path.unlink()

    if source.subdir:
        root = root / source.subdir
        if not root.is_dir():
            raise DownloadError(f"Subdirectory '{source.subdir}' not found in {source.repo}")
    return root


__all__ = ["archive_url", "download_template", "make_client", "ssl_context"]
