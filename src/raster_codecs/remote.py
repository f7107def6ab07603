"""
Remote file access for raster-codecs.

HTTP/HTTPS inputs are fetched with requests and stored in a local file,
since the codecs seek freely through their inputs.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

logger = logging.getLogger("raster_codecs.remote")

REMOTE_SCHEMES = ("http://", "https://")


def is_remote_url(path: Union[str, Path]) -> bool:
    """Check if path is a remote URL."""
    if isinstance(path, Path):
        return False
    return str(path).startswith(REMOTE_SCHEMES)


class RemoteFile:
    """HTTP/HTTPS file."""

    def __init__(self, url: str):
        if not is_remote_url(url):
            raise ValueError(f"Unsupported URL scheme: {urlparse(url).scheme}")
        self.url = url

    def read_all(self) -> bytes:
        import requests

        response = requests.get(self.url, timeout=120)
        response.raise_for_status()
        return response.content

    def download_to_temp(self) -> Path:
        """Download the file to a temporary location and return its path."""
        suffix = Path(urlparse(self.url).path).suffix or ".tmp"
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            tmp.write(self.read_all())
            return Path(tmp.name)


def download_remote(url: str, output_path: Optional[Path] = None) -> Path:
    """
    Download a remote file.

    Args:
        url: Remote URL
        output_path: Optional output path (uses temp file if not specified)

    Returns:
        Path to the downloaded file
    """
    remote = RemoteFile(url)
    logger.info(f"Downloading {url}")

    if output_path is None:
        return remote.download_to_temp()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(remote.read_all())
    return output_path

