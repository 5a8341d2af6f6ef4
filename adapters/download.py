"""
Remote fetch adapter.

Downloads files over HTTP(S) into a local directory and copies a mixed list
of URLs and local files into a destination. This is the only network access
the controllers perform; it is used to sync VS Code settings from the shared
settings repository.
"""

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import httpx
from rich import print as pr
from rich.markup import escape

from core.exceptions import DownloadError, FileWriteError
from core.file_io import FilesystemFileWriter, ensure_dir


@dataclass(frozen=True)
class Destination:
    """
    Where a download is written.

    Attributes:
        dir: Target directory; a fresh temporary directory when None.
        file: Target file name; the last segment of the final URL when None.
        mode: Permission bits applied to the written file, if any.
    """

    dir: Optional[Path] = None
    file: Optional[str] = None
    mode: Optional[int] = None


@dataclass(frozen=True)
class DownloadedFile:
    file: str
    dir: Path
    full_path: Path
    size: int


def is_url(text: str | Path) -> bool:
    """True for `http://` and `https://` URLs. `Path` objects are always local."""
    if isinstance(text, Path):
        return False
    parsed = urlparse(text)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


async def download(
    src: str,
    dest: Optional[Destination] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> DownloadedFile:
    """
    Fetch `src`, following redirects, and write the body to disk.

    Args:
        src: The URL to fetch.
        dest: Target directory, file name and mode. See `Destination`.
        client: An existing client to reuse; a short-lived one is created
            when None.

    Returns:
        DownloadedFile: Where the content was written and its size in bytes.

    Raises:
        DownloadError: On any status other than 200, or when the request fails.
        FileWriteError: If the target directory or file cannot be written.
    """
    dest = dest or Destination()
    try:
        if client is None:
            async with httpx.AsyncClient(follow_redirects=True) as own_client:
                response = await own_client.get(src)
        else:
            response = await client.get(src, follow_redirects=True)
    except httpx.HTTPError as e:
        raise DownloadError(src, message=f"{src}: {e}") from e

    final_url = str(response.url).rstrip("/")
    if response.status_code != 200:
        raise DownloadError(
            final_url,
            status_code=response.status_code,
            message=(
                f"{final_url}: status {response.status_code}-'{response.reason_phrase}'"
                f" while writing to {dest}"
            ),
        )

    content = response.content
    target_dir = (
        dest.dir
        if dest.dir is not None
        else Path(tempfile.mkdtemp(prefix="vscode-team-download"))
    )
    file_name = dest.file or final_url[final_url.rfind("/") + 1 :]

    writer = FilesystemFileWriter.in_dir(target_dir, file_name)
    writer.write_bytes(content)
    if dest.mode is not None:
        writer.chmod(dest.mode)

    return DownloadedFile(
        file=file_name,
        dir=target_dir,
        full_path=target_dir / file_name,
        size=len(content),
    )


async def copy_source_to_dest(
    sources: list[str | Path],
    dest: Path,
    dry_run: bool = False,
    verbose: bool = False,
) -> None:
    """
    Copy every source into the directory `dest`, creating it if needed.

    URLs are downloaded; anything else is treated as a local file and copied,
    overwriting a file of the same name. In dry-run mode the equivalent
    `mkdir`, `Download` and `cp` steps are printed instead.

    Raises:
        DownloadError: If a URL cannot be fetched.
        FileWriteError: If `dest` cannot be created.
    """
    if not dest.exists():
        if dry_run:
            pr(escape(f"mkdir {dest}"))
        else:
            if verbose:
                pr(escape(f"Creating directory {dest}"))
            ensure_dir(dest)

    if not dest.exists() and not dry_run:
        pr(f"[red]{escape(str(dest))} does not exist (and unable to create it)[/red]")
        return

    async with httpx.AsyncClient(follow_redirects=True) as client:
        for src in sources:
            if verbose:
                pr(escape(f"Copying {src} to {dest}"))
            if is_url(src):
                if dry_run:
                    pr(escape(f"Download {src} {dest}"))
                else:
                    await download(str(src), Destination(dir=dest), client=client)
            elif dry_run:
                pr(escape(f"cp {src} {dest}"))
            else:
                try:
                    shutil.copy(src, dest)
                except OSError as e:
                    raise FileWriteError(
                        message=f"Failed to copy {src} to {dest}",
                        file_path=str(dest),
                        original_exception=e,
                    ) from e
