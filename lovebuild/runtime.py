"""
love.js runtime blob: downloaded once, then served from a local cache.

The cache is never invalidated; delete the file to fetch a fresh copy.
"""
import urllib.error
import urllib.request
from pathlib import Path
from typing import Union

from lovebuild.errors import OutputError, PreconditionError, RuntimeFetchError
from lovebuild.logging import get_logger

log = get_logger('runtime')

USER_AGENT = 'Mozilla/5.0'
CHUNK_SIZE = 256 * 1024
TIMEOUT = 60


def download(url: str, timeout: float = TIMEOUT) -> bytes:
    """Fetch ``url`` (redirects are followed) and return the body.

    Raises:
        RuntimeFetchError: On transport errors or a non-200 response
    """
    log.info(f"Downloading {url} ...")
    req = urllib.request.Request(url, headers={'User-Agent': USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            status = getattr(response, 'status', 200)
            if status != 200:
                raise RuntimeFetchError(f"Downloading {url} failed: HTTP {status}")
            chunks = []
            received = 0
            while True:
                chunk = response.read(CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
                received += len(chunk)
                log.debug(f"  Downloaded {received / 1024 / 1024:.1f} MB")
    except urllib.error.HTTPError as e:
        raise RuntimeFetchError(f"Downloading {url} failed: HTTP {e.code}") from e
    except (urllib.error.URLError, OSError) as e:
        raise RuntimeFetchError(f"Downloading {url} failed: {e}") from e
    return b''.join(chunks)


def load_runtime(url: str, cache_path: Union[str, Path], offline: bool = False) -> str:
    """Return the love.js source, downloading it on first use.

    Args:
        url: Where to download love.js from
        cache_path: Cached copy; read if present, written after a download
        offline: Never download; a missing cache is an error

    Raises:
        PreconditionError: If offline and the cache is missing, or the
            cache cannot be read as UTF-8 text
        OutputError: If the downloaded runtime cannot be cached
        RuntimeFetchError: If the download fails
    """
    cache_path = Path(cache_path)
    if cache_path.is_file():
        log.info("Using cached love.js runtime")
        try:
            return cache_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise PreconditionError(
                f"Cached love.js at {cache_path} is unreadable ({e}); delete it to download again",
                path=cache_path,
            ) from e

    if offline:
        raise PreconditionError(f"love.js runtime not cached at {cache_path}", path=cache_path)

    data = download(url)
    try:
        text = data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise RuntimeFetchError(f"Downloaded runtime from {url} is not UTF-8 text") from e

    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(text, encoding='utf-8')
    except OSError as e:
        raise OutputError(f"Cannot write love.js cache {cache_path}: {e}", path=cache_path) from e
    log.info(f"Cached love.js ({len(data) / 1024 / 1024:.1f} MB)")
    return text
