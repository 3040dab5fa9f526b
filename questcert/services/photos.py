from __future__ import annotations

import asyncio
import logging
import os
import re

import requests

logger = logging.getLogger("questcert.photos")

_URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def _contained(root: str, candidate: str) -> bool:
    root_real = os.path.realpath(root)
    resolved = os.path.realpath(candidate)
    return resolved == root_real or resolved.startswith(f"{root_real}{os.sep}")


def _fetch_remote(url: str, timeout: float | None) -> bytes | None:
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        logger.info("[CERT-PHOTO] fetch failed url=%s error=%s", url, exc)
        return None
    if not response.ok:
        logger.info("[CERT-PHOTO] fetch failed url=%s status=%s", url, response.status_code)
        return None
    return response.content


def local_photo_path(source: str, base_dir: str | None = None) -> str:
    if os.path.isabs(source):
        return source
    root = base_dir or os.getcwd()
    return os.path.join(root, source.lstrip("/\\"))


def read_photo_bytes(
    source: str | None,
    *,
    base_dir: str | None = None,
    restrict_to_base: bool = False,
    timeout: float | None = None,
) -> bytes | None:
    """Return the raw bytes behind a photo reference, or ``None``.

    ``source`` is either an http(s) URL or a filesystem path; relative paths
    are resolved against ``base_dir`` (default: the working directory). Any
    failure yields ``None``. With ``restrict_to_base`` a path that resolves
    outside ``base_dir`` is treated as missing.
    """
    raw = (source or "").strip()
    if not raw:
        return None

    if _URL_PATTERN.match(raw):
        return _fetch_remote(raw, timeout)

    path = local_photo_path(raw, base_dir)
    try:
        if restrict_to_base and not _contained(base_dir or os.getcwd(), path):
            logger.warning("[CERT-PHOTO] path outside photo root ignored source=%r", raw)
            return None
        if not os.path.isfile(path):
            logger.debug("[CERT-PHOTO] missing path=%r", path)
            return None
    except ValueError as exc:
        # embedded NUL and similar unrepresentable paths
        logger.warning("[CERT-PHOTO] unusable path source=%r error=%s", raw, exc)
        return None
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as exc:
        logger.info("[CERT-PHOTO] read failed path=%s error=%s", path, exc)
        return None


async def resolve_photo(
    source: str | None,
    *,
    base_dir: str | None = None,
    restrict_to_base: bool = False,
    timeout: float | None = None,
) -> bytes | None:
    if not (source or "").strip():
        return None
    return await asyncio.to_thread(
        read_photo_bytes,
        source,
        base_dir=base_dir,
        restrict_to_base=restrict_to_base,
        timeout=timeout,
    )
