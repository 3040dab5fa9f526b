import os
import tempfile


def ensure_dir(path: str) -> None:
    """Create directory if missing (mkdir -p equivalent)."""
    if path:
        os.makedirs(path, exist_ok=True)


def write_atomic(path: str, data: bytes) -> None:
    """Write data to a temporary file, fsync it, then atomically rename to target path.

    Returns only once the rename has happened, so a reader never sees a
    partially written file at ``path``.
    """
    dir_path = os.path.dirname(os.path.abspath(path))
    ensure_dir(dir_path)
    fd, tmp_path = tempfile.mkstemp(dir=dir_path, suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def certificate_dir(site_root: str, year: int) -> str:
    return os.path.join(site_root, "certificates", str(year))


def remove_year_certificates(site_root: str, year: int, dry_run: bool = False) -> list[str]:
    base_dir = certificate_dir(site_root, year)
    removed: list[str] = []
    if not os.path.isdir(base_dir):
        return removed
    for name in sorted(os.listdir(base_dir)):
        if not name.lower().endswith(".pdf"):
            continue
        full_path = os.path.join(base_dir, name)
        if not dry_run:
            try:
                os.remove(full_path)
            except FileNotFoundError:
                continue
        removed.append(full_path)
    return removed
