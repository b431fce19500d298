"""
Appending replace directives to a go.mod manifest.

The manifest is never written in place: the new content goes to a temporary
file in the same directory which is then renamed over the original, so an
interrupted run leaves either the old or the new manifest on disk.
"""

import os
import stat
import tempfile
from pathlib import Path

from .error_handling import ManifestWriteError, log_filesystem_error
from .structured_logging import log_replace_applied


def format_replace_directive(module_path: str, local_path: str) -> str:
    return f"replace {module_path} => {local_path}"


def build_replace_content(content: str, module_path: str, local_path: str) -> str:
    """Return content with a replace directive appended on its own line."""
    return f"{content}\n{format_replace_directive(module_path, local_path)}\n"


def _atomic_write(file_path: Path, content: str) -> None:
    """
    Write content to file_path through a temp file and a rename.

    Raises:
        ManifestWriteError: If writing the temp file or renaming it fails
    """
    directory = file_path.parent
    try:
        mode = stat.S_IMODE(file_path.stat().st_mode)
    except OSError:
        mode = 0o644

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{file_path.name}.", suffix=".tmp", dir=str(directory)
        )
    except OSError as e:
        log_filesystem_error(
            "Could not create temp file", "manifest_writer", "_atomic_write",
            file_path=str(directory), exception=e,
        )
        raise ManifestWriteError("write temp file", e) from e

    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, mode)
        except OSError as e:
            log_filesystem_error(
                "Could not write temp file", "manifest_writer", "_atomic_write",
                file_path=tmp_name, exception=e,
            )
            raise ManifestWriteError("write temp file", e) from e

        try:
            os.replace(tmp_name, file_path)
        except OSError as e:
            log_filesystem_error(
                "Could not rename temp file", "manifest_writer", "_atomic_write",
                file_path=str(file_path), exception=e,
            )
            raise ManifestWriteError("rename temp file", e) from e
    except ManifestWriteError:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def apply_replace(
    manifest_path: str, content: str, module_path: str, local_path: str
) -> str:
    """
    Append ``replace module_path => local_path`` to the manifest and persist it.

    Args:
        manifest_path: Path of the go.mod file to replace
        content: Manifest text as it was read
        module_path: Module being replaced
        local_path: Local directory it should point to

    Returns:
        str: The new manifest content

    Raises:
        ManifestWriteError: If the manifest could not be written
    """
    new_content = build_replace_content(content, module_path, local_path)
    _atomic_write(Path(manifest_path), new_content)
    log_replace_applied(manifest_path, module_path, local_path)
    return new_content
