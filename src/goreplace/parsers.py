from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from .cli_config import SecurityConfig, get_config
from .dependency import DependencyRecord
from .error_handling import ManifestReadError, log_filesystem_error
from .structured_logging import log_manifest_parsed


def _validate_file_path(file_path: str, security: SecurityConfig) -> Path:
    """
    Validate the manifest path before reading it.

    Args:
        file_path: The file path to validate
        security: Limits to enforce

    Returns:
        Path: Validated path object

    Raises:
        ValueError: If path is invalid or unsafe
    """
    if not file_path or not isinstance(file_path, str):
        raise ValueError("File path must be a non-empty string")

    path = Path(file_path)

    if not path.exists():
        raise ValueError(f"File does not exist: {path}")

    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    try:
        file_size = path.stat().st_size
    except OSError as e:
        raise ValueError(f"Cannot access file: {e}")

    max_file_size = security.max_file_size_bytes
    if file_size > max_file_size:
        raise ValueError(f"File too large: {file_size} bytes (max: {max_file_size})")

    return path


def read_manifest(file_path: str, security: Optional[SecurityConfig] = None) -> str:
    """
    Read a go.mod manifest into memory.

    Args:
        file_path: Path to the go.mod file
        security: Limits to enforce, defaults to the global configuration

    Returns:
        str: Full manifest text

    Raises:
        ManifestReadError: If the file is missing, too large or unreadable
    """
    if security is None:
        security = get_config().security

    try:
        validated_path = _validate_file_path(file_path, security)
        with open(validated_path, encoding="utf-8") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise _read_failure(
            file_path, ValueError("File contains invalid UTF-8 characters"), e
        ) from e
    except PermissionError as e:
        raise _read_failure(
            file_path, ValueError("Permission denied reading file"), e
        ) from e
    except (OSError, ValueError) as e:
        raise _read_failure(file_path, e, e) from e


def _read_failure(
    file_path: str, cause: Exception, exception: Exception
) -> ManifestReadError:
    """Report a manifest read failure and build the error to raise."""
    log_filesystem_error(
        f"Could not read manifest: {cause}",
        "parsers",
        "read_manifest",
        file_path=file_path,
        exception=exception,
    )
    return ManifestReadError(file_path, cause)


def _parse_require_line(line: str) -> Optional[DependencyRecord]:
    """Parse a single require entry into a record, or None if it is skipped."""
    # Checked before the comment is removed so `// indirect` markers count
    if "indirect" in line:
        return None

    comment_index = line.find("//")
    if comment_index != -1:
        line = line[:comment_index].strip()

    parts = line.split()
    if len(parts) < 2:
        return None

    return DependencyRecord(path=parts[0], version=parts[1])


def _extract_replace_path(line: str) -> str:
    """Return the module path on the left of a replace directive."""
    parts = line.split("=>")
    if len(parts) < 2:
        return ""
    left = parts[0]
    if left.startswith("replace "):
        left = left[len("replace "):]
    return left.strip()


def parse_go_mod_content(content: str) -> Tuple[List[DependencyRecord], Set[str]]:
    """
    Parse go.mod text into require records and already-replaced module paths.

    The scan is line oriented and permissive: anything it does not recognise
    is skipped rather than treated as an error.

    Args:
        content: Raw manifest text

    Returns:
        Tuple[List[DependencyRecord], Set[str]]: Records in file order and the
        set of module paths that already have a replace directive
    """
    records: List[DependencyRecord] = []
    replaced: Set[str] = set()
    in_require_block = False

    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith("require ("):
            in_require_block = True
        elif line.startswith("require ") and not in_require_block:
            record = _parse_require_line(line[len("require "):])
            if record:
                records.append(record)
        elif in_require_block and line == ")":
            in_require_block = False
        elif in_require_block:
            record = _parse_require_line(line)
            if record:
                records.append(record)
        elif line.startswith("replace "):
            path = _extract_replace_path(line)
            if path:
                replaced.add(path)

    return records, replaced


def parse_go_mod(
    file_path: str, security: Optional[SecurityConfig] = None
) -> Tuple[str, List[DependencyRecord], Set[str]]:
    """
    Read and parse a go.mod file.

    Returns:
        Tuple[str, List[DependencyRecord], Set[str]]: The raw text (needed
        later to append to it) followed by the parse result

    Raises:
        ManifestReadError: If the file cannot be read
    """
    content = read_manifest(file_path, security)
    records, replaced = parse_go_mod_content(content)
    log_manifest_parsed(len(records), len(replaced), file_path=file_path)
    return content, records, replaced


def filter_dependencies(
    records: Iterable[DependencyRecord], replaced: Set[str], partial_name: str
) -> List[str]:
    """
    Select module paths containing partial_name that are not yet replaced.

    Matching is a case-sensitive literal substring test; input order and
    duplicates are preserved.
    """
    matched = []
    for record in records:
        if record.path in replaced:
            continue
        if partial_name in record.path:
            matched.append(record.path)
    return matched
