"""
Local path resolution for Go modules.

Maps a module path onto a checkout under ``$GOPATH/src``. Modules that use a
major-version suffix (``example.com/foo/v2``) are usually checked out without
it, so the suffix-stripped directory is tried after the exact one.
"""

import re
from pathlib import Path
from typing import List, Optional

from .cli_config import ResolverConfig, get_config
from .error_handling import ErrorCategory, LocalPathNotFoundError, get_error_handler
from .structured_logging import log_local_path_probe, log_local_path_resolved

_VERSION_SUFFIX = re.compile(r"(/v\d+)$")


def remove_version_from_path(module_path: str) -> str:
    """Strip one trailing ``/vN`` major-version segment, if present."""
    return _VERSION_SUFFIX.sub("", module_path, count=1)


class LocalPathResolver:
    """Finds the local checkout of a module under a configured GOPATH."""

    def __init__(self, config: Optional[ResolverConfig] = None):
        self.config = config or get_config().resolver
        self.error_handler = get_error_handler()

    def candidate_for(self, module_path: str) -> Path:
        """Return the directory a module would be checked out in."""
        return self.config.source_root / module_path

    def candidates(self, module_path: str) -> List[Path]:
        """Return the probe order: exact path first, then version-stripped."""
        paths = [self.candidate_for(module_path)]
        base_path = remove_version_from_path(module_path)
        if base_path != module_path:
            paths.append(self.candidate_for(base_path))
        return paths

    def resolve(self, module_path: str) -> str:
        """
        Resolve a module path to an existing local directory.

        Args:
            module_path: Module path as written in the require entry

        Returns:
            str: The first candidate that exists on disk

        Raises:
            LocalPathNotFoundError: If no candidate exists
        """
        probed = self.candidates(module_path)
        for index, candidate in enumerate(probed):
            exists = candidate.exists()
            log_local_path_probe(module_path, str(candidate), exists)
            if exists:
                log_local_path_resolved(module_path, str(candidate), stripped=index > 0)
                return str(candidate)

        original_path = str(probed[0])
        stripped_path = str(self.candidate_for(remove_version_from_path(module_path)))

        self.error_handler.error(
            ErrorCategory.FILESYSTEM,
            f"No local copy found for {module_path}",
            "dependency_resolver",
            "resolve",
            details={"tried": [original_path, stripped_path]},
            suggestions=[
                "Clone the module under $GOPATH/src",
                "Pass --gopath to point at a different workspace",
            ],
        )
        raise LocalPathNotFoundError(original_path, stripped_path)


def find_local_path(module_path: str, config: Optional[ResolverConfig] = None) -> str:
    """Resolve module_path with a resolver built from config."""
    return LocalPathResolver(config).resolve(module_path)
