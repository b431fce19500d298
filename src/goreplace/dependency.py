# In src/goreplace/dependency.py
from dataclasses import dataclass


@dataclass(frozen=True)
class DependencyRecord:
    """A single require entry parsed from a go.mod manifest."""

    path: str
    version: str
