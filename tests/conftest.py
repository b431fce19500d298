"""
Shared fixtures for goreplace tests.
"""

import logging

import pytest

from goreplace.cli_config import ResolverConfig, SecurityConfig, reset_config
from goreplace.error_handling import setup_error_handling

SAMPLE_GO_MOD = """module example.com/service

go 1.21

require (
    github.com/foo/auth-client v1.4.0
    github.com/foo/proto/v2 v2.0.0
    github.com/bar/oauth v0.9.1 // pinned for compat
    golang.org/x/sys v0.15.0 // indirect
    github.com/foo/bar v1.2.3
)

require github.com/single/line v1.0.0

replace github.com/foo/bar => ../bar
"""


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep global config and environment from leaking between tests."""
    for key in (
        "GOREPLACE_GOPATH",
        "GOREPLACE_MAX_INPUT_LENGTH",
        "GOREPLACE_MAX_FILE_SIZE_MB",
        "GOREPLACE_MANIFEST",
        "GOREPLACE_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("GOPATH", str(tmp_path / "gopath"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    reset_config()
    setup_error_handling(log_level=logging.CRITICAL)
    yield
    reset_config()


@pytest.fixture
def temp_dir(tmp_path):
    """Working directory for manifest files."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def gopath(tmp_path):
    """An empty GOPATH with a src/ directory."""
    root = tmp_path / "gopath"
    (root / "src").mkdir(parents=True)
    return root


@pytest.fixture
def resolver_config(gopath):
    return ResolverConfig(gopath=str(gopath))


@pytest.fixture
def security_config():
    return SecurityConfig()


@pytest.fixture
def sample_go_mod(temp_dir):
    """A go.mod with block and single-line requires plus one replace."""
    go_mod = temp_dir / "go.mod"
    go_mod.write_text(SAMPLE_GO_MOD, encoding="utf-8")
    return go_mod


@pytest.fixture
def make_checkout(gopath):
    """Create src/<module_path> under the test GOPATH."""

    def _make(module_path):
        path = gopath / "src" / module_path
        path.mkdir(parents=True, exist_ok=True)
        return path

    return _make
