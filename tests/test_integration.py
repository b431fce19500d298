"""
Integration tests for goreplace.
Tests configuration layering, error reporting and structured logging
working together with the core components.
"""

import json
import logging
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from goreplace.cli_config import (
    ComprehensiveConfig,
    get_config,
    load_config_file,
    reset_config,
    validate_config_values,
)
from goreplace.dependency_resolver import LocalPathResolver
from goreplace.error_handling import (
    ErrorCategory,
    LocalPathNotFoundError,
    ManifestReadError,
    setup_error_handling,
)
from goreplace.main import cli
from goreplace.parsers import read_manifest
from goreplace.structured_logging import StructuredFormatter


class TestConfigurationIntegration:
    """Test configuration sources and their precedence."""

    def test_defaults(self, tmp_path):
        config = get_config()

        assert config.resolver.gopath == str(tmp_path / "gopath")
        assert config.resolver.src_dir == "src"
        assert config.security.max_input_length == 256
        assert config.manifest.file_name == "go.mod"
        assert validate_config_values(config) == []

    def test_home_go_when_gopath_unset(self, monkeypatch, tmp_path):
        """Test the ~/go fallback used by the Go toolchain."""
        monkeypatch.delenv("GOPATH")

        config = get_config()

        assert config.resolver.gopath == str(tmp_path / "home" / "go")

    def test_first_gopath_entry_used(self, monkeypatch, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        monkeypatch.setenv("GOPATH", os.pathsep.join([str(first), str(second)]))

        assert get_config().resolver.gopath == str(first)

    def test_toml_config_file(self, monkeypatch, temp_dir):
        """Test that a project-level .goreplace.toml is picked up."""
        (temp_dir / ".goreplace.toml").write_text(
            '[resolver]\ngopath = "/opt/go"\n\n[security]\nmax_input_length = 32\n',
            encoding="utf-8",
        )
        monkeypatch.chdir(temp_dir)

        config = get_config()

        assert config.resolver.gopath == "/opt/go"
        assert config.security.max_input_length == 32

    def test_json_config_file(self, monkeypatch, temp_dir):
        (temp_dir / ".goreplace.json").write_text(
            json.dumps({"manifest": {"file_name": "alt.mod"}}), encoding="utf-8"
        )
        monkeypatch.chdir(temp_dir)

        assert get_config().manifest.file_name == "alt.mod"

    def test_environment_overrides_file(self, monkeypatch, temp_dir):
        (temp_dir / ".goreplace.toml").write_text(
            '[resolver]\ngopath = "/opt/go"\n', encoding="utf-8"
        )
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("GOREPLACE_GOPATH", "/srv/go")
        monkeypatch.setenv("GOREPLACE_MAX_INPUT_LENGTH", "8")

        config = get_config()

        assert config.resolver.gopath == "/srv/go"
        assert config.security.max_input_length == 8

    def test_invalid_integer_env_ignored(self, monkeypatch):
        monkeypatch.setenv("GOREPLACE_MAX_INPUT_LENGTH", "lots")

        assert get_config().security.max_input_length == 256

    def test_invalid_values_fall_back_to_defaults(self, monkeypatch, temp_dir):
        (temp_dir / ".goreplace.toml").write_text(
            "[security]\nmax_input_length = -1\n", encoding="utf-8"
        )
        monkeypatch.chdir(temp_dir)

        assert get_config().security.max_input_length == 256

    def test_wrongly_typed_values_keep_defaults(self, monkeypatch, temp_dir):
        """Test that values of the wrong type are ignored instead of crashing."""
        (temp_dir / ".goreplace.toml").write_text(
            '[security]\nmax_input_length = "abc"\nmax_file_size_mb = true\n\n'
            '[logging]\nlog_level = 10\n\n[manifest]\nfile_name = "alt.mod"\n',
            encoding="utf-8",
        )
        monkeypatch.chdir(temp_dir)

        config = get_config()

        assert config.security.max_input_length == 256
        assert config.security.max_file_size_mb == 10
        assert config.logging.log_level == "CRITICAL"
        assert config.manifest.file_name == "alt.mod"

    def test_non_table_section_ignored(self, monkeypatch, temp_dir):
        (temp_dir / ".goreplace.json").write_text(
            json.dumps({"security": 5}), encoding="utf-8"
        )
        monkeypatch.chdir(temp_dir)

        assert get_config().security.max_input_length == 256

    def test_validate_reports_wrong_types(self):
        config = ComprehensiveConfig()
        config.security.max_input_length = "abc"
        config.logging.log_level = 10

        errors = validate_config_values(config)

        assert "security.max_input_length must be positive" in errors
        assert any(error.startswith("logging.log_level") for error in errors)

    def test_broken_config_file(self, temp_dir):
        broken = temp_dir / "config.toml"
        broken.write_text("[resolver\ngopath =", encoding="utf-8")

        assert load_config_file(broken) is None

    def test_validate_reports_errors(self):
        config = ComprehensiveConfig()
        config.resolver.gopath = ""
        config.security.max_file_size_mb = 0
        config.logging.log_level = "LOUD"

        errors = validate_config_values(config)

        assert "resolver.gopath must not be empty" in errors
        assert "security.max_file_size_mb must be positive" in errors
        assert any(error.startswith("logging.log_level") for error in errors)

    def test_config_limit_applies_to_cli(self, monkeypatch, sample_go_mod, temp_dir):
        """Test that the configured ceiling is the one the CLI enforces."""
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("GOREPLACE_MAX_INPUT_LENGTH", "4")
        reset_config()

        runner = CliRunner()
        result = runner.invoke(cli, ["proto"])

        assert result.exit_code == 1
        assert "input too long (max 4 characters)" in result.output

    def test_manifest_name_from_environment(self, monkeypatch, temp_dir, make_checkout):
        (temp_dir / "other.mod").write_text(
            "require example.com/other v1.0.0\n", encoding="utf-8"
        )
        checkout = make_checkout("example.com/other")
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("GOREPLACE_MANIFEST", "other.mod")

        runner = CliRunner()
        result = runner.invoke(cli, ["other"], input="\n")

        assert result.exit_code == 0
        assert (temp_dir / "other.mod").read_text(encoding="utf-8").endswith(
            f"replace example.com/other => {checkout}\n"
        )


class TestErrorReporting:
    """Test that failures reach the error handler before being raised."""

    def test_resolver_failure_triggers_callback(self, resolver_config):
        handler = setup_error_handling(log_level=logging.CRITICAL)
        seen = []
        handler.register_callback(seen.append, ErrorCategory.FILESYSTEM)

        with pytest.raises(LocalPathNotFoundError):
            LocalPathResolver(resolver_config).resolve("github.com/foo/proto/v2")

        assert len(seen) == 1
        assert seen[0].details["tried"][0].endswith("github.com/foo/proto/v2")
        assert handler.get_error_stats() == {"FILESYSTEM_ERROR": 1}

    def test_read_failure_triggers_global_callback(self, temp_dir, security_config):
        handler = setup_error_handling(log_level=logging.CRITICAL)
        seen = []
        handler.register_callback(seen.append)

        with pytest.raises(ManifestReadError) as exc_info:
            read_manifest(str(temp_dir / "go.mod"), security_config)

        assert isinstance(exc_info.value.cause, ValueError)
        assert seen[0].category == ErrorCategory.FILESYSTEM
        assert seen[0].function == "read_manifest"

    def test_failing_callback_does_not_break_flow(self, resolver_config):
        handler = setup_error_handling(log_level=logging.CRITICAL)

        def explode(_context):
            raise RuntimeError("callback bug")

        handler.register_callback(explode)

        with pytest.raises(LocalPathNotFoundError):
            LocalPathResolver(resolver_config).resolve("github.com/foo/bar")

    def test_traceback_logged_at_debug(self, caplog):
        """Test that the stored traceback reaches the log in debug mode."""
        handler = setup_error_handling(log_level=logging.DEBUG)

        try:
            raise OSError("disk full")
        except OSError as e:
            context = handler.error(
                ErrorCategory.FILESYSTEM, "write failed", "tests", "raiser", exception=e
            )

        assert "OSError: disk full" in context.traceback_info
        debug_messages = [
            r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG
        ]
        assert any(message.startswith("Traceback") for message in debug_messages)

    def test_no_traceback_without_exception(self):
        handler = setup_error_handling(log_level=logging.CRITICAL)

        context = handler.warning(
            ErrorCategory.VALIDATION, "bad input", "tests", "checker"
        )

        assert context.traceback_info is None

    def test_home_directory_masked(self):
        handler = setup_error_handling(log_level=logging.CRITICAL)
        home = str(Path.home())

        sanitized = handler.logger._sanitize_message(f"failed on {home}/go/src/x")

        assert sanitized == "failed on ~/go/src/x"


class TestStructuredLogging:
    """Test the JSON log format."""

    def test_formatter_emits_json_with_extra_fields(self):
        record = logging.LogRecord(
            name="goreplace.resolver",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="local_path_resolved",
            args=(),
            exc_info=None,
        )
        record.event_type = "local_path_resolved"
        record.module_path = "github.com/foo/proto/v2"

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["component"] == "goreplace.resolver"
        assert entry["event_type"] == "local_path_resolved"
        assert entry["module_path"] == "github.com/foo/proto/v2"

    def test_verbose_flag_logs_events(self, monkeypatch, sample_go_mod, temp_dir, make_checkout):
        """Test that --verbose turns on debug events without breaking the run."""
        make_checkout("github.com/foo/proto/v2")
        monkeypatch.chdir(temp_dir)

        runner = CliRunner()
        result = runner.invoke(cli, ["--verbose", "proto"], input="\n")

        assert result.exit_code == 0
        assert logging.getLogger("goreplace.resolver").level == logging.DEBUG
