"""Tests for the deployment validator."""

import os
import subprocess

import pytest

from hostdeploy.exceptions import (
    ContainerNotRunningError,
    EngineServiceDownError,
    ValidationError,
)
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.services.commands import SystemCommands
from hostdeploy.services.deployment_validator import (
    CONTAINER_RUNNING,
    ENGINE_ACTIVE,
    PUBLIC_HTTP,
    REMOTE_HTTP,
    DeploymentValidator,
)

PUBLIC_URL = "http://203.0.113.10"


@pytest.fixture
def running(fake_ssh):
    return fake_ssh.on("docker ps", stdout="app_container\n")


def validator(ssh, logger, http):
    return DeploymentValidator(ssh, logger, NamedArtifacts(), http_client=http)


def test_all_checks_pass(running, logger, stub_http):
    http = stub_http(200)

    report = validator(running, logger, http).validate(5000, PUBLIC_URL)

    assert report.passed == [ENGINE_ACTIVE, CONTAINER_RUNNING, REMOTE_HTTP, PUBLIC_HTTP]
    assert http.requests == [(PUBLIC_URL, 7)]


def test_any_http_status_counts_as_response(running, logger, stub_http):
    report = validator(running, logger, stub_http(502)).validate(5000, PUBLIC_URL)
    assert report.get(PUBLIC_HTTP).passed


def test_remote_ok_public_unreachable_passes_with_warning(running, logger, unreachable_http):
    report = validator(running, logger, unreachable_http).validate(5000, PUBLIC_URL)

    assert report.failed == [PUBLIC_HTTP]
    assert "unreachable from here" in logger.log_path.read_text()


def test_public_ok_remote_fails_passes(running, logger, stub_http):
    running.on("curl", returncode=7)

    report = validator(running, logger, stub_http(200)).validate(5000, PUBLIC_URL)

    assert report.failed == [REMOTE_HTTP]


def test_both_probes_fail(running, logger, unreachable_http):
    running.on("curl", returncode=7, stderr="Connection refused")

    with pytest.raises(ValidationError) as exc:
        validator(running, logger, unreachable_http).validate(5000, PUBLIC_URL)

    assert exc.value.exit_code == 7
    assert "remote-http" in exc.value.context


def test_engine_down_is_fatal_even_when_http_works(fake_ssh, logger, stub_http):
    fake_ssh.on("systemctl is-active", returncode=3)
    fake_ssh.on("docker logs", stdout="last words\n")

    with pytest.raises(EngineServiceDownError) as exc:
        validator(fake_ssh, logger, stub_http(200)).validate(5000, PUBLIC_URL)

    assert exc.value.exit_code == 5
    assert "last words" in exc.value.context


def test_container_missing_is_fatal_even_when_http_works(fake_ssh, logger, stub_http):
    fake_ssh.on("docker ps", stdout="")

    with pytest.raises(ContainerNotRunningError) as exc:
        validator(fake_ssh, logger, stub_http(200)).validate(5000, PUBLIC_URL)

    assert exc.value.exit_code == 6
    assert not fake_ssh.ran("curl")


def test_similarly_named_container_does_not_count(fake_ssh, logger, stub_http):
    fake_ssh.on("docker ps", stdout="app_container_old\n")

    with pytest.raises(ContainerNotRunningError):
        validator(fake_ssh, logger, stub_http(200)).validate(5000, PUBLIC_URL)


def test_remote_probe_targets_loopback_port(running, logger, stub_http):
    validator(running, logger, stub_http(200)).validate(8080, PUBLIC_URL)

    probe = running.ran("curl")[0]
    assert "http://127.0.0.1:8080/" in probe
    assert "--max-time 5" in probe


def run_probe_with_wget(tmp_path, wget_exit):
    """Run the probe where only a wget that exits with wget_exit is on PATH."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    wget = bin_dir / "wget"
    wget.write_text(f"#!/bin/sh\nexit {wget_exit}\n")
    wget.chmod(0o755)
    return subprocess.run(
        ["/bin/sh", "-c", SystemCommands.http_probe(5000, 5)],
        env={"PATH": str(bin_dir)},
        capture_output=True,
    ).returncode


@pytest.mark.skipif(not os.path.exists("/bin/sh"), reason="needs a POSIX shell")
def test_wget_http_error_status_counts_as_response(tmp_path):
    assert run_probe_with_wget(tmp_path, 8) == 0


@pytest.mark.skipif(not os.path.exists("/bin/sh"), reason="needs a POSIX shell")
def test_wget_network_failure_fails_probe(tmp_path):
    assert run_probe_with_wget(tmp_path, 4) != 0
