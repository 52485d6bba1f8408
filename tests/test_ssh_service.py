"""Tests for the remote command channel."""

import subprocess

import pytest

from hostdeploy.exceptions import ConnectivityError
from hostdeploy.services import ssh_service
from hostdeploy.services.ssh_service import SSHService


class Completed:
    def __init__(self, returncode, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


@pytest.fixture
def scripted_run(monkeypatch):
    """Replace subprocess.run; results are consumed in order."""
    calls = []
    results = []

    def fake_run(argv, **kwargs):
        calls.append((argv, kwargs))
        result = results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(ssh_service.subprocess, "run", fake_run)
    return calls, results


def test_execute_builds_ssh_argv(ssh_config, logger, scripted_run):
    calls, results = scripted_run
    results.append(Completed(0, "ok\n"))

    result = SSHService(ssh_config, logger).execute("uptime")

    argv = calls[0][0]
    assert argv[0] == "ssh"
    assert "StrictHostKeyChecking=accept-new" in argv
    assert "BatchMode=yes" in argv
    assert argv[-2:] == ["ubuntu@203.0.113.10", "uptime"]
    assert result.is_success
    assert result.stdout == "ok\n"


def test_remote_failure_is_returned(ssh_config, logger, scripted_run):
    _, results = scripted_run
    results.append(Completed(1, "", "no such file"))

    result = SSHService(ssh_config, logger).execute("cat /missing")

    assert result.is_failure
    assert result.returncode == 1


def test_exit_255_raises_connectivity_error(ssh_config, logger, scripted_run):
    _, results = scripted_run
    results.append(Completed(255, "", "Permission denied (publickey)."))

    with pytest.raises(ConnectivityError) as exc:
        SSHService(ssh_config, logger).execute("true")

    assert exc.value.exit_code == 3
    assert "publickey" in exc.value.context


def test_timeout_raises_connectivity_error(ssh_config, logger, scripted_run):
    _, results = scripted_run
    results.append(subprocess.TimeoutExpired("ssh", 5))

    with pytest.raises(ConnectivityError):
        SSHService(ssh_config, logger).execute("sleep 100", timeout=5)


def test_execute_as_root_wraps_with_sudo(ssh_config, logger, scripted_run):
    calls, results = scripted_run
    results.append(Completed(0))

    SSHService(ssh_config, logger).execute_as_root("nginx -t")

    assert calls[0][0][-1] == "sudo -n sh -c 'nginx -t'"


def test_docker_retries_with_sudo_on_permission_denied(ssh_config, logger, scripted_run):
    calls, results = scripted_run
    results.append(
        Completed(1, "", "Got permission denied while trying to connect to the Docker daemon socket")
    )
    results.append(Completed(0))

    result = SSHService(ssh_config, logger).execute_docker("docker ps")

    assert result.is_success
    assert [c[0][-1] for c in calls] == ["docker ps", "sudo -n sh -c 'docker ps'"]


def test_docker_other_failure_not_retried(ssh_config, logger, scripted_run):
    calls, results = scripted_run
    results.append(Completed(1, "", "No such image"))

    result = SSHService(ssh_config, logger).execute_docker("docker rmi -f app_image")

    assert result.is_failure
    assert len(calls) == 1


def test_input_text_is_passed_to_stdin(ssh_config, logger, scripted_run):
    calls, results = scripted_run
    results.append(Completed(0))

    SSHService(ssh_config, logger).execute("tee /tmp/x", input_text="hello")

    assert calls[0][1]["input"] == "hello"


def test_commands_are_written_to_run_log(ssh_config, logger, scripted_run):
    _, results = scripted_run
    results.append(Completed(0, "line one\n", "warn\n"))

    SSHService(ssh_config, logger).execute("uptime")

    text = logger.log_path.read_text()
    assert "DEBUG: Executing: [ubuntu@203.0.113.10] uptime" in text
    assert "  [stdout] line one" in text
    assert "  [stderr] warn" in text
