"""Tests for the container lifecycle manager."""

import pytest

from hostdeploy.exceptions import BuildError, ContainerNotRunningError
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.services.container_service import ContainerService, tail_lines


@pytest.fixture
def service(fake_ssh, logger):
    return ContainerService(fake_ssh, logger, NamedArtifacts())


def test_build_uses_fixed_image_and_remote_dir(service, fake_ssh):
    service.build()
    assert fake_ssh.ran("docker build -t app_image app_deploy_dir")


def test_build_failure_raises_with_output_tail(service, fake_ssh):
    output = "\n".join(f"step {i}" for i in range(40))
    fake_ssh.on("docker build", returncode=1, stdout=output)

    with pytest.raises(BuildError) as exc:
        service.build()

    assert exc.value.exit_code == 10
    assert "step 39" in exc.value.context
    assert "step 0\n" not in exc.value.context


def test_run_replaces_existing_container_then_binds_loopback(service, fake_ssh):
    assert service.run(5000) is True

    remove = fake_ssh.commands.index("docker rm -f app_container")
    start = next(i for i, c in enumerate(fake_ssh.commands) if c.startswith("docker run"))
    assert remove < start
    assert "-p 127.0.0.1:5000:5000" in fake_ssh.commands[start]
    assert "--restart unless-stopped" in fake_ssh.commands[start]


def test_run_falls_back_to_all_interfaces(service, fake_ssh, logger):
    fake_ssh.on("127.0.0.1:5000:5000", returncode=125, stderr="address not available")

    assert service.run(5000) is False

    runs = fake_ssh.ran("docker run")
    assert len(runs) == 2
    assert "-p 5000:5000" in runs[1]
    assert len(fake_ssh.ran("docker rm -f app_container")) == 2
    assert "Loopback-only bind failed" in logger.log_path.read_text()


def test_run_failure_captures_container_logs(service, fake_ssh):
    fake_ssh.on("docker run", returncode=125, stderr="port is already allocated")
    fake_ssh.on("docker logs", stdout="Traceback: ImportError\n")

    with pytest.raises(ContainerNotRunningError) as exc:
        service.run(5000)

    assert exc.value.exit_code == 6
    assert "port is already allocated" in exc.value.context
    assert "ImportError" in exc.value.context


def test_redeploy_keeps_exactly_one_container(fake_host, logger):
    fake_host.dirs.add("app_deploy_dir")
    service = ContainerService(fake_host, logger, NamedArtifacts())

    for _ in range(2):
        service.build()
        service.run(5000)

    assert fake_host.containers == {"app_container"}
    assert fake_host.images == {"app_image"}


def test_tail_lines():
    assert tail_lines("a\nb\nc\n", 2) == "b\nc"
