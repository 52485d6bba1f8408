"""Tests for the reverse proxy configurator."""

import pytest

from hostdeploy.exceptions import ProxyError, ProxySyntaxError
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.services.proxy_service import ProxyService

AVAILABLE = "/etc/nginx/sites-available/app_deploy"
ENABLED = "/etc/nginx/sites-enabled/app_deploy"


@pytest.fixture
def service(fake_ssh, logger):
    return ProxyService(fake_ssh, logger, NamedArtifacts())


def test_render_site():
    site = ProxyService.render_site("203.0.113.10", 5000, 80)

    assert "listen 80;" in site
    assert "listen [::]:80;" in site
    assert "server_name 203.0.113.10;" in site
    assert "proxy_pass http://127.0.0.1:5000;" in site
    assert "proxy_connect_timeout 5s;" in site
    assert "proxy_read_timeout 30s;" in site
    assert "proxy_set_header X-Forwarded-For" in site


def test_configure_writes_links_checks_then_reloads(service, fake_ssh):
    service.configure("203.0.113.10", 5000, 80)

    order = [
        next(i for i, c in enumerate(fake_ssh.commands) if marker in c)
        for marker in (f"tee {AVAILABLE}", "ln -sfn", "nginx -t", "systemctl reload nginx")
    ]
    assert order == sorted(order)

    written = fake_ssh.inputs[next(c for c in fake_ssh.commands if "tee" in c)]
    assert "proxy_pass http://127.0.0.1:5000;" in written
    assert fake_ssh.ran(f"ln -sfn {AVAILABLE} {ENABLED}")


def test_syntax_failure_never_reloads(service, fake_ssh):
    fake_ssh.on("nginx -t", returncode=1, stderr="nginx: [emerg] unexpected end of file")

    with pytest.raises(ProxySyntaxError) as exc:
        service.configure("203.0.113.10", 5000, 80)

    assert exc.value.exit_code == 4
    assert "emerg" in exc.value.context
    assert not fake_ssh.ran("systemctl reload nginx")
    assert not fake_ssh.ran("systemctl restart nginx")


def test_reload_failure_falls_back_to_restart(service, fake_ssh):
    fake_ssh.on("systemctl reload nginx", returncode=1)

    service.configure("203.0.113.10", 5000, 80)

    assert fake_ssh.ran("systemctl restart nginx")


def test_reload_and_restart_failure_raises(service, fake_ssh):
    fake_ssh.on("systemctl reload nginx", returncode=1)
    fake_ssh.on("systemctl restart nginx", returncode=1, stderr="Job failed")

    with pytest.raises(ProxyError) as exc:
        service.configure("203.0.113.10", 5000, 80)

    assert exc.value.exit_code == 12


def test_write_failure_raises(service, fake_ssh):
    fake_ssh.on("tee", returncode=1, stderr="sudo: a password is required")

    with pytest.raises(ProxyError, match="Could not write"):
        service.configure("203.0.113.10", 5000, 80)

    assert not fake_ssh.ran("nginx -t")


def test_rewrite_is_idempotent(fake_host, logger):
    service = ProxyService(fake_host, logger, NamedArtifacts())

    service.configure("203.0.113.10", 5000, 80)
    first = dict(fake_host.files)
    service.configure("203.0.113.10", 5000, 80)

    assert fake_host.files == first
    assert fake_host.proxy_files == {AVAILABLE, ENABLED}


def test_remove_site(service, fake_ssh):
    assert service.remove_site() is True
    assert fake_ssh.ran(f"rm -f -- {ENABLED} {AVAILABLE}")


def test_reload_if_valid_skips_reload_on_bad_config(service, fake_ssh):
    fake_ssh.on("nginx -t", returncode=1)

    assert service.reload_if_valid() is False
    assert not fake_ssh.ran("systemctl reload nginx")
