"""
Named Remote Artifacts

Fixed identifiers of everything a deploy run creates on the remote host.
Every stage that creates one of them removes the previous one under the
same name first.
"""

from dataclasses import dataclass

from hostdeploy.constants import (
    CONTAINER_NAME,
    IMAGE_NAME,
    NGINX_SITES_AVAILABLE,
    NGINX_SITES_ENABLED,
    PROXY_SITE_NAME,
    REMOTE_APP_DIR,
)


@dataclass(frozen=True)
class NamedArtifacts:
    container_name: str = CONTAINER_NAME
    image_name: str = IMAGE_NAME
    remote_dir: str = REMOTE_APP_DIR
    proxy_site: str = PROXY_SITE_NAME

    @property
    def proxy_available_path(self) -> str:
        return f"{NGINX_SITES_AVAILABLE}/{self.proxy_site}"

    @property
    def proxy_enabled_path(self) -> str:
        return f"{NGINX_SITES_ENABLED}/{self.proxy_site}"
