"""
hostdeploy Constants

Centralized constants for named remote artifacts, timeouts and exit codes.
"""

# Named Remote Artifacts (reconciliation keys)
CONTAINER_NAME = "app_container"
IMAGE_NAME = "app_image"
REMOTE_APP_DIR = "app_deploy_dir"  # relative to the remote login's home
PROXY_SITE_NAME = "app_deploy"

# Nginx Layout
NGINX_SITES_AVAILABLE = "/etc/nginx/sites-available"
NGINX_SITES_ENABLED = "/etc/nginx/sites-enabled"

# Default Parameters
DEFAULT_BRANCH = "main"
DEFAULT_LOCAL_DIR = "."
DEFAULT_PUBLIC_PORT = 80
DEFAULT_LOG_DIR = "logs"

# Proxy Timeouts (seconds)
PROXY_CONNECT_TIMEOUT = 5
PROXY_READ_TIMEOUT = 30

# Validation Timeouts (seconds)
REMOTE_PROBE_TIMEOUT = 5
PUBLIC_PROBE_TIMEOUT = 7

# SSH Configuration
SSH_CONNECT_TIMEOUT = 10
SSH_COMMAND_TIMEOUT = 1800
SSH_CONNECTION_FAILURE_CODE = 255

# Container Diagnostics
CONTAINER_LOG_TAIL = 50

# Required Remote Packages
DOCKER_GROUP = "docker"
DOCKER_APT_PREREQUISITES = ["ca-certificates", "curl", "gnupg", "lsb-release"]
DOCKER_PACKAGES = [
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
]
DOCKER_GPG_URL = "https://download.docker.com/linux/ubuntu/gpg"
DOCKER_APT_REPO = "https://download.docker.com/linux/ubuntu"
DOCKER_KEYRING_DIR = "/etc/apt/keyrings"
DOCKER_KEYRING = "/etc/apt/keyrings/docker.gpg"
DOCKER_SOURCE_LIST = "/etc/apt/sources.list.d/docker.list"
DOCKER_COMPOSE_RELEASE_URL = (
    "https://github.com/docker/compose/releases/latest/download"
)
DOCKER_COMPOSE_BINARY = "/usr/local/bin/docker-compose"

# Build Descriptors (checked in order)
BUILD_DESCRIPTORS = [
    "Dockerfile",
    "docker-compose.yml",
    "docker-compose.yaml",
    "compose.yml",
    "compose.yaml",
]

# Accepted Repository URL Schemes
REPO_URL_PREFIXES = ("https://", "http://", "git@", "ssh://")

# Log Configuration
LOG_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
SECRET_MASK = "****"

# Parameter Files
ENV_TOKEN_KEY = "REPO_TOKEN"

# Exit Codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USER_ABORT = 2
EXIT_UNREACHABLE = 3
EXIT_PROXY_SYNTAX = 4
EXIT_ENGINE_DOWN = 5
EXIT_CONTAINER_NOT_RUNNING = 6
EXIT_VALIDATION_FAILED = 7
EXIT_SOURCE_FAILED = 8
EXIT_PREREQUISITE_FAILED = 9
EXIT_BUILD_FAILED = 10
EXIT_TRANSFER_FAILED = 11
EXIT_PROXY_FAILED = 12
EXIT_CONFIGURATION = 13
EXIT_INTERRUPTED = 130
