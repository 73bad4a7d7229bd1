"""Constants used throughout devcontainer-runner."""


# Project layout
DEVCONTAINER_DIR_NAME = ".devcontainer"
DEFAULT_DESCRIPTOR_NAME = "devcontainer.json"
SETTINGS_FILE_NAME = "devcontainer.json"

# Container defaults
DEFAULT_WORKSPACE_TARGET = "/workspace"
KEEP_ALIVE_COMMAND = ["/bin/sh", "-c", "while sleep 1000; do :; done"]
DEFAULT_IMAGE_TAG = "latest"
PORT_HOST_IP = "0.0.0.0"

# Identity labels
LABEL_DEVCONTAINER = "devcontainer"
LABEL_NAME = "devcontainer_name"
LABEL_APPLICATION_PORT = "devcontainer_application_port"
COMPOSE_PROJECT_LABEL = "com.docker.compose.project"
COMPOSE_SERVICE_LABEL = "com.docker.compose.service"

# Environment injected into the container and the companion application
ENV_PROJECT = "DEVCONTAINER_PROJECT"
ENV_APPLICATION_PORT = "DEVCONTAINER_APPLICATION_PORT"

# Container naming
CONTAINER_NAME_MARKER = "devcontainer"
MAX_NAME_ATTEMPTS = 20

# Built images
BUILD_IMAGE_PREFIX = "devcontainer_"
BUILD_HASH_LENGTH = 10
BUILD_CONTEXT_PREFIX = "devcontainer"

# Compose
DEFAULT_COMPOSE_BIN = "docker-compose"
COMPOSE_OVERRIDE_SUFFIX = "-compose.yml"
