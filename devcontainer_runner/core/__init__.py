"""Core lifecycle orchestration for devcontainer-runner."""
