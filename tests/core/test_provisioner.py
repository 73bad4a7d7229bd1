"""Tests for image and build provisioning."""

import asyncio
import gzip
import hashlib
import io
import tarfile
from unittest.mock import MagicMock, call, patch

import pytest

from devcontainer_runner.core.container_config import ContainerConfigBuilder
from devcontainer_runner.core.hooks import HookRunner
from devcontainer_runner.core.provisioner import (
    BuildProvisioner,
    ContainerMaterializer,
    ImageProvisioner,
    build_context_archive,
    format_image,
)
from devcontainer_runner.models import DevContainer, RunContext, Settings
from devcontainer_runner.services.exceptions import ContainerCreateError, ExecCommandError

HOOKS = {
    "postCreateCommand": "create",
    "postStartCommand": "start",
    "postAttachCommand": "attach",
}


def _container(status="running", labels=None, container_id="cid123"):
    container = MagicMock()
    container.id = container_id
    container.short_id = container_id[:10]
    container.status = status
    container.labels = labels or {}
    return container


def _materializer(docker_service, project_root, devcontainer, settings=None):
    settings = settings or Settings()
    return ContainerMaterializer(
        docker_service,
        project_root,
        ContainerConfigBuilder(project_root, devcontainer, settings),
        HookRunner(docker_service, devcontainer, settings),
    )


def _hook_lines(docker_service):
    return [c.args[1][-1] for c in docker_service.exec_command.await_args_list]


@pytest.mark.parametrize("image,expected", [
    ("ubuntu", "ubuntu:latest"),
    ("ubuntu:22.04", "ubuntu:22.04"),
    ("localhost:5000/img", "localhost:5000/img:latest"),
    ("localhost:5000/img:1.0", "localhost:5000/img:1.0"),
    ("mcr.microsoft.com/devcontainers/base", "mcr.microsoft.com/devcontainers/base:latest"),
])
def test_format_image(image, expected):
    assert format_image(image) == expected


class TestContainerMaterializer:
    """Test reuse, restart and creation paths."""

    def test_running_container_is_reused(self, mock_docker_service, temp_project_dir):
        devcontainer = DevContainer.model_validate({"image": "alpine", **HOOKS})
        mock_docker_service.find_container.return_value = _container(
            "running", {"devcontainer_application_port": "45000"}
        )
        ctx = RunContext("myproject")

        container_id = asyncio.run(
            _materializer(mock_docker_service, temp_project_dir, devcontainer).materialize("alpine:latest", ctx)
        )

        assert container_id == "cid123"
        assert ctx.application_port == 45000
        mock_docker_service.create_container.assert_not_awaited()
        mock_docker_service.start_container.assert_not_awaited()
        assert _hook_lines(mock_docker_service) == ["attach"]

    def test_stopped_container_is_started(self, mock_docker_service, temp_project_dir):
        devcontainer = DevContainer.model_validate({"image": "alpine", **HOOKS})
        stopped = _container("exited", {"devcontainer_application_port": "45000"})
        mock_docker_service.find_container.return_value = stopped

        asyncio.run(
            _materializer(mock_docker_service, temp_project_dir, devcontainer).materialize(
                "alpine:latest", RunContext("myproject")
            )
        )

        mock_docker_service.start_container.assert_awaited_once_with(stopped)
        mock_docker_service.create_container.assert_not_awaited()
        assert _hook_lines(mock_docker_service) == ["start", "attach"]

    @patch('devcontainer_runner.core.port_allocator._bind_free_port', return_value=45555)
    def test_found_without_label_allocates_port(self, mock_bind, mock_docker_service, temp_project_dir):
        mock_docker_service.find_container.return_value = _container("running")
        ctx = RunContext("myproject")

        asyncio.run(
            _materializer(
                mock_docker_service, temp_project_dir, DevContainer.model_validate({"image": "alpine"})
            ).materialize("alpine:latest", ctx)
        )

        assert ctx.application_port == 45555

    @patch('devcontainer_runner.core.port_allocator._bind_free_port', return_value=45000)
    def test_new_container(self, mock_bind, mock_docker_service, temp_project_dir):
        devcontainer = DevContainer.model_validate({"image": "alpine", **HOOKS})
        created = _container("created")
        mock_docker_service.create_container.return_value = created
        ctx = RunContext("myproject")

        container_id = asyncio.run(
            _materializer(mock_docker_service, temp_project_dir, devcontainer).materialize("alpine:latest", ctx)
        )

        assert container_id == "cid123"
        spec = mock_docker_service.create_container.await_args.args[0]
        assert spec.name == "myproject_devcontainer_alpine_1"
        assert spec.labels["devcontainer_application_port"] == "45000"
        mock_docker_service.start_container.assert_awaited_once_with(created)
        assert _hook_lines(mock_docker_service) == ["create", "start", "attach"]

    @patch('devcontainer_runner.core.port_allocator._bind_free_port', return_value=45000)
    def test_name_probing_skips_taken_names(self, mock_bind, mock_docker_service, temp_project_dir):
        mock_docker_service.container_name_exists.side_effect = [True, True, False]
        mock_docker_service.create_container.return_value = _container("created")

        asyncio.run(
            _materializer(
                mock_docker_service, temp_project_dir, DevContainer.model_validate({"image": "alpine"})
            ).materialize("alpine:latest", RunContext("myproject"))
        )

        assert mock_docker_service.container_name_exists.await_args_list == [
            call("myproject_devcontainer_alpine_1"),
            call("myproject_devcontainer_alpine_2"),
            call("myproject_devcontainer_alpine_3"),
        ]
        assert mock_docker_service.create_container.await_args.args[0].name == "myproject_devcontainer_alpine_3"

    @patch('devcontainer_runner.core.port_allocator._bind_free_port', return_value=45000)
    def test_name_probing_falls_back_to_unnamed(self, mock_bind, mock_docker_service, temp_project_dir):
        mock_docker_service.container_name_exists.return_value = True
        mock_docker_service.create_container.return_value = _container("created")

        asyncio.run(
            _materializer(
                mock_docker_service, temp_project_dir, DevContainer.model_validate({"image": "alpine"})
            ).materialize("alpine:latest", RunContext("myproject"))
        )

        assert mock_docker_service.container_name_exists.await_count == 20
        assert mock_docker_service.create_container.await_args.args[0].name is None

    @patch('devcontainer_runner.core.port_allocator._bind_free_port', return_value=45000)
    def test_hook_failure_propagates(self, mock_bind, mock_docker_service, temp_project_dir):
        devcontainer = DevContainer.model_validate({"image": "alpine", **HOOKS})
        mock_docker_service.create_container.return_value = _container("created")
        mock_docker_service.exec_command.return_value = 1

        with pytest.raises(ExecCommandError):
            asyncio.run(
                _materializer(mock_docker_service, temp_project_dir, devcontainer).materialize(
                    "alpine:latest", RunContext("myproject")
                )
            )

        assert _hook_lines(mock_docker_service) == ["create"]


class TestImageProvisioner:
    """Test the image strategy end to end against a mocked daemon."""

    @patch('devcontainer_runner.core.port_allocator._bind_free_port', return_value=45000)
    def test_alpine_with_forward_port(self, mock_bind, mock_docker_service, temp_project_dir):
        devcontainer = DevContainer.model_validate({"image": "alpine", "forwardPorts": [8080]})
        mock_docker_service.create_container.return_value = _container("created")
        provisioner = ImageProvisioner(
            mock_docker_service, devcontainer, _materializer(mock_docker_service, temp_project_dir, devcontainer)
        )

        asyncio.run(provisioner.provision(RunContext("myproject")))

        mock_docker_service.pull_image.assert_awaited_once_with("alpine:latest")
        spec = mock_docker_service.create_container.await_args.args[0]
        assert spec.image == "alpine:latest"
        assert spec.ports == {
            "8080/tcp": ("0.0.0.0", "8080"),
            "45000/tcp": ("0.0.0.0", "45000"),
        }
        assert spec.labels["devcontainer"] == "true"
        assert spec.labels["devcontainer_name"] == "myproject"
        assert spec.command == ["/bin/sh", "-c", "while sleep 1000; do :; done"]
        mock_docker_service.exec_command.assert_not_awaited()


class TestBuildProvisioner:
    """Test the build strategy."""

    def _write_dockerfile(self, project_dir, content=b"FROM alpine\n"):
        (project_dir / ".devcontainer" / "Dockerfile").write_bytes(content)
        return content

    def test_image_tag_from_dockerfile_hash(self, mock_docker_service, temp_project_dir):
        content = self._write_dockerfile(temp_project_dir)
        devcontainer = DevContainer.model_validate({"build": {"dockerfile": "Dockerfile"}})
        provisioner = BuildProvisioner(
            mock_docker_service, devcontainer, temp_project_dir / ".devcontainer", MagicMock()
        )

        expected = "devcontainer_" + hashlib.sha1(content).hexdigest()[:10]
        assert provisioner.image_tag() == expected

    def test_unreadable_dockerfile(self, mock_docker_service, temp_project_dir):
        devcontainer = DevContainer.model_validate({"build": {"dockerfile": "Missing.Dockerfile"}})
        provisioner = BuildProvisioner(
            mock_docker_service, devcontainer, temp_project_dir / ".devcontainer", MagicMock()
        )

        with pytest.raises(ContainerCreateError, match="Could not read docker file"):
            provisioner.image_tag()

    def test_build_context_archive(self, temp_project_dir):
        self._write_dockerfile(temp_project_dir)
        archive = build_context_archive(temp_project_dir / ".devcontainer")

        with tarfile.open(fileobj=io.BytesIO(gzip.decompress(archive.read()))) as tar:
            names = tar.getnames()

        assert "devcontainer/Dockerfile" in names

    @patch('devcontainer_runner.core.port_allocator._bind_free_port', return_value=45000)
    def test_provision_builds_then_materializes(self, mock_bind, mock_docker_service, temp_project_dir):
        content = self._write_dockerfile(temp_project_dir)
        devcontainer = DevContainer.model_validate({
            "build": {"dockerfile": "Dockerfile", "args": {"VARIANT": "3"}, "target": "dev"}
        })
        mock_docker_service.create_container.return_value = _container("created")
        provisioner = BuildProvisioner(
            mock_docker_service,
            devcontainer,
            temp_project_dir / ".devcontainer",
            _materializer(mock_docker_service, temp_project_dir, devcontainer),
        )

        asyncio.run(provisioner.provision(RunContext("myproject")))

        tag = "devcontainer_" + hashlib.sha1(content).hexdigest()[:10]
        build_call = mock_docker_service.build_image.await_args
        assert build_call.kwargs["dockerfile"] == "devcontainer/Dockerfile"
        assert build_call.kwargs["tag"] == tag
        assert build_call.kwargs["buildargs"] == {"VARIANT": "3"}
        assert build_call.kwargs["target"] == "dev"
        mock_docker_service.pull_image.assert_not_awaited()
        assert mock_docker_service.create_container.await_args.args[0].image == tag
