import pytest
from click.testing import CliRunner
from unittest.mock import AsyncMock, MagicMock
import tempfile
from pathlib import Path

from devcontainer_runner.models import DevContainer, Settings


@pytest.fixture
def cli_runner():
    """Provides a Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def mock_docker_client():
    """Provides a mocked docker-py client."""
    mock_client = MagicMock()
    mock_client.ping.return_value = True
    mock_client.containers.list.return_value = []
    return mock_client


@pytest.fixture
def mock_docker_service():
    """Provides a DockerService double with async methods."""
    service = MagicMock()
    service.find_container = AsyncMock(return_value=None)
    service.container_name_exists = AsyncMock(return_value=False)
    service.pull_image = AsyncMock()
    service.build_image = AsyncMock()
    service.create_container = AsyncMock()
    service.start_container = AsyncMock()
    service.stop_container = AsyncMock()
    service.exec_command = AsyncMock(return_value=0)
    service.wait_container = AsyncMock()
    return service


@pytest.fixture
def temp_project_dir():
    """Creates a temporary project directory with basic structure."""
    with tempfile.TemporaryDirectory() as tmpdir:
        project_path = Path(tmpdir) / "myproject"
        project_path.mkdir()

        (project_path / "src").mkdir()
        (project_path / "src" / "main.py").write_text("print('Hello, World!')")
        (project_path / ".devcontainer").mkdir()

        yield project_path


@pytest.fixture
def write_descriptor(temp_project_dir):
    """Writes a devcontainer.json into the temporary project."""
    def _write(content: str, name: str = "devcontainer.json") -> Path:
        path = temp_project_dir / ".devcontainer" / name
        path.write_text(content)
        return path
    return _write


@pytest.fixture
def image_devcontainer():
    """Provides a minimal image-mode descriptor."""
    return DevContainer.model_validate({"image": "alpine"})


@pytest.fixture
def empty_settings():
    """Provides empty user settings."""
    return Settings()


@pytest.fixture(autouse=True)
def isolated_user_config(monkeypatch, tmp_path):
    """Point the user settings lookup at an empty directory for all tests."""
    config_dir = tmp_path / "xdg-config"
    config_dir.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    return config_dir


@pytest.fixture
def isolated_cli_runner(cli_runner):
    """Provides a CLI runner with isolated filesystem."""
    with cli_runner.isolated_filesystem():
        yield cli_runner
