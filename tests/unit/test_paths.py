"""Unit tests for application data paths."""

from ftps_client.config import paths


class TestPaths:
    """Tests for platform path helpers."""

    def test_linux_uses_xdg_config_home(self, tmp_path, monkeypatch):
        """XDG_CONFIG_HOME is honoured and the directory created."""
        monkeypatch.setattr(paths.sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        app_dir = paths.get_app_data_dir()

        assert app_dir == tmp_path / "ftps-client"
        assert app_dir.is_dir()

    def test_windows_uses_appdata(self, tmp_path, monkeypatch):
        """APPDATA is the base on Windows."""
        monkeypatch.setattr(paths.sys, "platform", "win32")
        monkeypatch.setenv("APPDATA", str(tmp_path))

        assert paths.get_app_data_dir() == tmp_path / "ftps-client"

    def test_settings_and_log_paths(self, tmp_path, monkeypatch):
        """Settings and log file live under the app directory."""
        monkeypatch.setattr(paths.sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert paths.get_settings_path() == tmp_path / "ftps-client" / "settings.json"
        log_file = paths.get_log_file_path()
        assert log_file == tmp_path / "ftps-client" / "logs" / "ftps_client.log"
        assert log_file.parent.is_dir()
