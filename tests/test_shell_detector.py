from pathlib import Path
from unittest.mock import patch

import psutil
import pytest

from sniplias.models import AliasSource
from sniplias.shell_detector import ShellDetector, ShellType


@pytest.fixture
def detector(tmp_path):
    return ShellDetector(home_dir=tmp_path)


class TestDetectCurrentShell:

    @pytest.mark.parametrize("shell_env,expected", [
        ("/bin/zsh", ShellType.ZSH),
        ("/usr/bin/bash", ShellType.BASH),
        ("/usr/local/bin/ZSH", ShellType.ZSH),
    ])
    def test_shell_env(self, detector, shell_env, expected):
        with patch.dict("os.environ", {"SHELL": shell_env}, clear=True):
            assert detector.detect_current_shell() == expected

    def test_passwd_fallback(self, detector):
        with patch.dict("os.environ", {}, clear=True), \
             patch("pwd.getpwuid") as mock_getpwuid:
            mock_getpwuid.return_value.pw_shell = "/bin/zsh"
            assert detector.detect_current_shell() == ShellType.ZSH

    def test_env_var_fallback(self, detector):
        with patch.dict("os.environ", {"SHELL": "/bin/fish", "BASH_VERSION": "5.2"}, clear=True), \
             patch("pwd.getpwuid", side_effect=KeyError):
            assert detector.detect_current_shell() == ShellType.BASH

    def test_parent_process_fallback(self, detector):
        with patch.dict("os.environ", {}, clear=True), \
             patch("pwd.getpwuid", side_effect=KeyError), \
             patch("psutil.Process") as mock_process:
            mock_process.return_value.name.return_value = "-zsh"
            assert detector.detect_current_shell() == ShellType.ZSH

    def test_unknown(self, detector):
        with patch.dict("os.environ", {}, clear=True), \
             patch("pwd.getpwuid", side_effect=KeyError), \
             patch("psutil.Process", side_effect=psutil.NoSuchProcess(1)):
            assert detector.detect_current_shell() == ShellType.UNKNOWN


class TestFindStartupFile:

    def test_zsh_prefers_zshrc(self, detector, tmp_path):
        (tmp_path / ".zshrc").write_text("")
        (tmp_path / ".bashrc").write_text("")
        assert detector.find_startup_file(ShellType.ZSH) == (tmp_path / ".zshrc", AliasSource.ZSH)

    def test_bash_ignores_zshrc(self, detector, tmp_path):
        (tmp_path / ".zshrc").write_text("")
        (tmp_path / ".bash_profile").write_text("")
        assert detector.find_startup_file(ShellType.BASH) == (tmp_path / ".bash_profile", AliasSource.BASH)

    def test_bashrc_before_bash_profile(self, detector, tmp_path):
        (tmp_path / ".bashrc").write_text("")
        (tmp_path / ".bash_profile").write_text("")
        assert detector.find_startup_file(ShellType.UNKNOWN) == (tmp_path / ".bashrc", AliasSource.BASH)

    def test_directories_are_skipped(self, detector, tmp_path):
        (tmp_path / ".bashrc").mkdir()
        assert detector.find_startup_file(ShellType.BASH) is None

    def test_detects_when_no_shell_given(self, detector, tmp_path):
        (tmp_path / ".zshrc").write_text("")
        with patch.object(detector, "detect_current_shell", return_value=ShellType.ZSH):
            assert detector.find_startup_file() == (tmp_path / ".zshrc", AliasSource.ZSH)


def test_default_home_dir():
    with patch("pathlib.Path.home", return_value=Path("/mock/home")):
        assert ShellDetector().home_dir == Path("/mock/home")
