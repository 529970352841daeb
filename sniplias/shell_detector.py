"""Shell detection and startup file discovery"""

import os
import pwd
from pathlib import Path
from typing import Optional, List, Tuple
from enum import Enum

import psutil

from sniplias.models import AliasSource


class ShellType(Enum):
    """Shells sniplias knows about"""

    BASH = "bash"
    ZSH = "zsh"
    UNKNOWN = "unknown"


class ShellDetector:
    """Detect the user's shell and the startup file aliases belong in"""

    # Candidate startup files, in priority order
    BASH_CANDIDATES = [".bashrc", ".bash_profile"]
    ZSH_CANDIDATES = [".zshrc"]

    def __init__(self, home_dir: Optional[Path] = None):
        """Initialize detector with home directory"""
        self.home_dir = home_dir or Path.home()

    @staticmethod
    def _classify(shell_path: str) -> ShellType:
        shell_path = shell_path.lower()
        if "zsh" in shell_path:
            return ShellType.ZSH
        if "bash" in shell_path:
            return ShellType.BASH
        return ShellType.UNKNOWN

    def detect_current_shell(self) -> ShellType:
        """Detect the user's preferred shell"""
        # Method 1: SHELL environment variable
        shell_env = os.environ.get("SHELL", "")
        if shell_env:
            shell = self._classify(shell_env)
            if shell is not ShellType.UNKNOWN:
                return shell

        # Method 2: login shell from the passwd database
        try:
            shell = self._classify(pwd.getpwuid(os.getuid()).pw_shell)
            if shell is not ShellType.UNKNOWN:
                return shell
        except (KeyError, OSError):
            pass

        # Method 3: shell-specific environment variables
        if os.environ.get("ZSH_NAME") or os.environ.get("ZSH_VERSION"):
            return ShellType.ZSH
        if os.environ.get("BASH_VERSION"):
            return ShellType.BASH

        # Method 4: parent process name
        try:
            parent_name = psutil.Process(os.getppid()).name().lower().lstrip("-")
            if parent_name in ("zsh", "bash"):
                return ShellType(parent_name)
        except psutil.Error:
            pass

        return ShellType.UNKNOWN

    def candidate_files(self, shell_type: ShellType) -> List[Tuple[Path, AliasSource]]:
        """Startup files to try for a shell, most preferred first"""
        bash = [(self.home_dir / name, AliasSource.BASH) for name in self.BASH_CANDIDATES]
        if shell_type is ShellType.ZSH:
            zsh = [(self.home_dir / name, AliasSource.ZSH) for name in self.ZSH_CANDIDATES]
            return zsh + bash
        return bash

    def find_startup_file(
        self, shell_type: Optional[ShellType] = None
    ) -> Optional[Tuple[Path, AliasSource]]:
        """Return the first existing startup file and the shell it belongs to"""
        if shell_type is None:
            shell_type = self.detect_current_shell()

        for path, source in self.candidate_files(shell_type):
            if path.is_file():
                return path, source
        return None
