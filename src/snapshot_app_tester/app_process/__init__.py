"""Application process domain exports."""

from .app_launcher import AppLaunchError, AppProcess, build_launch_command

__all__ = ["AppLaunchError", "AppProcess", "build_launch_command"]
