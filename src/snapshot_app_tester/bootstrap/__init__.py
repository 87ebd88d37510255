"""Browser bootstrap domain exports."""

from .browser_bootstrap import BootstrapError, install_browser

__all__ = ["BootstrapError", "install_browser"]
