from .step_10_install_shell import InstallShellStep
from .step_20_install_dependencies import InstallDependenciesStep
from .step_30_install_framework import InstallFrameworkStep
from .step_40_install_theme import InstallThemeStep
from .step_50_install_plugins import InstallPluginsStep
from .step_60_install_assets import InstallAssetsStep
from .step_70_install_version_manager import InstallVersionManagerStep
from .step_80_default_shell import SetDefaultShellStep

__all__ = [
    "InstallShellStep",
    "InstallDependenciesStep",
    "InstallFrameworkStep",
    "InstallThemeStep",
    "InstallPluginsStep",
    "InstallAssetsStep",
    "InstallVersionManagerStep",
    "SetDefaultShellStep",
]
