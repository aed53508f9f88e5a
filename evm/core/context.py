"""
Application context — every component, wired once per invocation.

The CLI builds one ``AppContext`` at startup and hands it down through
``click``'s context object.  Tests build their own around mock adapters.
"""

from __future__ import annotations

from dataclasses import dataclass

from evm.adapters.http import HttpClient
from evm.adapters.process import ProcessLocator, PsutilProcessLocator
from evm.adapters.shell import CommandRunner
from evm.core.config.loader import EvmSettings
from evm.core.services.activation import ActivationController
from evm.core.services.download import Downloader
from evm.core.services.install_ops import Installer
from evm.core.services.plugins import PluginProxy
from evm.core.services.registry import VersionRegistry
from evm.core.services.supervisor import ProcessSupervisor


@dataclass
class AppContext:
    settings: EvmSettings
    registry: VersionRegistry
    activation: ActivationController
    installer: Installer
    supervisor: ProcessSupervisor
    plugins: PluginProxy


def build_context(
    settings: EvmSettings,
    *,
    http: HttpClient | None = None,
    locator: ProcessLocator | None = None,
    runner: CommandRunner | None = None,
    **supervisor_kwargs,
) -> AppContext:
    """Wire the services around the given (or the real) adapters."""
    http = http or HttpClient()
    locator = locator or PsutilProcessLocator(settings.process_marker)
    runner = runner or CommandRunner()

    registry = VersionRegistry(settings)
    activation = ActivationController(registry, locator)
    downloader = Downloader(settings, http)

    return AppContext(
        settings=settings,
        registry=registry,
        activation=activation,
        installer=Installer(registry, downloader, activation, locator),
        supervisor=ProcessSupervisor(
            settings, registry, locator, http, runner, **supervisor_kwargs
        ),
        plugins=PluginProxy(registry, runner),
    )
