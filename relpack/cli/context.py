from __future__ import annotations

from dataclasses import dataclass

from relpack.core.config import Config, ConfigError, load_config
from relpack.core.project import Project, detect_project
from relpack.core.result import Err
from relpack.output.console import ConsoleProtocol, RichConsole
from relpack.plugins.registry import PluginRegistry


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    config: Config | None
    registry: PluginRegistry
    console: ConsoleProtocol
    config_error: ConfigError | None = None


def build_context(*, verbose: bool = False) -> CLIContext:
    console = RichConsole(verbose=verbose)
    project = detect_project()

    config: Config | None = None
    config_error: ConfigError | None = None
    if project.config_path.exists():
        config_result = load_config(project.config_path)
        if isinstance(config_result, Err):
            config_error = config_result.error
            console.warning(f"Ignoring {project.config_path}: {config_error.message}")
        else:
            config = config_result.value

    if config is not None:
        registry = PluginRegistry.from_config(config.plugins, root=project.root, console=console)
    else:
        registry = PluginRegistry(console=console)

    return CLIContext(
        project=project,
        config=config,
        registry=registry,
        console=console,
        config_error=config_error,
    )
