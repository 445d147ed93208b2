"""
Built-in task catalog.

Declares the development workflow of a multi-service stack: code
generation, dependency installation, tests with coverage, container
lifecycle and cleanup. Per-service tasks are derived from the configured
services, so adding a service to the config adds its tasks.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from .core.exceptions import MuxopsConfigError
from .core.interfaces.executor import ICommandExecutor
from .core.interfaces.presenter import IPresenter
from .core.interfaces.toolchain import CommandLine, IToolchain
from .core.models.service import ServiceDescriptor
from .core.models.task import Step, Task
from .core.settings import MuxopsSettings
from .core.variables import VariableResolver
from .services.codegen import CodegenCoordinator, ImportRewriter
from .services.lifecycle import ComposeManager, ReportManager
from .services.tasks import TaskRegistry

TITLE = "muxops - Management Console"
USAGE = "muxops [task]..."


def service_descriptors(settings: MuxopsSettings) -> list[ServiceDescriptor]:
    """Resolve the configured services against the project root."""
    return [
        ServiceDescriptor.from_config(
            service,
            settings.project,
            settings.project_root,
            settings.coverage.for_language(service.language),
        )
        for service in settings.services
    ]


def print_help(presenter: IPresenter, registry: TaskRegistry) -> None:
    """Print the banner and every described task."""
    presenter.print_header(TITLE, USAGE)
    presenter.print_tasks(registry.list())


def _container_toolchain(language: str) -> IToolchain:
    from .core.container import get_container

    return get_container().get_toolchain(language)


def _join_names(names: list[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


def build_registry(
    settings: MuxopsSettings,
    executor: ICommandExecutor,
    variables: VariableResolver,
    toolchain_for: Callable[[str], IToolchain] | None = None,
    presenter: IPresenter | None = None,
) -> TaskRegistry:
    """
    Declare every built-in task.

    Nothing runs and no variable is resolved here; steps only capture what
    they need to run later.

    Raises:
        MuxopsConfigError: If a service uses a language with no toolchain
        UnknownTaskError, CyclicDependencyError: If the declaration is inconsistent
    """
    toolchain_for = toolchain_for or _container_toolchain
    services = service_descriptors(settings)

    toolchains: dict[str, IToolchain] = {}
    for service in services:
        if service.language not in toolchains:
            try:
                toolchains[service.language] = toolchain_for(service.language)
            except KeyError as e:
                raise MuxopsConfigError(
                    f"No toolchain available for language '{service.language}'",
                    context={"service": service.name},
                    cause=e,
                ) from e

    def lookup(language: str) -> IToolchain:
        return toolchains[language]

    codegen = CodegenCoordinator(executor, variables, toolchain_for=lookup)
    rewriter = ImportRewriter()
    compose = ComposeManager(executor, variables)
    reports = ReportManager(executor, variables, services, toolchain_for=lookup)

    def run_line(line: CommandLine, workdir: Path | None = None) -> None:
        executor.run(line.command, line.args, workdir=workdir, env_overrides=line.env or None)

    registry = TaskRegistry()

    # Code generation
    languages = list(dict.fromkeys(toolchains[s.language].display_name for s in services))
    schema_dir = Path(settings.project_root) / settings.project.proto_dir

    gen_steps = [Step(lambda: [codegen.prepare(s) for s in services], "Preparing directories...")]
    for service in services:
        display = toolchains[service.language].display_name
        gen_steps.append(
            Step(
                lambda s=service: codegen.compile(schema_dir, s),
                f"Generating {display} code ({service.label})...",
            )
        )
    # Packages need relative imports between generated modules
    packaged = [s for s in services if toolchains[s.language].needs_package_marker]
    if packaged:
        gen_steps.append(
            Step(
                lambda: [rewriter.patch_imports(s.gen_dir) for s in packaged],
                "Patching Python imports...",
            )
        )
    registry.register(
        Task(
            "gen-proto",
            description=f"Generate {_join_names(languages)} code from .proto files",
            recipe=gen_steps,
            success_message="Proto generation completed!",
        )
    )

    # Dependencies and tests, one task per service
    for service in services:
        toolchain = toolchains[service.language]
        registry.register(
            Task(
                f"deps-{service.name}",
                description=f"Install {service.label} ({toolchain.display_name}) dependencies",
                recipe=_deps_steps(service, toolchain, variables, run_line),
            )
        )
        registry.register(
            Task(
                f"test-{service.name}",
                description=f"Run {service.label} tests",
                recipe=[
                    Step(
                        lambda s=service: reports.collect_coverage(s),
                        f"[{service.label}] {toolchain.test_message}",
                    )
                ],
            )
        )

    registry.register(
        Task(
            "deps",
            description="Install/Update all dependencies",
            prerequisites=[f"deps-{s.name}" for s in services],
            success_message="All dependencies are ready.",
        )
    )
    registry.register(
        Task(
            "test",
            description="Run tests for all services",
            prerequisites=[f"test-{s.name}" for s in services],
            success_message="All tests passed successfully!",
        )
    )

    # Container lifecycle
    registry.register(
        Task(
            "up",
            description="Start system (background)",
            recipe=[Step(compose.up, "Starting containers...")],
            success_message="System is running! Run 'muxops logs' to monitor.",
        )
    )
    registry.register(
        Task(
            "down",
            description="Stop system",
            recipe=[Step(compose.down, "Stopping containers...")],
        )
    )
    registry.register(
        Task(
            "restart",
            description="Restart system",
            recipe=[Step(compose.restart, "Restarting containers...")],
        )
    )
    registry.register(
        Task("logs", description="Follow container logs", recipe=[Step(compose.logs)])
    )

    # Cleanup
    registry.register(
        Task("clean-proto", recipe=[Step(reports.clean_generated, "Cleaning generated protos...")])
    )
    registry.register(
        Task("clean-reports", recipe=[Step(reports.clean_reports, "Cleaning test reports...")])
    )
    registry.register(
        Task(
            "clean",
            description="Clean all generated files",
            prerequisites=["clean-proto", "clean-reports"],
            success_message="Cleanup completed.",
        )
    )

    # Compiler plugins
    tool_owners = [tc for tc in toolchains.values() if tc.language == "go"]
    if tool_owners:
        registry.register(_tools_task(tool_owners, variables, run_line))

    registry.register(
        Task(
            "help",
            description="Show this help message",
            recipe=[Step(lambda: print_help(_presenter(presenter), registry))],
        )
    )

    registry.validate()
    return registry


def _deps_steps(
    service: ServiceDescriptor,
    toolchain: IToolchain,
    variables: VariableResolver,
    run_line: Callable[[CommandLine, Path | None], None],
) -> list[Step]:
    # Commands are built when the step runs, so tool paths resolve lazily
    def run_all() -> None:
        for line in toolchain.deps_commands(variables):
            run_line(line, service.root)

    return [Step(run_all, f"[{service.label}] {toolchain.deps_message}")]


def _tools_task(
    toolchains: Iterable[IToolchain],
    variables: VariableResolver,
    run_line: Callable[[CommandLine, Path | None], None],
) -> Task:
    toolchains = list(toolchains)

    def ensure_gobin() -> None:
        Path(variables.resolve("gobin")).mkdir(parents=True, exist_ok=True)

    def install() -> None:
        for toolchain in toolchains:
            for line in toolchain.tool_commands(variables):
                run_line(line, None)

    return Task(
        "tools",
        description="Install required Go tools",
        recipe=[
            Step(ensure_gobin, "Installing protobuf tools..."),
            Step(install),
        ],
        success_message="Tools installed!",
    )


def _presenter(presenter: IPresenter | None) -> IPresenter:
    if presenter is not None:
        return presenter
    from .core.di import resolve_or_default
    from .presenters.console import ConsolePresenter

    return resolve_or_default(IPresenter, ConsolePresenter)  # type: ignore[type-abstract]
