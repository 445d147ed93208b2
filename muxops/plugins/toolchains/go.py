"""
Go toolchain.

protoc with the protoc-gen-go / protoc-gen-go-grpc plugins, `go mod` for
dependencies and `go test` for coverage.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from ...core.interfaces.toolchain import CommandLine
from .base import BaseToolchain

# go install targets for the protoc plugins
PLUGIN_PACKAGES = (
    "google.golang.org/protobuf/cmd/protoc-gen-go@latest",
    "google.golang.org/grpc/cmd/protoc-gen-go-grpc@latest",
)


class GoToolchain(BaseToolchain):
    """Go services (e.g. the gateway)."""

    language = "go"
    display_name = "Go"
    deps_message = "Downloading Go modules..."
    test_message = "Running Go tests..."

    def codegen_command(
        self,
        variables,
        schema_dir: Path,
        out_dir: Path,
        schema_files: Sequence[Path],
    ) -> CommandLine:
        gobin = Path(variables.resolve("gobin"))
        return CommandLine(
            command=variables.resolve("protoc"),
            args=(
                f"--plugin=protoc-gen-go={gobin / 'protoc-gen-go'}",
                f"--plugin=protoc-gen-go-grpc={gobin / 'protoc-gen-go-grpc'}",
                self.include_flag(schema_dir),
                f"--go_out={out_dir}",
                "--go_opt=paths=source_relative",
                f"--go-grpc_out={out_dir}",
                "--go-grpc_opt=paths=source_relative",
                *self.schema_args(schema_files),
            ),
        )

    def deps_commands(self, variables) -> list[CommandLine]:
        go = variables.resolve("go")
        return [
            CommandLine(go, ("mod", "tidy")),
            CommandLine(go, ("mod", "download")),
        ]

    def test_command(self, variables, service, report_path: str) -> CommandLine:
        return CommandLine(
            variables.resolve("go"),
            (
                "test",
                "./...",
                "-v",
                "-count=1",
                "-coverpkg=./...",
                f"-coverprofile={report_path}",
                "-covermode=atomic",
            ),
        )

    def tool_commands(self, variables) -> list[CommandLine]:
        go = variables.resolve("go")
        env = {"GOBIN": variables.resolve("gobin")}
        return [CommandLine(go, ("install", package), env=env) for package in PLUGIN_PACKAGES]
