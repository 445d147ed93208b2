"""
Import rewriter for generated gRPC modules.

grpcio-tools emits absolute imports (``import foo_pb2``) in ``*_grpc.py``
files, which break once the bindings live inside a package. This rewrites
them to relative imports in place.
"""

from __future__ import annotations

import re
from pathlib import Path

from ...core.interfaces.logger import ILogger

GRPC_MODULE_GLOB = "*_grpc.py"

# Anchored so an already rewritten `from . import x_pb2` never matches again
_ABSOLUTE_PB2_IMPORT = re.compile(
    rb"^(?P<indent>[ \t]*)import (?P<module>[A-Za-z0-9_]+_pb2)\b(?P<rest>[^\r\n]*)",
    re.MULTILINE,
)


class ImportRewriter:
    """
    Rewrites absolute ``*_pb2`` imports in generated gRPC modules.

    Works on bytes so line endings and encodings survive untouched.
    """

    def __init__(self, logger: ILogger | None = None) -> None:
        self._logger = logger

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ...core.di import resolve_or_default
            from ..logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    @staticmethod
    def rewrite(source: bytes) -> bytes:
        """Return source with every absolute pb2 import made relative."""
        return _ABSOLUTE_PB2_IMPORT.sub(rb"\g<indent>from . import \g<module>\g<rest>", source)

    def patch_imports(self, output_dir: Path | str) -> list[Path]:
        """
        Patch every gRPC module under output_dir.

        Args:
            output_dir: Directory holding generated bindings

        Returns:
            Files that were modified, sorted
        """
        root = Path(output_dir)
        if not root.is_dir():
            self.logger.debug("Nothing to patch, %s does not exist", root)
            return []

        changed: list[Path] = []
        for path in sorted(root.rglob(GRPC_MODULE_GLOB)):
            if not path.is_file():
                continue
            original = path.read_bytes()
            patched = self.rewrite(original)
            if patched != original:
                path.write_bytes(patched)
                changed.append(path)
                self.logger.debug("Patched imports in %s", path)

        if not changed:
            self.logger.debug("No imports to patch under %s", root)
        return changed
