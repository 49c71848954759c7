"""Syntax checking collaborator."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from uml_index.core.errors import SyntaxCheckError
from uml_index.core.logging import get_logger

logger = get_logger(__name__)

_NO_DIAGRAM_CATEGORIES = frozenset({"", "EMPTY", "UNKNOWN"})


@dataclass(slots=True)
class CheckResult:
    valid: bool
    category: str
    has_diagram: bool
    error_line: int | None = None
    message: str | None = None


class SyntaxChecker(Protocol):
    def check(self, source: str, timeout: float | None = None) -> CheckResult:
        """Validate ``source``; raise SyntaxCheckError only if the call itself fails."""
        ...


class PlantUMLSyntaxChecker:
    """Runs ``plantuml.jar -syntax`` with the source on stdin."""

    def __init__(self, jar_path: Path, java_bin: str = "java") -> None:
        self.jar_path = jar_path
        self.java_bin = java_bin

    def check(self, source: str, timeout: float | None = None) -> CheckResult:
        command = [self.java_bin, "-Djava.awt.headless=true", "-jar", str(self.jar_path), "-syntax"]
        try:
            proc = subprocess.run(
                command,
                input=source.encode("utf-8"),
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise SyntaxCheckError(f"syntax check could not run: {exc}") from exc
        output = proc.stdout.decode("utf-8", errors="replace")
        if not output.strip():
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            raise SyntaxCheckError(f"syntax check produced no output (exit {proc.returncode}): {stderr}")
        return parse_syntax_output(output)


def parse_syntax_output(output: str) -> CheckResult:
    """Parse the text printed by ``plantuml -syntax``.

    Errors look like ``ERROR\\n<line>\\n<message>``; anything else starts with
    the diagram category followed by an optional description.
    """
    lines = [line.strip() for line in output.strip().splitlines()]
    head = lines[0].upper() if lines else ""
    if head == "ERROR":
        error_line: int | None = None
        if len(lines) > 1:
            try:
                error_line = int(lines[1])
            except ValueError:
                logger.debug("Unparseable error line in syntax output: %s", lines[1])
        message = "\n".join(lines[2:]) or None
        return CheckResult(valid=False, category="", has_diagram=False, error_line=error_line, message=message)
    message = "\n".join(lines[1:]) or None
    return CheckResult(
        valid=True,
        category=head,
        has_diagram=head not in _NO_DIAGRAM_CATEGORIES,
        message=message,
    )


__all__ = ["CheckResult", "SyntaxChecker", "PlantUMLSyntaxChecker", "parse_syntax_output"]
