"""Tests for the PlantUML syntax checker adapter."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from uml_index.core.errors import SyntaxCheckError
from uml_index.ingest.checker import PlantUMLSyntaxChecker, parse_syntax_output


def test_parse_valid_output() -> None:
    result = parse_syntax_output("SEQUENCE\n(2 participants)\n")
    assert result.valid
    assert result.has_diagram
    assert result.category == "SEQUENCE"
    assert result.message == "(2 participants)"


def test_parse_error_output() -> None:
    result = parse_syntax_output("ERROR\n3\nSyntax Error?\n")
    assert not result.valid
    assert not result.has_diagram
    assert result.error_line == 3
    assert result.message == "Syntax Error?"


@pytest.mark.parametrize("output", ["EMPTY\n", "UNKNOWN\n(nothing)"])
def test_parse_without_diagram(output: str) -> None:
    result = parse_syntax_output(output)
    assert result.valid
    assert not result.has_diagram


def test_check_runs_jar_with_source_on_stdin(tmp_path: Path) -> None:
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=b"DESCRIPTION\n(3 entities)\n", stderr=b"")
    checker = PlantUMLSyntaxChecker(tmp_path / "plantuml.jar", java_bin="java")
    with patch("uml_index.ingest.checker.subprocess.run", return_value=completed) as run:
        result = checker.check("@startuml\nactor A\n@enduml", timeout=5)
    assert result.category == "DESCRIPTION"
    args, kwargs = run.call_args
    assert args[0][-1] == "-syntax"
    assert kwargs["input"] == b"@startuml\nactor A\n@enduml"
    assert kwargs["timeout"] == 5


def test_check_wraps_launch_failures(tmp_path: Path) -> None:
    checker = PlantUMLSyntaxChecker(tmp_path / "plantuml.jar", java_bin="/nonexistent/java")
    with patch("uml_index.ingest.checker.subprocess.run", side_effect=FileNotFoundError("java")):
        with pytest.raises(SyntaxCheckError):
            checker.check("@startuml\n@enduml")


def test_check_without_output_is_a_failure(tmp_path: Path) -> None:
    completed = subprocess.CompletedProcess(args=[], returncode=1, stdout=b"", stderr=b"Unable to access jarfile")
    checker = PlantUMLSyntaxChecker(tmp_path / "plantuml.jar")
    with patch("uml_index.ingest.checker.subprocess.run", return_value=completed):
        with pytest.raises(SyntaxCheckError, match="jarfile"):
            checker.check("@startuml\n@enduml")
