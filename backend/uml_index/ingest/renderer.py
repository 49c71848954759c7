"""Rendering collaborator and the three-way rendering pipeline."""

from __future__ import annotations

import base64
import subprocess
import zlib
from pathlib import Path
from typing import Protocol

import requests

from uml_index.core.errors import RenderError
from uml_index.models.entities import RenderedDiagram

_B64_ALPHABET = b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_PLANTUML_ALPHABET = b"0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"
_TO_PLANTUML = bytes.maketrans(_B64_ALPHABET, _PLANTUML_ALPHABET)


class Renderer(Protocol):
    def render_svg(self, source: str, timeout: float | None = None) -> str: ...

    def render_png(self, source: str, timeout: float | None = None) -> bytes: ...

    def render_ascii(self, source: str, timeout: float | None = None) -> str: ...


def encode_plantuml(source: str) -> str:
    """Encode ``source`` for a PlantUML server URL (raw deflate + PlantUML base64)."""
    compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
    deflated = compressor.compress(source.encode("utf-8")) + compressor.flush()
    # PlantUML pads the last group with zero bits instead of '='.
    return base64.b64encode(deflated).replace(b"=", b"A").translate(_TO_PLANTUML).decode("ascii")


class PlantUMLServerRenderer:
    """Renders through the HTTP endpoints of a PlantUML server."""

    def __init__(self, server_url: str, session: requests.Session | None = None) -> None:
        self.server_url = server_url.rstrip("/")
        self.session = session or requests.Session()

    def render_svg(self, source: str, timeout: float | None = None) -> str:
        return self._get("svg", source, timeout).text

    def render_png(self, source: str, timeout: float | None = None) -> bytes:
        return self._get("png", source, timeout).content

    def render_ascii(self, source: str, timeout: float | None = None) -> str:
        return self._get("txt", source, timeout).text

    def _get(self, fmt: str, source: str, timeout: float | None) -> requests.Response:
        url = f"{self.server_url}/{fmt}/{encode_plantuml(source)}"
        try:
            resp = self.session.get(url, timeout=timeout)
        except requests.RequestException as exc:
            raise RenderError(f"{fmt} render request failed: {exc}") from exc
        if not resp.ok:
            raise RenderError(f"{fmt} render failed ({resp.status_code})")
        return resp


class PlantUMLJarRenderer:
    """Renders by piping the source through a local ``plantuml.jar``."""

    def __init__(self, jar_path: Path, java_bin: str = "java") -> None:
        self.jar_path = jar_path
        self.java_bin = java_bin

    def render_svg(self, source: str, timeout: float | None = None) -> str:
        return self._run("svg", source, timeout).decode("utf-8")

    def render_png(self, source: str, timeout: float | None = None) -> bytes:
        return self._run("png", source, timeout)

    def render_ascii(self, source: str, timeout: float | None = None) -> str:
        return self._run("txt", source, timeout).decode("utf-8")

    def _run(self, fmt: str, source: str, timeout: float | None) -> bytes:
        command = [
            self.java_bin,
            "-Djava.awt.headless=true",
            "-jar",
            str(self.jar_path),
            "-pipe",
            "-charset",
            "UTF-8",
            f"-t{fmt}",
        ]
        try:
            proc = subprocess.run(
                command,
                input=source.encode("utf-8"),
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise RenderError(f"{fmt} render could not run: {exc}") from exc
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            raise RenderError(f"{fmt} render exited with {proc.returncode}: {stderr}")
        return proc.stdout


class RenderingPipeline:
    """Produce all three representations of one validated source, or none."""

    def __init__(self, renderer: Renderer) -> None:
        self.renderer = renderer

    def render(self, source: str, timeout: float | None = None) -> RenderedDiagram:
        svg = self._call("svg", self.renderer.render_svg, source, timeout)
        png = self._call("png", self.renderer.render_png, source, timeout)
        ascii_art = self._call("ascii", self.renderer.render_ascii, source, timeout)
        return RenderedDiagram(
            svg=svg,
            png_base64=base64.b64encode(png).decode("ascii"),
            ascii=ascii_art,
        )

    @staticmethod
    def _call(fmt, render, source, timeout):
        try:
            return render(source, timeout=timeout)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"failed to render {fmt}: {exc}") from exc


__all__ = [
    "Renderer",
    "encode_plantuml",
    "PlantUMLServerRenderer",
    "PlantUMLJarRenderer",
    "RenderingPipeline",
]
