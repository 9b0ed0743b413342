"""
Mermaid compilers: chart text -> SVG, produced by Mermaid itself.

Two transports:
- MermaidCliCompiler runs mermaid-cli (`mmdc`) in a subprocess
- KrokiCompiler posts the chart to a Kroki server

Both raise CompilationError carrying Mermaid's own diagnostic when the
chart is rejected. Infrastructure failures (missing executable, timeout,
HTTP 5xx) propagate as whatever they are.
"""

import asyncio
import json
import logging
import re
import shlex
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

import requests

from cloudarch import config
from cloudarch.errors import CompilationError
from cloudarch.renderer.theme import DiagramTheme
from cloudarch.utils.logging import preview

logger = logging.getLogger(__name__)

_STACK_FRAME = re.compile(r"^\s*at\s|^\S+\s\((?:file|node|https?):")
_ERROR_PREFIX = re.compile(r"^(?:Error(?: \d{3})?:\s*|Evaluation failed:\s*)+")
_ROOT_ID = re.compile(r'<svg\b[^>]*?\sid="([^"]+)"')


def mermaid_diagnostic(output: str) -> str:
    """First error block of a Mermaid failure, without JS stack frames."""
    lines: List[str] = []
    for line in output.strip().splitlines():
        if _STACK_FRAME.match(line):
            break
        lines.append(line.rstrip())
    text = _ERROR_PREFIX.sub("", "\n".join(lines).strip())
    return text or "Mermaid rejected the diagram"


def scope_svg_ids(svg: str, render_id: str) -> str:
    """
    Re-key an SVG under `render_id`. Mermaid prefixes every internal id,
    marker and CSS selector with the root id, so renaming the root id
    everywhere it is referenced keeps the document self-consistent.
    """
    match = _ROOT_ID.search(svg)
    if match is None:
        return svg.replace("<svg", f'<svg id="{render_id}"', 1)

    old = match.group(1)
    if old == render_id:
        return svg
    # only where it is used as an id: id="old...", url(#old...), #old selectors
    pattern = re.compile(r'(?<=[#"])' + re.escape(old) + r"(?![A-Za-z0-9])")
    return pattern.sub(render_id, svg)


class MermaidCompiler(ABC):
    @abstractmethod
    async def compile(self, chart: str, *, render_id: str, theme: DiagramTheme) -> str:
        """Return an SVG whose root element id is `render_id`."""


# ============================================================
# MERMAID-CLI
# ============================================================

class MermaidCliCompiler(MermaidCompiler):
    def __init__(
        self,
        command: str = config.MMDC_COMMAND,
        timeout: float = config.RENDER_TIMEOUT,
        puppeteer_config: Optional[str] = config.MMDC_PUPPETEER_CONFIG,
    ):
        self.command = shlex.split(command)
        self.timeout = timeout
        self.puppeteer_config = puppeteer_config

    def build_args(self, workdir: Path, render_id: str) -> List[str]:
        args = self.command + [
            "-i", str(workdir / "input.mmd"),
            "-o", str(workdir / "output.svg"),
            "-c", str(workdir / "config.json"),
            "-I", render_id,
            "-b", "transparent",
            "-q",
        ]
        if self.puppeteer_config:
            args += ["-p", self.puppeteer_config]
        return args

    async def compile(self, chart: str, *, render_id: str, theme: DiagramTheme) -> str:
        with tempfile.TemporaryDirectory(prefix="cloudarch-") as tmp_dir:
            workdir = Path(tmp_dir)
            (workdir / "input.mmd").write_text(chart, encoding="utf-8")
            (workdir / "config.json").write_text(json.dumps(theme.mermaid_config()), encoding="utf-8")

            proc = await asyncio.create_subprocess_exec(
                *self.build_args(workdir, render_id),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
                logger.error("mmdc timed out after %.0fs (%s)", self.timeout, render_id)
                raise

            if proc.returncode != 0:
                output = stderr.decode("utf-8", errors="replace") or stdout.decode("utf-8", errors="replace")
                logger.debug("mmdc exit=%s output=%s", proc.returncode, preview(output, 800))
                raise CompilationError(mermaid_diagnostic(output))

            return (workdir / "output.svg").read_text(encoding="utf-8")


# ============================================================
# KROKI
# ============================================================

class KrokiCompiler(MermaidCompiler):
    def __init__(self, base_url: str = config.KROKI_URL, timeout: float = config.RENDER_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def compile_sync(self, chart: str, *, render_id: str, theme: DiagramTheme) -> str:
        # Directive goes last so diagnostics keep the chart's own line numbers
        body = f"{chart.rstrip()}\n{theme.init_directive()}\n"

        response = requests.post(
            f"{self.base_url}/mermaid/svg",
            data=body.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
            timeout=self.timeout,
        )
        if response.status_code == 400:
            raise CompilationError(mermaid_diagnostic(response.text))
        response.raise_for_status()

        return scope_svg_ids(response.text, render_id)

    async def compile(self, chart: str, *, render_id: str, theme: DiagramTheme) -> str:
        return await asyncio.to_thread(self.compile_sync, chart, render_id=render_id, theme=theme)


def get_diagram_compiler(kind: str = config.DIAGRAM_COMPILER) -> MermaidCompiler:
    kind = kind.strip().lower()

    if kind == "mmdc":
        return MermaidCliCompiler()

    if kind == "kroki":
        return KrokiCompiler()

    raise ValueError(f"Unknown diagram compiler: {kind!r}")
