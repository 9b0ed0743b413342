import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests

from cloudarch.errors import CompilationError
from cloudarch.renderer.compiler import (
    KrokiCompiler,
    MermaidCliCompiler,
    get_diagram_compiler,
    mermaid_diagnostic,
    scope_svg_ids,
)
from cloudarch.renderer.theme import DEFAULT_THEME, build_theme

RID = "mermaid-abc1234"
CHART = "flowchart TB\n  A[Client] --> B[API]"

MMDC_PARSE_FAILURE = (
    "Error: Parse error on line 2:\n"
    "...TB  A[Client --> B\n"
    "----------------------^\n"
    "Expecting 'SQE', 'PIPE', got 'EOF'\n"
    "    at Parser.parseError (file:///usr/lib/node_modules/mermaid/dist/mermaid.js:1:1)\n"
    "    at Parser.parse (file:///usr/lib/node_modules/mermaid/dist/mermaid.js:1:2)\n"
)


# ============================================================
# MERMAID-CLI
# ============================================================

def _process(returncode=0, stdout=b"", stderr=b""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class FakeMmdc:
    """Replaces create_subprocess_exec; reads the inputs mmdc would read."""

    def __init__(self, proc, svg=None):
        self.proc = proc
        self.svg = svg
        self.args = None
        self.chart = None
        self.config = None

    async def __call__(self, *args, **kwargs):
        self.args = list(args)
        self.chart = Path(self._arg("-i")).read_text(encoding="utf-8")
        self.config = json.loads(Path(self._arg("-c")).read_text(encoding="utf-8"))
        if self.svg is not None:
            Path(self._arg("-o")).write_text(self.svg, encoding="utf-8")
        return self.proc

    def _arg(self, flag):
        return self.args[self.args.index(flag) + 1]


@pytest.mark.asyncio
async def test_mmdc_renders_with_render_id_and_theme():
    svg = f'<svg id="{RID}" xmlns="http://www.w3.org/2000/svg"></svg>'
    mmdc = FakeMmdc(_process(), svg=svg)

    with patch("cloudarch.renderer.compiler.asyncio.create_subprocess_exec", new=mmdc):
        result = await MermaidCliCompiler().compile(CHART, render_id=RID, theme=DEFAULT_THEME)

    assert result == svg
    assert mmdc.args[0] == "mmdc"
    assert mmdc.args[mmdc.args.index("-I") + 1] == RID
    assert mmdc.chart == CHART
    assert mmdc.config == DEFAULT_THEME.mermaid_config()


def test_mmdc_command_can_be_a_launcher():
    compiler = MermaidCliCompiler(command="npx -y @mermaid-js/mermaid-cli", puppeteer_config="/etc/puppeteer.json")
    args = compiler.build_args(Path("/tmp/work"), RID)

    assert args[:3] == ["npx", "-y", "@mermaid-js/mermaid-cli"]
    assert args[-2:] == ["-p", "/etc/puppeteer.json"]


@pytest.mark.asyncio
async def test_mmdc_parse_error_becomes_compilation_error():
    mmdc = FakeMmdc(_process(returncode=1, stderr=MMDC_PARSE_FAILURE.encode()))

    with patch("cloudarch.renderer.compiler.asyncio.create_subprocess_exec", new=mmdc):
        with pytest.raises(CompilationError) as exc_info:
            await MermaidCliCompiler().compile("flowchart TB\n  A[Client --> B", render_id=RID, theme=DEFAULT_THEME)

    diagnostic = str(exc_info.value)
    assert diagnostic.startswith("Parse error on line 2:")
    assert "Expecting 'SQE'" in diagnostic
    assert "Parser.parseError" not in diagnostic


@pytest.mark.asyncio
async def test_mmdc_timeout_kills_process():
    proc = _process()
    proc.communicate = AsyncMock(side_effect=asyncio.TimeoutError)
    mmdc = FakeMmdc(proc)

    with patch("cloudarch.renderer.compiler.asyncio.create_subprocess_exec", new=mmdc):
        with pytest.raises(asyncio.TimeoutError):
            await MermaidCliCompiler(timeout=0.5).compile(CHART, render_id=RID, theme=DEFAULT_THEME)

    proc.kill.assert_called_once()
    proc.wait.assert_awaited_once()


# ============================================================
# KROKI
# ============================================================

KROKI_SVG = (
    '<svg aria-roledescription="flowchart-v2" id="container" xmlns="http://www.w3.org/2000/svg">'
    "<style>#container .node rect{fill:#1f2020;}</style>"
    '<defs><marker id="container_flowchart-pointEnd"></marker></defs>'
    '<path marker-end="url(#container_flowchart-pointEnd)"></path>'
    "<text>container registry</text>"
    "</svg>"
)


def _kroki_response(status_code, text):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
    return response


@pytest.mark.asyncio
async def test_kroki_posts_chart_and_rescopes_svg():
    with patch("cloudarch.renderer.compiler.requests.post") as post:
        post.return_value = _kroki_response(200, KROKI_SVG)
        svg = await KrokiCompiler("https://kroki.test/", timeout=7).compile(CHART, render_id=RID, theme=DEFAULT_THEME)

    args, kwargs = post.call_args
    assert args[0] == "https://kroki.test/mermaid/svg"
    assert kwargs["timeout"] == 7
    body = kwargs["data"].decode("utf-8")
    assert body.startswith(CHART + "\n")
    assert body.rstrip().endswith(DEFAULT_THEME.init_directive())

    assert f'id="{RID}"' in svg
    assert f"#{RID} .node rect" in svg
    assert f"url(#{RID}_flowchart-pointEnd)" in svg
    assert "<text>container registry</text>" in svg
    assert 'id="container' not in svg


def test_kroki_bad_request_is_compilation_error():
    with patch("cloudarch.renderer.compiler.requests.post") as post:
        post.return_value = _kroki_response(400, "Error 400: Parse error on line 2:\nExpecting 'SQE', got 'EOF'")
        with pytest.raises(CompilationError) as exc_info:
            KrokiCompiler("http://kroki:8000").compile_sync("flowchart TB\n  A[x", render_id=RID, theme=DEFAULT_THEME)

    assert exc_info.value.diagnostic == "Parse error on line 2:\nExpecting 'SQE', got 'EOF'"


def test_kroki_server_error_propagates():
    with patch("cloudarch.renderer.compiler.requests.post") as post:
        post.return_value = _kroki_response(503, "unavailable")
        with pytest.raises(requests.HTTPError):
            KrokiCompiler("http://kroki:8000").compile_sync(CHART, render_id=RID, theme=DEFAULT_THEME)


# ============================================================
# HELPERS
# ============================================================

def test_diagnostic_strips_wrappers_and_stack():
    output = "Error: Evaluation failed: Error: Lexical error on line 3.\n    at t.parseError (https://x/mermaid.js:1:1)"
    assert mermaid_diagnostic(output) == "Lexical error on line 3."
    assert mermaid_diagnostic("") == "Mermaid rejected the diagram"


def test_scope_svg_ids_edge_cases():
    assert scope_svg_ids(f'<svg id="{RID}"></svg>', RID) == f'<svg id="{RID}"></svg>'
    assert scope_svg_ids("<svg></svg>", RID) == f'<svg id="{RID}"></svg>'


def test_compiler_selection():
    assert isinstance(get_diagram_compiler("mmdc"), MermaidCliCompiler)
    assert isinstance(get_diagram_compiler(" Kroki "), KrokiCompiler)
    with pytest.raises(ValueError, match="Unknown diagram compiler"):
        get_diagram_compiler("graphviz")


# ============================================================
# THEME
# ============================================================

def test_default_theme_is_dark_inter():
    cfg = DEFAULT_THEME.mermaid_config()
    assert cfg["theme"] == "dark"
    assert cfg["fontFamily"] == "Inter"
    assert cfg["securityLevel"] == "loose"
    assert cfg["themeVariables"]["fontFamily"] == "Inter"


def test_init_directive_is_mermaid_json():
    directive = build_theme("neutral", "Roboto").init_directive()
    assert directive.startswith("%%{init: ") and directive.endswith("}%%")
    assert json.loads(directive[len("%%{init: "):-len("}%%")])["theme"] == "neutral"


def test_unknown_theme():
    with pytest.raises(ValueError, match="Unknown diagram theme"):
        build_theme("neon")
