# Diagram rendering: chart text -> SVG via Mermaid, plus render/view state

from cloudarch.renderer.compiler import KrokiCompiler, MermaidCliCompiler, MermaidCompiler
from cloudarch.renderer.diagram_renderer import (
    DiagramRenderer,
    DiagramView,
    Failed,
    Rendered,
    RenderOutcome,
    RenderState,
    ViewState,
)
from cloudarch.renderer.theme import DEFAULT_THEME, DiagramTheme

__all__ = [
    "KrokiCompiler",
    "MermaidCliCompiler",
    "MermaidCompiler",
    "DiagramRenderer",
    "DiagramView",
    "Failed",
    "Rendered",
    "RenderOutcome",
    "RenderState",
    "ViewState",
    "DEFAULT_THEME",
    "DiagramTheme",
]
