import logging
import secrets
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Set, Union

from cloudarch.errors import CompilationError
from cloudarch.renderer.compiler import MermaidCompiler, get_diagram_compiler
from cloudarch.renderer.theme import DEFAULT_THEME, DiagramTheme

logger = logging.getLogger(__name__)

RENDER_FAILED_MESSAGE = "Failed to render architecture diagram. The syntax might be invalid."


class RenderState(Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    RENDERED = "rendered"
    FAILED = "failed"


class ViewState(Enum):
    NORMAL = "normal"
    EXPANDED = "expanded"


@dataclass(frozen=True)
class Rendered:
    chart: str
    svg: str
    render_id: str
    superseded: bool = False

    def to_dict(self) -> dict:
        return {
            "status": "rendered",
            "svg": self.svg,
            "renderId": self.render_id,
        }


@dataclass(frozen=True)
class Failed:
    chart: str
    diagnostic: str
    message: str = RENDER_FAILED_MESSAGE
    superseded: bool = False

    def to_dict(self) -> dict:
        return {
            "status": "failed",
            "message": self.message,
            "diagnostic": self.diagnostic,
            "chart": self.chart,
        }


RenderOutcome = Union[Rendered, Failed]


@dataclass(frozen=True)
class DiagramView:
    """Snapshot handed to the presentation layer."""
    expanded: bool
    toggle_title: str
    svg: Optional[str] = None
    error_message: Optional[str] = None
    chart: Optional[str] = None


def new_render_id() -> str:
    return "mermaid-" + secrets.token_hex(4)[:7]


class DiagramRenderer:
    """
    Holds one diagram: compiles chart strings to SVG and tracks render
    and view state.

    Render state and view state are independent: toggling the view never
    re-renders, and a new render never changes the view.

    Only the most recently submitted chart can change what is shown. A
    compile that finishes after a newer render() was issued comes back to
    its own caller marked superseded and is otherwise dropped.
    """

    def __init__(
        self,
        compiler: Optional[MermaidCompiler] = None,
        theme: DiagramTheme = DEFAULT_THEME,
        id_factory: Callable[[], str] = new_render_id,
    ):
        self.compiler = compiler or get_diagram_compiler()
        self.theme = theme
        self._id_factory = id_factory
        self._issued_ids: Set[str] = set()
        self._token = 0
        self._render_state = RenderState.IDLE
        self._view_state = ViewState.NORMAL
        self._outcome: Optional[RenderOutcome] = None

    @property
    def render_state(self) -> RenderState:
        return self._render_state

    @property
    def view_state(self) -> ViewState:
        return self._view_state

    @property
    def outcome(self) -> Optional[RenderOutcome]:
        return self._outcome

    def _next_render_id(self) -> str:
        render_id = self._id_factory()
        while render_id in self._issued_ids:
            render_id = self._id_factory()
        self._issued_ids.add(render_id)
        return render_id

    async def render(self, chart: str) -> Optional[RenderOutcome]:
        self._token += 1
        token = self._token

        if chart is None or not chart.strip():
            self._render_state = RenderState.IDLE
            self._outcome = None
            return None

        render_id = self._next_render_id()
        self._render_state = RenderState.RENDERING
        logger.debug("render %s token=%d chars=%d", render_id, token, len(chart))

        outcome: RenderOutcome
        try:
            svg = await self.compiler.compile(chart, render_id=render_id, theme=self.theme)
            outcome = Rendered(chart=chart, svg=svg, render_id=render_id)
        except CompilationError as e:
            logger.warning("Mermaid render error (%s): %s", render_id, e)
            outcome = Failed(chart=chart, diagnostic=str(e))
        except Exception as e:
            logger.exception("Unexpected error while rendering %s", render_id)
            outcome = Failed(chart=chart, diagnostic=f"{type(e).__name__}: {e}")

        if token != self._token:
            logger.debug("render %s superseded by token=%d", render_id, self._token)
            return replace(outcome, superseded=True)

        self._outcome = outcome
        self._render_state = (
            RenderState.RENDERED if isinstance(outcome, Rendered) else RenderState.FAILED
        )
        return outcome

    def toggle_expand(self) -> ViewState:
        self._view_state = (
            ViewState.NORMAL if self._view_state is ViewState.EXPANDED else ViewState.EXPANDED
        )
        return self._view_state

    def view(self) -> DiagramView:
        expanded = self._view_state is ViewState.EXPANDED
        outcome = self._outcome
        return DiagramView(
            expanded=expanded,
            toggle_title="Minimize" if expanded else "Maximize",
            svg=outcome.svg if isinstance(outcome, Rendered) else None,
            error_message=outcome.message if isinstance(outcome, Failed) else None,
            chart=outcome.chart if isinstance(outcome, Failed) else None,
        )
