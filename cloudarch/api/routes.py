import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from cloudarch.errors import GenerationError
from cloudarch.llm.client import GenerationClient
from cloudarch.renderer.compiler import MermaidCompiler, get_diagram_compiler
from cloudarch.renderer.diagram_renderer import DiagramRenderer, Rendered
from cloudarch.schemas import GenerationRequest, RenderRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_generation_client() -> GenerationClient:
    return GenerationClient()


@lru_cache(maxsize=1)
def get_compiler() -> MermaidCompiler:
    return get_diagram_compiler()


@router.get("/health")
def health():
    return {"status": "ok"}


# ============================================================
# GENERATE - problem statement -> CloudSolution
# ============================================================

@router.post("/generate")
async def generate_architecture(
    request: GenerationRequest,
    client: GenerationClient = Depends(get_generation_client),
):
    try:
        solution = await client.generate(request)
    except GenerationError as e:
        logger.error("Error generating architecture: %s", e)
        return JSONResponse(status_code=502, content=e.to_dict())

    return solution.model_dump(by_alias=True, mode="json")


# ============================================================
# RENDER - Mermaid chart -> SVG
# ============================================================

@router.post("/render")
async def render_diagram(request: RenderRequest, compiler: MermaidCompiler = Depends(get_compiler)):
    renderer = DiagramRenderer(compiler=compiler)
    outcome = await renderer.render(request.chart)

    if outcome is None:
        return {"status": "idle"}

    return outcome.to_dict()


@router.post("/render.svg")
async def render_diagram_svg(request: RenderRequest, compiler: MermaidCompiler = Depends(get_compiler)):
    """Raw SVG for direct embedding; 422 with the diagnostic on failure."""
    renderer = DiagramRenderer(compiler=compiler)
    outcome = await renderer.render(request.chart)

    if isinstance(outcome, Rendered):
        return Response(outcome.svg, media_type="image/svg+xml")

    content = outcome.to_dict() if outcome is not None else {"status": "idle"}
    return JSONResponse(status_code=422, content=content)
