"""FastAPI server for the Decision Dashboard.

Exposes the decision parsing and citation engine as JSON endpoints for the
frontend: article lookups and previews, section segmentation, citation
resolution, full decision rendering, and per-view citation interaction
state (hover preview / article modal).

Usage:
    cd dashboard
    PYTHONPATH=../src uvicorn api.server:app --reload --port 8000

Set TRIBUNAL_RULES_PATH to serve an alternative rules dataset.
"""
from __future__ import annotations

import asyncio
import sys
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Literal

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field

# Add src to path so we can import tribunal modules
_tribunal_src = Path(__file__).resolve().parents[2] / "src"
if str(_tribunal_src) not in sys.path:
    sys.path.insert(0, str(_tribunal_src))

from tribunal.articles import ArticleCorpus, CorpusError, article_modal, load_default_corpus  # noqa: E402
from tribunal.citations import CitationToken, RuleItem, resolve_citations  # noqa: E402
from tribunal.decision_parser import segment  # noqa: E402
from tribunal.document import build_document  # noqa: E402
from tribunal.interaction import CitationInteractionController  # noqa: E402
from tribunal.payload import DecisionPayload, PayloadError  # noqa: E402

# ---------------------------------------------------------------------------
# Globals
#
# Views are only touched from async endpoints on the single event loop;
# _views_lock serializes the registry.
# ---------------------------------------------------------------------------
_corpus: ArticleCorpus | None = None

_MAX_VIEWS = 256
_views: dict[str, _DecisionView] = {}
_views_lock = asyncio.Lock()


class _DecisionView:
    """One rendered rules section and the controller that owns its state."""

    __slots__ = ("controller", "rule_items")

    def __init__(self, rule_items: list[RuleItem], controller: CitationInteractionController) -> None:
        self.rule_items = rule_items
        self.controller = controller

    def token(self, item: int, fragment: int) -> CitationToken:
        try:
            frag = self.rule_items[item].fragments[fragment]
        except IndexError:
            raise HTTPException(
                status_code=404,
                detail=f"No fragment {fragment} in rule item {item}",
            ) from None
        if not isinstance(frag, CitationToken):
            raise HTTPException(
                status_code=422,
                detail=f"Fragment {fragment} of rule item {item} is not a citation",
            )
        return frag

    def snapshot(self, view_id: str) -> dict[str, Any]:
        tooltip = self.controller.tooltip()
        return {
            "view_id": view_id,
            "state": self.controller.state.as_dict(),
            "tooltip": tooltip.as_dict() if tooltip else None,
            "modal": self.controller.modal(),
        }


def _get_corpus() -> ArticleCorpus:
    """Get the article corpus, raising 503 if not available."""
    if _corpus is None:
        raise HTTPException(
            status_code=503,
            detail="Rules dataset not available. Check TRIBUNAL_RULES_PATH.",
        )
    return _corpus


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    global _corpus  # noqa: PLW0603
    try:
        _corpus = load_default_corpus()
        print(f"[dashboard] Rules loaded: {len(_corpus)} articles (v{_corpus.version})")
    except CorpusError as e:
        print(f"[dashboard] Warning: could not load rules: {e}")
        _corpus = None

    yield
    async with _views_lock:
        _views.clear()


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Decision Dashboard API",
    version="0.1.0",
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------
class SegmentRequest(BaseModel):
    text: str = ""


class ResolveRequest(BaseModel):
    rules_text: str = ""


class CreateViewRequest(BaseModel):
    rules_text: str = ""


class ViewEvent(BaseModel):
    type: Literal["enter", "leave", "click", "close", "outside"]
    item: int | None = Field(default=None, ge=0)
    fragment: int | None = Field(default=None, ge=0)
    x: float = 0.0
    y: float = 0.0


# ---------------------------------------------------------------------------
# Routes: Health
# ---------------------------------------------------------------------------
@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "rules_loaded": _corpus is not None,
        "article_count": len(_corpus) if _corpus else 0,
        "open_views": len(_views),
    }


# ---------------------------------------------------------------------------
# Routes: Articles
# ---------------------------------------------------------------------------
@app.get("/api/articles")
async def list_articles():
    corpus = _get_corpus()
    return {
        "version": corpus.version,
        "articles": [
            {
                "id": a.id,
                "title": a.title,
                "subsection_ids": [s.id for s in a.subsections],
            }
            for a in corpus
        ],
    }


@app.get("/api/articles/{ref}")
async def get_article(ref: str):
    corpus = _get_corpus()
    article = corpus.get_by_id(ref)
    if article is None:
        raise HTTPException(status_code=404, detail=f"Article not found: {ref}")
    return {
        "article": article.as_dict(),
        "modal": article_modal(article, version=corpus.version),
    }


@app.get("/api/articles/{ref}/preview")
async def get_article_preview(ref: str):
    corpus = _get_corpus()
    return {
        "ref": ref,
        "resolved": corpus.get_by_id(ref) is not None,
        "preview": corpus.get_preview(ref),
    }


# ---------------------------------------------------------------------------
# Routes: Decisions
# ---------------------------------------------------------------------------
@app.post("/api/decisions/segment")
async def segment_decision(req: SegmentRequest):
    sections = segment(req.text)
    return {
        "sections": sections.as_dict(),
        "fact_items": sections.fact_items,
        "evidence_items": sections.evidence_items,
        "missing": sections.missing(),
    }


@app.post("/api/citations/resolve")
async def resolve_rules(req: ResolveRequest):
    items = resolve_citations(req.rules_text, _get_corpus())
    return {"rule_items": [item.as_dict() for item in items]}


@app.post("/api/decisions/render")
async def render_decision(payload: dict[str, Any] = Body(...)):
    corpus = _get_corpus()
    try:
        decision = DecisionPayload.from_dict(payload)
    except PayloadError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return build_document(decision, corpus).as_dict()


# ---------------------------------------------------------------------------
# Routes: Citation interaction views
# ---------------------------------------------------------------------------
@app.post("/api/views")
async def create_view(req: CreateViewRequest):
    corpus = _get_corpus()
    items = resolve_citations(req.rules_text, corpus)
    view_id = uuid.uuid4().hex
    async with _views_lock:
        if len(_views) >= _MAX_VIEWS:
            # Drop the oldest view (dicts keep insertion order)
            _views.pop(next(iter(_views)))
        view = _DecisionView(items, CitationInteractionController(corpus))
        _views[view_id] = view
    return {
        **view.snapshot(view_id),
        "rule_items": [item.as_dict() for item in items],
    }


@app.post("/api/views/{view_id}/events")
async def apply_view_event(view_id: str, event: ViewEvent):
    async with _views_lock:
        view = _views.get(view_id)
        if view is None:
            raise HTTPException(status_code=404, detail=f"Unknown view: {view_id}")
        controller = view.controller
        if event.type in ("enter", "leave", "click"):
            if event.item is None or event.fragment is None:
                raise HTTPException(
                    status_code=422,
                    detail=f"'{event.type}' events need item and fragment",
                )
            token = view.token(event.item, event.fragment)
            if event.type == "enter":
                controller.pointer_enter(token, event.x, event.y)
            elif event.type == "leave":
                controller.pointer_leave(token)
            else:
                controller.click(token)
        elif event.type == "close":
            controller.close()
        else:
            controller.pointer_down_outside()
        return view.snapshot(view_id)


@app.delete("/api/views/{view_id}")
async def delete_view(view_id: str):
    async with _views_lock:
        if _views.pop(view_id, None) is None:
            raise HTTPException(status_code=404, detail=f"Unknown view: {view_id}")
    return {"deleted": view_id}
