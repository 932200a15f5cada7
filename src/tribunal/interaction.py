"""Hover/selection state for citation links in a rendered decision.

Two independent axes:
    hover     -- which citation the pointer is over, and where it entered
    selection -- which article is open in the modal

Hovering never clears a selection and closing the modal never clears a
hover. Events arrive one at a time from a single UI dispatcher; one
controller belongs to one decision view.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from tribunal.articles import Article, ArticleCorpus, article_modal, load_default_corpus
from tribunal.citations import CitationToken

log = logging.getLogger(__name__)

# Tooltip is drawn just right of and above the pointer.
TOOLTIP_OFFSET_X = 10
TOOLTIP_OFFSET_Y = -10


@dataclass(frozen=True, slots=True)
class PointerPosition:
    """Viewport coordinates of a pointer event."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True, slots=True)
class InteractionState:
    """Snapshot of the controller's state."""

    hovered_article_id: str | None = None
    hover_position: PointerPosition = PointerPosition()
    selected_article: Article | None = None

    @property
    def is_hovering(self) -> bool:
        return self.hovered_article_id is not None

    @property
    def has_selection(self) -> bool:
        return self.selected_article is not None

    def as_dict(self) -> dict[str, Any]:
        return {
            "hovered_article_id": self.hovered_article_id,
            "hover_position": {"x": self.hover_position.x, "y": self.hover_position.y},
            "selected_article": (
                self.selected_article.as_dict() if self.selected_article else None
            ),
        }


@dataclass(frozen=True, slots=True)
class Tooltip:
    """Positioned hover preview."""

    article_id: str
    text: str
    left: float
    top: float

    def as_dict(self) -> dict[str, Any]:
        return {"article_id": self.article_id, "text": self.text, "left": self.left, "top": self.top}


class CitationInteractionController:
    """Synchronous state machine driven by pointer events on citation tokens."""

    def __init__(self, corpus: ArticleCorpus | None = None) -> None:
        self._corpus = corpus if corpus is not None else load_default_corpus()
        self._state = InteractionState()

    @property
    def state(self) -> InteractionState:
        return self._state

    def _replace(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)

    # -- hover axis ----------------------------------------------------------

    def pointer_enter(self, token: CitationToken, x: float, y: float) -> InteractionState:
        """Start hovering a resolved citation at the entry coordinates."""
        if not token.is_resolved:
            return self._state
        self._replace(
            hovered_article_id=token.resolved_article_id,
            hover_position=PointerPosition(x, y),
        )
        return self._state

    def pointer_leave(self, token: CitationToken) -> InteractionState:
        """Stop hovering; a leave from a different citation is ignored."""
        if self._state.hovered_article_id is None:
            return self._state
        if token.resolved_article_id != self._state.hovered_article_id:
            log.debug(
                "Ignoring leave for %r while hovering %r",
                token.raw_text, self._state.hovered_article_id,
            )
            return self._state
        self._replace(hovered_article_id=None, hover_position=PointerPosition())
        return self._state

    # -- selection axis ------------------------------------------------------

    def click(self, token: CitationToken) -> InteractionState:
        """Open the cited article. Unresolved tokens are not clickable."""
        if not token.is_resolved:
            return self._state
        assert token.resolved_article_id is not None
        article = self._corpus.get_by_id(token.resolved_article_id)
        if article is None:
            return self._state
        self._replace(selected_article=article)
        return self._state

    def close(self) -> InteractionState:
        """Dismiss the modal."""
        self._replace(selected_article=None)
        return self._state

    def pointer_down_outside(self) -> InteractionState:
        """Pointer-down on the backdrop outside the modal surface."""
        return self.close()

    # -- derived views -------------------------------------------------------

    def tooltip(self) -> Tooltip | None:
        """Preview for the hovered citation, or None when not hovering."""
        article_id = self._state.hovered_article_id
        if article_id is None:
            return None
        pos = self._state.hover_position
        return Tooltip(
            article_id=article_id,
            text=self._corpus.get_preview(article_id),
            left=pos.x + TOOLTIP_OFFSET_X,
            top=pos.y + TOOLTIP_OFFSET_Y,
        )

    def modal(self) -> dict[str, Any] | None:
        """Modal view for the selected article, or None when closed."""
        article = self._state.selected_article
        if article is None:
            return None
        return article_modal(article, version=self._corpus.version)
