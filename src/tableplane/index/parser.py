"""Markdown parsing and rendering over mistune's AST.

A parsed document is stored as a JSON-safe record: a ``root`` token
whose children are mistune block tokens, plus the reference-link
definitions needed to render it back.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

import mistune
from mistune.renderers.markdown import MarkdownRenderer

from tableplane.index.models import MarkdownNode

ROOT_KIND = "root"
DEFAULT_PLUGINS: tuple[str, ...] = ("table", "strikethrough", "task_lists", "url")


class _MarkdownRenderer(MarkdownRenderer):
    """Markdown renderer that also knows the strikethrough plugin token."""

    def strikethrough(self, token: dict[str, Any], state: mistune.BlockState) -> str:
        return "~~" + self.render_children(token, state) + "~~"


class MarkdownParser:
    """Parses markdown text into records and renders records back out."""

    def __init__(self, plugins: Sequence[str] = DEFAULT_PLUGINS) -> None:
        self._plugins = list(plugins)

    def parse(self, text: str) -> dict[str, Any]:
        md = mistune.create_markdown(renderer=None, plugins=self._plugins)
        tokens, state = md.parse(text)
        return {
            "type": ROOT_KIND,
            "children": tokens,
            "ref_links": dict(state.env.get("ref_links", {})),
        }

    def parse_bytes(self, data: bytes) -> dict[str, Any]:
        return self.parse(data.decode("utf-8"))

    @staticmethod
    def tree(record: dict[str, Any]) -> MarkdownNode:
        return MarkdownNode.from_token(record)

    def render_markdown(self, record: dict[str, Any]) -> str:
        tokens, state = self._render_input(record)
        return _MarkdownRenderer()(tokens, state)

    def render_html(self, record: dict[str, Any]) -> str:
        md = mistune.create_markdown(escape=False, renderer="html", plugins=self._plugins)
        tokens, state = self._render_input(record)
        return md.renderer(tokens, state)  # type: ignore[misc]

    @staticmethod
    def _render_input(record: dict[str, Any]) -> tuple[list[dict[str, Any]], mistune.BlockState]:
        # Renderers mutate tokens in place; stored records must stay untouched.
        tokens = copy.deepcopy(record.get("children") or [])
        state = mistune.BlockState()
        state.env["ref_links"] = copy.deepcopy(record.get("ref_links") or {})
        return tokens, state
