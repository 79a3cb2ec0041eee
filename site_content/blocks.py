from __future__ import annotations

from html import escape
from typing import Any, Callable, Dict, Iterable, List, Optional


RichText = List[Dict[str, Any]]
Block = Dict[str, Any]


def plain_text(runs: Optional[Iterable[Any]]) -> str:
    """Concatenate the plain text of rich text runs, ignoring anything malformed."""
    out = []
    for run in runs or []:
        if isinstance(run, dict):
            text = run.get("plain_text")
            if isinstance(text, str):
                out.append(text)
    return "".join(out)


def rich_text_to_html(runs: Optional[Iterable[Any]]) -> str:
    """
    Render rich text runs to inline HTML.

    Annotations wrap innermost-first: code, bold, italic, strikethrough, underline,
    then the hyperlink outermost.
    """
    parts = []
    for run in runs or []:
        if not isinstance(run, dict):
            continue
        txt = escape(run.get("plain_text") or "")
        a = run.get("annotations") or {}
        if a.get("code"):
            txt = f"<code>{txt}</code>"
        if a.get("bold"):
            txt = f"<strong>{txt}</strong>"
        if a.get("italic"):
            txt = f"<em>{txt}</em>"
        if a.get("strikethrough"):
            txt = f"<s>{txt}</s>"
        if a.get("underline"):
            txt = f"<u>{txt}</u>"
        href = run.get("href")
        if href:
            txt = f'<a href="{escape(href)}" target="_blank" rel="noopener noreferrer">{txt}</a>'
        parts.append(txt)
    return "".join(parts)


def _body(block: Block) -> Dict[str, Any]:
    body = block.get(block.get("type") or "")
    return body if isinstance(body, dict) else {}


def _wrap(tag: str) -> Callable[[Block], str]:
    def render(block: Block) -> str:
        return f"<{tag}>{rich_text_to_html(_body(block).get('rich_text'))}</{tag}>"
    return render


def _callout(block: Block) -> str:
    body = _body(block)
    emoji = (body.get("icon") or {}).get("emoji")
    prefix = f"<span>{escape(emoji)}</span> " if emoji else ""
    return f'<div class="callout">{prefix}{rich_text_to_html(body.get("rich_text"))}</div>'


def _image(block: Block) -> str:
    body = _body(block)
    source = body.get("external") if body.get("type") == "external" else body.get("file")
    url = (source or {}).get("url")
    if not url:
        return ""
    alt = escape(plain_text(body.get("caption")))
    return f'<p><img src="{escape(url)}" alt="{alt}" /></p>'


def _divider(block: Block) -> str:
    return "<hr/>"


_RENDERERS: Dict[str, Callable[[Block], str]] = {
    "paragraph": _wrap("p"),
    "heading_1": _wrap("h1"),
    "heading_2": _wrap("h2"),
    "heading_3": _wrap("h3"),
    "quote": _wrap("blockquote"),
    "callout": _callout,
    "image": _image,
    "divider": _divider,
}

_LIST_TAGS = {
    "bulleted_list_item": "ul",
    "numbered_list_item": "ol",
}


def blocks_to_html(blocks: Iterable[Block]) -> str:
    """
    Render a flat sequence of Notion blocks to HTML, one block per line.

    Consecutive list items of the same kind share a single <ul>/<ol>.
    Unsupported block types are skipped.
    """
    parts: List[str] = []
    open_list: Optional[str] = None
    items: List[str] = []

    def flush() -> None:
        nonlocal open_list, items
        if open_list:
            parts.append(f"<{open_list}>{''.join(items)}</{open_list}>")
        open_list, items = None, []

    for block in blocks:
        if not isinstance(block, dict):
            continue
        btype = block.get("type") or ""
        list_tag = _LIST_TAGS.get(btype)
        if list_tag:
            if list_tag != open_list:
                flush()
                open_list = list_tag
            items.append(f"<li>{rich_text_to_html(_body(block).get('rich_text'))}</li>")
            continue

        flush()
        render = _RENDERERS.get(btype)
        if render is None:
            continue
        html = render(block)
        if html:
            parts.append(html)

    flush()
    return "\n".join(parts)


def first_paragraph(blocks: Iterable[Block]) -> Optional[str]:
    """Plain text of the first paragraph block that is not blank."""
    for block in blocks:
        if isinstance(block, dict) and block.get("type") == "paragraph":
            text = plain_text(_body(block).get("rich_text")).strip()
            if text:
                return text
    return None
