"""
Prismic structured text to plain text and HTML.

A rich-text field is a list of blocks like:

    {"type": "paragraph", "text": "Hello world",
     "spans": [{"start": 0, "end": 5, "type": "strong"}]}

Span offsets index into `text`. List items are consecutive blocks, grouped
into a single <ul>/<ol> when rendered.
"""

import html
from collections import defaultdict
from typing import Callable, Iterable, Optional

from .preview import link_resolver as default_link_resolver

BLOCK_TAGS = {
    'paragraph': 'p',
    'heading1': 'h1',
    'heading2': 'h2',
    'heading3': 'h3',
    'heading4': 'h4',
    'heading5': 'h5',
    'heading6': 'h6',
    'preformatted': 'pre',
    'list-item': 'li',
    'o-list-item': 'li',
}

LIST_TAGS = {
    'list-item': 'ul',
    'o-list-item': 'ol',
}

SPAN_TAGS = {
    'strong': 'strong',
    'em': 'em',
}


def as_text(blocks: Optional[Iterable[dict]], separator: str = ' ') -> str:
    """Concatenate the text of every block."""
    if not blocks:
        return ''
    return separator.join(
        block.get('text') or '' for block in blocks if 'text' in block
    )


def _link_href(data: dict, resolver: Callable[[dict], str]) -> str:
    if data.get('link_type') == 'Document':
        return resolver(data)
    return data.get('url') or '#'


def _span_tags(span: dict, resolver: Callable[[dict], str]) -> tuple[str, str]:
    span_type = span.get('type')
    if span_type in SPAN_TAGS:
        tag = SPAN_TAGS[span_type]
        return f'<{tag}>', f'</{tag}>'
    if span_type == 'hyperlink':
        data = span.get('data') or {}
        href = html.escape(_link_href(data, resolver), quote=True)
        if data.get('target'):
            target = html.escape(data['target'], quote=True)
            return f'<a href="{href}" target="{target}" rel="noopener">', '</a>'
        return f'<a href="{href}">', '</a>'
    return '', ''


def _utf16_offsets(text: str) -> list[int]:
    """Python index for every UTF-16 offset into `text`, plus the end."""
    offsets = []
    for index, char in enumerate(text):
        offsets.append(index)
        if ord(char) > 0xFFFF:
            # Surrogate pair: both code units belong to the same character
            offsets.append(index)
    offsets.append(len(text))
    return offsets


def render_spans(text: str, spans: Optional[list], resolver: Callable[[dict], str] = default_link_resolver) -> str:
    """
    Escape `text` and wrap the span ranges in their tags.

    Span offsets count UTF-16 code units and are clamped to the text.
    Crossing spans are split so the output stays well nested.
    """
    offsets = _utf16_offsets(text)
    last = len(offsets) - 1

    starts = defaultdict(list)
    for span in spans or ():
        start = offsets[max(0, min(span.get('start', 0), last))]
        end = offsets[max(0, min(span.get('end', 0), last))]
        if end <= start:
            continue
        open_tag, close_tag = _span_tags(span, resolver)
        if not open_tag:
            continue
        starts[start].append((end, open_tag, close_tag))

    out = []
    stack = []  # (end, open_tag, close_tag), innermost last
    for i in range(len(text) + 1):
        ending = [depth for depth, entry in enumerate(stack) if entry[0] == i]
        if ending:
            # Close everything down to the outermost span ending here,
            # then reopen the ones still running
            depth = ending[0]
            for entry in reversed(stack[depth:]):
                out.append(entry[2])
            reopen = sorted((e for e in stack[depth:] if e[0] != i), key=lambda e: -e[0])
            del stack[depth:]
            for entry in reopen:
                out.append(entry[1])
                stack.append(entry)

        # Longer spans open first so they enclose shorter ones
        for entry in sorted(starts.get(i, ()), key=lambda e: -e[0]):
            out.append(entry[1])
            stack.append(entry)

        if i < len(text):
            char = text[i]
            out.append('<br />' if char == '\n' else html.escape(char, quote=False))
    return ''.join(out)


def _render_block(block: dict, resolver: Callable[[dict], str]) -> str:
    block_type = block.get('type')

    if block_type == 'image':
        url = html.escape(block.get('url') or '', quote=True)
        alt = html.escape(block.get('alt') or '', quote=True)
        return f'<p class="block-img"><img src="{url}" alt="{alt}" /></p>'

    if block_type == 'embed':
        oembed = block.get('oembed') or {}
        # Embed markup comes from the CMS provider and is trusted as-is
        return f'<div data-oembed="{html.escape(oembed.get("embed_url") or "", quote=True)}">{oembed.get("html") or ""}</div>'

    tag = BLOCK_TAGS.get(block_type)
    if tag is None:
        return ''
    inner = render_spans(block.get('text') or '', block.get('spans'), resolver)
    return f'<{tag}>{inner}</{tag}>'


def as_html(blocks: Optional[Iterable[dict]], link_resolver: Optional[Callable[[dict], str]] = None) -> str:
    """Render rich-text blocks as an HTML fragment."""
    resolver = link_resolver or default_link_resolver
    parts = []
    open_list = None

    for block in blocks or ():
        list_tag = LIST_TAGS.get(block.get('type'))
        if list_tag != open_list:
            if open_list:
                parts.append(f'</{open_list}>')
            if list_tag:
                parts.append(f'<{list_tag}>')
            open_list = list_tag
        parts.append(_render_block(block, resolver))

    if open_list:
        parts.append(f'</{open_list}>')

    return ''.join(parts)
