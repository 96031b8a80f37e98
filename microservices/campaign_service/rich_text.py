"""
Rich-text helpers for the proposed-policies body

The body is HTML produced by a rich-text editor. Every read path that renders
it goes through sanitize_html; moderation sees strip_markup output; cards
show create_snippet output.
"""

import html
import re
from html.parser import HTMLParser
from typing import Dict, List, Optional, Tuple

ALLOWED_TAGS = frozenset({
    "a", "b", "blockquote", "br", "code", "em", "h1", "h2", "h3", "h4",
    "h5", "h6", "hr", "i", "li", "ol", "p", "pre", "s", "span", "strike",
    "strong", "sub", "sup", "u", "ul",
})

VOID_TAGS = frozenset({"br", "hr"})

# Removed together with everything inside them
DROP_CONTENT_TAGS = frozenset({
    "script", "style", "iframe", "object", "embed", "noscript", "template",
    "textarea", "select", "svg", "math", "frame", "frameset", "applet",
})

ALLOWED_ATTRIBUTES: Dict[str, frozenset] = {
    "a": frozenset({"href", "target", "rel", "class"}),
    "*": frozenset({"class"}),
}

SAFE_URL_SCHEMES = ("http", "https", "mailto", "tel")

_MARKUP_RE = re.compile(r"<[^>]*>?")
_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_URL_NOISE_RE = re.compile(r"[\x00-\x20\x7f]+")


def _is_safe_url(value: str) -> bool:
    compact = _URL_NOISE_RE.sub("", html.unescape(value))
    match = _SCHEME_RE.match(compact)
    if not match:
        # relative URL or fragment
        return True
    return match.group(1).lower() in SAFE_URL_SCHEMES


def _allowed_attrs(tag: str) -> frozenset:
    return ALLOWED_ATTRIBUTES.get(tag, ALLOWED_ATTRIBUTES["*"])


class _Sanitizer(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.out: List[str] = []
        self.open_tags: List[str] = []
        self.skip_tag: Optional[str] = None
        self.skip_depth = 0

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]):
        if self.skip_tag:
            if tag == self.skip_tag:
                self.skip_depth += 1
            return
        if tag in DROP_CONTENT_TAGS:
            self.skip_tag = tag
            self.skip_depth = 1
            return
        if tag not in ALLOWED_TAGS:
            return

        kept = []
        allowed = _allowed_attrs(tag)
        for name, value in attrs:
            name = name.lower()
            if name not in allowed or value is None:
                continue
            if name == "href" and not _is_safe_url(value):
                continue
            kept.append((name, value))

        if tag == "a" and any(name == "target" for name, _ in kept):
            kept = [(n, v) for n, v in kept if n != "rel"]
            kept.append(("rel", "noopener noreferrer"))

        rendered = "".join(f' {name}="{html.escape(value, quote=True)}"' for name, value in kept)
        self.out.append(f"<{tag}{rendered}>")
        if tag not in VOID_TAGS:
            self.open_tags.append(tag)

    def handle_startendtag(self, tag, attrs):
        if self.skip_tag or tag in DROP_CONTENT_TAGS:
            return
        self.handle_starttag(tag, attrs)
        if tag in ALLOWED_TAGS and tag not in VOID_TAGS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str):
        if self.skip_tag:
            if tag == self.skip_tag:
                self.skip_depth -= 1
                if self.skip_depth == 0:
                    self.skip_tag = None
            return
        if tag not in self.open_tags:
            return
        # close anything left open inside this element
        while self.open_tags:
            current = self.open_tags.pop()
            self.out.append(f"</{current}>")
            if current == tag:
                break

    def handle_data(self, data: str):
        if not self.skip_tag:
            self.out.append(html.escape(data, quote=False))

    def result(self) -> str:
        self.close()
        while self.open_tags:
            self.out.append(f"</{self.open_tags.pop()}>")
        return "".join(self.out)


class _TextExtractor(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []
        self.skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in DROP_CONTENT_TAGS:
            self.skip_depth += 1

    def handle_endtag(self, tag):
        if tag in DROP_CONTENT_TAGS and self.skip_depth:
            self.skip_depth -= 1

    def handle_data(self, data):
        if not self.skip_depth:
            self.parts.append(data)

    def text(self) -> str:
        self.close()
        return "".join(self.parts)


def sanitize_html(value: Optional[str]) -> str:
    """Allow-list sanitize user-submitted HTML for display"""
    if not value:
        return ""
    parser = _Sanitizer()
    parser.feed(value)
    return parser.result()


def strip_markup(value: Optional[str]) -> str:
    """Replace every tag with a space; entities are left as written"""
    if not value:
        return ""
    return _MARKUP_RE.sub(" ", value)


def html_to_text(value: Optional[str]) -> str:
    """Text content of an HTML fragment with entities decoded"""
    if not value:
        return ""
    parser = _TextExtractor()
    parser.feed(value)
    return parser.text()


def create_snippet(value: Optional[str], max_length: int = 160) -> str:
    """Plain-text preview of a rich-text body"""
    return html_to_text(value).strip()[:max_length]


__all__ = [
    "ALLOWED_TAGS",
    "sanitize_html",
    "strip_markup",
    "html_to_text",
    "create_snippet",
]
