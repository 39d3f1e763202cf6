"""HTML escaping and allow-list sanitizing for admin-authored content.

Rich-text props (hero left column, form heading/intro, success message)
are stored as HTML written in the admin editor. They are cleaned with
bleach before being placed in a public page; every other value is escaped.
"""

import html as html_module
import json
import re

import bleach
from bleach.css_sanitizer import CSSSanitizer

ALLOWED_TAGS = frozenset({
    "a", "b", "br", "em", "h1", "h2", "h3", "h4", "i", "li", "ol", "p",
    "span", "strong", "u", "ul", "div", "blockquote", "s", "sub", "sup",
})

ALLOWED_ATTRS = {
    "a": ["href", "title", "target", "rel"],
    "*": ["class", "style"],
}

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto", "tel"})

_CSS_SANITIZER = CSSSanitizer(
    allowed_css_properties=[
        "color", "background-color", "font-size", "font-weight", "font-style",
        "text-align", "text-decoration", "line-height", "margin", "padding",
    ],
)

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{3,8}$")
_FUNC_COLOR_RE = re.compile(r"^(rgb|rgba|hsl|hsla)\([0-9.,%\s]+\)$")
_NAMED_COLOR_RE = re.compile(r"^[a-zA-Z]+$")


def escape_html(value: object | None) -> str:
    """Escape a value for safe HTML insertion."""
    if value is None:
        return ""
    return html_module.escape(str(value))


def sanitize_rich_text(raw_html: str | None) -> str:
    """Clean admin-authored HTML down to a formatting allow-list.

    Disallowed tags are stripped (their text kept), event handler
    attributes and script URLs are dropped.
    """
    if not raw_html:
        return ""
    return bleach.clean(
        str(raw_html),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        css_sanitizer=_CSS_SANITIZER,
        strip=True,
    )


def sanitize_url(url: str | None) -> str:
    """Escape a URL, replacing script-capable schemes with '#'."""
    if not url:
        return "#"
    url = str(url).strip()
    if url.lower().startswith(("javascript:", "data:", "vbscript:")):
        return "#"
    return escape_html(url)


def sanitize_color(color: str | None, default: str = "#1f2937") -> str:
    """Accept hex, rgb/hsl functions and named colors; otherwise the default."""
    if not color:
        return default
    color = str(color).strip()
    if _HEX_COLOR_RE.match(color) or _NAMED_COLOR_RE.match(color):
        return color
    if _FUNC_COLOR_RE.match(color):
        return escape_html(color)
    return default


def json_for_script(data: object) -> str:
    """Serialize data for embedding inside a <script> element."""
    return (
        json.dumps(data, default=str)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )
