"""HTML rendering of go-import meta tags."""

from __future__ import annotations

from html import escape
from typing import Iterable

from .models import ImportDirective

_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta http-equiv="Content-Type" content="text/html; charset=utf-8">
{metas}
</head>
<body></body>
</html>
"""


def render_meta_tag(directive: ImportDirective) -> str:
    return f'<meta name="go-import" content="{escape(directive.meta_content, quote=True)}">'


def render_meta(imports: Iterable[ImportDirective]) -> str:
    """Render one go-import meta tag per directive, in order, as an HTML page."""

    return _PAGE.format(metas="\n".join(render_meta_tag(d) for d in imports))
