"""Markdown to HTML conversion for Drive's HTML import"""

import markdown

MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body>
{body}
</body>
</html>
"""


def markdown_to_html_body(content: str) -> str:
    """Render markdown to an HTML fragment"""
    return markdown.markdown(content, extensions=MARKDOWN_EXTENSIONS, output_format="html")


def markdown_to_html(content: str) -> str:
    """Render markdown to a complete HTML document"""
    return HTML_TEMPLATE.format(body=markdown_to_html_body(content))


def append_html(existing_html: str, content: str) -> str:
    """Append rendered markdown to an exported HTML document

    The fragment goes right before ``</body>``; without a body tag it is
    appended at the end.
    """
    fragment = markdown_to_html_body(content)
    marker = existing_html.lower().rfind("</body>")
    if marker == -1:
        return existing_html + fragment
    return existing_html[:marker] + fragment + existing_html[marker:]
