"""Markdown + LaTeX rendering of question text for the candidate view.

Question text is authored as Markdown with ``$...$`` math. The renderer turns
it into HTML and leaves the math for MathJax to typeset at display time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html

from markdown_it import MarkdownIt

_MATHJAX_SCRIPT = (
    "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"
)


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments or full documents."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""
        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No question text.</em></p>"
        return self._markdown.render(sanitized)

    def render_question(self, question_text: str, *, heading: str, font_size: int = 14) -> str:
        """Render a question as a full document headed by e.g. 'Question 2 of 5 - 3 pts'."""
        body = f"<p class=\"heading\">{html.escape(heading)}</p>{self.render_fragment(question_text)}"
        return self.wrap_with_mathjax(body, font_size=font_size)

    def wrap_with_mathjax(self, body_html: str, title: str = "QuizPortal", font_size: int = 14) -> str:
        """Wrap a fragment inside a minimal HTML document that loads MathJax."""
        return f"""<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>{html.escape(title)}</title>
    <style>
      body {{ font-family: 'Segoe UI', system-ui, sans-serif; margin: 0; padding: 1rem; }}
      .question-html {{ font-size: {font_size}pt; line-height: 1.5; }}
      .heading {{ font-size: 0.8em; color: #666666; }}
    </style>
    <script>
      window.MathJax = {{ tex: {{ inlineMath: [['$','$']], displayMath: [['$$','$$']] }}, svg: {{ fontCache: 'global' }} }};
    </script>
    <script defer src=\"{_MATHJAX_SCRIPT}\"></script>
  </head>
  <body>
    <div class=\"question-html\">{body_html}</div>
  </body>
</html>"""


renderer = MarkdownMathRenderer()
