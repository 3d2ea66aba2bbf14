"""Markdown and HTML renderers for generated stories."""

from __future__ import annotations

from html import escape
from pathlib import Path

from nanogen.core.story_generation import Story, StoryChapter

MARKDOWN_FILENAME = "story.md"
HTML_FILENAME = "story.html"


def _chapter_heading(chapter: StoryChapter) -> str:
    return f"Chapter {chapter.number}: {chapter.title}"


def render_markdown(story: Story) -> str:
    """One paragraph per block, chapters under second-level headings."""
    lines: list[str] = [f"# {story.title}", ""]
    for chapter in story.chapters:
        lines.append(f"## {_chapter_heading(chapter)}")
        lines.append("")
        for block in chapter.blocks:
            lines.append(block.text)
            lines.append("")
    lines.append(f"## {story.closing}")
    return "\n".join(lines).strip() + "\n"


def build_page(title: str, body_html: str) -> str:
    """Wrap story HTML in a single self-contained page template."""
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{escape(title)}</title>
  <style>
    :root {{
      color-scheme: light;
      --paper: #f8f5ef;
      --ink: #1c1a17;
      --frame: #d9ccb8;
    }}
    body {{
      margin: 0;
      font-family: Georgia, "Times New Roman", serif;
      background: #ede1cd;
      color: var(--ink);
    }}
    .content {{
      max-width: 840px;
      margin: 2.5rem auto;
      padding: 2rem 1.6rem 2.2rem;
      background: var(--paper);
      border: 1px solid var(--frame);
      line-height: 1.7;
      font-size: 1.1rem;
    }}
    h1 {{
      font-size: 2rem;
      border-bottom: 2px solid var(--frame);
      padding-bottom: 0.3rem;
    }}
    h2 {{ font-size: 1.5rem; margin-top: 2rem; }}
    p {{ margin: 0.8rem 0; }}
    p.dialogue {{ margin: 0.3rem 0; }}
  </style>
</head>
<body>
  <article class="content">
{body_html}
  </article>
</body>
</html>
"""


def render_html(story: Story) -> str:
    html_lines: list[str] = [f"<h1>{escape(story.title)}</h1>"]
    for chapter in story.chapters:
        html_lines.append(f"<h2>{escape(_chapter_heading(chapter))}</h2>")
        for block in chapter.blocks:
            if block.kind == "dialogue":
                html_lines.append(f'<p class="dialogue">{escape(block.text)}</p>')
            else:
                html_lines.append(f"<p>{escape(block.text)}</p>")
    html_lines.append(f"<h2>{escape(story.closing)}</h2>")
    return build_page(story.title, "\n".join(html_lines))


def write_story(story: Story, output_dir: Path) -> tuple[Path, Path]:
    """Write Markdown and HTML renditions, returning their paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    markdown_path = output_dir / MARKDOWN_FILENAME
    html_path = output_dir / HTML_FILENAME
    markdown_path.write_text(render_markdown(story), encoding="utf-8")
    html_path.write_text(render_html(story), encoding="utf-8")
    return markdown_path, html_path
