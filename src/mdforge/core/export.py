"""Page assembly and output: Jinja2 page template, AST dump, and static asset copies"""

import json
import logging
import shutil
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader

from mdforge.config import Settings
from mdforge.core.models import Document
from mdforge.core.passes.highlight import PygmentsHighlighter
from mdforge.core.render import HtmlRenderer
from mdforge.core.utils.slug import slugify


logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
PAGE_TEMPLATE = "page.html"
DEFAULT_STYLESHEET = TEMPLATE_DIR / "styles.css"
STYLES_NAME = "styles.css"
LOGO_NAME = "logo.png"


def _environment() -> Environment:
    loader = FileSystemLoader(str(TEMPLATE_DIR))
    return Environment(loader=loader, autoescape=True, trim_blocks=True, lstrip_blocks=True)


def site_url(domain: str) -> str:
    """Base URL for tag and author links; bare domains are served over https."""
    domain = domain.rstrip("/")
    return domain if "://" in domain else f"https://{domain}"


def output_stem(document: Document) -> str:
    if document.source_path is not None:
        return document.source_path.stem
    return slugify(document.metadata.title) or "index"


def build_page(
    document: Document,
    settings: Settings,
    highlighter: Optional[PygmentsHighlighter] = None,
    renderer: Optional[HtmlRenderer] = None,
    ) -> str:
    """Render the full HTML page for a compiled document."""
    renderer = renderer or HtmlRenderer()
    highlighter = highlighter or PygmentsHighlighter(settings.highlight_style)
    meta = document.metadata
    author_name = (meta.author.name if meta.author else "") or meta.author_key

    template = _environment().get_template(PAGE_TEMPLATE)
    return template.render(
        meta=meta,
        author_name=author_name,
        domain=settings.domain,
        site_url=site_url(settings.domain),
        logo=bool(settings.logo),
        code_css=highlighter.stylesheet(),
        toc=renderer.render_toc(document.toc),
        body=renderer.render(document.children),
        footnotes=renderer.render_footnotes(document),
    )


def build_ast(document: Document) -> dict[str, Any]:
    """Debug dump of the enriched tree, metadata and TOC."""
    return {
        "source": str(document.source_path) if document.source_path else None,
        "metadata": document.metadata.model_dump(mode="json"),
        "toc": [asdict(entry) for entry in document.toc],
        "children": [node.to_dict() for node in document.children],
        "footnotes": [node.to_dict() for node in document.footnotes],
    }


def copy_asset(src: Path, dest: Path, force: bool = False) -> bool:
    """Copy src to dest unless dest already exists (and force is off). Returns True if copied."""
    if dest.exists() and not force:
        logger.info("Keeping existing %s", dest)
        return False
    if not src.is_file():
        logger.warning("Asset %s not found; skipping", src)
        return False
    shutil.copyfile(src, dest)
    logger.info("Copied %s -> %s", src, dest)
    return True


def write_outputs(
    document: Document,
    out_dir: Path,
    settings: Settings,
    highlighter: Optional[PygmentsHighlighter] = None,
    ) -> list[Path]:
    """Write <stem>.html (and optionally <stem>.ast.json) plus styles/logo.

    Returns the written paths, the HTML page first.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = output_stem(document)

    html_path = out_dir / f"{stem}.html"
    html_path.write_text(build_page(document, settings, highlighter), encoding="utf-8")
    written = [html_path]

    if settings.output_ast:
        ast_path = out_dir / f"{stem}.ast.json"
        ast_path.write_text(json.dumps(build_ast(document), indent=2, ensure_ascii=False), encoding="utf-8")
        written.append(ast_path)

    stylesheet = Path(settings.stylesheet) if settings.stylesheet else DEFAULT_STYLESHEET
    if copy_asset(stylesheet, out_dir / STYLES_NAME, settings.force):
        written.append(out_dir / STYLES_NAME)
    if settings.logo and copy_asset(Path(settings.logo), out_dir / LOGO_NAME, settings.force):
        written.append(out_dir / LOGO_NAME)
    return written
