"""Pipeline orchestration: front-matter, parse, the ordered enrichment passes, and build output"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional

from mdforge.config import Settings
from mdforge.core.diagnostics import Diagnostics
from mdforge.core.export import write_outputs
from mdforge.core.models import Document
from mdforge.core.parse import discover_files, parse_front_matter, parse_markdown
from mdforge.core.passes.extensions import apply_extensions
from mdforge.core.passes.footnotes import link_footnotes
from mdforge.core.passes.highlight import Highlighter, PygmentsHighlighter, highlight_code_blocks
from mdforge.core.passes.links import classify_links
from mdforge.core.passes.metadata import assemble_metadata
from mdforge.core.passes.tasks import render_tasks_and_figures
from mdforge.core.passes.toc import build_toc
from mdforge.core.passes.typography import apply_typography
from mdforge.crud.authors import AuthorRegistry
from mdforge.errors import CompileError


logger = logging.getLogger(__name__)


@dataclass
class CompiledDocument:
    document:    Document
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class BuildResult:
    source:      Path
    html_path:   Optional[Path]
    diagnostics: Diagnostics
    written:     list[Path] = field(default_factory=list)
    error:       Optional[CompileError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def compile_document(
    raw: str,
    settings: Optional[Settings] = None,
    registry: Optional[AuthorRegistry] = None,
    highlighter: Optional[Highlighter] = None,
    source_path: Optional[Path] = None,
    today: Optional[date] = None,
    ) -> CompiledDocument:
    """Run front-matter extraction, parsing and every enrichment pass over one document.

    Front-matter and parse failures raise CompileError before any pass runs.
    Everything after that only records warnings.
    """
    settings = settings or Settings()
    highlighter = highlighter or PygmentsHighlighter(settings.highlight_style)

    front_matter, body = parse_front_matter(raw)
    document = parse_markdown(body, settings.parser_config)
    document.source_path = source_path

    diagnostics = Diagnostics()
    # Order matters: each pass relies on the tree shape left by the previous one.
    apply_extensions(document, diagnostics)
    apply_typography(document, diagnostics)
    build_toc(document, diagnostics)
    link_footnotes(document, diagnostics)
    classify_links(document, settings.domain, diagnostics)
    highlight_code_blocks(document, highlighter, diagnostics)
    render_tasks_and_figures(document, diagnostics)
    assemble_metadata(document, front_matter, registry, diagnostics, settings.words_per_minute, today)

    logger.info("Compiled %s with %d warning(s)", source_path or "<string>", len(diagnostics))
    return CompiledDocument(document=document, diagnostics=diagnostics)


def compile_file(
    path: Path,
    settings: Optional[Settings] = None,
    registry: Optional[AuthorRegistry] = None,
    highlighter: Optional[Highlighter] = None,
    ) -> CompiledDocument:
    """Read path as UTF-8 and compile it; I/O errors surface as CompileError."""
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CompileError(f"Cannot read {path}: {e}") from e
    return compile_document(raw, settings, registry, highlighter, source_path=path)


def run_build(
    path: str,
    settings: Settings,
    registry: Optional[AuthorRegistry] = None,
    ) -> list[BuildResult]:
    """Compile every markdown file under path and write its outputs to settings.out_dir.

    Files are compiled one at a time. A fatal error is recorded on that file's
    result and the build moves on; the failed file gets no output.
    """
    files = discover_files(Path(path))
    if not files:
        raise CompileError(f"No markdown files found at {path}")

    highlighter = PygmentsHighlighter(settings.highlight_style)
    out_dir = Path(settings.out_dir)
    results = []
    for p in files:
        logger.info("Compiling %s", p)
        try:
            compiled = compile_file(p, settings, registry, highlighter)
        except CompileError as e:
            logger.error("Failed to compile %s: %s", p, e)
            results.append(BuildResult(source=p, html_path=None, diagnostics=Diagnostics(), error=e))
            continue
        written = write_outputs(compiled.document, out_dir, settings, highlighter)
        results.append(BuildResult(source=p, html_path=written[0], diagnostics=compiled.diagnostics, written=written))
    return results
