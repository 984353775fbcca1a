"""Fatal compile errors: raised before any enrichment pass runs"""


class CompileError(ValueError):
    """Base for errors that abort compilation of a single document."""


class FrontMatterError(CompileError):
    """Front-matter is not valid YAML, not a mapping, or lacks required keys."""


class MarkdownParseError(CompileError):
    """The Markdown parser failed on the document body."""
