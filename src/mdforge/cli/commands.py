"""CLI command implementations"""

import logging
from typing import Annotated, Optional

import typer

from mdforge.config import Settings, load_config
from mdforge.core.pipeline import run_build
from mdforge.crud.authors import add_author, list_authors, open_registry
from mdforge.crud.database import get_session, get_url, init_db, make_engine, reset_db
from mdforge.errors import CompileError


LOG_FORMAT = "[%(levelname)s]: %(message)s"


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING, format=LOG_FORMAT, force=True)


def _db_url(settings: Settings) -> str:
    """The registry URL when authors_db is a database, else MDFORGE_DB_URL or the SQLite default."""
    return settings.authors_db if "://" in settings.authors_db else get_url()


def build_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file or directory to compile")],
    out: Annotated[Optional[str], typer.Option("--out-dir", "-o", help="Output directory")] = None,
    domain: Annotated[Optional[str], typer.Option("--domain", "-d", help="Site domain for link classification")] = None,
    authors_db: Annotated[Optional[str], typer.Option("--authors-db", "-a", help="Author registry: .yaml file or database URL")] = None,
    stylesheet: Annotated[Optional[str], typer.Option("--stylesheet", help="styles.css to copy into the output")] = None,
    logo: Annotated[Optional[str], typer.Option("--logo", help="logo.png to copy into the output")] = None,
    force: Annotated[bool, typer.Option("--force", "-F", help="Overwrite existing styles/logo")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress at INFO level")] = False,
    output_ast: Annotated[bool, typer.Option("--output-ast", "-O", help="Also write <stem>.ast.json")] = False,
    ):
    """Compile markdown to HTML pages: front-matter, enrichment passes, page template."""
    settings = _settings(overrides={
        "out_dir": out, "domain": domain, "authors_db": authors_db,
        "stylesheet": stylesheet, "logo": logo,
        "force": force or None, "verbose": verbose or None, "output_ast": output_ast or None,
    })
    _configure_logging(settings.verbose)

    try:
        registry = open_registry(settings.authors_db)
    except ValueError as e:
        _fail("Cannot open author registry", e)

    try:
        results = run_build(path, settings, registry)
    except CompileError as e:
        _fail(str(e))
    except OSError as e:
        _fail("Build failed", e)

    failed = [r for r in results if not r.ok]
    for result in results:
        if not result.ok:
            typer.echo(f"  {result.source}: {result.error}", err=True)
            continue
        warnings = f" ({len(result.diagnostics)} warning(s))" if len(result.diagnostics) else ""
        typer.echo(f"  {result.source} -> {result.html_path}{warnings}")
    typer.echo(f"Built {len(results) - len(failed)} document(s) to {settings.out_dir}/")
    if failed:
        _fail(f"{len(failed)} document(s) failed to compile")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate the authors table")] = False,
    ):
    """Initialize the author registry schema. Use --reset to clear existing authors."""
    settings = _settings()
    url = _db_url(settings)
    engine = make_engine(url)
    if reset:
        reset_db(engine)
        typer.echo("Existing authors cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {url}")


def add_author_cmd(
    key: Annotated[str, typer.Argument(help="Author key used in front-matter `author:`")],
    name: Annotated[str, typer.Option("--name", help="Display name")] = "",
    avatar: Annotated[str, typer.Option("--avatar", help="Avatar image URL")] = "",
    bio: Annotated[str, typer.Option("--bio", help="Short biography")] = "",
    ):
    """Add or update an author in the SQL registry."""
    settings = _settings()
    engine = make_engine(_db_url(settings))
    init_db(engine)
    with get_session(engine) as session:
        _, status = add_author(session, key, name=name, avatar=avatar, bio=bio)
        session.commit()
    typer.echo(f"  {status}: {key}")


def authors_cmd():
    """List authors registered in the SQL registry."""
    settings = _settings()
    engine = make_engine(_db_url(settings))
    init_db(engine)
    with get_session(engine) as session:
        authors = list_authors(session)
    if not authors:
        typer.echo("No authors registered.")
        raise typer.Exit(1)
    for author in authors:
        typer.echo(f"{author.key}\t{author.name}")
