"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdforge.cli.commands import add_author_cmd, authors_cmd, build_cmd, init_cmd


app = typer.Typer(name="mdforge", no_args_is_help=True, help="Extended Markdown to HTML page compiler")

app.command(name="build")(build_cmd)
app.command(name="init")(init_cmd)
app.command(name="add-author")(add_author_cmd)
app.command(name="authors")(authors_cmd)
