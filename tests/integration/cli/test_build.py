"""Integration tests for the CLI commands (build, init, add-author, authors)"""

from typer.testing import CliRunner

from mdforge.cli.cli import app


runner = CliRunner()

DOC = """\
---
title: Hello
author: jdoe
tags: [demo]
avatar: /img/jdoe.png
---

# Hello

World with a [link](https://other.org).
"""


def test_help_lists_commands():
    """--help shows every registered command."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in ("build", "init", "add-author", "authors"):
        assert name in result.output


def test_build_cmd_writes_html(tmp_path, monkeypatch):
    """build compiles a file to <stem>.html and copies the stylesheet."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "hello.md").write_text(DOC)

    result = runner.invoke(app, ["build", "hello.md", "--out-dir", "site", "--domain", "example.com"])

    assert result.exit_code == 0, result.output
    html = (tmp_path / "site" / "hello.html").read_text()
    assert "<title>Hello</title>" in html
    assert 'target="_blank"' in html
    assert (tmp_path / "site" / "styles.css").exists()
    assert not (tmp_path / "site" / "hello.ast.json").exists()
    assert "Built 1 document(s)" in result.output


def test_build_cmd_output_ast(tmp_path, monkeypatch):
    """-O also writes the AST dump."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "hello.md").write_text(DOC)

    result = runner.invoke(app, ["build", "hello.md", "-o", "site", "-O"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "site" / "hello.ast.json").exists()


def test_build_cmd_directory(tmp_path, monkeypatch):
    """A directory argument compiles every markdown file under it."""
    monkeypatch.chdir(tmp_path)
    docs = tmp_path / "docs"
    (docs / "sub").mkdir(parents=True)
    (docs / "a.md").write_text("# A\n")
    (docs / "sub" / "b.md").write_text("# B\n")

    result = runner.invoke(app, ["build", "docs", "-o", "site"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "site" / "a.html").exists()
    assert (tmp_path / "site" / "b.html").exists()


def test_build_cmd_fatal_error_exits_1(tmp_path, monkeypatch):
    """Invalid front-matter fails the build with exit code 1 and no page."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bad.md").write_text("---\ntitle: Missing keys\n---\nbody\n")

    result = runner.invoke(app, ["build", "bad.md", "-o", "site"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert not (tmp_path / "site" / "bad.html").exists()


def test_build_cmd_reports_failures_after_building_the_rest(tmp_path, monkeypatch):
    """One bad file still lets its siblings build, then the command exits 1."""
    monkeypatch.chdir(tmp_path)
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "bad.md").write_text("---\ntitle: Missing keys\n---\nbody\n")
    (docs / "good.md").write_text("# Good\n")

    result = runner.invoke(app, ["build", "docs", "-o", "site"])

    assert result.exit_code == 1
    assert (tmp_path / "site" / "good.html").exists()
    assert not (tmp_path / "site" / "bad.html").exists()
    assert "Built 1 document(s)" in result.output
    assert "1 document(s) failed to compile" in result.output


def test_build_cmd_uses_sql_registry(tmp_path, monkeypatch):
    """Authors added with add-author resolve during build when authors_db is a URL."""
    monkeypatch.chdir(tmp_path)
    db_url = f"sqlite:///{tmp_path}/test.db"
    monkeypatch.setenv("MDFORGE_AUTHORS_DB", db_url)
    (tmp_path / "hello.md").write_text(DOC)

    added = runner.invoke(app, ["add-author", "jdoe", "--name", "Jane Doe"])
    assert added.exit_code == 0, added.output
    assert "created: jdoe" in added.output

    result = runner.invoke(app, ["build", "hello.md", "-o", "site"])
    assert result.exit_code == 0, result.output
    assert "Jane Doe" in (tmp_path / "site" / "hello.html").read_text()


def test_init_and_authors_cmd(tmp_path, monkeypatch):
    """init creates the table; authors lists what add-author stored."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MDFORGE_DB_URL", f"sqlite:///{tmp_path}/test.db")

    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    assert "Database initialized" in result.output

    empty = runner.invoke(app, ["authors"])
    assert empty.exit_code == 1
    assert "No authors registered." in empty.output

    runner.invoke(app, ["add-author", "asmith", "--name", "Alex Smith"])
    listed = runner.invoke(app, ["authors"])
    assert listed.exit_code == 0
    assert "asmith\tAlex Smith" in listed.output

    reset = runner.invoke(app, ["init", "--reset"])
    assert reset.exit_code == 0
    assert "Existing authors cleared." in reset.output
