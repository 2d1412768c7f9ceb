"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdcat.cli.commands import open_cmd, outline_cmd, render_cmd, search_cmd


app = typer.Typer(name="mdcat", no_args_is_help=True, help="Markdown viewer: line-tagged rendering and search")

app.command(name="render")(render_cmd)
app.command(name="search")(search_cmd)
app.command(name="outline")(outline_cmd)
app.command(name="open")(open_cmd)
