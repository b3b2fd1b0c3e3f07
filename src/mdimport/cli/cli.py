"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdimport.cli.commands import import_cmd, list_cmd, main_callback


app = typer.Typer(name="mdimport", no_args_is_help=True, help="Import Markdown posts into a Sanity dataset")

app.callback()(main_callback)
app.command(name="import")(import_cmd)
app.command(name="list")(list_cmd)
