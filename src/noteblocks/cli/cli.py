"""CLI entrypoint: Typer app definition and command registration"""

import typer

from noteblocks.cli.commands import (
    configure_logging, export_cmd, index_cmd, init_cmd, query_cmd, segment_cmd,
)


app = typer.Typer(name="noteblocks", no_args_is_help=True, help="Segment notes into typed blocks and index them")

app.callback()(configure_logging)
app.command(name="segment")(segment_cmd)
app.command(name="index")(index_cmd)
app.command(name="query")(query_cmd)
app.command(name="export")(export_cmd)
app.command(name="init")(init_cmd)
