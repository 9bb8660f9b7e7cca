"""Typer application entry point for the docspider CLI."""

import typer

from docspider.cli.commands import chunk as chunk_command
from docspider.cli.commands import crawl as crawl_command
from docspider.cli.commands import seeds as seeds_command

app = typer.Typer(no_args_is_help=True, name="docspider")

# Direct commands, not sub-typers
app.command(name="crawl", help="Crawl the documentation site and write chunks")(
    crawl_command.crawl_command
)
app.command(name="chunk", help="Chunk a local markdown file without crawling")(
    chunk_command.chunk_command
)
app.command(name="seeds", help="List seed catalog sections")(
    seeds_command.seeds_command
)


if __name__ == "__main__":
    app()
