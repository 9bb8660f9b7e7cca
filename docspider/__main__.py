"""Allow ``python -m docspider``."""

from docspider.cli.app import app

app(prog_name="docspider")
