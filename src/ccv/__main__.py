"""Allow ``python -m ccv``."""

from ccv.cli import app

app()
