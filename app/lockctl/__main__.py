"""Allow running lockctl with ``python -m lockctl``."""

from lockctl.cli.main import app

app()
