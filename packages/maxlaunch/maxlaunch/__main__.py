"""Allow ``python -m maxlaunch``."""

from maxlaunch.cli.main import app

app(prog_name="maxlaunch")
