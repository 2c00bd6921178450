"""Allow running Backup Kit with ``python -m backupkit``."""

from backupkit.cli import app

app(prog_name="backupkit")
