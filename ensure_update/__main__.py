from ensure_update.cli import app

app()
