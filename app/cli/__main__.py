from app.cli.cli import app

app()
