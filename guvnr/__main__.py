from guvnr.cli import app

app()
