from omnivoice.cli.main import app

app()
