from commitmsg.cli import app

app()
