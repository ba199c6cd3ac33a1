from gsync.cli import app

app(prog_name="gsync")
