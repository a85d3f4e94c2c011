from pipedeck.cli import app

app(prog_name="pipedeck")
