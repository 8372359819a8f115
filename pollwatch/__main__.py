from pollwatch.cli import app


app(prog_name="pollwatch")
