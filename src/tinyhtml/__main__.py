from tinyhtml.cli import run

run()
