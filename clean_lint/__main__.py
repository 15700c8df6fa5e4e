from clean_lint.cli import cli

cli()
