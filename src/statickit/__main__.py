from statickit.cli.main import cli

cli()
