from site_purge.cli import cli

if __name__ == "__main__":
    cli()
