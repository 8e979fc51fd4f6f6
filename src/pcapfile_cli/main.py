"""
pcapfile CLI - main entry point.
"""
import click

from .inspect import inspect


@click.group()
def cli():
    """pcapfile - read legacy pcap capture files."""
    pass


cli.add_command(inspect)

if __name__ == "__main__":
    cli()
