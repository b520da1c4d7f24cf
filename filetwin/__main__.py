"""
Main entry point for the filetwin CLI.
"""

from filetwin.cli import cli


def main() -> None:
    """Main function for the filetwin CLI."""
    cli()


if __name__ == "__main__":
    main()
