"""Allow hecpump to be executable through `python -m hecpump`."""
from hecpump.cli import cli


if __name__ == "__main__":  # pragma: no cover
    cli(prog_name="hecpump")
