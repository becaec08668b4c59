"""Command line interface: ``statement-convert``."""

import sys

import click

from statement_converter.convert import Format, convert
from statement_converter.errors import StatementError
from statement_converter.logging_setup import configure_logging

FORMAT_CHOICE = click.Choice([fmt.value for fmt in Format])


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--input", "input_file", type=click.File("rb"), default="-",
              help="Statement to read, '-' for stdin.")
@click.option("--output", "output_file", type=click.File("wb", lazy=True), default="-",
              help="Where to write the result, '-' for stdout.")
@click.option("--in-format", required=True, type=FORMAT_CHOICE, help="Format of the input.")
@click.option("--out-format", required=True, type=FORMAT_CHOICE, help="Format of the output.")
@click.option("--debug", is_flag=True, help="Log parsing details to stderr.")
@click.version_option(package_name="statement-converter")
def main(input_file, output_file, in_format, out_format, debug):
    """Convert a bank statement between CSV, MT940 and camt.053."""
    configure_logging("DEBUG" if debug else None)
    try:
        convert(input_file, output_file, in_format, out_format)
    except StatementError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
