"""
c4cc - C4 Compiler Command-Line Interface
=========================================

This module implements the command-line interface for the C4 compiler.
It compiles a source file into an instruction listing that c4run can
execute.

Usage Examples
--------------
Basic compilation:
    $ c4cc hello.c

With output file:
    $ c4cc hello.c -o hello.lst

Listing to stdout:
    $ c4cc hello.c -o -

Dump the token stream:
    $ c4cc --tokens hello.c

Full pipeline:
    $ c4cc hello.c && c4run --listing hello.lst
"""

from pathlib import Path
from typing import Optional

import click

from pyc4 import __version__
from pyc4.compiler import C4Compiler, CompilerOptions, CLexer
from pyc4.cli.errors import handle_cli_exception, setup_logging


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, allow_dash=True, path_type=Path),
    help="Output listing file, '-' for stdout (default: input.lst)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum expression nesting depth (default: $PYC4_MAX_DEPTH or 64)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c4cc")
def main(
    input_file: Path,
    output: Optional[Path],
    tokens: bool,
    max_depth: Optional[int],
    verbose: bool,
) -> None:
    """
    Compile C4 source code to a stack machine listing.

    INPUT_FILE is the C4 source file (.c) to compile.

    \b
    Examples:
        c4cc hello.c                 # Outputs hello.lst
        c4cc hello.c -o out.lst      # Specify output file
        c4cc hello.c -o -            # Write listing to stdout
        c4cc --tokens hello.c        # Dump tokens

    \b
    Supported language:
        printf(expr);    print the value of expr
        return expr;     stop with the value of expr
        expr uses integer literals and + - * / %
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".lst")

    options = CompilerOptions.from_env()
    if max_depth is not None:
        options.max_expression_depth = max_depth

    try:
        if verbose:
            click.echo(f"Compiling {input_file}...", err=True)

        source = input_file.read_text(encoding="utf-8")

        # Token dump mode
        if tokens:
            lexer = CLexer(source, str(input_file))
            for token in lexer.tokenize():
                click.echo(repr(token))
            return

        compiler = C4Compiler(options)
        result = compiler.compile_source(source, str(input_file))

        if str(output) == "-":
            click.echo(result.listing, nl=False)
            return

        output.write_text(result.listing, encoding="utf-8")

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens", err=True)
            click.echo(f"Emitted: {len(result.instructions)} instructions", err=True)

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
