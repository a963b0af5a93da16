"""
c4run - Stack Machine Runner Command-Line Interface
===================================================

Compiles and runs a C4 source file, or runs a listing produced by c4cc.
Program output goes to stdout, diagnostics go to stderr.

Usage Examples
--------------
Run a source file:
    $ c4run hello.c

Run a compiled listing:
    $ c4run --listing hello.lst

Trace every instruction:
    $ c4run --trace hello.c
"""

from pathlib import Path
from typing import Optional

import click

from pyc4 import __version__
from pyc4.compiler import C4Compiler, CompilerOptions, Instruction
from pyc4.vm import StackMachine, MachineOptions
from pyc4.cli.errors import handle_cli_exception, setup_logging


def _trace(ip: int, instruction: Instruction, machine: StackMachine) -> bool:
    """Echo one trace line to stderr before the instruction runs."""
    click.echo(f"{ip:04d}  {str(instruction):<12} stack={machine.stack}", err=True)
    return True


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-l", "--listing",
    is_flag=True,
    help="Treat INPUT_FILE as an instruction listing instead of source",
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Print each instruction and the stack to stderr as it runs (also $PYC4_TRACE)",
)
@click.option(
    "--max-stack",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum operand stack depth (default: $PYC4_MAX_STACK or 1024)",
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
@click.version_option(version=__version__, prog_name="c4run")
def main(
    input_file: Path,
    listing: bool,
    trace: bool,
    max_stack: Optional[int],
    max_depth: Optional[int],
    verbose: bool,
) -> None:
    """
    Run a C4 program on the stack machine.

    INPUT_FILE is a C4 source file, or a listing with --listing.

    \b
    Examples:
        c4run hello.c                # Compile and run
        c4run --listing hello.lst    # Run a c4cc listing
        c4run --trace hello.c        # Trace execution

    \b
    Exit codes:
        0  program ran to completion
        1  compile error or runtime fault
        2  invalid arguments or unreadable input
        3  internal error
    """
    setup_logging(verbose)

    machine_options = MachineOptions.from_env()
    if max_stack is not None:
        machine_options.max_stack_depth = max_stack

    compiler_options = CompilerOptions.from_env()
    if max_depth is not None:
        compiler_options.max_expression_depth = max_depth

    try:
        text = input_file.read_text(encoding="utf-8")

        if listing:
            machine = StackMachine.from_listing(text, machine_options)
        else:
            compiler = C4Compiler(compiler_options)
            result = compiler.compile_source(text, str(input_file))
            machine = StackMachine(result.instructions, machine_options)

        if verbose:
            click.echo(f"Running {input_file}: {len(machine.program)} instructions", err=True)

        if trace or machine_options.trace:
            machine.on_instruction = lambda ip, instruction: _trace(ip, instruction, machine)

        state = machine.run()

        if verbose:
            click.echo(f"Halted after {state.steps} steps", err=True)
            if machine.exit_value is not None:
                click.echo(f"Exit value: {machine.exit_value}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose, error_type="Execution")


if __name__ == "__main__":
    main()
