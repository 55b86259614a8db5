"""simpil command line: run, format and interactively evaluate simpIL."""

from __future__ import annotations

import logging
import re
import sys

import click

from simpil.export import to_text
from simpil.model import IDENTIFIER_PATTERN, RESERVED_WORDS
from simpil.parse import ParseError, parse_program
from simpil.simulate import ExecutionEngine, ExecutionState, Status, initial_state

logger = logging.getLogger(__name__)

EXIT_FAULT = 1
EXIT_BUDGET = 2

REPL_PROMPT = "> "
REPL_MAX_STEPS = 100_000


def _parse_input(ctx, param, values) -> dict[str, list[int]]:
    """Turn repeated ``NAME=1,2,3`` options into an inputs mapping."""
    streams: dict[str, list[int]] = {}
    for item in values:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=V1,V2,..., got {item!r}")
        if not re.fullmatch(IDENTIFIER_PATTERN, name) or name in RESERVED_WORDS:
            raise click.BadParameter(f"input name {name!r} is not a simpIL identifier")
        if name in streams:
            raise click.BadParameter(f"input '{name}' given more than once")
        try:
            streams[name] = [int(v) for v in raw.split(",") if v.strip()]
        except ValueError:
            raise click.BadParameter(f"non-integer value in {item!r}") from None
    return streams


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every executed statement")
def main(verbose):
    """simpIL interpreter."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command("run")
@click.argument("source_file", type=click.File("r"))
@click.option(
    "--input", "-i", "inputs", multiple=True, callback=_parse_input,
    help="Input source as NAME=V1,V2,... (repeatable)",
)
@click.option("--max-steps", type=click.IntRange(min=0), default=None, help="Step budget")
@click.option("--json", "json_output", is_flag=True, help="Print the final state as JSON")
def run_command(source_file, inputs, max_steps, json_output):
    """Run a simpIL program and print its final state."""
    try:
        program = parse_program(source_file.read())
        state = initial_state(inputs=inputs)
        logger.debug("Loaded %d statements from %s", len(program), source_file.name)
    except (ParseError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_FAULT)

    ExecutionEngine(program).run(state, max_steps=max_steps)
    snapshot = state.snapshot()

    if json_output:
        click.echo(snapshot.model_dump_json(indent=2))
    else:
        click.echo(f"status: {snapshot.status.value}")
        if snapshot.fault is not None:
            click.echo(f"fault: {snapshot.fault.value} ({snapshot.fault_message})")
        click.echo(f"pc: {snapshot.pc}")
        click.echo(f"steps: {snapshot.steps}")
        for name, value in sorted(snapshot.env.items()):
            click.echo(f"  {name} = {value}")
        for address, value in snapshot.memory.items():
            click.echo(f"  [{address}] = {value}")

    if state.status == Status.HALTED_ERROR:
        sys.exit(EXIT_FAULT)
    if state.status == Status.RUNNING:
        sys.exit(EXIT_BUDGET)


@main.command("fmt")
@click.argument("source_file", type=click.File("r"))
def fmt_command(source_file):
    """Print a simpIL program in canonical form."""
    try:
        program = parse_program(source_file.read())
    except ParseError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_FAULT)
    click.echo(to_text(program), nl=False)


@main.command("repl")
@click.option(
    "--input", "-i", "inputs", multiple=True, callback=_parse_input,
    help="Input source as NAME=V1,V2,... (repeatable)",
)
@click.option(
    "--max-steps", type=click.IntRange(min=0), default=REPL_MAX_STEPS, show_default=True,
    help="Step budget per line",
)
def repl_command(inputs, max_steps):
    """Read simpIL lines from stdin and run each against one shared state.

    Every line is a program of its own, so jump targets count from the
    start of that line.  Variables, memory and input cursors carry over.
    """
    try:
        shared = initial_state(inputs=inputs)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_FAULT)
    stdin = click.get_text_stream("stdin")
    click.echo(REPL_PROMPT, nl=False)
    for line in stdin:
        if line.strip():
            _repl_line(line, shared, max_steps)
        click.echo(REPL_PROMPT, nl=False)
    click.echo()


def _repl_line(line: str, shared: ExecutionState, max_steps: int) -> None:
    try:
        program = parse_program(line)
    except ParseError as exc:
        click.echo(f"Error: {exc}", err=True)
        return

    env_before = dict(shared.env)
    memory_before = dict(shared.memory)
    state = ExecutionState(env=shared.env, memory=shared.memory, inputs=shared.inputs)
    ExecutionEngine(program).run(state, max_steps=max_steps)

    for name, value in sorted(state.env.items()):
        if env_before.get(name) != value:
            click.echo(f"{name} = {value}")
    for address, value in sorted(state.memory.items()):
        if memory_before.get(address) != value:
            click.echo(f"[{address}] = {value}")
    if state.status == Status.HALTED_ERROR:
        click.echo(f"fault: {state.fault.value} ({state.fault_message})")
    elif state.status == Status.RUNNING:
        click.echo(f"step budget exhausted after {state.steps} steps")


if __name__ == "__main__":
    main()
