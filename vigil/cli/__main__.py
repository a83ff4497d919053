"""Vigil CLI - Main Entry Point.

Commands:
    levels   - List error levels and their labels
    diagnose - Run the missing-symbol heuristics on a fatal message
"""

import sys

import click

from . import __version__, __cli_name__
from ..levels import LABELS, ErrorLevel, is_deprecation, is_fatal
from ..loaders import PrefixLoader
from ..runtime import InMemoryRuntime
from ..suggest import DiagnosticSuggester


def _parse_root(value: str) -> tuple[str, str]:
    prefix, sep, directory = value.partition("=")
    if not sep or not directory:
        raise click.BadParameter(f"expected PREFIX=DIR, got {value!r}", param_hint="--root")
    return prefix, directory


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Vigil - runtime error interception and diagnostics."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@cli.command('levels')
def levels_cmd():
    """List error levels and their labels."""
    for level in ErrorLevel:
        if level is ErrorLevel.ALL:
            continue
        code = int(level)
        label = LABELS.get(code, "-")
        tags = []
        if is_fatal(code):
            tags.append(click.style("fatal", fg="red"))
        if is_deprecation(code):
            tags.append(click.style("deprecation", fg="yellow"))
        line = f"{code:>6}  {level.name:<18} {label:<22}"
        click.echo(f"{line} {' '.join(tags)}".rstrip())


@cli.command('diagnose')
@click.argument('message')
@click.option('--root', '-r', 'roots', multiple=True, help='Search root as PREFIX=DIR (repeatable)')
@click.option('--function', '-f', 'functions', multiple=True, help='Name of a defined function (repeatable)')
@click.option('--file', 'file', default='unknown', help='File the error occurred in')
@click.option('--line', 'line', type=int, default=0, help='Line the error occurred on')
@click.pass_context
def diagnose_cmd(ctx, message: str, roots, functions, file: str, line: int):
    """
    Explain a fatal "undefined function" or "not found" MESSAGE.

    Examples:
        vigil diagnose 'Class "App\\Models\\User" not found' --root 'App\\=src'
        vigil diagnose 'Call to undefined function App\\foo()' -f 'App\\Util\\foo'
    """
    runtime = InMemoryRuntime()
    loader = PrefixLoader()
    for value in roots:
        prefix, directory = _parse_root(value)
        loader.add_prefix(prefix, directory)
    runtime.register_loader(loader)

    for name in functions:
        runtime.define_function(name)

    result = DiagnosticSuggester(runtime).suggest(message, file, line)
    if result is None:
        click.echo(click.style("No diagnosis for this message.", fg="yellow"), err=True)
        sys.exit(1)

    click.echo(result.enhanced_message)
    if ctx.obj['verbose']:
        click.echo(click.style(f"kind: {result.kind}", dim=True))
    for candidate in result.candidates:
        click.echo(f"  - {candidate}")


def main():
    """Entry point for `vigil` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
