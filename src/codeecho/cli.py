"""Command-line interface for codeecho."""
import json
import logging
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from . import __version__
from .adapters import create_source
from .core.analyzer import RepositoryAggregator
from .core.exceptions import AuthenticationError, CodeEchoError
from .core.models import Config
from .core.tokenizer import TokenCounter
from .utils.file_filter import ExclusionFilter
from .utils.tree_builder import FileTreeBuilder, format_size

console = Console(stderr=True)


def setup_logging(debug: bool) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.WARNING
    format_string = '[%(levelname)s] %(message)s'

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("github").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def _split_repo(value: str) -> Tuple[str, str]:
    """Parse ``owner/repo`` or a github.com URL."""
    parts = value.replace('https://github.com/', '').replace('github.com/', '').strip('/').split('/')
    if len(parts) != 2 or not all(parts):
        raise click.BadParameter(f"Expected OWNER/REPO, got {value!r}")
    return parts[0], parts[1]


def _aggregator(ctx: click.Context) -> RepositoryAggregator:
    config: Config = ctx.obj['config']
    if not config.github_token:
        raise AuthenticationError("GitHub token not found. Set GITHUB_TOKEN environment variable.")
    return RepositoryAggregator(create_source(config.github_token, config), config)


def _fail(error: Exception, debug: bool) -> None:
    label = "ERROR" if isinstance(error, CodeEchoError) else "CRITICAL ERROR"
    console.print(f"[bold red]> {label}:[/bold red] {error}")
    if debug:
        console.print_exception()
    sys.exit(1)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--timeout', type=int, help='HTTP timeout in seconds')
@click.version_option(__version__)
@click.pass_context
def main(ctx: click.Context, debug: bool, timeout: Optional[int]) -> None:
    """
    Flatten a GitHub repository branch into one text document.

    The GitHub token is read from the GITHUB_TOKEN environment variable
    (a .env file is honoured).
    """
    setup_logging(debug)
    config = Config()
    if timeout:
        config.request_timeout = timeout
    ctx.obj = {'config': config, 'debug': debug}


@main.command()
@click.pass_context
def repos(ctx: click.Context) -> None:
    """List your repositories (first page only)."""
    try:
        for repo in _aggregator(ctx).repositories():
            click.echo(repo['full_name'])
    except Exception as e:
        _fail(e, ctx.obj['debug'])


@main.command()
@click.argument('repository')
@click.pass_context
def branches(ctx: click.Context, repository: str) -> None:
    """List branches of REPOSITORY (OWNER/REPO)."""
    owner, repo = _split_repo(repository)
    try:
        for name in _aggregator(ctx).branches(owner, repo):
            click.echo(name)
    except Exception as e:
        _fail(e, ctx.obj['debug'])


@main.command()
@click.argument('repository')
@click.argument('branch')
@click.option('--json', 'as_json', is_flag=True, help='Print the tree as JSON')
@click.option('--sizes', is_flag=True, help='Show aggregated sizes')
@click.pass_context
def tree(ctx: click.Context, repository: str, branch: str, as_json: bool, sizes: bool) -> None:
    """Show the folder structure of BRANCH in REPOSITORY."""
    owner, repo = _split_repo(repository)
    try:
        root = _aggregator(ctx).folder_structure(owner, repo, branch)
    except Exception as e:
        _fail(e, ctx.obj['debug'])
        return

    if as_json:
        click.echo(json.dumps(root.to_dict(), indent=2))
        return

    header = f"{owner}/{repo}@{branch}"
    if sizes:
        header += f" ({format_size(root.size)})"
    click.echo(header)
    click.echo(FileTreeBuilder.render_ascii(root, show_sizes=sizes), nl=False)


@main.command()
@click.argument('repository')
@click.argument('branch')
@click.option('--exclude', '-x', 'excludes', multiple=True, help='Excluded path prefix (repeatable)')
@click.option('--exclusions', help='Excluded path prefixes as a JSON array')
@click.option('--output', '-o', type=click.Path(dir_okay=False, writable=True), help='Write the document here instead of stdout')
@click.option('--concurrency', '-c', type=click.IntRange(min=1), help='Parallel blob fetches (default: 1, sequential)')
@click.option('--exact-tokens', is_flag=True, help='Also count tokens with tiktoken')
@click.pass_context
def export(ctx: click.Context, repository: str, branch: str, excludes: Tuple[str, ...],
           exclusions: Optional[str], output: Optional[str], concurrency: Optional[int],
           exact_tokens: bool) -> None:
    """
    Export BRANCH of REPOSITORY as a single markdown document.

    Examples:

        codeecho export django/django main -x docs -x tests

        codeecho export owner/repo dev --exclusions '["vendor", "assets"]' -o out.md
    """
    owner, repo = _split_repo(repository)
    config: Config = ctx.obj['config']
    if concurrency:
        config.fetch_concurrency = concurrency

    excluded = list(excludes) + ExclusionFilter.parse(exclusions)

    try:
        aggregator = _aggregator(ctx)
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Fetching files", total=None)

            def on_progress(completed: int, total: int) -> None:
                progress.update(task, completed=completed, total=total)

            result = aggregator.export(owner, repo, branch, excluded, on_progress)
    except Exception as e:
        _fail(e, ctx.obj['debug'])
        return

    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(result.text)
        console.print(f"[green]Wrote[/green] {output}")
    else:
        click.echo(result.text, nl=False)

    console.print(f"Files included: {len(result.files)}  skipped: {len(result.skipped)}")
    console.print(f"Estimated tokens: {result.total_tokens:,}")
    if exact_tokens:
        counter = TokenCounter(config.token_encoder)
        console.print(f"Document tokens ({config.token_encoder}): {counter.count(result.text):,}")


@main.command()
@click.option('--host', default='127.0.0.1', show_default=True)
@click.option('--port', default=8000, show_default=True, type=int)
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Run the JSON API."""
    import uvicorn

    from .api import create_app

    uvicorn.run(create_app(ctx.obj['config']), host=host, port=port)


if __name__ == '__main__':
    main()
