"""
Command-line interface for repo-vetter.
"""

import asyncio
from pathlib import Path

import typer

from repo_vetter import log
from repo_vetter.config import (
    get_github_token,
    get_log_file,
    get_log_level,
    get_threshold,
    set_threshold,
    set_verify_ssl,
)
from repo_vetter.datasource import BaseDataSource, get_data_source
from repo_vetter.errors import ConfigError, DataSourceError, InputError
from repo_vetter.http_client import close_async_http_client
from repo_vetter.runner import read_urls, run_batch

# --- Typer App ---
app = typer.Typer()


async def _validate_token(source: BaseDataSource) -> bool:
    try:
        return await source.validate_credentials()
    except DataSourceError as e:
        log.error(f"Could not validate GitHub token: {e}")
        return False


async def _score_urls(
    urls: list[str], source: BaseDataSource, threshold: int, check_token: bool
) -> int | None:
    """Validate credentials (if any) and score every URL. None means bad token."""
    try:
        if check_token and not await _validate_token(source):
            log.error("Invalid GitHub token.")
            return None
        return await run_batch(urls, source, threshold=threshold, emit=typer.echo)
    finally:
        await close_async_http_client()


@app.command()
def score(
    url_file: Path = typer.Argument(
        ...,
        help="File with one GitHub repository URL per line.",
    ),
    threshold: int | None = typer.Option(
        None,
        "--threshold",
        "-t",
        help="Cumulative-share cutoff percentage (default: config or 50).",
    ),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Disable SSL certificate verification for HTTPS requests.",
    ),
):
    """Score every repository in URL_FILE and print one NDJSON record per repository."""
    log.configure_logging(get_log_level(), get_log_file())
    try:
        _score(url_file, threshold, insecure)
    finally:
        log.close()


def _score(url_file: Path, threshold: int | None, insecure: bool) -> None:
    set_verify_ssl(not insecure)

    try:
        if threshold is not None:
            set_threshold(threshold)
        effective_threshold = get_threshold()
        urls = read_urls(url_file)
    except (ConfigError, InputError) as e:
        log.error(str(e))
        raise typer.Exit(code=1) from None

    token = get_github_token()
    source = get_data_source("github", token=token)
    emitted = asyncio.run(
        _score_urls(urls, source, effective_threshold, check_token=token is not None)
    )
    if emitted is None:
        raise typer.Exit(code=1)

    log.info(f"Scored {emitted} of {len(urls)} repositories.")


@app.command("check-token")
def check_token(
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Disable SSL certificate verification for HTTPS requests.",
    ),
):
    """Check that GITHUB_TOKEN is accepted by GitHub."""
    log.configure_logging(get_log_level(), get_log_file())
    try:
        set_verify_ssl(not insecure)

        token = get_github_token()
        if token is None:
            log.error("GITHUB_TOKEN is not set.")
            raise typer.Exit(code=1)

        async def _check() -> bool:
            try:
                return await _validate_token(get_data_source("github", token=token))
            finally:
                await close_async_http_client()

        if not asyncio.run(_check()):
            log.error("Invalid GitHub token.")
            raise typer.Exit(code=1)
        typer.echo("GitHub token is valid.")
    finally:
        log.close()


if __name__ == "__main__":
    app()
