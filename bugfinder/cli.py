# bugfinder/cli.py
from __future__ import annotations
import logging
from pathlib import Path

import click

from bugfinder.analyzer import BugAnalyzer, BugOutcome
from bugfinder.diff_classifier import ClassifyError, analyze_diff
from bugfinder.git_ops import FetchError, SearchError, find_commit, get_commit_diff
from bugfinder.jira_client import JiraClient, TransportError
from bugfinder.models import ConfigError, Settings
from bugfinder.reporter import Reporter, ReportWriteError

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s"

SEPARATOR = "-" * 50


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    # urllib3 is noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _make_progress_callback(total: int):
    """Echo one line per finished bug, with its position in the run."""
    done = 0

    def callback(outcome: BugOutcome):
        nonlocal done
        done += 1
        line = f"  [{done}/{total}] {outcome.bug_id}: {outcome.outcome.value}"
        if outcome.commit_hash:
            line += f" ({outcome.commit_hash[:12]})"
        if outcome.error:
            line += f" - {outcome.error.splitlines()[0][:100]}"
        click.echo(line, err=outcome.error is not None)

    return callback


@click.group()
def main():
    """Correlate Jira bugs with their fixing git commits."""
    pass


@main.command()
@click.option("--config", "-c", "config_path", default="config.yaml",
              help="Settings file (YAML or JSON)")
@click.option("--max-bugs", "-n", type=int, default=None, help="Override max_bugs_to_find")
@click.option("--output", "-o", default=None, help="Override output_csv_file")
@click.option("--keyword", "-k", multiple=True,
              help="Keyword to look for in added lines (replaces configured keywords)")
@click.option("--json", "json_path", default=None, help="Also write a JSON summary here")
@click.option("--verbose", "-v", is_flag=True, help="Log skipped bugs and git diagnostics")
def run(config_path, max_bugs, output, keyword, json_path, verbose):
    """Find fixing commits for resolved bugs and write a CSV report."""
    _configure_logging(verbose)

    try:
        settings = Settings.from_file(Path(config_path))
    except ConfigError as e:
        raise click.ClickException(str(e))

    max_bugs = max_bugs if max_bugs is not None else settings.max_bugs_to_find
    if max_bugs <= 0:
        raise click.ClickException("--max-bugs must be positive")
    output = output or settings.output_csv_file
    keywords = [k for k in keyword if k] if keyword else settings.analysis_keywords

    click.echo(f"Configuration loaded for project: {settings.project_name}")
    click.echo(f"Analyzing local repo: {settings.local_repo_path}")
    if keywords:
        click.echo(f"Keywords: {', '.join(keywords)}")
    else:
        click.echo("No keywords configured - every located commit is accepted")

    client = JiraClient(settings.jira_api_url, timeout=settings.jira_timeout)
    click.echo(f"Searching for {max_bugs} bugs...")
    try:
        bug_ids = client.search_bugs(settings.project_name, max_bugs)
    except TransportError as e:
        raise click.ClickException(f"Error searching Jira: {e}")
    click.echo(f"Found {len(bug_ids)} bug keys. Starting analysis...")

    analyzer = BugAnalyzer(
        repo_path=settings.local_repo_path,
        keywords=keywords,
        jira_base_url=settings.jira_base_url,
        repo_commit_url=settings.repo_commit_url,
        on_outcome=_make_progress_callback(len(bug_ids)),
    )
    result = analyzer.analyze(bug_ids)

    click.echo(SEPARATOR)
    click.echo(f"Analysis complete. Found {len(result.matches)} matching bugs "
               f"out of {len(result.outcomes)} analyzed.")
    for name, count in result.counts().items():
        if count:
            click.echo(f"  {name}: {count}")
    click.echo(SEPARATOR)

    reporter = Reporter(settings.project_name)
    if json_path:
        try:
            reporter.write_json(json_path, result)
        except ReportWriteError as e:
            raise click.ClickException(f"Error writing JSON summary: {e}")
        click.echo(f"Wrote JSON summary to {json_path}")

    if not result.matches:
        click.echo("No bugs matched all criteria.")
        return

    for record in result.matches:
        click.echo(f"Bug: {record.bug_id} -> {record.commit_url}")

    click.echo(f"\nSaving results to {output}...")
    try:
        reporter.write_csv(output, result.matches)
    except ReportWriteError as e:
        raise click.ClickException(f"Error writing CSV: {e}")
    click.echo(f"Successfully saved results to {output}")


@main.command()
@click.option("--repo", "-r", required=True, type=click.Path(exists=True, file_okay=False),
              help="Local git repository")
@click.argument("bug_id")
def locate(repo, bug_id):
    """Print the most recent commit whose message mentions BUG_ID."""
    try:
        commit_hash = find_commit(repo, bug_id)
    except SearchError as e:
        raise click.ClickException(str(e))

    if not commit_hash:
        click.echo(f"{bug_id}: no commit found")
        return
    click.echo(f"{bug_id}: {commit_hash}")


@main.command()
@click.option("--repo", "-r", required=True, type=click.Path(exists=True, file_okay=False),
              help="Local git repository")
@click.option("--keyword", "-k", multiple=True, required=True,
              help="Keyword to look for in added lines")
@click.argument("commit")
def check(repo, keyword, commit):
    """Classify a single COMMIT against the given keywords."""
    try:
        diff = get_commit_diff(repo, commit)
    except FetchError as e:
        raise click.ClickException(str(e))

    if not diff:
        click.echo(f"{commit}: empty changeset")
        return

    try:
        matched = analyze_diff(diff, list(keyword))
    except ClassifyError as e:
        raise click.ClickException(str(e))
    click.echo(f"{commit}: {'MATCH' if matched else 'NO MATCH'}")


if __name__ == "__main__":
    main()
