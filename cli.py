#!/usr/bin/env python3
"""
CLI for the Project Status Engine.

Usage:
    python cli.py recompute 42
    python cli.py recompute-all --reevaluate-manual
    python cli.py set-status 42 on-hold --reason "Client instruction"
    python cli.py summary
    python cli.py schedule

Commands:
    recompute      Recompute one project's status
    recompute-all  Recompute every project (or a filtered subset)
    set-status     Apply a manual status change
    summary        Show project counts per status
    schedule       Run the periodic recompute job in the foreground
"""
import json
import logging
import time
from datetime import date

import click

logger = logging.getLogger(__name__)


def _service(ctx):
    from app.scheduling import build_recompute_service
    from app.models import create_session_factory

    config = ctx.obj["config"]
    session_factory = create_session_factory(config.database_url, create_tables=True)
    return build_recompute_service(session_factory=session_factory, config=config)


def _parse_statuses(ctx, param, values):
    """Accept canonical, legacy and display status values."""
    from app.domain.services.status_catalog import parse_status

    try:
        return [parse_status(v) for v in values]
    except ValueError as e:
        raise click.BadParameter(str(e))


def _echo_result(outcome, output_json: bool) -> None:
    if output_json:
        payload = outcome.to_dict()
        if outcome.result:
            payload['result'] = outcome.result.to_dict()
        click.echo(json.dumps(payload, indent=2))
        return

    code = outcome.project_code or outcome.project_id
    if not outcome.ok:
        click.echo(click.style(f"{code}: failed - {'; '.join(outcome.errors)}", fg='red'), err=True)
        return
    if outcome.skipped:
        click.echo(f"{code}: {outcome.previous_status.value} (manual, left unchanged)")
        return
    new = outcome.new_status.value if outcome.new_status else '-'
    old = outcome.previous_status.value if outcome.previous_status else '-'
    marker = click.style('changed', fg='green') if outcome.changed else 'unchanged'
    click.echo(f"{code}: {old} -> {new} [{marker}]")
    if outcome.result:
        click.echo(f"  Reason: {outcome.result.reason}")
        for phase in outcome.result.phases:
            click.echo(
                f"  {phase.timing.value:<18} {phase.progress_percent:6.1f}%  "
                f"started {phase.started_count}/{phase.activity_count}  "
                f"completed {phase.completed_count}/{phase.activity_count}"
            )


@click.group()
@click.version_option(version='1.0.0')
@click.option('--config', 'config_path', default=None, type=click.Path(exists=True),
              help='Path to status engine YAML configuration')
@click.pass_context
def cli(ctx, config_path):
    """Project Status Engine CLI.

    Derives construction project statuses from activities and their
    planned/actual progress records.
    """
    from app.config import get_config

    config = get_config(config_path)
    logging.basicConfig(level=config.log_level, format=config.log_format)
    ctx.ensure_object(dict)
    ctx.obj['config'] = config


@cli.command()
@click.argument('project_id', type=int)
@click.option('--reevaluate-manual', is_flag=True, help='Overwrite on-hold / cancelled statuses')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_context
def recompute(ctx, project_id: int, reevaluate_manual: bool, output_json: bool):
    """Recompute and store the status of one project."""
    outcome = _service(ctx).recompute_project(project_id, reevaluate_manual=reevaluate_manual)
    _echo_result(outcome, output_json)
    if not outcome.ok:
        raise click.exceptions.Exit(1)


@cli.command('recompute-all')
@click.option('--code', 'codes', multiple=True, help='Only these project codes (repeatable)')
@click.option('--status', 'statuses', multiple=True, callback=_parse_statuses,
              help='Only projects currently in this status (repeatable)')
@click.option('--created-from', type=click.DateTime(formats=['%Y-%m-%d']), default=None)
@click.option('--created-to', type=click.DateTime(formats=['%Y-%m-%d']), default=None)
@click.option('--reevaluate-manual', is_flag=True, help='Overwrite on-hold / cancelled statuses')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_context
def recompute_all(ctx, codes, statuses, created_from, created_to, reevaluate_manual, output_json):
    """Recompute statuses for all projects, optionally filtered."""
    service = _service(ctx)

    if codes or statuses or created_from or created_to:
        created_between = None
        if created_from or created_to:
            created_between = (
                created_from.date() if created_from else date.min,
                created_to.date() if created_to else date.max,
            )
        results = service.recompute_by_criteria(
            project_codes=list(codes) or None,
            statuses=list(statuses) or None,
            created_between=created_between,
            reevaluate_manual=reevaluate_manual,
        )
    else:
        results = service.recompute_all(reevaluate_manual=reevaluate_manual)

    if output_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        for outcome in results:
            _echo_result(outcome, False)
        changed = sum(1 for r in results if r.changed)
        failed = sum(1 for r in results if not r.ok)
        click.echo(click.style(
            f"\n{changed} changed, {failed} failed, {len(results)} total",
            fg='red' if failed else 'green', bold=True
        ))
    if any(not r.ok for r in results):
        raise click.exceptions.Exit(1)


@cli.command('set-status')
@click.argument('project_id', type=int)
@click.argument('status')
@click.option('--reason', default='', help='Reason recorded with the change')
@click.pass_context
def set_status(ctx, project_id: int, status: str, reason: str):
    """Apply a manual status change (validated against allowed transitions)."""
    from app.domain.exceptions import DomainError

    try:
        outcome = _service(ctx).apply_manual_status(project_id, status, reason)
    except DomainError as e:
        logger.warning(f"Manual status change rejected for project {project_id}: {e.code}")
        click.echo(click.style(e.message, fg='red'), err=True)
        raise click.Abort()
    click.echo(click.style(
        f"{outcome.project_code}: {outcome.previous_status.value} -> {status}",
        fg='green'
    ))


@cli.command()
@click.option('--recent', default=10, type=int, help='Number of recent changes to show')
@click.pass_context
def summary(ctx, recent: int):
    """Show project counts per status and recent changes."""
    from app.domain.services.status_catalog import get_all_statuses

    data = _service(ctx).status_summary(recent_limit=recent)
    click.echo(click.style('Project Status Summary', fg='cyan', bold=True))
    click.echo(f"Total projects: {data['total']}")
    for info in get_all_statuses():
        count = data['by_status'].get(info['value'], 0)
        click.echo(f"  {info['label']:<20} {count}")
    click.echo(
        f"Active: {data['active_count']}  Completed: {data['completed_count']}  "
        f"Problematic: {data['problematic_count']}"
    )
    if data['recent_updates']:
        click.echo("\nRecent changes:")
        for change in data['recent_updates']:
            click.echo(
                f"  {change['changed_at']}  project {change['project_id']}: "
                f"{change['old_status']} -> {change['new_status']} ({change['source']})"
            )


@cli.command()
@click.pass_context
def schedule(ctx):
    """Run the periodic recompute job until interrupted."""
    from app.scheduling import setup_scheduler

    scheduler = setup_scheduler(service=_service(ctx), config=ctx.obj["config"])
    if scheduler is None:
        click.echo("Scheduling is disabled in configuration")
        return

    click.echo(click.style('Status recompute scheduler running (Ctrl+C to stop)', fg='cyan'))
    try:
        while True:
            time.sleep(1)
    except (KeyboardInterrupt, SystemExit):
        scheduler.shutdown()
        click.echo("Scheduler stopped")


if __name__ == '__main__':
    cli()
