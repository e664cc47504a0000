# ==============================================================================
# run.py
# ------------------------------------------------------------------------------
# The main entry point: command-line validation runs over uploaded workbooks.
# ==============================================================================

from functools import wraps

import click

from config import Config
from quotacheck import configure
from quotacheck.main.reports import export_results
from quotacheck.validator import (QuotaCheckError, read_lms_workbook, read_quota_workbook,
                                  read_reference_workbook, run_lms_validation,
                                  run_overlay_validation, run_validation)
from quotacheck.validator.periods import processing_months
from quotacheck.validator.regions import REGIONS

WORKBOOK = click.Path(exists=True, dir_okay=False)


def run_options(f):
    """Adds the shared workbook arguments and run options to a command."""
    f = click.option('--export-dir', type=click.Path(file_okay=False), default=None,
                     help='Write the CSV reports into this folder.')(f)
    f = click.option('--export', 'export', is_flag=True,
                     help='Write the CSV reports into the configured export folder.')(f)
    f = click.option('--region', type=click.Choice(REGIONS), default=None,
                     help='Region to validate (defaults to QUOTACHECK_DEFAULT_REGION).')(f)
    f = click.option('--period', default=None, help="Period label such as 'Jan-26'.")(f)
    f = click.argument('roster', type=WORKBOOK)(f)
    f = click.argument('quota', type=WORKBOOK)(f)
    return f


def reports_errors(f):
    """Turns a failed run into a single user-facing error message."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except QuotaCheckError as e:
            raise click.ClickException(str(e)) from e
    return decorated_function


def _finish(results, export_dir, export=False):
    click.echo(f"Results for {results.period} / {results.region}:")
    for name, value in vars(results.summary).items():
        click.echo(f"  {name.replace('_', ' '):<22}: {value}")
    export_dir = export_dir or (Config.EXPORT_FOLDER if export else None)
    if export_dir:
        for path in export_results(results, export_dir):
            click.echo(f"  wrote {path}")


def _fiscal_half_run(runner, tables, quota, roster, period, region, export_dir, export):
    parsed = read_quota_workbook(quota)
    if period is None:
        if not parsed.submission_months:
            raise click.ClickException('No submission months found in the quota file.')
        period = parsed.submission_months[-1]
    references = read_reference_workbook(roster)
    results = runner(parsed.records, references, period, region or Config.DEFAULT_REGION, tables)
    _finish(results, export_dir, export)


@click.group()
@click.pass_context
def cli(ctx):
    """Quota file validation against the HR roster."""
    try:
        ctx.obj = configure(Config)
    except QuotaCheckError as e:
        raise click.ClickException(str(e)) from e


@cli.command('validate')
@run_options
@click.pass_obj
@reports_errors
def validate(tables, quota, roster, period, region, export_dir, export):
    """Validate an LTS/LSS quota file for one submission month."""
    _fiscal_half_run(run_validation, tables, quota, roster, period, region, export_dir, export)


@cli.command('overlay')
@run_options
@click.pass_obj
@reports_errors
def overlay(tables, quota, roster, period, region, export_dir, export):
    """Validate an LTS/LSS quota file, placing records by resolved region."""
    _fiscal_half_run(run_overlay_validation, tables, quota, roster, period, region, export_dir, export)


@cli.command('lms')
@run_options
@click.pass_obj
@reports_errors
def lms(tables, quota, roster, period, region, export_dir, export):
    """Validate an LMS quota file for one processing month."""
    records = read_lms_workbook(quota)
    references = read_reference_workbook(roster)
    period = period or processing_months()[-1]
    results = run_lms_validation(records, references, period, region or Config.DEFAULT_REGION, tables)
    _finish(results, export_dir, export)


@cli.command('months')
@click.argument('quota', type=WORKBOOK)
@reports_errors
def months(quota):
    """List the submission months found in a quota file."""
    for label in read_quota_workbook(quota).submission_months:
        click.echo(label)


if __name__ == '__main__':
    cli()
