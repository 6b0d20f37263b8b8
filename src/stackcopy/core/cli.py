"""Command line interface for copying stack tables between stages."""

import os
import sys
import logging
from typing import Optional

import click
from pydantic import ValidationError

from .config import setup_logging, load_environment, get_int_env
from ..connectors.dynamodb import create_store_from_env
from ..engine.copier import TableCopyPipeline, copy_after_deploy
from ..engine.enumerator import enumerate_tables
from ..exceptions import StackCopyException
from ..models.config import CopyConfig, DEFAULT_MAX_CONCURRENCY
from ..models.context import physical_name
from ..models.result import CopyResult
from ..services.manifest import DeploymentManifest
from ..version import __version__

DEFAULT_MANIFEST = 'serverless.yml'


def _manifest_option(fn):
    return click.option('--config', 'config_path', default=DEFAULT_MANIFEST, show_default=True,
                        type=click.Path(dir_okay=False),
                        help='Deployment file declaring the table resources')(fn)


def _run_options(fn):
    options = [
        click.option('--region', help='Region of the tables (defaults to AWS_REGION, then provider.region)'),
        click.option('--stage-placeholder', help='Token in table names replaced by the stage '
                                                 '(defaults to custom.stage)'),
        click.option('--max-concurrency', type=click.IntRange(min=1),
                     help=f'Maximum simultaneous storage calls (default: {DEFAULT_MAX_CONCURRENCY})'),
        click.option('--single-page', is_flag=True, help='Read only the first scan page of each table'),
        click.option('--output', type=click.Choice(['table', 'json']), default='table',
                     help='Output format'),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


@click.group()
@click.version_option(__version__, prog_name='stackcopy')
@click.option('--log-level', default='INFO', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set the logging level')
@click.option('--env-file', type=click.Path(exists=True), help='Path to .env file')
def cli(log_level: str, env_file: Optional[str]) -> None:
    """Copy table data between deployment stages."""
    setup_logging(log_level)
    load_environment(env_file)


def _run_overrides(manifest: DeploymentManifest, region: Optional[str], stage_placeholder: Optional[str],
                   max_concurrency: Optional[int], single_page: bool) -> dict:
    """CopyConfig fields shared by manual and post-deploy runs."""
    return {
        'region': region or os.getenv('AWS_REGION') or os.getenv('AWS_DEFAULT_REGION') or manifest.region,
        'stage_placeholder': stage_placeholder or manifest.stage_placeholder,
        'max_concurrency': max_concurrency or get_int_env('STACKCOPY_MAX_CONCURRENCY', DEFAULT_MAX_CONCURRENCY),
        'scan_all_pages': not single_page,
    }


def _pipeline_factory(manifest: DeploymentManifest, region: Optional[str], max_concurrency: int):
    def factory() -> TableCopyPipeline:
        store = create_store_from_env(region=region, max_pool_connections=max_concurrency)
        return TableCopyPipeline(store, manifest.resources)
    return factory


def _display_result(result: CopyResult, output: str) -> None:
    """Display a run result."""
    if output == 'json':
        click.echo(result.model_dump_json(indent=2))
        return

    click.echo(f"{'Table':<40} {'Downloaded':<12} {'Existing':<10} {'Deleted':<10} {'Uploaded':<10}")
    click.echo("-" * 86)
    for logical_name, stats in result.tables.items():
        click.echo(f"{logical_name:<40} {stats.downloaded:<12} {stats.target_existing:<10} "
                   f"{stats.deleted:<10} {stats.uploaded:<10}")

    if result.succeeded:
        click.echo(f"\n✅ Copied {len(result.tables)} tables from {result.source_stage} to {result.target_stage}")
    else:
        click.echo(f"\n❌ Copy failed after {result.failed_stage.value}: {result.error_message}", err=True)


def _finish(result: CopyResult, output: str) -> None:
    _display_result(result, output)
    if not result.succeeded:
        sys.exit(1)


@cli.command('copy-stack-tables')
@click.option('--source-stage', required=True, help='Stage you want to copy data from')
@click.option('--target-stage', required=True, help='Stage you want to copy data to')
@click.option('--overwrite-all-data', type=bool, default=False, show_default=True,
              help='Delete existing target data before uploading')
@_manifest_option
@_run_options
def copy_stack_tables(source_stage: str, target_stage: str, overwrite_all_data: bool, config_path: str,
                      region: Optional[str], stage_placeholder: Optional[str], max_concurrency: Optional[int],
                      single_page: bool, output: str) -> None:
    """Push table data from one stage to another."""
    try:
        manifest = DeploymentManifest.load(config_path)
        overrides = _run_overrides(manifest, region, stage_placeholder, max_concurrency, single_page)
        config = CopyConfig(
            source_stage=source_stage,
            target_stage=target_stage,
            overwrite_all_data=overwrite_all_data,
            **overrides
        )

        pipeline = _pipeline_factory(manifest, config.region, config.max_concurrency)()
        result = pipeline.run(config)

    except (StackCopyException, ValidationError, ValueError) as e:
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logging.exception("Unexpected error occurred")
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)

    _finish(result, output)


@cli.command('after-deploy')
@click.option('--stage', 'deployed_stage', required=True, help='Stage that was just deployed')
@_manifest_option
@_run_options
def after_deploy(deployed_stage: str, config_path: str, region: Optional[str], stage_placeholder: Optional[str],
                 max_concurrency: Optional[int], single_page: bool, output: str) -> None:
    """Run the copy configured under custom.copyDataDeploy, if it targets the deployed stage."""
    try:
        manifest = DeploymentManifest.load(config_path)
        deploy_config = manifest.deploy_copy_config()
        overrides = _run_overrides(manifest, region, stage_placeholder, max_concurrency, single_page)

        result = copy_after_deploy(
            _pipeline_factory(manifest, overrides['region'], overrides['max_concurrency']),
            deploy_config,
            deployed_stage,
            **overrides
        )

    except (StackCopyException, ValidationError, ValueError) as e:
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logging.exception("Unexpected error occurred")
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)

    if result is None:
        return
    _finish(result, output)


@cli.command('list-tables')
@_manifest_option
@click.option('--source-stage', help='Also show physical names under this stage')
@click.option('--target-stage', help='Also show physical names under this stage')
@click.option('--stage-placeholder', help='Token in table names replaced by the stage')
def list_tables(config_path: str, source_stage: Optional[str], target_stage: Optional[str],
                stage_placeholder: Optional[str]) -> None:
    """List the tables declared in the deployment file."""
    try:
        manifest = DeploymentManifest.load(config_path)
    except StackCopyException as e:
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(1)

    placeholder = stage_placeholder or manifest.stage_placeholder
    names = enumerate_tables(manifest.resources)
    if not names:
        click.echo("No table resources declared.")
        return

    for name in names:
        line = name
        for stage in (source_stage, target_stage):
            if stage:
                line += f"  {stage}: {physical_name(name, stage, placeholder)}"
        click.echo(line)


@cli.command('test-connection')
@click.option('--region', help='Region of the tables')
def test_connection(region: Optional[str]) -> None:
    """Test connection to the storage engine."""
    try:
        store = create_store_from_env(region=region)
        if store.test_connection():
            click.echo("✅ Successfully connected to DynamoDB!")
        else:
            click.echo("❌ Could not connect to DynamoDB", err=True)
            sys.exit(1)
    except Exception as e:
        logging.exception("Unexpected error occurred")
        click.echo(f"❌ Unexpected error: {e}", err=True)
        sys.exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    cli()
