"""Command line maintenance tool for the statistics tables."""

from __future__ import annotations

import dataclasses
import json
from typing import Dict, List, Optional, Tuple

import click

from ..cache import StatisticsCache
from ..catalog import MetadataCatalog
from ..config import Config, load_config
from ..errors import StatisticsError
from ..statistics import AlterColumnStatsRequest, StatisticsRepository, TableStatsRegistry
from ..store import StatisticsStore, create_statistics_tables, create_store
from ..store.result_row import ResultRow
from ..utils.logging import setup_logging


@dataclasses.dataclass
class StatsRuntime:
    """Objects shared by every command of one invocation."""

    config: Config
    store: StatisticsStore
    repository: StatisticsRepository
    cache: StatisticsCache
    registry: TableStatsRegistry


def _build_runtime(config_path: Optional[str]) -> StatsRuntime:
    config = load_config(config_path) if config_path else Config()
    setup_logging(
        level=config.logging.level,
        structured=config.logging.structured,
        log_file=config.logging.log_file,
    )
    store = create_store(config.store)
    store.ensure_connected()
    cache = StatisticsCache(max_size=config.statistics.stats_cache_size)
    registry = TableStatsRegistry()
    repository = StatisticsRepository(
        store,
        catalog=MetadataCatalog.from_config(config.catalogs),
        cache=cache,
        refresh_hook=registry,
        config=config.statistics,
    )
    cache.repository = repository
    return StatsRuntime(config, store, repository, cache, registry)


def _parse_assignments(assignments: Tuple[str, ...]) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected key=value, got {assignment!r}")
        properties[key.strip()] = value.strip()
    return properties


def _echo_rows(rows: List[ResultRow]) -> None:
    for row in rows:
        click.echo(json.dumps(row.as_dict(), default=str))


@click.group()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file. Defaults to an in-memory DuckDB store.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str]) -> None:
    """Inspect and maintain persisted column statistics."""
    try:
        runtime = _build_runtime(config_path)
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.obj = runtime
    ctx.call_on_close(runtime.store.disconnect)


@cli.command()
@click.pass_obj
def init(runtime: StatsRuntime) -> None:
    """Create the statistics tables if they do not exist."""
    try:
        create_statistics_tables(runtime.store, runtime.config.statistics)
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo("statistics tables ready")


@cli.command()
@click.argument("table_id", type=int)
@click.argument("column")
@click.option("--index-id", type=int, default=-1, show_default=True)
@click.pass_obj
def show(runtime: StatsRuntime, table_id: int, column: str, index_id: int) -> None:
    """Print the current statistic of a column."""
    try:
        statistic = runtime.repository.query_column_statistics_by_name(table_id, index_id, column)
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(dataclasses.asdict(statistic)))


@cli.command()
@click.argument("table")
@click.argument("column")
@click.option("-s", "--set", "assignments", multiple=True, required=True, help="key=value override.")
@click.option("-p", "--partition", "partitions", multiple=True, help="Partition name to alter.")
@click.pass_obj
def alter(
    runtime: StatsRuntime,
    table: str,
    column: str,
    assignments: Tuple[str, ...],
    partitions: Tuple[str, ...],
) -> None:
    """Override statistics of a column, e.g. -s ndv=10 -s row_count=100."""
    try:
        request = AlterColumnStatsRequest.from_properties(
            table, column, _parse_assignments(assignments), list(partitions)
        )
        changes = runtime.repository.alter_column_statistics(request)
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    for change in changes:
        click.echo(f"wrote {change.identifier.id}")


@cli.command()
@click.argument("table_id", type=int)
@click.argument("columns", nargs=-1, required=True)
@click.pass_obj
def drop(runtime: StatsRuntime, table_id: int, columns: Tuple[str, ...]) -> None:
    """Delete statistics and histograms of columns."""
    try:
        runtime.repository.drop_statistics(table_id, list(columns))
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"dropped statistics of {len(columns)} columns")


@cli.command("drop-partitions")
@click.argument("partition_ids", nargs=-1, required=True, type=int)
@click.pass_obj
def drop_partitions(runtime: StatsRuntime, partition_ids: Tuple[int, ...]) -> None:
    """Delete statistics of partitions."""
    try:
        runtime.repository.drop_statistics_by_partitions(list(partition_ids))
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"dropped statistics of {len(partition_ids)} partitions")


@cli.command("list")
@click.option("--limit", type=click.IntRange(min=0), default=100, show_default=True)
@click.option("--offset", type=click.IntRange(min=0), default=0, show_default=True)
@click.pass_obj
def list_stats(runtime: StatsRuntime, limit: int, offset: int) -> None:
    """List statistic ids, oldest update first."""
    try:
        rows = runtime.repository.fetch_stats_full_name(limit, offset)
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_rows(rows)


@cli.command()
@click.pass_obj
def recent(runtime: StatsRuntime) -> None:
    """Warm the cache from the most recently updated table-level statistics."""
    try:
        loaded = runtime.cache.warm_up()
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"cached {loaded} statistics")


@cli.command()
@click.argument("table_id", type=int)
@click.pass_obj
def partitions(runtime: StatsRuntime, table_id: int) -> None:
    """Show which partitions of each column have statistics."""
    try:
        column_to_partitions = runtime.repository.fetch_col_and_parts_for_stats(table_id)
    except StatisticsError as exc:
        raise click.ClickException(str(exc)) from exc
    for column_name in sorted(column_to_partitions):
        part_ids = ",".join(str(part_id) for part_id in sorted(column_to_partitions[column_name]))
        click.echo(f"{column_name}\t{part_ids}")


if __name__ == "__main__":
    cli()
