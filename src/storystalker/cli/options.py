# ABOUTME: Shared Click options and parameter types for Story Stalker CLI commands.
# ABOUTME: Provides the --db flag and a reading-status choice type.

from pathlib import Path

import click

from storystalker.db.connection import DEFAULT_DB_PATH
from storystalker.metadata.types import ReadingStatus

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    envvar="STORYSTALKER_DB",
    help=f"Path to library database (default: {DEFAULT_DB_PATH}).",
)


class StatusType(click.ParamType):
    """Accepts want/reading/finished (any case) or 0/1/2."""

    name = "status"

    def convert(
        self, value: object, param: click.Parameter | None, ctx: click.Context | None
    ) -> ReadingStatus:
        if isinstance(value, ReadingStatus):
            return value
        try:
            return ReadingStatus.parse(value)  # type: ignore[arg-type]
        except ValueError:
            self.fail(f"{value!r} is not one of want, reading, finished.", param, ctx)


STATUS = StatusType()
