"""SQLite schema management (code-first approach).

Tables and indexes are contributed by feature modules and created idempotently.
"""

import logging
from collections.abc import Sequence

import aiosqlite

from helixintel.core.module import Module
from helixintel.modules.schedules import SchedulesModule
from helixintel.modules.tasks import TasksModule


logger = logging.getLogger(__name__)


def default_modules() -> list[Module]:
    """Feature modules in table-creation order (tasks reference schedules)."""
    return [SchedulesModule(), TasksModule()]


def get_all_table_schemas(modules: Sequence[Module]) -> dict[str, str]:
    """Collect table schemas from modules.

    Raises:
        ValueError: If two modules define the same table
    """
    all_schemas: dict[str, str] = {}
    for module in modules:
        for table_name, schema in module.get_table_schemas().items():
            if table_name in all_schemas:
                msg = f"Duplicate table schema '{table_name}' from module '{module.name}'"
                raise ValueError(msg)
            all_schemas[table_name] = schema
    return all_schemas


def get_all_indexes(modules: Sequence[Module]) -> list[str]:
    """Collect index statements from modules."""
    all_indexes: list[str] = []
    for module in modules:
        all_indexes.extend(module.get_indexes())
    return all_indexes


async def init_db(conn: aiosqlite.Connection, modules: Sequence[Module] | None = None) -> None:
    """Create all tables and indexes (idempotent)."""
    active_modules = default_modules() if modules is None else modules
    schemas = get_all_table_schemas(active_modules)

    for table_name, statement in schemas.items():
        await conn.execute(statement)
        logger.debug("Ensured table %s", table_name)

    for statement in get_all_indexes(active_modules):
        await conn.execute(statement)

    logger.info(
        "Database schema initialized",
        extra={"tables": list(schemas), "modules": [module.name for module in active_modules]},
    )
