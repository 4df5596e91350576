"""SQLite implementation of the maintenance store (aiosqlite)."""

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import Any

import aiosqlite

from helixintel.core import db_client
from helixintel.core.clock import Clock, SystemClock
from helixintel.core.errors import (
    DuplicateScheduleConflictError,
    HelixIntelError,
    InvalidStateTransitionError,
    NotFoundError,
    PersistenceError,
    StaleRecordError,
)
from helixintel.core.ports import AdvanceFn
from helixintel.core.schema import init_db
from helixintel.domain.create_models import AssetCreate, HomeCreate, ScheduleCreate, TaskCreate, TemplateCreate
from helixintel.domain.schedule import Schedule
from helixintel.domain.task import Task, TaskStatus
from helixintel.domain.template import Asset, AssetCategory, Difficulty, Home, MaintenanceTemplate
from helixintel.domain.update_models import SchedulePatch, TaskPatch
from helixintel.models.service_models import CompletionResult


logger = logging.getLogger(__name__)

_SCHEDULE_COLUMNS = (
    "id, created, updated, home_id, asset_id, template_id, frequency, custom_frequency_days, "
    "next_due_date, last_completed_date, is_active, version"
)


def _new_id() -> str:
    return uuid.uuid4().hex


def _is_unique_violation(error: aiosqlite.IntegrityError) -> bool:
    return "UNIQUE constraint failed" in str(error)


class SQLiteMaintenanceStore:
    """Maintenance store backed by a single SQLite connection.

    Every operation holds an asyncio lock so a transaction on the shared
    connection is never interleaved with another coroutine's statements.
    Cross-process races (two app instances on one file) are settled by
    ``BEGIN IMMEDIATE`` and the partial unique index on active schedules.
    """

    def __init__(self, *, db_path: str | None = None, clock: Clock | None = None) -> None:
        self._db_path = db_path
        self._clock = clock or SystemClock()
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            msg = "Store is not open. Call open() first."
            raise RuntimeError(msg)
        return self._conn

    async def open(self) -> None:
        """Open the connection and ensure the schema exists."""
        if self._conn is not None:
            return
        self._conn = await db_client.connect(db_path=self._db_path)
        await init_db(self._conn)

    async def close(self) -> None:
        """Close the connection."""
        if self._conn is None:
            return
        try:
            await self._conn.close()
            logger.info("Closed SQLite connection", extra={"db_path": str(db_client.get_db_path(self._db_path))})
        finally:
            self._conn = None

    @asynccontextmanager
    async def _read(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        async with self._lock:
            try:
                yield self.conn
            except aiosqlite.Error as e:
                logger.error("%s_failed", operation, extra={"error": str(e)})
                msg = f"Failed to {operation}: {e}"
                raise PersistenceError(msg) from e

    @asynccontextmanager
    async def _write(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        async with self._lock:
            try:
                async with db_client.transaction(self.conn) as conn:
                    yield conn
            except (HelixIntelError, PersistenceError):
                raise
            except aiosqlite.Error as e:
                logger.error("%s_failed", operation, extra={"error": str(e)})
                msg = f"Failed to {operation}: {e}"
                raise PersistenceError(msg) from e

    # Row helpers (caller holds the lock)

    @staticmethod
    async def _insert(conn: aiosqlite.Connection, table: str, data: dict[str, Any]) -> None:
        columns = ", ".join(data)
        placeholders = ", ".join("?" for _ in data)
        values = [db_client.encode_value(value) for value in data.values()]
        await conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", values)  # noqa: S608 - internal table names

    @staticmethod
    async def _update(conn: aiosqlite.Connection, table: str, record_id: str, data: dict[str, Any]) -> int:
        set_clause = ", ".join(f"{key} = ?" for key in data)
        values = [db_client.encode_value(value) for value in data.values()]
        values.append(record_id)
        cursor = await conn.execute(f"UPDATE {table} SET {set_clause} WHERE id = ?", values)  # noqa: S608 - internal table names
        return cursor.rowcount

    @staticmethod
    async def _fetch_one(conn: aiosqlite.Connection, query: str, params: Iterable[Any]) -> dict[str, Any] | None:
        cursor = await conn.execute(query, tuple(params))
        row = await cursor.fetchone()
        return None if row is None else db_client.row_to_dict(row)

    async def _fetch_schedule(self, conn: aiosqlite.Connection, schedule_id: str) -> Schedule:
        record = await self._fetch_one(conn, f"SELECT {_SCHEDULE_COLUMNS} FROM schedules WHERE id = ?", (schedule_id,))  # noqa: S608
        if record is None:
            raise NotFoundError("schedule", schedule_id)
        return Schedule.model_validate(record)

    async def _fetch_photos(self, conn: aiosqlite.Connection, task_ids: list[str]) -> dict[str, list[str]]:
        photos: dict[str, list[str]] = {task_id: [] for task_id in task_ids}
        if not task_ids:
            return photos
        placeholders = ", ".join("?" for _ in task_ids)
        cursor = await conn.execute(
            f"SELECT task_id, url FROM task_photos WHERE task_id IN ({placeholders}) ORDER BY task_id, position",  # noqa: S608
            task_ids,
        )
        for row in await cursor.fetchall():
            photos[row["task_id"]].append(row["url"])
        return photos

    async def _tasks_from_rows(self, conn: aiosqlite.Connection, rows: Iterable[aiosqlite.Row]) -> list[Task]:
        records = [db_client.row_to_dict(row) for row in rows]
        photos = await self._fetch_photos(conn, [record["id"] for record in records])
        return [Task.model_validate({**record, "completion_photos": photos[record["id"]]}) for record in records]

    async def _fetch_task(self, conn: aiosqlite.Connection, task_id: str) -> Task:
        cursor = await conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
        row = await cursor.fetchone()
        if row is None:
            raise NotFoundError("task", task_id)
        return (await self._tasks_from_rows(conn, [row]))[0]

    async def _replace_photos(self, conn: aiosqlite.Connection, task_id: str, urls: list[str]) -> None:
        await conn.execute("DELETE FROM task_photos WHERE task_id = ?", (task_id,))
        await conn.executemany(
            "INSERT INTO task_photos (task_id, position, url) VALUES (?, ?, ?)",
            [(task_id, position, url) for position, url in enumerate(urls)],
        )

    async def _insert_task(self, conn: aiosqlite.Connection, task: TaskCreate) -> str:
        task_id = _new_id()
        data = task.model_dump()
        await self._insert(conn, "tasks", {"id": task_id, "updated": task.created, **data})
        return task_id

    async def _apply_task_patch(
        self,
        conn: aiosqlite.Connection,
        task_id: str,
        patch: TaskPatch,
        expected_status: frozenset[TaskStatus],
    ) -> Task:
        current = await self._fetch_task(conn, task_id)
        if current.status not in expected_status:
            attempted = patch.status or current.status
            raise InvalidStateTransitionError(current=current.status, attempted=attempted, task_id=task_id)

        data = patch.model_dump(exclude_unset=True)
        photos = data.pop("completion_photos", None)
        if data:
            await self._update(conn, "tasks", task_id, data)
        if photos is not None:
            await self._replace_photos(conn, task_id, photos)
        return await self._fetch_task(conn, task_id)

    async def _apply_schedule_patch(
        self,
        conn: aiosqlite.Connection,
        schedule: Schedule,
        patch: SchedulePatch,
    ) -> Schedule:
        data = patch.model_dump(exclude_unset=True)
        if not data:
            return schedule
        data["version"] = schedule.version + 1

        set_clause = ", ".join(f"{key} = ?" for key in data)
        values = [db_client.encode_value(value) for value in data.values()]
        try:
            cursor = await conn.execute(
                f"UPDATE schedules SET {set_clause} WHERE id = ? AND version = ?",  # noqa: S608 - columns come from SchedulePatch
                [*values, schedule.id, schedule.version],
            )
        except aiosqlite.IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateScheduleConflictError(
                    template_id=schedule.template_id, asset_id=schedule.asset_id
                ) from e
            raise
        if cursor.rowcount == 0:
            msg = f"Schedule {schedule.id} changed during update"
            raise StaleRecordError(msg)
        return await self._fetch_schedule(conn, schedule.id)

    # Reference data

    async def get_home(self, home_id: str) -> Home:
        async with self._read("get_home") as conn:
            record = await self._fetch_one(conn, "SELECT id, name FROM homes WHERE id = ?", (home_id,))
        if record is None:
            raise NotFoundError("home", home_id)
        return Home.model_validate(record)

    async def get_asset(self, asset_id: str) -> Asset:
        async with self._read("get_asset") as conn:
            record = await self._fetch_one(
                conn, "SELECT id, home_id, name, category FROM assets WHERE id = ?", (asset_id,)
            )
        if record is None:
            raise NotFoundError("asset", asset_id)
        return Asset.model_validate(record)

    async def get_template(self, template_id: str) -> MaintenanceTemplate:
        async with self._read("get_template") as conn:
            record = await self._fetch_one(conn, "SELECT * FROM templates WHERE id = ?", (template_id,))
            if record is None:
                raise NotFoundError("template", template_id)
            cursor = await conn.execute(
                "SELECT instruction FROM template_instructions WHERE template_id = ? ORDER BY position",
                (template_id,),
            )
            instructions = [row["instruction"] for row in await cursor.fetchall()]
        return MaintenanceTemplate.model_validate({**record, "instructions": instructions})

    async def create_home(self, home: HomeCreate) -> Home:
        home_id = _new_id()
        now = self._clock.now()
        async with self._write("create_home") as conn:
            await self._insert(conn, "homes", {"id": home_id, "created": now, "updated": now, **home.model_dump()})
        logger.info("Created home", extra={"home_id": home_id})
        return Home(id=home_id, name=home.name)

    async def create_asset(self, asset: AssetCreate) -> Asset:
        asset_id = _new_id()
        now = self._clock.now()
        async with self._write("create_asset") as conn:
            await self._insert(conn, "assets", {"id": asset_id, "created": now, "updated": now, **asset.model_dump()})
        logger.info("Created asset", extra={"asset_id": asset_id, "home_id": asset.home_id})
        return Asset(id=asset_id, **asset.model_dump())

    async def create_template(self, template: TemplateCreate) -> MaintenanceTemplate:
        template_id = _new_id()
        now = self._clock.now()
        data = template.model_dump(exclude={"instructions"})
        async with self._write("create_template") as conn:
            await self._insert(conn, "templates", {"id": template_id, "created": now, "updated": now, **data})
            await conn.executemany(
                "INSERT INTO template_instructions (template_id, position, instruction) VALUES (?, ?, ?)",
                [(template_id, position, text) for position, text in enumerate(template.instructions)],
            )
        logger.info("Created template", extra={"template_id": template_id, "template_name": template.name})
        return MaintenanceTemplate(id=template_id, **template.model_dump())

    async def list_templates(
        self,
        *,
        include_inactive: bool = False,
        category: AssetCategory | None = None,
        difficulty: Difficulty | None = None,
        search: str | None = None,
    ) -> list[MaintenanceTemplate]:
        """Return templates ordered by category and name."""
        conditions: list[str] = []
        params: list[Any] = []
        if not include_inactive:
            conditions.append("is_active = 1")
        if category is not None:
            conditions.append("category = ?")
            params.append(category.value)
        if difficulty is not None:
            conditions.append("difficulty = ?")
            params.append(difficulty.value)
        if search and search.strip():
            # LIKE is case-insensitive for ASCII; wildcards in the term match literally
            escaped = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            conditions.append("(name LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\')")
            params.extend([f"%{escaped}%"] * 2)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        async with self._read("list_templates") as conn:
            cursor = await conn.execute(f"SELECT id FROM templates {where} ORDER BY category, name", params)  # noqa: S608
            template_ids = [row["id"] for row in await cursor.fetchall()]
        return [await self.get_template(template_id) for template_id in template_ids]

    # Schedules

    async def get_schedule(self, schedule_id: str) -> Schedule:
        async with self._read("get_schedule") as conn:
            return await self._fetch_schedule(conn, schedule_id)

    async def find_active_schedule(self, *, home_id: str, asset_id: str | None, template_id: str) -> Schedule | None:
        async with self._read("find_active_schedule") as conn:
            record = await self._fetch_one(
                conn,
                f"SELECT {_SCHEDULE_COLUMNS} FROM schedules "  # noqa: S608
                "WHERE home_id = ? AND COALESCE(asset_id, '') = ? AND template_id = ? AND is_active = 1",
                (home_id, asset_id or "", template_id),
            )
        return None if record is None else Schedule.model_validate(record)

    async def create_schedule_and_task(self, schedule: ScheduleCreate, task: TaskCreate) -> tuple[Schedule, Task]:
        schedule_id = _new_id()
        async with self._write("create_schedule_and_task") as conn:
            try:
                await self._insert(
                    conn,
                    "schedules",
                    {"id": schedule_id, "updated": schedule.created, "is_active": True, **schedule.model_dump()},
                )
            except aiosqlite.IntegrityError as e:
                if not _is_unique_violation(e):
                    raise
                existing = await self._fetch_one(
                    conn,
                    "SELECT id FROM schedules WHERE home_id = ? AND COALESCE(asset_id, '') = ? "
                    "AND template_id = ? AND is_active = 1",
                    (schedule.home_id, schedule.asset_id or "", schedule.template_id),
                )
                raise DuplicateScheduleConflictError(
                    template_id=schedule.template_id,
                    asset_id=schedule.asset_id,
                    existing_schedule_id=existing["id"] if existing else None,
                ) from e

            task_id = await self._insert_task(conn, task.model_copy(update={"schedule_id": schedule_id}))
            created_schedule = await self._fetch_schedule(conn, schedule_id)
            created_task = await self._fetch_task(conn, task_id)

        logger.info(
            "Created schedule with first task",
            extra={"schedule_id": schedule_id, "task_id": task_id, "home_id": schedule.home_id},
        )
        return created_schedule, created_task

    async def update_schedule(
        self, schedule_id: str, patch: SchedulePatch, *, expected_version: int | None = None
    ) -> Schedule:
        async with self._write("update_schedule") as conn:
            current = await self._fetch_schedule(conn, schedule_id)
            if expected_version is not None and current.version != expected_version:
                msg = f"Schedule {schedule_id} is at version {current.version}, expected {expected_version}"
                raise StaleRecordError(msg)
            updated = await self._apply_schedule_patch(conn, current, patch)

        logger.info("Updated schedule", extra={"schedule_id": schedule_id, "version": updated.version})
        return updated

    async def list_schedules(
        self,
        *,
        home_id: str,
        asset_id: str | None = None,
        include_inactive: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Schedule], int]:
        conditions = ["home_id = ?"]
        params: list[Any] = [home_id]
        if asset_id is not None:
            conditions.append("asset_id = ?")
            params.append(asset_id)
        if not include_inactive:
            conditions.append("is_active = 1")
        where_clause = " AND ".join(conditions)
        offset = (page - 1) * per_page

        async with self._read("list_schedules") as conn:
            count_row = await self._fetch_one(conn, f"SELECT COUNT(*) AS total FROM schedules WHERE {where_clause}", params)  # noqa: S608
            cursor = await conn.execute(
                f"SELECT {_SCHEDULE_COLUMNS} FROM schedules WHERE {where_clause} "  # noqa: S608
                "ORDER BY next_due_date ASC, created DESC LIMIT ? OFFSET ?",
                [*params, per_page, offset],
            )
            rows = await cursor.fetchall()

        total = count_row["total"] if count_row else 0
        return [Schedule.model_validate(db_client.row_to_dict(row)) for row in rows], total

    # Tasks

    async def get_task(self, task_id: str) -> Task:
        async with self._read("get_task") as conn:
            return await self._fetch_task(conn, task_id)

    async def create_task(self, task: TaskCreate) -> Task:
        async with self._write("create_task") as conn:
            task_id = await self._insert_task(conn, task)
            created = await self._fetch_task(conn, task_id)
        logger.info("Created task", extra={"task_id": task_id, "home_id": task.home_id})
        return created

    async def update_task(self, task_id: str, patch: TaskPatch, *, expected_status: frozenset[TaskStatus]) -> Task:
        async with self._write("update_task") as conn:
            updated = await self._apply_task_patch(conn, task_id, patch, expected_status)
        logger.info("Updated task", extra={"task_id": task_id, "status": updated.status})
        return updated

    async def update_task_and_maybe_create_next(
        self,
        task_id: str,
        patch: TaskPatch,
        *,
        expected_status: frozenset[TaskStatus],
        advance: AdvanceFn | None = None,
    ) -> CompletionResult:
        async with self._write("complete_task") as conn:
            task = await self._apply_task_patch(conn, task_id, patch, expected_status)
            if task.schedule_id is None or advance is None:
                return CompletionResult(task=task)

            schedule = await self._fetch_schedule(conn, task.schedule_id)
            schedule_patch, next_task = advance(schedule)
            schedule = await self._apply_schedule_patch(conn, schedule, schedule_patch)

            created_next = None
            if next_task is not None:
                next_id = await self._insert_task(conn, next_task.model_copy(update={"schedule_id": schedule.id}))
                created_next = await self._fetch_task(conn, next_id)

        logger.info(
            "Completed task and advanced schedule",
            extra={
                "task_id": task_id,
                "schedule_id": schedule.id,
                "next_task_id": created_next.id if created_next else None,
            },
        )
        return CompletionResult(task=task, schedule=schedule, next_task=created_next)

    async def list_tasks(
        self,
        *,
        home_id: str,
        schedule_id: str | None = None,
        statuses: frozenset[TaskStatus] | None = None,
    ) -> list[Task]:
        conditions = ["home_id = ?"]
        params: list[Any] = [home_id]
        if schedule_id is not None:
            conditions.append("schedule_id = ?")
            params.append(schedule_id)
        if statuses:
            conditions.append(f"status IN ({', '.join('?' for _ in statuses)})")
            params.extend(sorted(status.value for status in statuses))

        async with self._read("list_tasks") as conn:
            cursor = await conn.execute(
                f"SELECT * FROM tasks WHERE {' AND '.join(conditions)} ORDER BY due_date ASC, created ASC",  # noqa: S608
                params,
            )
            return await self._tasks_from_rows(conn, await cursor.fetchall())
