"""Tasks module for maintenance task management."""


class TasksModule:
    """Tasks module for home maintenance tasks.

    Provides:
    - Task records, scheduled or standalone
    - State machine for the task lifecycle and derived overdue status
    - Completion photos
    - Dashboard analytics and sorting helpers
    """

    @property
    def name(self) -> str:
        """Module name (unique identifier)."""
        return "tasks"

    @property
    def description(self) -> str:
        """Module description (human-readable)."""
        return "Maintenance tasks with completion tracking and analytics"

    def get_table_schemas(self) -> dict[str, str]:
        """Return table schemas for this module."""
        return {
            "tasks": """CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL,
        updated TEXT NOT NULL,
        home_id TEXT NOT NULL REFERENCES homes(id),
        asset_id TEXT REFERENCES assets(id),
        template_id TEXT REFERENCES templates(id),
        schedule_id TEXT REFERENCES schedules(id),
        title TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        notes TEXT,
        due_date TEXT NOT NULL,
        priority TEXT NOT NULL DEFAULT 'MEDIUM'
            CHECK (priority IN ('LOW', 'MEDIUM', 'HIGH', 'URGENT')),
        status TEXT NOT NULL DEFAULT 'PENDING'
            CHECK (status IN ('PENDING', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')),
        estimated_cost REAL,
        completed_at TEXT,
        completion_notes TEXT,
        actual_cost REAL CHECK (actual_cost IS NULL OR actual_cost >= 0),
        cost_notes TEXT
    )""",
            "task_photos": """CREATE TABLE IF NOT EXISTS task_photos (
        task_id TEXT NOT NULL REFERENCES tasks(id),
        position INTEGER NOT NULL,
        url TEXT NOT NULL,
        PRIMARY KEY (task_id, position)
    )""",
        }

    def get_indexes(self) -> list[str]:
        """Return indexes for this module's tables."""
        return [
            "CREATE INDEX IF NOT EXISTS idx_tasks_home_id ON tasks (home_id)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_schedule_id ON tasks (schedule_id)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks (status)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks (due_date)",
        ]
