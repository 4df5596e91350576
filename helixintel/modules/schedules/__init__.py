"""Schedules module: reference data and recurring maintenance schedules."""


class SchedulesModule:
    """Schedules module for recurring home maintenance.

    Provides:
    - Homes, assets and maintenance templates (reference data)
    - Schedules with at most one active schedule per asset and template
    - The schedule engine that applies templates and advances due dates
    """

    @property
    def name(self) -> str:
        """Module name (unique identifier)."""
        return "schedules"

    @property
    def description(self) -> str:
        """Module description (human-readable)."""
        return "Recurring maintenance schedules generated from templates"

    def get_table_schemas(self) -> dict[str, str]:
        """Return table schemas for this module."""
        return {
            "homes": """CREATE TABLE IF NOT EXISTS homes (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL,
        updated TEXT NOT NULL,
        name TEXT NOT NULL
    )""",
            "assets": """CREATE TABLE IF NOT EXISTS assets (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL,
        updated TEXT NOT NULL,
        home_id TEXT NOT NULL REFERENCES homes(id),
        name TEXT NOT NULL,
        category TEXT NOT NULL DEFAULT 'OTHER'
            CHECK (category IN ('HVAC', 'PLUMBING', 'ELECTRICAL', 'APPLIANCE', 'OUTDOOR', 'STRUCTURAL', 'OTHER'))
    )""",
            "templates": """CREATE TABLE IF NOT EXISTS templates (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL,
        updated TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        category TEXT NOT NULL
            CHECK (category IN ('HVAC', 'PLUMBING', 'ELECTRICAL', 'APPLIANCE', 'OUTDOOR', 'STRUCTURAL', 'OTHER')),
        default_frequency TEXT NOT NULL,
        default_custom_frequency_days INTEGER,
        estimated_duration_minutes INTEGER,
        difficulty TEXT NOT NULL DEFAULT 'EASY'
            CHECK (difficulty IN ('EASY', 'MODERATE', 'HARD', 'PROFESSIONAL')),
        is_active INTEGER NOT NULL DEFAULT 1
    )""",
            "template_instructions": """CREATE TABLE IF NOT EXISTS template_instructions (
        template_id TEXT NOT NULL REFERENCES templates(id),
        position INTEGER NOT NULL,
        instruction TEXT NOT NULL,
        PRIMARY KEY (template_id, position)
    )""",
            "schedules": """CREATE TABLE IF NOT EXISTS schedules (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL,
        updated TEXT NOT NULL,
        home_id TEXT NOT NULL REFERENCES homes(id),
        asset_id TEXT REFERENCES assets(id),
        template_id TEXT NOT NULL REFERENCES templates(id),
        frequency TEXT NOT NULL
            CHECK (frequency IN ('WEEKLY', 'BIWEEKLY', 'MONTHLY', 'QUARTERLY', 'SEMIANNUAL', 'ANNUAL', 'CUSTOM')),
        custom_frequency_days INTEGER
            CHECK (custom_frequency_days IS NULL OR custom_frequency_days BETWEEN 1 AND 365),
        next_due_date TEXT NOT NULL,
        last_completed_date TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        version INTEGER NOT NULL DEFAULT 1,
        CHECK ((frequency = 'CUSTOM') = (custom_frequency_days IS NOT NULL))
    )""",
        }

    def get_indexes(self) -> list[str]:
        """Return indexes for this module's tables."""
        return [
            "CREATE INDEX IF NOT EXISTS idx_assets_home_id ON assets (home_id)",
            "CREATE INDEX IF NOT EXISTS idx_schedules_home_id ON schedules (home_id)",
            "CREATE INDEX IF NOT EXISTS idx_schedules_asset_id ON schedules (asset_id)",
            "CREATE INDEX IF NOT EXISTS idx_schedules_next_due_date ON schedules (next_due_date)",
            # At most one active schedule per home, asset (or whole home) and template
            """CREATE UNIQUE INDEX IF NOT EXISTS idx_schedules_one_active
        ON schedules (home_id, COALESCE(asset_id, ''), template_id) WHERE is_active = 1""",
        ]
