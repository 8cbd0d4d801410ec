"""
Schema DDL for the floor inventory database.

Defines all table structures, constraints, and indexes as a single SQL
string constant. ``DatabaseProvider.initialize_schema`` runs it on every
start, so every statement is idempotent.

Tables:
    stations  - Device slots on the floor map (soft-deleted, never removed)
    bays      - Named regions grouping stations of one device type
    audits    - Per-site, per-date equipment counts (JSON count mappings)
    logs      - Append-only field-level change history
"""

# Complete schema DDL as a single SQL script.
SCHEMA_SQL = """
-- ============================================================================
-- STATIONS: One peripheral slot on the map
-- ============================================================================

CREATE TABLE IF NOT EXISTS stations (
    id TEXT PRIMARY KEY,
    station_number INTEGER CHECK(station_number IS NULL OR station_number > 0),
    bay TEXT,              -- soft reference to bays.name, not enforced
    device_type TEXT NOT NULL CHECK(device_type IN ('mouse', 'keyboard', 'headset')),
    position_x REAL NOT NULL DEFAULT 0,
    position_y REAL NOT NULL DEFAULT 0,
    device_serial_number TEXT,   -- NOT unique: duplicate serials are allowed
    device_brand TEXT,
    device_model TEXT,
    device_notes TEXT,
    device_registered_at TIMESTAMP,
    device_updated_at TIMESTAMP,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);

-- Station number is unique per device type among active, numbered stations
CREATE UNIQUE INDEX IF NOT EXISTS idx_stations_number
    ON stations(station_number, device_type)
    WHERE station_number IS NOT NULL AND is_active = 1;

CREATE INDEX IF NOT EXISTS idx_stations_type_bay ON stations(device_type, bay);
CREATE INDEX IF NOT EXISTS idx_stations_serial ON stations(device_serial_number);
CREATE INDEX IF NOT EXISTS idx_stations_active_type ON stations(is_active, device_type);

-- ============================================================================
-- BAYS: Named station groups; reactivated rather than re-inserted
-- ============================================================================

CREATE TABLE IF NOT EXISTS bays (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL CHECK(length(name) <= 20),
    device_type TEXT NOT NULL CHECK(device_type IN ('mouse', 'keyboard', 'headset')),
    position_x REAL NOT NULL DEFAULT 0,
    position_y REAL NOT NULL DEFAULT 0,
    width REAL NOT NULL DEFAULT 55,
    height REAL NOT NULL DEFAULT 50,
    color TEXT NOT NULL DEFAULT '#6c757d',
    lifecycle TEXT NOT NULL DEFAULT 'active' CHECK(lifecycle IN ('active', 'soft_deleted')),
    metadata TEXT,         -- JSON: description, capacity, department, tags, ...
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL,
    UNIQUE(name, device_type)
);

CREATE INDEX IF NOT EXISTS idx_bays_lifecycle_type ON bays(lifecycle, device_type);

-- ============================================================================
-- AUDITS: One equipment count snapshot per date and site
-- ============================================================================

CREATE TABLE IF NOT EXISTS audits (
    id TEXT PRIMARY KEY,
    date TEXT NOT NULL,    -- ISO-8601 date
    site TEXT NOT NULL,
    items TEXT NOT NULL,   -- JSON: item -> {departments, stock, defectives}
    other_items TEXT NOT NULL,
    missing_items TEXT NOT NULL,
    created_by TEXT,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL,
    UNIQUE(date, site)
);

CREATE INDEX IF NOT EXISTS idx_audits_site ON audits(site);

-- ============================================================================
-- LOGS: Append-only change history
-- ============================================================================

CREATE TABLE IF NOT EXISTS logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    action TEXT NOT NULL CHECK(action IN ('create', 'update', 'delete')),
    audit_date TEXT NOT NULL,
    item TEXT,
    field TEXT,
    old_value TEXT,        -- JSON-encoded
    new_value TEXT,        -- JSON-encoded
    description TEXT NOT NULL,
    user_id TEXT,
    timestamp TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_logs_timestamp_action ON logs(timestamp, action);
CREATE INDEX IF NOT EXISTS idx_logs_audit_date_action ON logs(audit_date, action);
CREATE INDEX IF NOT EXISTS idx_logs_item_field ON logs(item, field, timestamp);
CREATE INDEX IF NOT EXISTS idx_logs_user ON logs(user_id, timestamp);
"""
