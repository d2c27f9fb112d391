USERS_TABLE = "auth_users"
ENTRIES_TABLE = "entries"
PROFILES_TABLE = "profiles"
QUESTS_TABLE = "quests"
LEADS_TABLE = "leads"

USERS_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    email_confirmed INTEGER DEFAULT 0,
    confirmation_token TEXT,
    token_version INTEGER DEFAULT 0,
    created_at TEXT NOT NULL
)
"""

ENTRIES_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {ENTRIES_TABLE} (
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    emotion TEXT NOT NULL,
    intensity INTEGER NOT NULL,
    notes TEXT,
    image_url TEXT,
    pnl REAL,
    trading_data TEXT,
    updated_at TEXT,
    PRIMARY KEY (user_id, date)
)
"""

PROFILES_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {PROFILES_TABLE} (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    alias TEXT NOT NULL,
    picture TEXT,
    journal_purpose TEXT,
    updated_at TEXT
)
"""

QUESTS_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {QUESTS_TABLE} (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    text TEXT NOT NULL,
    completed INTEGER DEFAULT 0,
    created_at TEXT NOT NULL
)
"""

LEADS_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {LEADS_TABLE} (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

ENTRIES_UNIQUE_SQL = f"""
ALTER TABLE {ENTRIES_TABLE}
ADD CONSTRAINT entries_user_id_date_key UNIQUE (user_id, date)
"""

TABLE_SETUP_SQL = {
    ENTRIES_TABLE: ENTRIES_TABLE_SQL,
    PROFILES_TABLE: PROFILES_TABLE_SQL,
    QUESTS_TABLE: QUESTS_TABLE_SQL,
    LEADS_TABLE: LEADS_TABLE_SQL,
}

ALL_TABLES_SQL = [
    USERS_TABLE_SQL,
    ENTRIES_TABLE_SQL,
    PROFILES_TABLE_SQL,
    QUESTS_TABLE_SQL,
    LEADS_TABLE_SQL,
]
