# ABOUTME: SQL DDL statements for the Story Stalker database schema.
# ABOUTME: Defines books, vault entries (user_books), and the reflection-prompt tables.

SCHEMA_VERSION = 1

# Parent tables come before the tables that reference them.
SCHEMA_V1 = """
-- Book metadata, independent of any tracking state
CREATE TABLE IF NOT EXISTS books (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    title           TEXT    NOT NULL,
    author          TEXT,
    year            INTEGER,
    description     TEXT,
    genres          TEXT,             -- comma-joined: "Fantasy, Horror"
    cover_url       TEXT,
    isbn10          TEXT,
    isbn13          TEXT,
    external_source TEXT,             -- e.g. "openlibrary"
    external_id     TEXT,
    created_at      INTEGER NOT NULL, -- unix ms
    updated_at      INTEGER NOT NULL  -- unix ms
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_books_external ON books(external_source, external_id);
CREATE INDEX IF NOT EXISTS idx_books_title ON books(title);
CREATE INDEX IF NOT EXISTS idx_books_author ON books(author);
CREATE INDEX IF NOT EXISTS idx_books_genres ON books(genres);

-- Vault entries: one per book
CREATE TABLE IF NOT EXISTS user_books (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id          INTEGER NOT NULL UNIQUE,
    status           INTEGER NOT NULL DEFAULT 0, -- 0=Want, 1=Reading, 2=Finished
    progress_percent INTEGER NOT NULL DEFAULT 0,
    notes            TEXT,
    added_at         INTEGER NOT NULL,
    started_at       INTEGER,
    finished_at      INTEGER,
    updated_at       INTEGER NOT NULL,

    FOREIGN KEY (book_id) REFERENCES books(id)
        ON DELETE CASCADE
        ON UPDATE CASCADE,

    CHECK (progress_percent BETWEEN 0 AND 100),
    CHECK (status IN (0, 1, 2))
);

CREATE INDEX IF NOT EXISTS idx_user_books_status ON user_books(status);

-- Reflection prompt catalog
CREATE TABLE IF NOT EXISTS prompts (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    text           TEXT    NOT NULL,
    milestone_type INTEGER NOT NULL, -- 0=Origin, 1=Progress, 2=Completion
    is_active      INTEGER NOT NULL DEFAULT 1,
    created_at     INTEGER NOT NULL,
    updated_at     INTEGER NOT NULL,

    CHECK (milestone_type IN (0, 1, 2)),
    CHECK (is_active IN (0, 1))
);

CREATE INDEX IF NOT EXISTS idx_prompts_milestone ON prompts(milestone_type);

-- Prompts selected for a vault entry (three slots)
CREATE TABLE IF NOT EXISTS user_book_prompts (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    user_book_id  INTEGER NOT NULL,
    prompt_id     INTEGER NOT NULL,
    slot          INTEGER NOT NULL,
    replaced_once INTEGER NOT NULL DEFAULT 0,
    selected_at   INTEGER NOT NULL,
    updated_at    INTEGER NOT NULL,

    FOREIGN KEY (user_book_id) REFERENCES user_books(id)
        ON DELETE CASCADE
        ON UPDATE CASCADE,
    FOREIGN KEY (prompt_id) REFERENCES prompts(id)
        ON DELETE RESTRICT
        ON UPDATE CASCADE,

    CHECK (slot IN (1, 2, 3)),
    CHECK (replaced_once IN (0, 1)),

    UNIQUE (user_book_id, slot),
    UNIQUE (user_book_id, prompt_id)
);

CREATE INDEX IF NOT EXISTS idx_user_book_prompts_user_book ON user_book_prompts(user_book_id);
CREATE INDEX IF NOT EXISTS idx_user_book_prompts_prompt ON user_book_prompts(prompt_id);

-- Reflection answers, capped at 210 characters
CREATE TABLE IF NOT EXISTS prompt_responses (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    user_book_prompt_id INTEGER NOT NULL,
    response_text       TEXT    NOT NULL,
    created_at          INTEGER NOT NULL,

    FOREIGN KEY (user_book_prompt_id) REFERENCES user_book_prompts(id)
        ON DELETE CASCADE
        ON UPDATE CASCADE,

    CHECK (length(response_text) <= 210)
);

CREATE INDEX IF NOT EXISTS idx_prompt_responses_ubp ON prompt_responses(user_book_prompt_id);
"""

# Forward-only migrations as (target_version, sql). Never drop tables or data here.
MIGRATIONS: list[tuple[int, str]] = []
