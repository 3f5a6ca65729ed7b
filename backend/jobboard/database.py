import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from jobboard.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- JOBS
-- ============================================================
CREATE TABLE IF NOT EXISTS jobs (
    id               TEXT PRIMARY KEY,
    tenant_id        TEXT NOT NULL,
    posted_by        TEXT NOT NULL,
    posted_by_name   TEXT,
    company          TEXT NOT NULL,
    position         TEXT NOT NULL,
    location         TEXT NOT NULL,
    type             TEXT NOT NULL
                     CHECK(type IN ('full-time','part-time','internship','contract')),
    experience       TEXT NOT NULL DEFAULT 'mid'
                     CHECK(experience IN ('entry','mid','senior','lead')),
    industry         TEXT NOT NULL DEFAULT 'technology',
    remote           INTEGER NOT NULL DEFAULT 0,
    salary_min       INTEGER,
    salary_max       INTEGER,
    salary_currency  TEXT,
    vacancies        INTEGER,
    requirements     TEXT NOT NULL DEFAULT '[]',
    benefits         TEXT NOT NULL DEFAULT '[]',
    description      TEXT NOT NULL,
    deadline         TEXT,
    application_url  TEXT,
    status           TEXT NOT NULL DEFAULT 'pending'
                     CHECK(status IN ('active','pending','closed','draft')),
    created_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_jobs_tenant_status ON jobs(tenant_id, status);
CREATE INDEX IF NOT EXISTS idx_jobs_posted_by ON jobs(posted_by);
CREATE INDEX IF NOT EXISTS idx_jobs_created ON jobs(created_at);

CREATE TABLE IF NOT EXISTS job_tags (
    job_id TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    name   TEXT NOT NULL,
    PRIMARY KEY (job_id, name)
);

-- ============================================================
-- APPLICATIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS applications (
    id             TEXT PRIMARY KEY,
    job_id         TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    applicant_id   TEXT NOT NULL,
    tenant_id      TEXT NOT NULL,
    contact_name   TEXT NOT NULL,
    contact_email  TEXT NOT NULL,
    contact_phone  TEXT NOT NULL,
    skills         TEXT NOT NULL,
    experience     TEXT NOT NULL,
    message        TEXT,
    resume_ref     TEXT,
    status         TEXT NOT NULL DEFAULT 'Applied'
                   CHECK(status IN ('Applied','Shortlisted','Rejected','Hired')),
    applied_at     TEXT NOT NULL,
    updated_at     TEXT NOT NULL,
    reviewed_by    TEXT,
    reviewed_at    TEXT,
    review_notes   TEXT,
    UNIQUE (job_id, applicant_id)
);

CREATE INDEX IF NOT EXISTS idx_applications_applicant ON applications(applicant_id);
CREATE INDEX IF NOT EXISTS idx_applications_status ON applications(status);

-- ============================================================
-- SAVED JOBS
-- ============================================================
CREATE TABLE IF NOT EXISTS saved_jobs (
    user_id  TEXT NOT NULL,
    job_id   TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    saved_at TEXT NOT NULL,
    PRIMARY KEY (user_id, job_id)
);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.close()
