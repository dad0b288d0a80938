# -*- coding: utf-8 -*-
"""App database (plan days, meals, workouts): SQLite helpers."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS plan_days (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                date TEXT NOT NULL,
                goal TEXT,
                total_calories INTEGER,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                UNIQUE (user_id, date)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS plan_meals (
                id TEXT PRIMARY KEY,
                plan_day_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                slot TEXT,
                title TEXT NOT NULL,
                description TEXT,
                start_time TEXT NOT NULL,
                end_time TEXT NOT NULL,
                calories INTEGER,
                protein_g INTEGER,
                carbs_g INTEGER,
                fat_g INTEGER,
                status TEXT NOT NULL,
                source TEXT NOT NULL,
                source_meta_json TEXT,
                FOREIGN KEY(plan_day_id) REFERENCES plan_days(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_plan_meals_day_position ON plan_meals(plan_day_id, position ASC);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS plan_workouts (
                id TEXT PRIMARY KEY,
                plan_day_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                title TEXT NOT NULL,
                focus TEXT,
                description TEXT,
                start_time TEXT NOT NULL,
                end_time TEXT NOT NULL,
                duration_min INTEGER,
                intensity TEXT,
                status TEXT NOT NULL,
                source TEXT NOT NULL,
                source_meta_json TEXT,
                FOREIGN KEY(plan_day_id) REFERENCES plan_days(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_plan_workouts_day_position ON plan_workouts(plan_day_id, position ASC);"
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """One connection, one transaction: commit on success, roll back on any error."""
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
