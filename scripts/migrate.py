#!/usr/bin/env python3
"""
Apply the SQL files in migrations/ in filename order.

Column-add migrations may already have been applied; MySQL then reports
ER_DUP_FIELDNAME, which is logged and skipped. Any other error stops the run.
"""
import argparse
import logging
import os
import sys

import pymysql
from pymysql.constants import ER

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db import Database  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("migrate")

MIGRATIONS_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "migrations"
)


def split_statements(sql: str) -> list:
    return [s.strip() for s in sql.split(";") if s.strip()]


def apply_migration(conn, path: str) -> int:
    """Run every statement of one file. Returns the number of statements skipped."""
    with open(path, encoding="utf-8") as f:
        statements = split_statements(f.read())

    skipped = 0
    cursor = conn.cursor()
    try:
        for statement in statements:
            try:
                cursor.execute(statement)
            except pymysql.err.MySQLError as e:
                if e.args and e.args[0] == ER.DUP_FIELDNAME:
                    logger.info(f"{os.path.basename(path)}: column already exists. Skipping.")
                    skipped += 1
                    continue
                raise
        conn.commit()
    finally:
        cursor.close()
    return skipped


def main(argv=None):
    parser = argparse.ArgumentParser(description="Apply SQL migrations")
    parser.add_argument("--dir", default=MIGRATIONS_DIR, help="Directory with *.sql files")
    args = parser.parse_args(argv)

    files = sorted(f for f in os.listdir(args.dir) if f.endswith(".sql"))
    if not files:
        logger.info(f"No migrations found in {args.dir}")
        return 0

    conn = Database().connect()
    try:
        for name in files:
            logger.info(f"Running migration {name}...")
            apply_migration(conn, os.path.join(args.dir, name))
        logger.info(f"Applied {len(files)} migration file(s)")
    except Exception as e:
        conn.rollback()
        logger.error(f"Migration failed: {e}", exc_info=True)
        return 1
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
