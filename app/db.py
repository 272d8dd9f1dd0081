import pymysql
from fastapi import Request

from app import config

DB_CONFIG = {
    "host": config.DB_HOST,
    "port": config.DB_PORT,
    "user": config.DB_USER,
    "password": config.DB_PASSWORD,
    "database": config.DB_NAME,
}


class ConnectionWrapper:
    def __init__(self, conn):
        self._conn = conn

    @property
    def IntegrityError(self):
        return self._conn.IntegrityError

    def cursor(self, dictionary=False):
        if dictionary:
            return self._conn.cursor(pymysql.cursors.DictCursor)
        return self._conn.cursor()

    def commit(self):
        return self._conn.commit()

    def rollback(self):
        return self._conn.rollback()

    def close(self):
        return self._conn.close()


class Database:
    """Store handle owned by the application lifespan."""

    def __init__(self, db_config: dict = None):
        self.db_config = dict(db_config or DB_CONFIG)

    def connect(self) -> ConnectionWrapper:
        """Open a MySQL connection with dictionary cursor support"""
        conn = pymysql.connect(
            host=self.db_config["host"],
            port=self.db_config["port"],
            user=self.db_config["user"],
            password=self.db_config["password"],
            database=self.db_config["database"],
            charset="utf8mb4",
            cursorclass=pymysql.cursors.DictCursor,
        )
        return ConnectionWrapper(conn)


def get_db(request: Request):
    """Per-request connection dependency"""
    conn = request.app.state.db.connect()
    try:
        yield conn
    finally:
        conn.close()
