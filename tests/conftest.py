"""
Test fixtures.

Services run against an in-memory SQLite database behind a connection
wrapper that accepts the same %s placeholders and returns dict rows, like
the pymysql DictCursor used in production.
"""
import sqlite3
from datetime import datetime, date

import pytest
from fastapi.testclient import TestClient

from app.db import ConnectionWrapper, get_db
from app.middleware import create_access_token

sqlite3.register_adapter(datetime, lambda d: d.strftime("%Y-%m-%d %H:%M:%S"))
sqlite3.register_adapter(date, lambda d: d.isoformat())

ADMIN_ROLE_ID = 2
TRAINER_ROLE_ID = 5
MEMBER_ROLE_ID = 4
HOUSEKEEPING_ROLE_ID = 8

SCHEMA = """
CREATE TABLE branch (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    address TEXT
);
CREATE TABLE user (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    fullName TEXT NOT NULL,
    email TEXT,
    phone TEXT,
    adminId INTEGER,
    roleId INTEGER NOT NULL,
    branchId INTEGER,
    tax REAL,
    gymName TEXT,
    gymAddress TEXT,
    gstNumber TEXT
);
CREATE TABLE member (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    userId INTEGER,
    adminId INTEGER,
    branchId INTEGER,
    fullName TEXT NOT NULL,
    email TEXT,
    phone TEXT,
    address TEXT,
    membershipFrom TEXT,
    membershipTo TEXT,
    discount REAL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'ACTIVE'
);
CREATE TABLE memberplan (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    adminId INTEGER,
    name TEXT NOT NULL,
    sessions INTEGER NOT NULL DEFAULT 0,
    price REAL NOT NULL DEFAULT 0,
    validityDays INTEGER,
    taxRate REAL DEFAULT 0,
    trainerId INTEGER,
    trainerType TEXT,
    status TEXT NOT NULL DEFAULT 'ACTIVE'
);
CREATE TABLE member_plan_assignment (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    memberId INTEGER NOT NULL,
    planId INTEGER NOT NULL,
    membershipFrom TEXT,
    membershipTo TEXT,
    status TEXT NOT NULL DEFAULT 'ACTIVE'
);
CREATE TABLE classtype (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL
);
CREATE TABLE classschedule (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    adminId INTEGER NOT NULL,
    className TEXT NOT NULL,
    trainerId INTEGER NOT NULL,
    date TEXT NOT NULL,
    day TEXT,
    startTime TEXT NOT NULL,
    endTime TEXT NOT NULL,
    capacity INTEGER NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'Active',
    members TEXT,
    price REAL NOT NULL DEFAULT 0
);
CREATE TABLE booking (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    memberId INTEGER NOT NULL,
    scheduleId INTEGER NOT NULL,
    createdAt TEXT,
    UNIQUE (memberId, scheduleId)
);
CREATE TABLE memberattendance (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    memberId INTEGER NOT NULL,
    branchId INTEGER,
    checkIn TEXT NOT NULL,
    checkOut TEXT,
    status TEXT NOT NULL DEFAULT 'Present',
    mode TEXT,
    notes TEXT,
    createdAt TEXT
);
CREATE TABLE payment (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    memberId INTEGER NOT NULL,
    planId INTEGER,
    amount REAL NOT NULL,
    invoiceNo TEXT,
    paymentDate TEXT,
    paymentMode TEXT
);
CREATE TABLE staff (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    userId INTEGER NOT NULL,
    adminId INTEGER,
    branchId INTEGER
);
CREATE TABLE shifts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    staffId TEXT NOT NULL,
    branchId INTEGER,
    shiftDate TEXT NOT NULL,
    startTime TEXT NOT NULL,
    endTime TEXT NOT NULL,
    shiftType TEXT NOT NULL,
    description TEXT,
    status TEXT NOT NULL DEFAULT 'Pending',
    createdById INTEGER,
    createdAt TEXT
);
"""


class SqliteCursor:
    def __init__(self, conn):
        self._cursor = conn.cursor()

    def execute(self, sql, params=()):
        return self._cursor.execute(sql.replace("%s", "?"), tuple(params or ()))

    def fetchone(self):
        row = self._cursor.fetchone()
        return dict(row) if row is not None else None

    def fetchall(self):
        return [dict(row) for row in self._cursor.fetchall()]

    @property
    def lastrowid(self):
        return self._cursor.lastrowid

    @property
    def rowcount(self):
        return self._cursor.rowcount

    def close(self):
        self._cursor.close()


class SqliteConnectionWrapper(ConnectionWrapper):
    cursor_class = SqliteCursor

    def cursor(self, dictionary=False):
        return self.cursor_class(self._conn)


class Seeder:
    """Inserts fixture rows and returns their ids"""

    def __init__(self, conn):
        self.conn = conn

    def _insert(self, table, **values):
        columns = ", ".join(values)
        placeholders = ", ".join(["%s"] * len(values))
        cursor = self.conn.cursor(dictionary=True)
        try:
            cursor.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                list(values.values()),
            )
            self.conn.commit()
            return cursor.lastrowid
        finally:
            cursor.close()

    def count(self, table, where="1 = 1", params=()):
        cursor = self.conn.cursor(dictionary=True)
        try:
            cursor.execute(f"SELECT COUNT(*) AS total FROM {table} WHERE {where}", params)
            return cursor.fetchone()["total"]
        finally:
            cursor.close()

    def branch(self, name="Main Branch"):
        return self._insert("branch", name=name, address="1 Gym Street")

    def admin(self, name="Gym Owner", tax=18):
        return self._insert(
            "user", fullName=name, email="owner@example.com", roleId=ADMIN_ROLE_ID,
            tax=tax, gymName="Iron Gym", gymAddress="1 Gym Street", gstNumber="29ABCDE1234F1Z5",
        )

    def trainer(self, admin_id, name="Tina Trainer"):
        return self._insert("user", fullName=name, adminId=admin_id, roleId=TRAINER_ROLE_ID)

    def housekeeper(self, admin_id, name="Harry Housekeeper"):
        user_id = self._insert("user", fullName=name, adminId=admin_id, roleId=HOUSEKEEPING_ROLE_ID)
        staff_id = self._insert("staff", userId=user_id, adminId=admin_id)
        return user_id, staff_id

    def member(self, admin_id, branch_id=None, name="Mia Member", tax=None, discount=0,
               status="ACTIVE"):
        """Returns (login user id, member id)"""
        user_id = self._insert(
            "user", fullName=name, email=f"{name.split()[0].lower()}@example.com",
            phone="0800000000", adminId=admin_id, roleId=MEMBER_ROLE_ID, tax=tax,
        )
        member_id = self._insert(
            "member", userId=user_id, adminId=admin_id, branchId=branch_id, fullName=name,
            email=f"{name.split()[0].lower()}@example.com", phone="0800000000",
            discount=discount, status=status,
        )
        return user_id, member_id

    def plan(self, sessions=10, price=1000, name="Monthly"):
        return self._insert("memberplan", name=name, sessions=sessions, price=price, validityDays=30)

    def assign(self, member_id, plan_id, membership_to="2999-12-31 00:00:00", status="ACTIVE"):
        return self._insert(
            "member_plan_assignment", memberId=member_id, planId=plan_id,
            membershipFrom="2020-01-01 00:00:00", membershipTo=membership_to, status=status,
        )

    def schedule(self, admin_id, trainer_id, capacity=10, class_name="Morning Yoga"):
        return self._insert(
            "classschedule", adminId=admin_id, className=class_name, trainerId=trainer_id,
            date="2030-01-07 00:00:00.000", day="Monday", startTime="07:00", endTime="08:00",
            capacity=capacity, status="Active", members="[]", price=0,
        )

    def booking(self, member_id, schedule_id):
        return self._insert("booking", memberId=member_id, scheduleId=schedule_id)

    def payment(self, member_id, amount, plan_id=None, invoice_no="INV-0001"):
        return self._insert(
            "payment", memberId=member_id, planId=plan_id, amount=amount, invoiceNo=invoice_no,
            paymentDate="2026-01-15 10:00:00", paymentMode="Cash",
        )


@pytest.fixture
def conn():
    raw = sqlite3.connect(":memory:", check_same_thread=False)
    raw.row_factory = sqlite3.Row
    raw.executescript(SCHEMA)
    wrapper = SqliteConnectionWrapper(raw)
    yield wrapper
    raw.close()


@pytest.fixture
def seed(conn):
    return Seeder(conn)


@pytest.fixture
def gym(seed):
    """An admin with one branch and one trainer"""
    admin_id = seed.admin()
    return {
        "admin_id": admin_id,
        "branch_id": seed.branch(),
        "trainer_id": seed.trainer(admin_id),
    }


@pytest.fixture
def client(conn):
    from main import app

    app.dependency_overrides[get_db] = lambda: conn
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id, role_id=ADMIN_ROLE_ID, admin_id=None):
    token = create_access_token({"user_id": user_id, "role_id": role_id, "admin_id": admin_id})
    return {"Authorization": f"Bearer {token}"}
