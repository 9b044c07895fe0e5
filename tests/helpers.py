import copy
import threading

from werkzeug.security import generate_password_hash

from errors import StoreError


class FakeStore:
    """In-memory stand-in for store.Store that records every call."""

    def __init__(self, tables=None, fail_reads=(), fail_writes=False):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.fail_reads = set(fail_reads)
        self.fail_writes = fail_writes
        self.calls = []
        self._lock = threading.Lock()
        self._next_id = 1

    def fresh(self):
        return self

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def calls_to(self, kind):
        return [c for c in self.calls if c[0] == kind]

    @staticmethod
    def _matches(row, filters):
        return all(row.get(k) == v for k, v in (filters or {}).items())

    def select(self, table, filters=None, columns=None, order_by=None):
        self._record("select", table, filters)
        if table in self.fail_reads:
            raise StoreError(f"Failed to read {table}")
        rows = [copy.deepcopy(r) for r in self.tables.get(table, []) if self._matches(r, filters)]
        if columns:
            rows = [{c: r.get(c) for c in columns} for r in rows]
        return rows

    def select_one(self, table, filters, columns=None):
        rows = self.select(table, filters, columns)
        return rows[0] if rows else None

    def count_by(self, table, column):
        counts = {}
        for row in self.tables.get(table, []):
            counts[row.get(column)] = counts.get(row.get(column), 0) + 1
        return counts

    def insert(self, table, rows):
        if isinstance(rows, dict):
            rows = [rows]
        self._record("insert", table, rows)
        if self.fail_writes:
            raise StoreError(f"Failed to insert into {table}")
        inserted = []
        for row in rows:
            row = dict(row)
            if "id" not in row:
                row["id"] = str(self._next_id)
                self._next_id += 1
            self.tables.setdefault(table, []).append(row)
            inserted.append(dict(row))
        return inserted

    def update(self, table, patch, filters):
        self._record("update", table, patch, filters)
        if self.fail_writes:
            raise StoreError(f"Failed to update {table}")
        affected = 0
        for row in self.tables.get(table, []):
            if self._matches(row, filters):
                row.update(patch)
                affected += 1
        return affected

    def delete(self, table, filters):
        self._record("delete", table, filters)
        if self.fail_writes:
            raise StoreError(f"Failed to delete from {table}")
        before = self.tables.get(table, [])
        self.tables[table] = [r for r in before if not self._matches(r, filters)]
        return len(before) - len(self.tables[table])


def make_user(store, email, role="user", password="secret", **extra):
    return store.insert("profiles", {
        "email": email,
        "password": generate_password_hash(password),
        "role": role,
        **extra,
    })[0]


def login(client, email, password="secret"):
    return client.post("/login", json={"email": email, "password": password})
