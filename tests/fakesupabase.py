"""In-memory stand-in for the async Supabase client (table queries only)."""

import uuid

from postgrest.exceptions import APIError


def _is_uuid(value):
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class FakeResult:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, name):
        self._db = db
        self._name = name
        self._filters = []
        self._order = None
        self._range = None
        self._limit = None
        self._count = None
        self._insert = None
        self._update = None
        self._delete = False
        self._bad_value = None

    def select(self, *columns, count=None):
        self._count = count
        return self

    def eq(self, field, value):
        if field in self._db.uuid_columns.get(self._name, ()) and not _is_uuid(value):
            self._bad_value = value
        self._filters.append(lambda r: str(r.get(field)) == str(value))
        return self

    def order(self, field, desc=False):
        self._order = (field, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def insert(self, record):
        self._insert = record
        return self

    def update(self, values):
        self._update = values
        return self

    def delete(self):
        self._delete = True
        return self

    async def execute(self):
        kind = "insert" if self._insert else "update" if self._update else "delete" if self._delete else "select"
        self._db.calls.append((self._name, kind))
        if self._name in self._db.fail_tables:
            raise self._db.fail_tables[self._name]
        if self._bad_value is not None:
            raise APIError({
                "code": "22P02",
                "message": f'invalid input syntax for type uuid: "{self._bad_value}"',
                "details": None,
                "hint": None,
            })
        rows = self._db.tables.setdefault(self._name, [])
        if self._insert is not None:
            return FakeResult([self._db.insert(self._name, self._insert)])
        matched = [row for row in rows if all(f(row) for f in self._filters)]
        if self._delete:
            self._db.tables[self._name] = [row for row in rows if not any(row is m for m in matched)]
            return FakeResult([dict(row) for row in matched])
        if self._update is not None:
            for row in matched:
                row.update(self._update)
            return FakeResult([dict(row) for row in matched])
        if self._order is not None:
            field, desc = self._order
            matched = sorted(matched, key=lambda r: r.get(field) or 0, reverse=desc)
        total = len(matched)
        if self._range is not None:
            start, end = self._range
            matched = matched[start:end + 1]
        if self._limit is not None:
            matched = matched[: self._limit]
        return FakeResult([dict(row) for row in matched], count=total if self._count else None)


class FakeSupabase:
    """Tables are lists of dicts; ``unique`` maps table -> column tuple enforced on insert.

    ``uuid_columns`` maps table -> columns that reject non-uuid filter values (22P02).
    """

    def __init__(self, tables=None, unique=None, uuid_columns=None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.unique = unique or {"streak_events": ("user_id", "event_date")}
        self.uuid_columns = uuid_columns or {}
        self.fail_tables = {}
        self.calls = []

    def table(self, name: str):
        return FakeQuery(self, name)

    def insert(self, name, record):
        rows = self.tables.setdefault(name, [])
        columns = self.unique.get(name)
        if columns:
            key = tuple(str(record.get(c)) for c in columns)
            if any(tuple(str(r.get(c)) for c in columns) == key for r in rows):
                raise APIError({
                    "code": "23505",
                    "message": f'duplicate key value violates unique constraint "uq_{name}"',
                    "details": None,
                    "hint": None,
                })
        row = dict(record)
        row.setdefault("id", str(uuid.uuid4()))
        rows.append(row)
        return dict(row)

    async def getter(self):
        return self
