"""In-memory stand-in for the parts of the supabase-py client the app uses."""

import copy
import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace


class FakeAPIError(Exception):
    """Shaped like postgrest.exceptions.APIError"""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeAuthError(Exception):
    pass


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.filters = []
        self.ordering = None
        self.row_limit = None
        self.payload = None

    def select(self, columns="*", count=None):
        self.columns = columns
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def _matches(self, row):
        return all(check(row) for check in self.filters)

    def _project(self, row):
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [name.strip() for name in self.columns.split(",")]
        return {name: row.get(name) for name in names}

    def execute(self):
        self.db.calls.append((self.table, self.action))
        failure = self.db.failures.get((self.table, self.action))
        if failure is not None:
            raise failure
        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            for new_row in new_rows:
                if any(row["id"] == new_row["id"] for row in rows):
                    raise FakeAPIError(
                        'duplicate key value violates unique constraint "profile_pkey"', code="23505"
                    )
            stored = []
            for new_row in new_rows:
                row = {"created_at": self.db.now(), "updated_at": None, **copy.deepcopy(new_row)}
                rows.append(row)
                stored.append(copy.deepcopy(row))
            return FakeResponse(stored)

        matched = [row for row in rows if self._matches(row)]

        if self.action == "update":
            for row in matched:
                row.update(self.payload)
                row["updated_at"] = self.db.now()
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.action == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.ordering:
            column, desc = self.ordering
            present = [row for row in matched if row.get(column) is not None]
            missing = [row for row in matched if row.get(column) is None]
            present.sort(key=lambda row: row[column], reverse=desc)
            matched = present + missing
        if self.row_limit is not None:
            matched = matched[:self.row_limit]
        return FakeResponse([self._project(row) for row in matched], count=len(matched))


class FakeAdminAuth:
    def __init__(self, db):
        self.db = db

    def list_users(self, page=None, per_page=None):
        self.db.calls.append(("auth.users", "list"))
        if self.db.auth_failure:
            raise self.db.auth_failure
        users = list(self.db.users.values())
        page = page or 1
        per_page = per_page or 50
        start = (page - 1) * per_page
        return users[start:start + per_page]

    def create_user(self, attributes):
        self.db.calls.append(("auth.users", "create"))
        if self.db.auth_failure:
            raise self.db.auth_failure
        email = attributes["email"]
        if any(user.email == email for user in self.db.users.values()):
            raise FakeAuthError("A user with this email address has already been registered")
        user = self.db.add_user(email, user_metadata=attributes.get("user_metadata") or {})
        return SimpleNamespace(user=user)

    def delete_user(self, user_id, should_soft_delete=False):
        self.db.calls.append(("auth.users", "delete"))
        if self.db.delete_failure:
            raise self.db.delete_failure
        if user_id not in self.db.users:
            raise FakeAuthError("User not found")
        del self.db.users[user_id]
        # ON DELETE CASCADE
        self.db.tables["profile"] = [row for row in self.db.tables.get("profile", []) if row["id"] != user_id]

    def sign_out(self, jwt, scope="global"):
        self.db.calls.append(("auth", "sign_out"))
        self.db.tokens.pop(jwt, None)


class FakeAuth:
    def __init__(self, db):
        self.db = db
        self.admin = FakeAdminAuth(db)

    def get_user(self, jwt=None):
        user_id = self.db.tokens.get(jwt)
        if user_id is None or user_id not in self.db.users:
            raise FakeAuthError("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.db.users[user_id])

    def sign_in_with_password(self, credentials):
        if self.db.sign_in_error:
            raise self.db.sign_in_error
        for user in self.db.users.values():
            if user.email == credentials["email"] and self.db.passwords.get(user.id) == credentials["password"]:
                token = self.db.issue_token(user.id)
                return SimpleNamespace(user=user, session=SimpleNamespace(access_token=token))
        raise FakeAuthError("Invalid login credentials")

    def sign_up(self, credentials):
        if any(user.email == credentials["email"] for user in self.db.users.values()):
            raise FakeAuthError("User already registered")
        metadata = credentials.get("options", {}).get("data", {})
        user = self.db.add_user(credentials["email"], password=credentials["password"], user_metadata=metadata)
        return SimpleNamespace(user=user, session=None)


class FakeSupabase:
    def __init__(self):
        self.tables = {"profile": []}
        self.users = {}
        self.passwords = {}
        self.tokens = {}
        self.calls = []
        self.failures = {}
        self.auth_failure = None
        self.delete_failure = None
        self.sign_in_error = None
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)
        self.auth = FakeAuth(self)

    def now(self):
        return (datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=next(self._clock))).isoformat()

    def view(self):
        """Another client on the same data, with its own failure switches"""
        clone = copy.copy(self)
        clone.failures = {}
        clone.auth_failure = None
        clone.delete_failure = None
        clone.sign_in_error = None
        clone.auth = FakeAuth(clone)
        return clone

    def table(self, name):
        return FakeQuery(self, name)

    def add_user(self, email, password="secret-password", user_metadata=None, created_at=None):
        user_id = f"user-{next(self._ids)}"
        user = SimpleNamespace(
            id=user_id,
            email=email,
            user_metadata=user_metadata or {},
            app_metadata={},
            created_at=created_at or datetime(2025, 1, 1, tzinfo=timezone.utc),
            updated_at=None,
        )
        self.users[user_id] = user
        self.passwords[user_id] = password
        return user

    def add_profile(self, user_id, full_name=None, role_id="client", plan="free", created_at=None):
        row = {
            "id": user_id,
            "full_name": full_name,
            "role_id": role_id,
            "plan": plan,
            "created_at": created_at or self.now(),
            "updated_at": None,
        }
        self.tables["profile"].append(row)
        return row

    def add_account(self, email, full_name=None, role_id="client", plan="free", created_at=None):
        """Auth user + profile row + a valid token; returns (user_id, token)"""
        user = self.add_user(email, created_at=created_at)
        self.add_profile(user.id, full_name=full_name, role_id=role_id, plan=plan)
        return user.id, self.issue_token(user.id)

    def issue_token(self, user_id):
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def profile(self, user_id):
        for row in self.tables["profile"]:
            if row["id"] == user_id:
                return row
        return None
