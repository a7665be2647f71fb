import math
from datetime import datetime, timezone

import pytest

from app.modules.admin import query
from app.modules.admin.schemas import UserView


def _user(user_id, full_name, email, role_id="client", plan="free"):
    return UserView(id=user_id, full_name=full_name, email=email, role_id=role_id, plan=plan)


class TestMergeUser:
    def test_fields_come_from_both_records(self):
        profile = {
            "id": "u1",
            "full_name": "Jane Doe",
            "role_id": "admin",
            "plan": "pro",
            "created_at": "2024-01-01T00:00:00+00:00",
            "updated_at": "2024-02-01T00:00:00+00:00",
        }
        identity = {
            "id": "u1",
            "email": "jane@x.com",
            "created_at": datetime(2023, 5, 1, tzinfo=timezone.utc),
        }
        user = query.merge_user(profile, identity)
        assert user.email == "jane@x.com"
        assert user.full_name == "Jane Doe"
        assert user.role_id == "admin"
        assert user.plan == "pro"
        # identity creation time wins and is rendered as text
        assert user.created_at == "2023-05-01T00:00:00+00:00"
        assert user.updated_at == "2024-02-01T00:00:00+00:00"

    def test_defaults_for_missing_values(self):
        user = query.merge_user({"id": "u2", "full_name": "", "role_id": None, "plan": None})
        assert user.full_name == "No name"
        assert user.email == "No email"
        assert user.role_id == "client"
        assert user.plan == "free"
        assert user.created_at is None

    def test_created_at_falls_back_to_profile(self):
        profile = {"id": "u3", "created_at": "2024-03-03T00:00:00+00:00"}
        user = query.merge_user(profile, {"id": "u3", "email": "a@b.c", "created_at": None})
        assert user.created_at == "2024-03-03T00:00:00+00:00"

    def test_unexpected_role_and_plan_pass_through(self):
        user = query.merge_user({"id": "u4", "role_id": "superadmin", "plan": "platinum"})
        assert user.role_id == "superadmin"
        assert user.plan == "platinum"


def test_merge_users_keeps_profile_order_and_marks_orphans():
    profiles = [{"id": "b", "full_name": "B"}, {"id": "a", "full_name": "A"}, {"id": "orphan"}]
    identities = [{"id": "a", "email": "a@x.com"}, {"id": "b", "email": "b@x.com"}]
    users = query.merge_users(profiles, identities)
    assert [u.id for u in users] == ["b", "a", "orphan"]
    assert [u.email for u in users] == ["b@x.com", "a@x.com", "No email"]


class TestSearchUsers:
    users = [
        _user("1", "Jane Doe", "jane@x.com"),
        _user("2", "Bob", "bob@y.com"),
    ]

    def test_single_match(self):
        result = query.search_users(self.users, "jane")
        assert [u.id for u in result] == ["1"]

    def test_case_insensitive_partial_match_on_email(self):
        result = query.search_users(self.users, "Y.CO")
        assert [u.id for u in result] == ["2"]

    def test_empty_search_returns_everything(self):
        assert query.search_users(self.users, "") == self.users
        assert query.search_users(self.users, None) == self.users

    def test_no_match(self):
        assert query.search_users(self.users, "zed") == []


class TestPaginate:
    def test_second_page_of_twenty_five(self):
        users = [_user(str(i), f"User {i}", f"u{i}@x.com") for i in range(25)]
        page, pagination = query.paginate(users, 2, 10)
        assert [u.id for u in page] == [str(i) for i in range(10, 20)]
        assert pagination.page == 2
        assert pagination.page_size == 10
        assert pagination.total_pages == 3
        assert pagination.total_count == 25

    def test_page_past_the_end_is_empty(self):
        users = [_user(str(i), "U", "u@x.com") for i in range(3)]
        page, pagination = query.paginate(users, 5, 10)
        assert page == []
        assert pagination.total_pages == 1

    def test_empty_input(self):
        page, pagination = query.paginate([], 1, 10)
        assert page == []
        assert pagination.total_pages == 0
        assert pagination.total_count == 0

    def test_total_pages_and_page_length_hold_for_any_size(self):
        for count in (0, 1, 9, 10, 11, 31):
            users = [_user(str(i), "U", "u@x.com") for i in range(count)]
            for page_size in (1, 3, 10, 50):
                for page_number in (1, 2, 4):
                    page, pagination = query.paginate(users, page_number, page_size)
                    assert pagination.total_pages == math.ceil(count / page_size)
                    assert len(page) <= page_size

    def test_rejects_non_positive_values(self):
        with pytest.raises(ValueError):
            query.paginate([], 0, 10)
        with pytest.raises(ValueError):
            query.paginate([], 1, 0)

    def test_serializes_with_camel_case_keys(self):
        _, pagination = query.paginate([], 1, 10)
        assert pagination.model_dump(by_alias=True) == {
            "page": 1, "pageSize": 10, "totalPages": 0, "totalCount": 0
        }


def test_compute_stats_counts_plans_and_admins():
    profiles = [
        {"plan": "free", "role_id": "client"},
        {"plan": "pro", "role_id": "admin"},
        {"plan": "enterprise", "role_id": "owner"},
        {"plan": "free", "role_id": "client"},
        {"plan": "legacy", "role_id": "client"},
    ]
    stats = query.compute_stats(profiles)
    assert stats.model_dump() == {"total": 5, "free": 2, "pro": 1, "enterprise": 1, "admins": 2}


def test_group_by_role_orders_columns():
    users = [
        _user("1", "A", "a@x.com", role_id="client"),
        _user("2", "B", "b@x.com", role_id="owner"),
        _user("3", "C", "c@x.com", role_id="admin"),
        _user("4", "D", "d@x.com", role_id="superadmin"),
    ]
    columns = query.group_by_role(users)
    assert [c.id for c in columns] == ["owner", "admin", "client"]
    assert [c.title for c in columns] == ["Owner", "Admin", "Client"]
    assert [[u.id for u in c.users] for c in columns] == [["2"], ["3"], ["1"]]
