"""DataTableAdapter against an in-memory SQLite database."""

import pytest
from sqlalchemy import select

from datatable_adapter import (
    DataAccessError,
    DataTableAdapter,
    DataTablesRequest,
    Operator,
    load_column_map,
    paginate,
)
from main import User
from tests.factories import make_request

COLUMNS = load_column_map(
    {
        "name": {
            "operator": Operator.LIKE_LOOSE,
            "model_column": User.first_name + " " + User.last_name,
        },
        "email": {"operator": Operator.EQ, "model_column": "users.email"},
        "created_at": {"model_column": User.created_at},
    }
)


@pytest.mark.asyncio
class TestRender:
    async def test_exact_email_search(self, session):
        request = {
            "columns": [{"data": "email", "searchable": "true"}],
            "search": {"value": "a@b.com"},
            "start": 0,
            "length": 10,
            "order": [],
            "draw": 1,
        }
        column_map = load_column_map({"email": {"operator": Operator.EQ, "model_column": "users.email"}})

        datatable = await DataTableAdapter.create(session, select(User), request, column_map)
        response = await datatable.render()

        assert response["draw"] == 1
        assert response["recordsTotal"] == 5
        assert response["recordsFiltered"] == 1
        assert [user.email for user in response["data"]] == ["a@b.com"]
        assert set(response) == {"data", "draw", "recordsTotal", "recordsFiltered"}

    async def test_empty_search_counts_everything(self, session):
        request = make_request(["name", "email", "created_at"], search="")

        response = await paginate(session, select(User), request, COLUMNS)

        assert response["recordsFiltered"] == response["recordsTotal"] == 5
        assert len(response["data"]) == 5

    async def test_loose_name_search(self, session):
        request = make_request(["name", "email"], search="Rob")

        response = await paginate(session, select(User), request, COLUMNS)

        assert response["recordsFiltered"] == 2
        assert sorted(user.id for user in response["data"]) == [1, 3]

    async def test_date_search_matches_whole_day(self, session):
        request = make_request(["name", "email", "created_at"], search="2024-03-05")

        response = await paginate(session, select(User), request, COLUMNS)

        assert response["recordsFiltered"] == 1
        assert response["data"][0].id == 1

    async def test_date_search_without_timestamp_column_is_unfiltered(self, session):
        request = make_request(["name", "email"], search="2024-03-05")

        response = await paginate(session, select(User), request, COLUMNS)

        assert response["recordsFiltered"] == 5

    async def test_pagination(self, session):
        request = make_request(
            ["email"], start=2, length=2, order=[{"column": 0, "dir": "asc"}]
        )

        response = await paginate(session, select(User), request, COLUMNS)

        assert response["recordsFiltered"] == 5
        assert [user.email for user in response["data"]] == ["carol@example.com", "dave@example.com"]

    async def test_render_without_offset_returns_filtered_set(self, session):
        request = make_request(["email"], start=2, length=2)

        datatable = await DataTableAdapter.create(session, select(User), request, COLUMNS)
        response = await datatable.render(with_offset=False)

        assert len(response["data"]) == 5

    async def test_negative_length_returns_rest_of_rows(self, session):
        request = make_request(["email"], start=1, length=-1, order=[{"column": 0, "dir": "asc"}])

        response = await paginate(session, select(User), request, COLUMNS)

        assert len(response["data"]) == 4

    async def test_descending_order(self, session):
        request = make_request(["name", "email"], order=[{"column": 1, "dir": "desc"}])

        response = await paginate(session, select(User), request, COLUMNS)

        emails = [user.email for user in response["data"]]
        assert emails == sorted(emails, reverse=True)

    async def test_extra_filters_do_not_change_total(self, session):
        filters = [{"column": "users.deleted_at", "operator": Operator.IS_NULL}]
        request = make_request(["name"], search="Rob")

        response = await paginate(session, select(User), request, COLUMNS, filters)

        assert response["recordsTotal"] == 5
        assert response["recordsFiltered"] == 1
        assert response["data"][0].id == 1

    async def test_between_filter(self, session):
        filters = [{"column": User.id, "operator": Operator.BETWEEN, "value": [2, 4]}]

        response = await paginate(session, select(User), make_request(["email"]), COLUMNS, filters)

        assert sorted(user.id for user in response["data"]) == [2, 3, 4]

    async def test_column_selection_returns_mappings(self, session):
        request = make_request(["email"], search="a@b.com")

        response = await paginate(session, select(User.id, User.email), request, COLUMNS)

        assert response["data"] == [{"id": 2, "email": "a@b.com"}]

    async def test_total_counted_lazily_when_not_created(self, session):
        request = DataTablesRequest.model_validate(make_request(["email"], search="a@b.com", draw=7))

        response = await DataTableAdapter(session, select(User), request, COLUMNS).render()

        assert response["draw"] == 7
        assert response["recordsTotal"] == 5
        assert response["recordsFiltered"] == 1

    async def test_database_errors_propagate(self, session):
        column_map = load_column_map({"email": {"model_column": "users.no_such_column"}})
        request = make_request(["email"], search="x")

        datatable = await DataTableAdapter.create(session, select(User), request, column_map)

        with pytest.raises(DataAccessError):
            await datatable.render()
