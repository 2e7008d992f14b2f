import os

from fastapi.testclient import TestClient

# Sessions never expire during tests
os.environ.setdefault("SESSION_MAX_AGE", "0")

from src.session_lists.main import app, create_app  # noqa: E402
from src.session_lists.renderer import JSONViewRenderer  # noqa: E402
from src.session_lists.sessions import InMemorySessionStore  # noqa: E402
from src.session_lists.settings import get_settings  # noqa: E402

AJAX = {"X-Requested-With": "XMLHttpRequest"}


class FakeClockSessionStore(InMemorySessionStore):
    def __init__(self, max_age_seconds: int) -> None:
        super().__init__(max_age_seconds)
        self.now = 1000.0

    def _now(self) -> float:
        return self.now


def new_client() -> TestClient:
    # Each client carries its own cookie jar, so each one is a fresh session
    return TestClient(app, follow_redirects=False)


def create_list(client: TestClient, name: str):
    return client.post("/lists", data={"list_name": name})


def add_todo(client: TestClient, list_id: int, text: str):
    return client.post(f"/lists/{list_id}/todos", data={"todo": text})


def overview(client: TestClient) -> dict:
    res = client.get("/lists")
    assert res.status_code == 200
    return res.json()


def assert_redirect(res, location: str):
    assert res.status_code == 303
    assert res.headers["location"] == location


class TestHealthAndHome:
    def test_health_check(self):
        res = new_client().get("/health")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["session_backend"] == "memory"

    def test_home_redirects_to_lists(self):
        assert_redirect(new_client().get("/"), "/lists")

    def test_new_session_has_no_lists(self):
        page = overview(new_client())
        assert page["view"] == "lists"
        assert page["lists"] == []

    def test_session_cookie_issued_once_session_has_content(self):
        client = new_client()
        create_list(client, "Kept")
        assert client.cookies.get(get_settings().session_cookie_name)

    def test_blank_visit_sets_no_cookie(self):
        client = new_client()
        client.get("/lists")
        assert client.cookies.get(get_settings().session_cookie_name) is None

    def test_new_list_form(self):
        res = new_client().get("/lists/new")
        assert res.status_code == 200
        assert res.json()["view"] == "new_list"


class TestCreateList:
    def test_create_list_trims_name_and_redirects(self):
        client = new_client()
        res = create_list(client, " Groceries ")
        assert_redirect(res, "/lists")

        page = overview(client)
        assert page["success"] == "The list has been created."
        assert [lst["name"] for lst in page["lists"]] == ["Groceries"]
        assert page["lists"][0]["id"] == 0

    def test_flash_message_is_consumed_once(self):
        client = new_client()
        create_list(client, "Chores")
        assert overview(client)["success"] == "The list has been created."
        assert "success" not in overview(client)

    def test_empty_name_rerenders_form_with_error(self):
        client = new_client()
        res = create_list(client, "   ")
        assert res.status_code == 422
        page = res.json()
        assert page["view"] == "new_list"
        assert page["error"] == "List name must be between 1 and 100 characters"
        assert page["list_name"] == "   "
        assert overview(client)["lists"] == []

    def test_missing_field_is_invalid_name(self):
        res = new_client().post("/lists", data={})
        assert res.status_code == 422
        assert res.json()["error"] == "List name must be between 1 and 100 characters"

    def test_too_long_name_rejected(self):
        res = create_list(new_client(), "x" * 101)
        assert res.status_code == 422
        assert res.json()["error"] == "List name must be between 1 and 100 characters"

    def test_duplicate_name_rejected(self):
        client = new_client()
        create_list(client, "Work")
        res = create_list(client, "Work")
        assert res.status_code == 422
        assert res.json()["error"] == "List name must be unique"
        assert len(overview(client)["lists"]) == 1

    def test_sessions_are_isolated(self):
        first, second = new_client(), new_client()
        create_list(first, "Mine")
        assert overview(second)["lists"] == []
        assert create_list(second, "Mine").status_code == 303


class TestShowAndEditList:
    def test_show_list_sorts_incomplete_todos_first(self):
        client = new_client()
        create_list(client, "Trip")
        for text in ("Passport", "Tickets", "Sunscreen"):
            add_todo(client, 0, text)
        client.post("/lists/0/todos/0", data={"completed": "true"})

        res = client.get("/lists/0")
        assert res.status_code == 200
        page = res.json()
        assert page["view"] == "list"
        assert [t["name"] for t in page["list"]["todos"]] == ["Tickets", "Sunscreen", "Passport"]
        assert page["list"]["remaining_count"] == 2
        assert page["list"]["completed"] is False

    def test_missing_list_redirects_with_error(self):
        client = new_client()
        assert_redirect(client.get("/lists/42"), "/lists")
        assert overview(client)["error"] == "The specified list was not found"

    def test_non_numeric_id_redirects_with_error(self):
        client = new_client()
        create_list(client, "Zero")
        overview(client)
        assert_redirect(client.get("/lists/abc"), "/lists")
        assert overview(client)["error"] == "Invalid identifier: 'abc'"

    def test_edit_form(self):
        client = new_client()
        create_list(client, "Books")
        res = client.get("/list/0/edit")
        assert res.status_code == 200
        assert res.json()["view"] == "edit_list"
        assert res.json()["list"]["name"] == "Books"

    def test_edit_form_missing_list(self):
        assert_redirect(new_client().get("/list/3/edit"), "/lists")


class TestRenameList:
    def test_rename_redirects_to_list(self):
        client = new_client()
        create_list(client, "Old")
        res = client.post("/lists/0", data={"list_name": " New "})
        assert_redirect(res, "/lists/0")

        page = client.get("/lists/0").json()
        assert page["list"]["name"] == "New"
        assert page["success"] == "The update was successful."

    def test_rename_to_own_name_is_allowed(self):
        client = new_client()
        create_list(client, "Same")
        assert_redirect(client.post("/lists/0", data={"list_name": "Same"}), "/lists/0")

    def test_rename_to_other_lists_name_rerenders_edit_form(self):
        client = new_client()
        create_list(client, "A")
        create_list(client, "B")
        res = client.post("/lists/1", data={"list_name": "A"})
        assert res.status_code == 422
        page = res.json()
        assert page["view"] == "edit_list"
        assert page["error"] == "List name must be unique"
        assert page["list"]["name"] == "B"
        assert page["list_name"] == "A"

    def test_rename_missing_list(self):
        assert_redirect(new_client().post("/lists/9", data={"list_name": "X"}), "/lists")


class TestDeleteList:
    def test_delete_list_redirects(self):
        client = new_client()
        create_list(client, "Temp")
        assert_redirect(client.post("/lists/0/destroy"), "/lists")
        page = overview(client)
        assert page["lists"] == []
        assert page["success"] == "The list has been deleted"

    def test_delete_list_ajax_returns_path(self):
        client = new_client()
        create_list(client, "Temp")
        res = client.post("/lists/0/destroy", headers=AJAX)
        assert res.status_code == 200
        assert res.text == "/lists"
        assert overview(client)["lists"] == []

    def test_ids_survive_deleting_other_lists(self):
        client = new_client()
        for name in ("A", "B", "C"):
            create_list(client, name)
        client.post("/lists/1/destroy")
        assert client.get("/lists/2").json()["list"]["name"] == "C"

    def test_delete_missing_list(self):
        assert_redirect(new_client().post("/lists/5/destroy"), "/lists")


class TestTodos:
    def test_add_todo(self):
        client = new_client()
        create_list(client, "Groceries")
        res = add_todo(client, 0, "  Milk ")
        assert_redirect(res, "/lists/0")

        page = client.get("/lists/0").json()
        assert page["success"] == "The todo was added successfully."
        assert page["list"]["todos"] == [{"id": 0, "name": "Milk", "completed": False}]

    def test_add_invalid_todo_rerenders_list(self):
        client = new_client()
        create_list(client, "Groceries")
        res = add_todo(client, 0, "")
        assert res.status_code == 422
        page = res.json()
        assert page["view"] == "list"
        assert page["error"] == "Todo must be between 1 and 100 characters"
        assert page["list"]["todos_count"] == 0

    def test_add_todo_to_missing_list(self):
        assert_redirect(add_todo(new_client(), 7, "Milk"), "/lists")

    def test_delete_todo_ajax_returns_204(self):
        client = new_client()
        create_list(client, "Groceries")
        add_todo(client, 0, "Milk")
        add_todo(client, 0, "Eggs")

        res = client.post("/lists/0/todos/0/destroy", headers=AJAX)
        assert res.status_code == 204
        assert res.text == ""

        todos = client.get("/lists/0").json()["list"]["todos"]
        assert [t["name"] for t in todos] == ["Eggs"]

    def test_delete_todo_redirects(self):
        client = new_client()
        create_list(client, "Groceries")
        add_todo(client, 0, "Milk")
        assert_redirect(client.post("/lists/0/todos/0/destroy"), "/lists/0")
        assert client.get("/lists/0").json()["success"] == "The todo has been deleted"

    def test_delete_missing_todo(self):
        client = new_client()
        create_list(client, "Groceries")
        assert_redirect(client.post("/lists/0/todos/3/destroy"), "/lists")
        assert overview(client)["error"] == "The specified todo was not found"

    def test_set_completed_true_and_back(self):
        client = new_client()
        create_list(client, "Groceries")
        add_todo(client, 0, "Milk")

        assert_redirect(client.post("/lists/0/todos/0", data={"completed": "true"}), "/lists/0")
        todo = client.get("/lists/0").json()["list"]["todos"][0]
        assert todo["completed"] is True

        client.post("/lists/0/todos/0", data={"completed": "yes"})
        todo = client.get("/lists/0").json()["list"]["todos"][0]
        assert todo["completed"] is False

    def test_complete_all(self):
        client = new_client()
        create_list(client, "Groceries")
        add_todo(client, 0, "Milk")
        add_todo(client, 0, "Eggs")

        assert_redirect(client.post("/lists/0/complete_all"), "/lists/0")
        page = client.get("/lists/0").json()
        assert page["success"] == "The list has been completed"
        assert page["list"]["completed"] is True
        assert page["list"]["remaining_count"] == 0

    def test_complete_all_on_empty_list_stays_incomplete(self):
        client = new_client()
        create_list(client, "Empty")
        client.post("/lists/0/complete_all")
        assert client.get("/lists/0").json()["list"]["completed"] is False


class TestOverviewOrdering:
    def test_completed_lists_sort_last(self):
        client = new_client()
        for list_id, name in enumerate(("A", "B", "C", "D")):
            create_list(client, name)
            add_todo(client, list_id, "item")
        client.post("/lists/0/complete_all")
        client.post("/lists/2/complete_all")

        names = [lst["name"] for lst in overview(client)["lists"]]
        assert names == ["B", "D", "A", "C"]


class TestInjectedSessionStore:
    def test_state_is_saved_to_the_injected_store(self):
        store = InMemorySessionStore()
        client = TestClient(create_app(session_store=store), follow_redirects=False)
        create_list(client, "Injected")

        key = client.cookies.get(get_settings().session_cookie_name)
        assert key
        state = store.load(key)
        assert [lst["name"] for lst in state["lists"]] == ["Injected"]

    def test_cleared_session_starts_empty(self):
        store = InMemorySessionStore()
        client = TestClient(create_app(session_store=store), follow_redirects=False)
        create_list(client, "Gone")

        assert store.clear(client.cookies.get(get_settings().session_cookie_name)) is True
        assert overview(client)["lists"] == []

    def test_empty_injected_store_is_used(self):
        store = InMemorySessionStore()
        assert len(store) == 0
        assert create_app(session_store=store).state.session_store is store

    def test_injected_renderer_is_used(self):
        renderer = JSONViewRenderer()
        assert create_app(renderer=renderer).state.renderer is renderer

    def test_cookieless_requests_do_not_create_sessions(self):
        store = InMemorySessionStore()
        client = TestClient(create_app(session_store=store), follow_redirects=False)
        for _ in range(50):
            assert client.get("/health").status_code == 200
        client.get("/lists")
        assert len(store) == 0

    def test_expired_sessions_are_swept_by_later_saves(self):
        store = FakeClockSessionStore(max_age_seconds=60)
        app_under_test = create_app(session_store=store)
        for name in ("First", "Second"):
            create_list(TestClient(app_under_test, follow_redirects=False), name)
        assert len(store) == 2

        store.now += 61
        create_list(TestClient(app_under_test, follow_redirects=False), "Third")
        assert len(store) == 1
