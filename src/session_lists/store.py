from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .errors import DuplicateName, InvalidName, NotFound
from .models import ListEntity, SessionState, TodoEntity

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 100

LIST_NAME_LENGTH_ERROR = f"List name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
LIST_NAME_UNIQUE_ERROR = "List name must be unique"
TODO_LENGTH_ERROR = f"Todo must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
LIST_NOT_FOUND_ERROR = "The specified list was not found"
TODO_NOT_FOUND_ERROR = "The specified todo was not found"


# PUBLIC_INTERFACE
def is_list_completed(todo_list: ListEntity) -> bool:
    """True iff the list has at least one todo and every todo is completed."""
    todos = todo_list["todos"]
    if not todos:
        return False
    return all(todo["completed"] for todo in todos)


# PUBLIC_INTERFACE
def remaining_count(todo_list: ListEntity) -> int:
    """Number of todos not yet completed."""
    return sum(1 for todo in todo_list["todos"] if not todo["completed"])


def next_id(items: Iterable[dict]) -> int:
    """Next durable id: one past the current maximum, or 0 for an empty collection."""
    ids = [item["id"] for item in items]
    if not ids:
        return 0
    return max(ids) + 1


def _valid_length(name: str) -> bool:
    return NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH


# PUBLIC_INTERFACE
def error_for_list_name(
    name: str, lists: Sequence[ListEntity], exclude_id: Optional[int] = None
) -> Optional[str]:
    """
    Return an error message if the list name is invalid, None otherwise.

    exclude_id names a list that is ignored by the uniqueness check (the list being renamed).
    """
    if not _valid_length(name):
        return LIST_NAME_LENGTH_ERROR
    if any(lst["name"] == name and lst["id"] != exclude_id for lst in lists):
        return LIST_NAME_UNIQUE_ERROR
    return None


# PUBLIC_INTERFACE
def error_for_todo(name: str) -> Optional[str]:
    """Return an error message if the todo text is invalid, None otherwise."""
    if not _valid_length(name):
        return TODO_LENGTH_ERROR
    return None


def sorted_todos(todo_list: ListEntity) -> List[TodoEntity]:
    """Todos with incomplete ones first; order is otherwise preserved."""
    return sorted(todo_list["todos"], key=lambda todo: 1 if todo["completed"] else 0)


# PUBLIC_INTERFACE
class SessionListStore:
    """
    Lists and todos held in one session's state.

    The store mutates the SessionState it wraps in place; persisting that state is the
    caller's job (see sessions.SessionStore). Failed operations raise a ListStoreError
    subclass and leave the state untouched.
    """

    def __init__(self, state: SessionState) -> None:
        state.setdefault("lists", [])
        self._state = state

    @property
    def lists(self) -> List[ListEntity]:
        return self._state["lists"]

    def list_all(self) -> List[ListEntity]:
        """
        Return the session's lists with completed lists after incomplete or empty ones.
        The sort is stable, so insertion order holds within each group.
        """
        return sorted(self.lists, key=lambda lst: 1 if is_list_completed(lst) else 0)

    def create_list(self, name: str) -> ListEntity:
        list_name = name.strip()
        self._check_list_name(list_name)

        entity: ListEntity = {"id": next_id(self.lists), "name": list_name, "todos": []}
        self.lists.append(entity)
        logger.info("Created list id=%s name=%r", entity["id"], list_name)
        return entity

    def get_list(self, list_id: int) -> ListEntity:
        for lst in self.lists:
            if lst["id"] == list_id:
                return lst
        raise NotFound(LIST_NOT_FOUND_ERROR)

    def rename_list(self, list_id: int, new_name: str) -> ListEntity:
        target = self.get_list(list_id)
        list_name = new_name.strip()
        self._check_list_name(list_name, exclude_id=list_id)

        target["name"] = list_name
        logger.info("Renamed list id=%s to %r", list_id, list_name)
        return target

    def delete_list(self, list_id: int) -> None:
        target = self.get_list(list_id)
        self.lists.remove(target)
        logger.info("Deleted list id=%s", list_id)

    def add_todo(self, list_id: int, text: str) -> TodoEntity:
        target = self.get_list(list_id)
        name = text.strip()
        error = error_for_todo(name)
        if error:
            logger.debug("Rejected todo for list id=%s: %s", list_id, error)
            raise InvalidName(error)

        todo: TodoEntity = {"id": next_id(target["todos"]), "name": name, "completed": False}
        target["todos"].append(todo)
        logger.info("Added todo id=%s to list id=%s", todo["id"], list_id)
        return todo

    def get_todo(self, list_id: int, todo_id: int) -> TodoEntity:
        for todo in self.get_list(list_id)["todos"]:
            if todo["id"] == todo_id:
                return todo
        raise NotFound(TODO_NOT_FOUND_ERROR)

    def delete_todo(self, list_id: int, todo_id: int) -> None:
        todo = self.get_todo(list_id, todo_id)
        self.get_list(list_id)["todos"].remove(todo)
        logger.info("Deleted todo id=%s from list id=%s", todo_id, list_id)

    def set_todo_completed(self, list_id: int, todo_id: int, completed: bool) -> TodoEntity:
        todo = self.get_todo(list_id, todo_id)
        todo["completed"] = completed
        logger.info("Set todo id=%s in list id=%s completed=%s", todo_id, list_id, completed)
        return todo

    def complete_all(self, list_id: int) -> ListEntity:
        target = self.get_list(list_id)
        for todo in target["todos"]:
            todo["completed"] = True
        logger.info("Completed all %d todos in list id=%s", len(target["todos"]), list_id)
        return target

    def _check_list_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        error = error_for_list_name(name, self.lists, exclude_id=exclude_id)
        if error is None:
            return
        logger.debug("Rejected list name %r: %s", name, error)
        if error == LIST_NAME_UNIQUE_ERROR:
            raise DuplicateName(error)
        raise InvalidName(error)
