from __future__ import annotations

from typing import List, Optional, TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A single todo item stored inside a list.

    Fields:
    - id: Integer identifier, unique within the owning list and stable across deletions
    - name: Todo text (1..100 chars, trimmed on input by the store)
    - completed: Boolean completion flag
    """

    id: int
    name: str
    completed: bool


# PUBLIC_INTERFACE
class ListEntity(TypedDict):
    """
    A named, ordered collection of todos.

    Fields:
    - id: Integer identifier, unique within the session
    - name: List name (1..100 chars, unique among the session's lists)
    - todos: Todos in insertion order
    """

    id: int
    name: str
    todos: List[TodoEntity]


# PUBLIC_INTERFACE
class SessionState(TypedDict):
    """
    Everything kept for one user session.

    error/success are one-shot messages consumed by the next rendered view.
    """

    lists: List[ListEntity]
    error: Optional[str]
    success: Optional[str]


# PUBLIC_INTERFACE
def new_session_state() -> SessionState:
    """Return an empty session state."""
    return {"lists": [], "error": None, "success": None}
