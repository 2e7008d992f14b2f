from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import ListEntity, TodoEntity
from .store import is_list_completed, remaining_count, sorted_todos


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned for a todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"id": 0, "name": "Buy milk", "completed": False}}
    )

    id: int = Field(..., description="Identifier of the todo, unique within its list")
    name: str = Field(..., description="Todo text")
    completed: bool = Field(..., description="Completion status flag")

    @classmethod
    def from_entity(cls, todo: TodoEntity) -> "TodoOut":
        return cls(id=todo["id"], name=todo["name"], completed=todo["completed"])


# PUBLIC_INTERFACE
class ListOut(BaseModel):
    """
    Schema returned for a todo list, with its derived completion status.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 0,
                "name": "Groceries",
                "completed": False,
                "remaining_count": 1,
                "todos_count": 2,
                "todos": [
                    {"id": 1, "name": "Eggs", "completed": False},
                    {"id": 0, "name": "Milk", "completed": True},
                ],
            }
        }
    )

    id: int = Field(..., description="Identifier of the list, unique within the session")
    name: str = Field(..., description="List name")
    completed: bool = Field(..., description="True when the list has todos and all are completed")
    remaining_count: int = Field(..., description="Number of todos not yet completed")
    todos_count: int = Field(..., description="Total number of todos")
    todos: List[TodoOut] = Field(default_factory=list, description="Todos of the list")

    @classmethod
    def from_entity(cls, todo_list: ListEntity, sort_todos: bool = False) -> "ListOut":
        """
        Build the view of a list. With sort_todos, incomplete todos come first.
        """
        todos = sorted_todos(todo_list) if sort_todos else todo_list["todos"]
        return cls(
            id=todo_list["id"],
            name=todo_list["name"],
            completed=is_list_completed(todo_list),
            remaining_count=remaining_count(todo_list),
            todos_count=len(todo_list["todos"]),
            todos=[TodoOut.from_entity(t) for t in todos],
        )


# PUBLIC_INTERFACE
class PageOut(BaseModel):
    """
    A rendered view: its name, the one-shot flash messages and the view data.
    """

    view: str = Field(..., description="View name: lists, new_list, list or edit_list")
    error: Optional[str] = Field(default=None, description="One-shot error message")
    success: Optional[str] = Field(default=None, description="One-shot success message")
    lists: Optional[List[ListOut]] = Field(default=None, description="Lists for the overview")
    list: Optional[ListOut] = Field(default=None, description="The list being shown or edited")
    list_name: Optional[str] = Field(default=None, description="List name submitted with a form")
    todo: Optional[str] = Field(default=None, description="Todo text submitted with a form")
