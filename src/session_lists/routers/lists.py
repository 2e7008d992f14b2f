from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from ..errors import DuplicateName, InvalidName
from ..models import SessionState
from ..renderer import ViewRenderer, get_renderer
from ..schemas import ListOut
from ..store import SessionListStore
from ..utils import is_async_request, parse_identifier

router = APIRouter(tags=["lists"])


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _get_session(request: Request) -> SessionState:
    """
    Dependency returning the session state loaded by the session middleware.
    """
    return request.state.session


def _get_store(session: SessionState = Depends(_get_session)) -> SessionListStore:
    return SessionListStore(session)


# PUBLIC_INTERFACE
@router.get("/", summary="Home", description="Redirect to the list overview.")
def home() -> RedirectResponse:
    return _redirect("/lists")


# PUBLIC_INTERFACE
@router.get(
    "/lists",
    summary="List overview",
    description="Render all lists, incomplete or empty lists first and completed lists last.",
)
def show_lists(
    request: Request,
    store: SessionListStore = Depends(_get_store),
    renderer: ViewRenderer = Depends(get_renderer),
) -> Response:
    lists = [ListOut.from_entity(lst) for lst in store.list_all()]
    return renderer.render(request, "lists", lists=lists)


# PUBLIC_INTERFACE
@router.get("/lists/new", summary="New list form")
def new_list_form(request: Request, renderer: ViewRenderer = Depends(get_renderer)) -> Response:
    return renderer.render(request, "new_list")


# PUBLIC_INTERFACE
@router.post(
    "/lists",
    summary="Create list",
    description="Create a list from the list_name form field. Invalid names re-render the form.",
    responses={303: {"description": "List created"}, 422: {"description": "Invalid list name"}},
)
def create_list(
    request: Request,
    list_name: str = Form(""),
    session: SessionState = Depends(_get_session),
    store: SessionListStore = Depends(_get_store),
    renderer: ViewRenderer = Depends(get_renderer),
) -> Response:
    try:
        store.create_list(list_name)
    except (InvalidName, DuplicateName) as exc:
        session["error"] = exc.message
        return renderer.render(
            request, "new_list", status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, list_name=list_name
        )
    session["success"] = "The list has been created."
    return _redirect("/lists")


# PUBLIC_INTERFACE
@router.get(
    "/lists/{list_id}",
    summary="Show list",
    description="Render one list with incomplete todos first.",
    responses={303: {"description": "List not found, redirected to the overview"}},
)
def show_list(
    request: Request,
    list_id: str,
    store: SessionListStore = Depends(_get_store),
    renderer: ViewRenderer = Depends(get_renderer),
) -> Response:
    todo_list = store.get_list(parse_identifier(list_id))
    return renderer.render(request, "list", list=ListOut.from_entity(todo_list, sort_todos=True))


# PUBLIC_INTERFACE
@router.get("/list/{list_id}/edit", summary="Edit list form")
def edit_list_form(
    request: Request,
    list_id: str,
    store: SessionListStore = Depends(_get_store),
    renderer: ViewRenderer = Depends(get_renderer),
) -> Response:
    todo_list = store.get_list(parse_identifier(list_id))
    return renderer.render(request, "edit_list", list=ListOut.from_entity(todo_list))


# PUBLIC_INTERFACE
@router.post(
    "/lists/{list_id}",
    summary="Rename list",
    description="Rename a list from the list_name form field. Invalid names re-render the edit form.",
)
def rename_list(
    request: Request,
    list_id: str,
    list_name: str = Form(""),
    session: SessionState = Depends(_get_session),
    store: SessionListStore = Depends(_get_store),
    renderer: ViewRenderer = Depends(get_renderer),
) -> Response:
    lid = parse_identifier(list_id)
    try:
        store.rename_list(lid, list_name)
    except (InvalidName, DuplicateName) as exc:
        session["error"] = exc.message
        return renderer.render(
            request,
            "edit_list",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            list=ListOut.from_entity(store.get_list(lid)),
            list_name=list_name,
        )
    session["success"] = "The update was successful."
    return _redirect(f"/lists/{lid}")


# PUBLIC_INTERFACE
@router.post(
    "/lists/{list_id}/destroy",
    summary="Delete list",
    description="Delete a list. XMLHttpRequest callers receive the overview path as plain text.",
)
def delete_list(
    request: Request,
    list_id: str,
    session: SessionState = Depends(_get_session),
    store: SessionListStore = Depends(_get_store),
) -> Response:
    store.delete_list(parse_identifier(list_id))
    if is_async_request(request):
        return PlainTextResponse("/lists")
    session["success"] = "The list has been deleted"
    return _redirect("/lists")


# PUBLIC_INTERFACE
@router.post(
    "/lists/{list_id}/todos",
    summary="Add todo",
    description="Add a todo from the todo form field. Invalid text re-renders the list.",
)
def add_todo(
    request: Request,
    list_id: str,
    todo: str = Form(""),
    session: SessionState = Depends(_get_session),
    store: SessionListStore = Depends(_get_store),
    renderer: ViewRenderer = Depends(get_renderer),
) -> Response:
    lid = parse_identifier(list_id)
    try:
        store.add_todo(lid, todo)
    except InvalidName as exc:
        session["error"] = exc.message
        return renderer.render(
            request,
            "list",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            list=ListOut.from_entity(store.get_list(lid), sort_todos=True),
            todo=todo,
        )
    session["success"] = "The todo was added successfully."
    return _redirect(f"/lists/{lid}")


# PUBLIC_INTERFACE
@router.post(
    "/lists/{list_id}/todos/{todo_id}/destroy",
    summary="Delete todo",
    description="Delete a todo. XMLHttpRequest callers receive an empty 204 response.",
)
def delete_todo(
    request: Request,
    list_id: str,
    todo_id: str,
    session: SessionState = Depends(_get_session),
    store: SessionListStore = Depends(_get_store),
) -> Response:
    lid = parse_identifier(list_id)
    store.delete_todo(lid, parse_identifier(todo_id))
    if is_async_request(request):
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    session["success"] = "The todo has been deleted"
    return _redirect(f"/lists/{lid}")


# PUBLIC_INTERFACE
@router.post(
    "/lists/{list_id}/todos/{todo_id}",
    summary="Update todo status",
    description="Set a todo's completion flag from the completed form field ('true' or anything else).",
)
def update_todo(
    list_id: str,
    todo_id: str,
    completed: str = Form(""),
    session: SessionState = Depends(_get_session),
    store: SessionListStore = Depends(_get_store),
) -> Response:
    lid = parse_identifier(list_id)
    store.set_todo_completed(lid, parse_identifier(todo_id), completed == "true")
    session["success"] = "The todo has been updated"
    return _redirect(f"/lists/{lid}")


# PUBLIC_INTERFACE
@router.post("/lists/{list_id}/complete_all", summary="Complete all todos")
def complete_all(
    list_id: str,
    session: SessionState = Depends(_get_session),
    store: SessionListStore = Depends(_get_store),
) -> Response:
    lid = parse_identifier(list_id)
    store.complete_all(lid)
    session["success"] = "The list has been completed"
    return _redirect(f"/lists/{lid}")
