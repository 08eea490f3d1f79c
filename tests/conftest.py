import textwrap
from pathlib import Path

import pytest

WIDGETS_SRC = '''
from app.http import JWT, Json, Query, Response, format
from app.routing import Routes, delete, get, post

from .schemas import WidgetCreate, WidgetFilter, WidgetResponse


def routes():
    return (
        Routes.new()
        .prefix("/v1")
        .add("/widgets", get(list_widgets))
        .add("/widgets/{id}", get(get_widget))
        .add("/widgets", post(create_widget))
        .add("/widgets/{id}", delete(delete_widget))
    )


async def list_widgets(filters: Query[WidgetFilter]) -> Response:
    widgets = await store.list(filters)
    if not widgets:
        return format.json(list[WidgetResponse]())
    return format.json([WidgetResponse.from_model(w) for w in widgets])


async def get_widget(id: str) -> Response:
    widget = await store.get(id)
    if widget is None:
        raise WidgetNotFound(id)
    return format.json(WidgetResponse.from_model(widget))


async def create_widget(auth: JWT, payload: Json[WidgetCreate]) -> Response:
    widget = await store.create(auth.user_id, payload)
    return format.json(WidgetResponse.from_model(widget))


async def delete_widget(auth: JWT, id: str) -> Response:
    await store.delete(id)
    return format.empty()
'''


def write(p: Path, s: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(textwrap.dedent(s), encoding="utf-8")


@pytest.fixture
def widgets_source() -> str:
    return WIDGETS_SRC


@pytest.fixture
def controllers_dir(tmp_path: Path) -> Path:
    d = tmp_path / "controllers"
    write(d / "__init__.py", "from . import widgets\n")
    write(d / "widgets.py", WIDGETS_SRC)
    return d
