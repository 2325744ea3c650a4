import httpx
import pytest

from task_api.cli import main as cli_main
from task_api.client import TaskApiError, TaskBoard, TaskClient, TaskDraft
from task_api.schemas.task import TaskUpdated


@pytest.fixture
def api(client):
    return TaskClient("http://testserver/api", http=client)


@pytest.fixture
def board(api):
    return TaskBoard(api)


def _unreachable_client():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    return TaskClient("http://tasks.invalid/api", http=httpx.Client(transport=httpx.MockTransport(handler)))


def test_client_round_trip(api):
    assert api.health() == {"status": "healthy"}

    created = api.create_task("Buy milk", "2 litres")
    assert created.title == "Buy milk"
    assert api.get_task(created.id) == created

    updated = api.update_task(created.id, "Buy oat milk", "")
    assert updated == TaskUpdated(id=created.id, title="Buy oat milk", description="")

    api.delete_task(created.id)
    assert api.list_tasks() == []


def test_client_raises_with_server_message(api):
    with pytest.raises(TaskApiError) as excinfo:
        api.get_task(42)
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Task not found"


def test_client_wraps_transport_errors():
    with pytest.raises(TaskApiError) as excinfo:
        _unreachable_client().list_tasks()
    assert excinfo.value.status_code is None


def test_board_refetches_after_create(board):
    board.draft = TaskDraft(title="Write tests", description="")
    assert board.create()
    assert [task.title for task in board.tasks] == ["Write tests"]
    assert board.draft == TaskDraft()
    assert board.error is None


def test_board_rejects_blank_title_locally(board, api):
    board.draft = TaskDraft(title="   ")
    assert not board.create()
    assert board.error == "Task title is required."
    assert api.list_tasks() == []


def test_board_edit_flow(board, api):
    task = api.create_task("Draft", "v1")
    assert board.refresh()

    board.start_editing(board.tasks[0])
    board.editing.title = "Final"
    assert board.update()
    assert board.editing is None
    assert board.tasks[0].title == "Final"
    assert board.tasks[0].id == task.id


def test_board_cancel_editing(board, api):
    api.create_task("Keep")
    board.refresh()
    board.start_editing(board.tasks[0])
    board.cancel_editing()
    assert board.editing is None
    assert not board.update()


def test_board_delete_missing_task_sets_error(board):
    assert not board.delete(99)
    assert board.error == "Failed to delete task. Please try again."


def test_board_refresh_failure_message():
    board = TaskBoard(_unreachable_client())
    assert not board.refresh()
    assert board.error == "Failed to fetch tasks. Please check your backend service."


def test_cli_add_and_list(api, capsys):
    assert cli_main(["add", "Ship release", "-d", "v1.0"], client=api) == 0
    out = capsys.readouterr().out
    assert "[1] Ship release - v1.0" in out

    assert cli_main(["list"], client=api) == 0
    assert "Ship release" in capsys.readouterr().out


def test_cli_edit_and_delete(api, capsys):
    task = api.create_task("Old")
    assert cli_main(["edit", str(task.id), "New"], client=api) == 0
    assert "New" in capsys.readouterr().out

    assert cli_main(["delete", str(task.id), "--yes"], client=api) == 0
    assert "No tasks yet" in capsys.readouterr().out


def test_cli_show_missing_task(api, capsys):
    assert cli_main(["show", "7"], client=api) == 1
    assert "Task not found" in capsys.readouterr().err


def test_cli_reports_unreachable_api(capsys):
    assert cli_main(["list"], client=_unreachable_client()) == 1
    assert "Failed to fetch tasks" in capsys.readouterr().err
