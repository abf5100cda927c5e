import pytest
from click.testing import CliRunner

from tests.helpers import make_prompt, seed, txn
from pocketledger import cli
from pocketledger.config import STORAGE_ENV
from pocketledger.models import MonthKey
from pocketledger.store import LedgerStore


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "configure_logging", lambda level, **kw: calls.append(kw))
    return calls


@pytest.fixture
def root(tmp_path, monkeypatch):
    path = tmp_path / "ledger"
    monkeypatch.setenv(STORAGE_ENV, str(path))
    return path


def invoke(*args):
    return CliRunner().invoke(cli.main, list(args))


def test_add_then_list(root):
    result = invoke("add", "-d", "2024-03-02", "42.5", "coffee")
    assert result.exit_code == 0, result.output
    invoke("add", "--date", "2024-03-01", "--repeat", "1m", "900", "rent")

    result = invoke("list", "-d", "2024-03-20")
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "-" * 60
    assert lines[1] == "  0  2024-03-01\t-900.00\trent"
    assert lines[2] == "  1  2024-03-02\t -42.50\tcoffee"
    assert lines[3] == "-" * 60
    assert len(lines) == 4

    stored = LedgerStore(root).load(MonthKey(2024, 3))
    assert str(stored[0].repeat) == "1m"


def test_list_full_prints_sum(root):
    seed(LedgerStore(root), txn("2024-03-01", "-1.25", "a"), txn("2024-03-02", "3", "b"))
    result = invoke("list", "-d", "2024-03-01", "-f")
    assert result.output.splitlines()[-1] == "Sum:\t\t   1.75"


def test_list_of_empty_month(root):
    result = invoke("list", "-d", "1999-01-01")
    assert result.exit_code == 0
    assert result.output.splitlines() == ["-" * 60, "-" * 60]


def test_root_option_overrides_environment(root, tmp_path):
    other = tmp_path / "other"
    result = invoke("--root", str(other), "add", "-d", "2024-03-02", "1", "x")
    assert result.exit_code == 0
    assert (other / "2024" / "03.csv").is_file()
    assert not root.exists()


@pytest.mark.parametrize(
    "args, message",
    [
        (("add", "-d", "2024-02-30", "1", "x"), "Invalid date"),
        (("add", "lots", "x"), "Invalid amount"),
        (("add", "-r", "xw", "1", "x"), "Invalid repeat tag"),
        (("list", "-d", "yesterday"), "Invalid date"),
        (("delete", "-y", "-d", "2024-03-01", "0"), "No entry at index 0"),
    ],
)
def test_failures_exit_non_zero(root, args, message):
    result = invoke(*args)
    assert result.exit_code == 1
    assert message in result.output


def test_missing_storage_root(monkeypatch):
    monkeypatch.delenv(STORAGE_ENV, raising=False)
    result = invoke("months")
    assert result.exit_code == 1
    assert "No storage root configured" in result.output


@pytest.mark.parametrize("command", ["add", "list", "delete", "months", "tui"])
def test_command_help_needs_no_storage_root(monkeypatch, quiet_logging, command):
    monkeypatch.delenv(STORAGE_ENV, raising=False)
    result = invoke(command, "--help")
    assert result.exit_code == 0, result.output
    assert "Usage:" in result.output
    assert quiet_logging == []


def test_malformed_month_fails_list(root):
    path = LedgerStore(root).path_for(MonthKey(2024, 3))
    path.parent.mkdir(parents=True)
    path.write_text("2024-03-01,abc,x,none\n")
    result = invoke("list", "-d", "2024-03-01")
    assert result.exit_code == 1
    assert "Invalid amount" in result.output


def test_delete_with_yes(root):
    seed(LedgerStore(root), txn("2024-03-01", "-1", "a"), txn("2024-03-02", "-2", "b"))
    result = invoke("delete", "-y", "-d", "2024-03-09", "1")
    assert result.exit_code == 0
    assert "Deleted 2024-03-02" in result.output
    assert [t.description for t in LedgerStore(root).load(MonthKey(2024, 3))] == ["a"]


class FakeQuestion:
    def __init__(self, answer):
        self.answer = answer

    def ask(self):
        return self.answer


def test_delete_asks_for_confirmation(root, monkeypatch):
    seed(LedgerStore(root), txn("2024-03-01", "-1", "a"))
    monkeypatch.setattr(
        cli.questionary,
        "confirm",
        make_prompt([FakeQuestion(False), FakeQuestion(True)]),
    )

    result = invoke("delete", "-d", "2024-03-01", "0")
    assert result.exit_code == 0
    assert "Nothing deleted." in result.output
    assert len(LedgerStore(root).load(MonthKey(2024, 3))) == 1

    result = invoke("delete", "-d", "2024-03-01", "0")
    assert result.exit_code == 0
    assert LedgerStore(root).load(MonthKey(2024, 3)) == []


def test_months_lists_catalog(root):
    seed(LedgerStore(root), txn("2024-03-01", "-1", "a"), txn("2023-11-01", "-1", "b"))
    result = invoke("months")
    assert result.output.splitlines() == ["2023-11", "2024-03"]


def test_no_command_opens_browser(root, monkeypatch, quiet_logging):
    launched = []
    monkeypatch.setattr(cli, "launch_tui", lambda settings: launched.append(settings))

    assert invoke().exit_code == 0
    assert invoke("tui").exit_code == 0

    assert [s.storage_root for s in launched] == [root, root]
    assert quiet_logging == [
        {"log_file": root / ".pocketledger.log"},
        {"log_file": root / ".pocketledger.log"},
    ]


def test_launch_tui_wraps_run(tmp_path, monkeypatch):
    captured = {}

    def fake_wrapper(func, store):
        captured["func"] = func
        captured["root"] = store.root

    monkeypatch.setattr(cli.curses, "wrapper", fake_wrapper)
    cli.launch_tui(cli.load_settings(tmp_path))
    assert captured == {"func": cli.run, "root": tmp_path}
