import pytest

from main import run
from snipbook import __version__
from snipbook.config import store_path
from snipbook.snippet import SnippetStorage


class _ScriptedPrompt:
    def __init__(self, *answers):
        self.answers = list(answers)

    def __call__(self, message):
        return self.answers.pop(0)


class _StubPicker:
    def __init__(self, choice=""):
        self.choice = choice
        self.calls = []

    def select(self, table, query=None):
        self.calls.append({"table": table, "query": query})
        return self.choice


@pytest.fixture
def env(tmp_path):
    return {"SNIPBOOK_HOME": str(tmp_path / "home"), "SHELL": "/bin/zsh"}


@pytest.fixture
def store(env):
    return SnippetStorage(store_path(env))


def test_add_saves_command_from_arguments(env, store):
    code = run(["add", "ls", "-la", "|", "grep", "foo"], env=env, prompt_fn=_ScriptedPrompt("list files"))

    assert code == 0
    [record] = store.snapshot()
    assert record.command == "ls -la | grep foo"
    assert record.description == "list files"


def test_add_reprompts_description_with_delimiter(env, store):
    ask = _ScriptedPrompt("a | b", "a or b")

    assert run(["add", "echo", "hi"], env=env, prompt_fn=ask) == 0
    assert [r.description for r in store.snapshot()] == ["a or b"]


def test_add_from_file_with_delete(env, store, tmp_path):
    source = tmp_path / "line"
    source.write_text("kubectl get pods | grep -v Running\n", encoding="utf-8")

    code = run(["add", "--file", str(source), "--delete"], env=env, prompt_fn=_ScriptedPrompt("broken pods"))

    assert code == 0
    assert not source.exists()
    assert store.snapshot()[0].command == "kubectl get pods | grep -v Running"


def test_add_prompts_for_missing_command(env, store):
    code = run(["add"], env=env, prompt_fn=_ScriptedPrompt("df -h", "disk free"))

    assert code == 0
    assert store.snapshot()[0].command == "df -h"


def test_add_delete_requires_file(env, store, capsys):
    assert run(["add", "--delete"], env=env, prompt_fn=_ScriptedPrompt()) == 2
    assert capsys.readouterr().err.startswith("snipbook: ")
    assert store.is_empty()


def test_add_blank_description_is_an_error(env, store):
    assert run(["add", "true"], env=env, prompt_fn=_ScriptedPrompt("  ")) == 1
    assert store.is_empty()


def test_add_rejects_unknown_flag(env):
    with pytest.raises(SystemExit) as excinfo:
        run(["add", "--bogus"], env=env)

    assert excinfo.value.code == 2


def test_find_on_empty_store_exits_1(env, capsys):
    assert run(["find"], env=env, picker=_StubPicker()) == 1
    assert "add one first" in capsys.readouterr().err


def test_find_prints_selected_command(env, store, capsys):
    store.append("list files", "ls -la | grep foo")
    picker = _StubPicker("ls -la | grep foo")

    assert run(["find", "--query", "list"], env=env, picker=picker) == 0
    assert capsys.readouterr().out == "ls -la | grep foo\n"
    assert picker.calls[0]["query"] == "list"
    assert picker.calls[0]["table"].startswith("TIMESTAMP")


def test_find_cancelled_prints_nothing(env, store, capsys):
    store.append("list files", "ls")

    assert run(["find"], env=env, picker=_StubPicker("")) == 0
    assert capsys.readouterr().out == ""


def test_find_reports_malformed_store(env, store, capsys):
    store.open_for_manual_edit().write_text("broken line\n", encoding="utf-8")

    assert run(["find"], env=env, picker=_StubPicker()) == 1
    err = capsys.readouterr().err
    assert "line 1" in err
    assert "broken line" in err


@pytest.mark.parametrize("verb", ["list", "ls"])
def test_list_prints_table(env, store, capsys, verb):
    store.append("list files", "ls -la")

    assert run([verb], env=env) == 0
    out = capsys.readouterr().out
    assert out.startswith("TIMESTAMP")
    assert "ls -la" in out


def test_list_on_empty_store_exits_1(env):
    assert run(["list"], env=env) == 1


def test_edit_opens_store_in_editor(env, store, monkeypatch):
    opened = []
    monkeypatch.setattr("main.open_in_editor", lambda path, editor: opened.append((path, editor)))

    assert run(["edit"], env={**env, "EDITOR": "nano"}) == 0
    assert opened == [(store.path, "nano")]


def test_setup_defaults_to_login_shell(env, capsys):
    assert run(["setup"], env=env) == 0
    assert "bindkey" in capsys.readouterr().out


def test_first_run_materializes_config(env, tmp_path):
    run(["setup", "--shell", "bash"], env=env)

    assert (tmp_path / "home" / "config").exists()


def test_help_exits_zero(env, capsys):
    assert run(["help"], env=env) == 0
    assert "usage: snipbook" in capsys.readouterr().out


def test_version(env, capsys):
    assert run(["version"], env=env) == 0
    assert capsys.readouterr().out.strip() == f"snipbook {__version__}"


def test_no_command_is_an_argument_error(env):
    assert run([], env=env) == 2


def test_find_accepts_query_starting_with_dash(env, store, capsys):
    store.append("long listing", "ls -la")
    picker = _StubPicker("ls -la")

    assert run(["find", "--query=-la"], env=env, picker=picker) == 0
    assert picker.calls[0]["query"] == "-la"
    assert capsys.readouterr().out == "ls -la\n"
