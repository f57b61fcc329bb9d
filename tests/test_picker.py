import subprocess

import pytest

from snipbook.exception_handler import PickerError, PickerUnavailable
from snipbook.formatter import RenderMode, render
from snipbook.picker import FuzzyPicker, PickerConfig
from snipbook.snippet import Record


TABLE = render(
    [
        Record(timestamp="2024-05-06 07:08:09", description="list files", command="ls -la | grep foo"),
        Record(timestamp="2024-05-06 07:09:00", description="uptime", command="uptime"),
    ],
    RenderMode.FIND,
)


class _FakeRun:
    def __init__(self, returncode=0, stdout=""):
        self.returncode = returncode
        self.stdout = stdout
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append({"cmd": cmd, **kwargs})
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.stdout)


@pytest.fixture
def fzf_installed(monkeypatch):
    monkeypatch.setattr("snipbook.picker.shutil.which", lambda name: f"/usr/bin/{name}")


def _install_run(monkeypatch, fake):
    monkeypatch.setattr("snipbook.picker.subprocess.run", fake)
    return fake


def test_build_command_skips_header_and_seeds_query():
    picker = FuzzyPicker(PickerConfig(highlighter=None))

    cmd = picker.build_command("grep")

    assert cmd[0] == "fzf"
    assert "--header-lines=1" in cmd
    assert "--delimiter=\\|" in cmd
    assert "--query=grep" in cmd
    assert any(arg.startswith("--preview=") for arg in cmd)


def test_build_command_without_query():
    cmd = FuzzyPicker(PickerConfig(highlighter=None)).build_command()

    assert not any(arg.startswith("--query") for arg in cmd)


def test_preview_uses_fold_without_highlighter():
    preview = FuzzyPicker(PickerConfig(highlighter=None)).preview_command()

    assert "{3..}" in preview
    assert 'fold -s -w "$FZF_PREVIEW_COLUMNS"' in preview


def test_preview_uses_highlighter_with_theme():
    preview = FuzzyPicker(PickerConfig(highlighter="bat", theme="Nord")).preview_command()

    assert "bat --color=always" in preview
    assert "--theme=Nord" in preview
    assert "fold" not in preview


def test_select_returns_command_of_chosen_row(monkeypatch, fzf_installed):
    chosen = TABLE.splitlines()[1]
    fake = _install_run(monkeypatch, _FakeRun(stdout=chosen + "\n"))

    result = FuzzyPicker(PickerConfig(highlighter=None)).select(TABLE, query="ls")

    assert result == "ls -la | grep foo"
    assert fake.calls[0]["input"].startswith(TABLE)
    assert "--query=ls" in fake.calls[0]["cmd"]


@pytest.mark.parametrize("returncode", [1, 130])
def test_select_treats_cancel_as_empty_result(monkeypatch, fzf_installed, returncode):
    _install_run(monkeypatch, _FakeRun(returncode=returncode))

    assert FuzzyPicker(PickerConfig(highlighter=None)).select(TABLE) == ""


def test_select_raises_on_picker_failure(monkeypatch, fzf_installed):
    _install_run(monkeypatch, _FakeRun(returncode=2))

    with pytest.raises(PickerError):
        FuzzyPicker(PickerConfig(highlighter=None)).select(TABLE)


def test_select_requires_fzf(monkeypatch):
    monkeypatch.setattr("snipbook.picker.shutil.which", lambda name: None)

    with pytest.raises(PickerUnavailable):
        FuzzyPicker(PickerConfig(highlighter=None)).select(TABLE)
