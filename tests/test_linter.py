# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Behavioural tests for :class:`rubolint.linter.Linter` orchestration."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from rubolint.config import LinterConfig
from rubolint.edits import apply_edits
from rubolint.failures import FailureKind
from rubolint.linter import DocumentEvent, Linter
from rubolint.models import Range, TextDocument
from rubolint.process import ProcessCompletion

if TYPE_CHECKING:
    from conftest import FakeRubocop, FakeSpawner, RecordingNotifier

URI = "file:///project/app.rb"
OTHER_URI = "file:///project/other.rb"


@pytest.fixture
def config(tmp_path: Path) -> LinterConfig:
    return LinterConfig(execute_path="/opt/rubocop/bin", workspace_root=tmp_path)


@pytest.fixture
def linter(config: LinterConfig, fake_spawner: FakeSpawner, notifier: RecordingNotifier) -> Linter:
    return Linter(config, spawner=fake_spawner, notifier=notifier)


@pytest.fixture
def payload(make_offense: Callable[..., dict[str, object]], make_payload: Callable[..., str]) -> str:
    return make_payload(make_offense(line=2, column=3, length=4, severity="warning", message="X", cop_name="Lint/Y"))


def _document(uri: str = URI, text: str = "x = 1\n", *, language_id: str = "ruby") -> TextDocument:
    return TextDocument(uri, text, language_id=language_id)


def test_execute_spawns_rubocop_with_stdin_contract(
    linter: Linter,
    config: LinterConfig,
    fake_spawner: FakeSpawner,
    tmp_path: Path,
) -> None:
    document = _document()

    task = linter.execute(document)

    assert task is not None
    (record,) = fake_spawner.spawned
    assert record.invocation.command == config.command
    assert record.invocation.arguments == (
        "--stdin",
        str(document.path),
        "--force-exclusion",
        "--format",
        "json",
    )
    assert record.invocation.cwd == tmp_path
    assert record.source == "x = 1\n"


def test_completed_run_publishes_diagnostics_and_actions(
    linter: Linter,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
    payload: str,
) -> None:
    completed: list[str] = []
    linter.execute(_document(), on_complete=lambda: completed.append("done"))

    fake_spawner.spawned[0].complete(payload)

    (diagnostic,) = linter.store.diagnostics(URI)
    assert diagnostic.range == Range.create(1, 2, 1, 6)
    assert diagnostic.message == "X (warning:Lint/Y)"
    actions = linter.code_actions(URI, Range.create(1, 3, 1, 3))
    assert [action.title for action in actions] == ["ignore inline (Lint/Y)", "ignore wrap (Lint/Y)"]
    assert completed == ["done"]
    assert notifier.messages == []
    assert linter.queue.wait_idle(timeout=0)


def test_new_request_supersedes_running_one(
    linter: Linter,
    fake_spawner: FakeSpawner,
    make_offense: Callable[..., dict[str, object]],
    make_payload: Callable[..., str],
) -> None:
    completed: list[str] = []
    linter.execute(_document(text="old\n"), on_complete=lambda: completed.append("old"))
    linter.execute(_document(text="new\n"), on_complete=lambda: completed.append("new"))

    stale, fresh = fake_spawner.spawned
    assert stale.killed
    assert fresh.source == "new\n"

    fresh.complete(make_payload(make_offense(cop_name="Fresh/Cop")))
    stale.complete(make_payload(make_offense(cop_name="Stale/Cop")))

    assert [diagnostic.code for diagnostic in linter.store.diagnostics(URI)] == ["Fresh/Cop"]
    assert completed == ["new"]


def test_completion_racing_cancellation_is_discarded(
    linter: Linter,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
    payload: str,
) -> None:
    linter.execute(_document())
    stale = fake_spawner.spawned[0]
    linter.execute(_document())

    # output that arrived before the kill took effect
    stale.on_complete(ProcessCompletion(returncode=0, stdout=payload))
    stale.on_complete(ProcessCompletion(returncode=None, failure=FailureKind.EXECUTABLE_MISSING))

    assert linter.store.get(URI) is None
    assert notifier.messages == []


def test_close_cancels_run_and_clears_published_state(
    linter: Linter,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
    payload: str,
) -> None:
    document = _document()
    linter.execute(document)
    fake_spawner.spawned[0].complete(payload)
    linter.execute(document)

    linter.handle_event(DocumentEvent.CLOSE, document)
    fake_spawner.spawned[1].complete(payload)

    assert fake_spawner.spawned[1].killed
    assert linter.store.get(URI) is None
    assert linter.code_actions(URI, Range.create(1, 3, 1, 3)) == []
    assert notifier.messages == []
    assert linter.queue.wait_idle(timeout=0)


def test_distinct_documents_run_one_at_a_time(
    linter: Linter,
    fake_spawner: FakeSpawner,
    payload: str,
) -> None:
    linter.execute(_document(URI))
    linter.execute(_document(OTHER_URI))

    assert len(fake_spawner.spawned) == 1
    assert linter.queue.pending_keys == (OTHER_URI,)

    fake_spawner.spawned[0].complete(payload)

    assert len(fake_spawner.spawned) == 2
    assert fake_spawner.spawned[1].invocation.arguments[1] == str(Path("/project/other.rb"))
    fake_spawner.spawned[1].complete(payload)
    assert set(linter.store.keys()) == {URI, OTHER_URI}


@pytest.mark.parametrize(
    ("completion", "expected"),
    [
        (
            ProcessCompletion(returncode=None, stderr="No such file", failure=FailureKind.EXECUTABLE_MISSING),
            "is not executable (command not found). Please check the execute path setting.",
        ),
        (
            ProcessCompletion(returncode=None, stderr="Permission denied", failure=FailureKind.EXECUTABLE_NOT_EXECUTABLE),
            "is not executable: Permission denied",
        ),
        (ProcessCompletion(returncode=0, stdout=""), "returns empty output! please check configuration."),
        (ProcessCompletion(returncode=2, stdout="oops\nbroken"), '(it might be non-JSON output) : "oops broken"'),
    ],
)
def test_failures_are_reported_once_and_publish_nothing(
    linter: Linter,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
    completion: ProcessCompletion,
    expected: str,
) -> None:
    linter.execute(_document())

    fake_spawner.spawned[0].on_complete(completion)

    (message,) = notifier.messages
    assert expected in message
    assert linter.store.get(URI) is None
    assert linter.queue.wait_idle(timeout=0)


def test_stderr_is_reported_but_output_still_published(
    linter: Linter,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
    payload: str,
) -> None:
    linter.execute(_document())

    fake_spawner.spawned[0].complete(payload, stderr="warning: obsolete parameter")

    assert notifier.messages == ["warning: obsolete parameter"]
    assert len(linter.store.diagnostics(URI)) == 1


def test_suppressed_stderr_is_not_reported(
    config: LinterConfig,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
    payload: str,
) -> None:
    config.suppress_rubocop_warnings = True
    linter = Linter(config, spawner=fake_spawner, notifier=notifier)
    linter.execute(_document())

    fake_spawner.spawned[0].complete(payload, stderr="warning: obsolete parameter")

    assert notifier.messages == []
    assert len(linter.store.diagnostics(URI)) == 1


@pytest.mark.parametrize(
    "document",
    [
        _document(language_id="python"),
        _document("untitled:Untitled-1"),
    ],
)
def test_non_ruby_or_non_file_documents_are_ignored(
    linter: Linter,
    fake_spawner: FakeSpawner,
    document: TextDocument,
) -> None:
    assert linter.execute(document) is None
    assert linter.handle_event(DocumentEvent.OPEN, document) is None
    assert fake_spawner.spawned == []


def test_save_respects_on_save_setting(
    config: LinterConfig,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
) -> None:
    config.on_save = False
    linter = Linter(config, spawner=fake_spawner, notifier=notifier)

    assert not linter.is_on_save
    assert linter.handle_event(DocumentEvent.SAVE, _document()) is None
    assert linter.handle_event(DocumentEvent.MANUAL, _document()) is not None
    assert len(fake_spawner.spawned) == 1


def test_reloaded_config_applies_to_runs_started_afterwards(
    linter: Linter,
    config: LinterConfig,
    fake_spawner: FakeSpawner,
    payload: str,
) -> None:
    linter.execute(_document(URI))
    linter.execute(_document(OTHER_URI))

    linter.reload_config(config.model_copy(update={"execute_path": "/usr/local/bin"}))
    fake_spawner.spawned[0].complete(payload)

    assert fake_spawner.spawned[1].invocation.command == linter.config.command
    assert linter.config.command != config.command


def test_configured_rubocop_file_is_passed_when_present(
    config: LinterConfig,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
    tmp_path: Path,
) -> None:
    (tmp_path / ".rubocop.yml").write_text("AllCops: {}\n", encoding="utf-8")
    config.config_file_path = Path(".rubocop.yml")
    linter = Linter(config, spawner=fake_spawner, notifier=notifier)

    linter.execute(_document())

    arguments = fake_spawner.spawned[0].invocation.arguments
    assert arguments[3:5] == ("--config", str(tmp_path / ".rubocop.yml"))
    assert notifier.messages == []


def test_missing_rubocop_file_warns_and_is_skipped(
    config: LinterConfig,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
) -> None:
    config.config_file_path = Path("missing.yml")
    linter = Linter(config, spawner=fake_spawner, notifier=notifier)

    linter.execute(_document())

    assert "--config" not in fake_spawner.spawned[0].invocation.arguments
    assert notifier.messages == ["missing.yml file does not exist. Ignoring..."]


def test_additional_arguments_precede_format_flags(
    config: LinterConfig,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
) -> None:
    config.additional_arguments = ["--only", "Lint"]
    linter = Linter(config, spawner=fake_spawner, notifier=notifier)

    linter.execute(_document())

    assert fake_spawner.spawned[0].invocation.arguments[-4:] == ("--only", "Lint", "--format", "json")


def test_working_directory_falls_back_to_document_folder(fake_spawner: FakeSpawner, notifier: RecordingNotifier) -> None:
    linter = Linter(LinterConfig(), spawner=fake_spawner, notifier=notifier)

    assert linter.working_directory(_document()) == Path("/project")


def test_lint_open_documents_schedules_lintable_documents(
    linter: Linter,
    fake_spawner: FakeSpawner,
    payload: str,
) -> None:
    tasks = linter.lint_open_documents(
        [_document(URI), _document("untitled:scratch"), _document(OTHER_URI, language_id="ruby")],
    )

    assert [task.key for task in tasks] == [URI, OTHER_URI]
    fake_spawner.spawned[0].complete(payload)
    fake_spawner.spawned[1].complete(payload)
    assert linter.queue.wait_idle(timeout=0)


@pytest.mark.skipif(os.name != "posix", reason="fake rubocop script requires a POSIX shell")
def test_end_to_end_with_real_process(
    fake_rubocop: FakeRubocop,
    notifier: RecordingNotifier,
    tmp_path: Path,
    payload: str,
) -> None:
    fake_rubocop.configure(stdout=payload, exit_code=1)
    source = tmp_path / "app.rb"
    source.write_text("def a\n  foo\nend\n", encoding="utf-8")
    config = LinterConfig(execute_path=str(fake_rubocop.directory), workspace_root=tmp_path)
    document = TextDocument.from_path(source)

    with Linter(config, notifier=notifier) as linter:
        linter.execute(document)
        assert linter.queue.wait_idle(timeout=10)
        diagnostics = linter.store.diagnostics(document.key)

    assert [diagnostic.code for diagnostic in diagnostics] == ["Lint/Y"]
    assert fake_rubocop.stdin == "def a\n  foo\nend\n"
    assert fake_rubocop.arguments[:2] == ["--stdin", str(source.resolve())]
    assert notifier.messages == []


@pytest.mark.skipif(os.name != "posix", reason="fake rubocop script requires a POSIX shell")
def test_format_document_runs_autocorrect(
    fake_rubocop: FakeRubocop,
    notifier: RecordingNotifier,
    tmp_path: Path,
) -> None:
    fake_rubocop.configure(stdout="Inspecting 1 file\n====================\ndef a\n  3\nend\n", exit_code=1)
    source = tmp_path / "app.rb"
    source.write_text("def a\n3\nend\n", encoding="utf-8")
    config = LinterConfig(execute_path=str(fake_rubocop.directory), workspace_root=tmp_path)
    document = TextDocument.from_path(source)

    with Linter(config, notifier=notifier) as linter:
        edits = linter.format_document(document)

    assert apply_edits(document.text, edits) == "def a\n  3\nend\n"
    assert fake_rubocop.arguments == ["--stdin", str(source.resolve()), "--force-exclusion", "--auto-correct"]
    assert notifier.messages == []


def test_previous_results_stay_visible_until_superseding_run_completes(
    linter: Linter,
    fake_spawner: FakeSpawner,
    make_offense: Callable[..., dict[str, object]],
    make_payload: Callable[..., str],
) -> None:
    linter.execute(_document(text="v1\n"))
    fake_spawner.spawned[0].complete(make_payload(make_offense(cop_name="First/Cop")))
    linter.execute(_document(text="v2\n"))
    linter.execute(_document(text="v3\n"))

    assert fake_spawner.spawned[1].killed
    assert [diagnostic.code for diagnostic in linter.store.diagnostics(URI)] == ["First/Cop"]
    assert [action.cop_name for action in linter.code_actions(URI, Range.create(0, 0, 0, 0))] == [
        "First/Cop",
        "First/Cop",
    ]

    fake_spawner.spawned[2].complete(make_payload(make_offense(cop_name="Third/Cop")))

    assert [diagnostic.code for diagnostic in linter.store.diagnostics(URI)] == ["Third/Cop"]


def test_close_cancels_running_and_pending_runs(
    linter: Linter,
    fake_spawner: FakeSpawner,
    notifier: RecordingNotifier,
    payload: str,
) -> None:
    linter.execute(_document(URI))
    linter.execute(_document(OTHER_URI))

    linter.close()
    fake_spawner.spawned[0].complete(payload)

    assert fake_spawner.spawned[0].killed
    assert len(fake_spawner.spawned) == 1
    assert linter.store.keys() == ()
    assert notifier.messages == []
    assert linter.queue.wait_idle(timeout=0)
