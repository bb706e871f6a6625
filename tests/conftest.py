import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Optional, Union

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from rule_screening.completion.client import ICompletionClient  # noqa: E402
from rule_screening.completion.models import CompletionResponse  # noqa: E402
from rule_screening.repositories.screening import ScreeningRepository  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("RULE_SCREENING_HOME", raising=False)
    monkeypatch.delenv("RULE_SCREENING_API_KEY", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def screening_root(tmp_path: Path) -> Path:
    return tmp_path / ".config" / "rule-screening"


@pytest.fixture
def repository(screening_root: Path) -> ScreeningRepository:
    return ScreeningRepository(root=screening_root)


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    counter = {"value": 0}

    def _next() -> str:
        counter["value"] += 1
        return f"rule-{counter['value']}"

    return _next


def completion_body(content: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


Reply = Union[CompletionResponse, Exception, str]


class StubCompletionClient(ICompletionClient):
    """Answers keyed by rule title; an optional gate per title holds the reply."""

    def __init__(
        self,
        replies: dict[str, Reply],
        gates: Optional[dict[str, asyncio.Event]] = None,
    ) -> None:
        self.replies = replies
        self.gates = gates or {}
        self.calls: list[tuple[str, str]] = []
        self.completed: list[str] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> CompletionResponse:
        self.calls.append((system_prompt, user_prompt))
        title = user_prompt.splitlines()[0].removeprefix("Rule: ")
        gate = self.gates.get(title)
        if gate is not None:
            await gate.wait()
        self.completed.append(title)

        reply = self.replies[title]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return CompletionResponse(status_code=200, reason="OK", body=completion_body(reply))
        return reply


@pytest.fixture
def stub_client():
    def _make(replies: dict[str, Reply], gates: Optional[dict[str, asyncio.Event]] = None):
        return StubCompletionClient(replies, gates)

    return _make


@pytest.fixture
def cli_runner(tmp_path: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(tmp_path))
            env.setdefault("COLUMNS", "160")
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()
