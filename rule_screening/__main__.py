import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO, TypeVar

import click
from rich.console import Console

from rule_screening.completion.client import HttpCompletionClient
from rule_screening.completion.models import CompletionOptions
from rule_screening.constants import HOME_ENV_VAR, RULE_FILE_SUFFIX
from rule_screening.errors import ScreeningAppError
from rule_screening.evaluation.orchestrator import EvaluationOrchestrator
from rule_screening.logging_config import configure_logging
from rule_screening.repositories.screening import ScreeningRepository
from rule_screening.rules.models import Rule
from rule_screening.rules.parser import parse_rule_file, serialize_rule
from rule_screening.rules.store import RuleStore
from rule_screening.tui import ScreeningConsoleUI
from rule_screening.utils import slugify

T = TypeVar("T")


def _repository_from_obj(obj: Dict[str, Any]) -> ScreeningRepository:
    return ScreeningRepository(root=obj.get("root"))


def _load_store(repository: ScreeningRepository) -> RuleStore:
    return RuleStore(repository.load_rules())


def _guard(fn: Callable[[], T]) -> T:
    try:
        return fn()
    except ScreeningAppError as exc:
        raise click.ClickException(str(exc))


def _read_subject(subject: Optional[TextIO], text: Optional[str]) -> str:
    if subject is not None and text is not None:
        raise click.UsageError("Use either --subject or --text, not both.")
    if text is not None:
        return text
    if subject is not None:
        return subject.read()
    return ""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=HOME_ENV_VAR,
    default=None,
    help="Directory holding rules and settings.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, root: Optional[Path], verbose: bool) -> None:
    """Screen free text against an ordered list of rules with a language model."""
    configure_logging(verbose=verbose)
    ctx.obj = {"root": root.expanduser() if root is not None else None}


@cli.group(help="Manage screening rules.")
def rules() -> None:
    pass


@rules.command("list", help="List rules in evaluation order.")
@click.pass_obj
def rules_list(obj: Dict[str, Any]) -> None:
    ui = ScreeningConsoleUI(Console())
    store = _guard(lambda: _load_store(_repository_from_obj(obj)))
    ui.render_rules(store.rules(), store.summary())


@rules.command("add", help="Append a rule to the end of the list.")
@click.argument("title")
@click.option("-d", "--definition", default="", help="Rule definition text.")
@click.pass_obj
def rules_add(obj: Dict[str, Any], title: str, definition: str) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    store = _guard(lambda: _load_store(repository))
    rule_id = _guard(lambda: store.add(title, definition))
    repository.save_rules(store.snapshot())
    ui.render_rule_saved(store.require(rule_id))


@rules.command("remove", help="Remove a rule by id, id prefix or position.")
@click.argument("ref")
@click.pass_obj
def rules_remove(obj: Dict[str, Any], ref: str) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    store = _guard(lambda: _load_store(repository))
    rule = _guard(lambda: store.resolve(ref))
    store.remove(rule.id)
    repository.save_rules(store.snapshot())
    ui.render_rule_saved(rule, removed=True)


@rules.command("move", help="Move a rule to a new 1-based position.")
@click.argument("ref")
@click.argument("position", type=int)
@click.pass_obj
def rules_move(obj: Dict[str, Any], ref: str, position: int) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    store = _guard(lambda: _load_store(repository))
    rule = _guard(lambda: store.resolve(ref))
    from_index = store.index_of(rule.id)
    _guard(lambda: store.reorder(from_index, position - 1))
    repository.save_rules(store.snapshot())
    ui.render_rule_moved(rule, position)


@rules.command("show", help="Show a rule with its latest result.")
@click.argument("ref")
@click.pass_obj
def rules_show(obj: Dict[str, Any], ref: str) -> None:
    ui = ScreeningConsoleUI(Console())
    store = _guard(lambda: _load_store(_repository_from_obj(obj)))
    rule = _guard(lambda: store.resolve(ref))
    ui.render_rule(rule, store.index_of(rule.id) + 1)


@rules.command("clear-results", help="Drop every stored evaluation result.")
@click.pass_obj
def rules_clear_results(obj: Dict[str, Any]) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    store = _guard(lambda: _load_store(repository))
    store.clear_results()
    repository.save_rules(store.snapshot())
    ui.render_rules(store.rules(), store.summary())


@rules.command("import", help="Append rules from markdown files with a title frontmatter.")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.pass_obj
def rules_import(obj: Dict[str, Any], paths: tuple[Path, ...]) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    store = _guard(lambda: _load_store(repository))

    drafts = [_guard(lambda path=path: parse_rule_file(path)) for path in paths]
    added: list[Rule] = []
    for draft in drafts:
        rule_id = store.add(draft.title, draft.definition)
        added.append(store.require(rule_id))
    repository.save_rules(store.snapshot())
    ui.render_rules_imported(added)


@rules.command("export", help="Write each rule to DIRECTORY as a markdown file.")
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path))
@click.pass_obj
def rules_export(obj: Dict[str, Any], directory: Path) -> None:
    ui = ScreeningConsoleUI(Console())
    store = _guard(lambda: _load_store(_repository_from_obj(obj)))
    directory.mkdir(parents=True, exist_ok=True)

    written: list[str] = []
    for position, rule in enumerate(store.rules(), start=1):
        path = directory / f"{position:02d}-{slugify(rule.title)}{RULE_FILE_SUFFIX}"
        path.write_text(serialize_rule(rule), encoding="utf-8")
        written.append(str(path))
    ui.render_rules_exported(written)


@cli.command(help="Evaluate rules against the subject matter.")
@click.argument("refs", nargs=-1)
@click.option(
    "-s",
    "--subject",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="File with the subject matter ('-' for stdin).",
)
@click.option("-t", "--text", default=None, help="Subject matter given inline.")
@click.pass_obj
def evaluate(
    obj: Dict[str, Any],
    refs: tuple[str, ...],
    subject: Optional[TextIO],
    text: Optional[str],
) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    store = _guard(lambda: _load_store(repository))
    subject_matter = _read_subject(subject, text)

    rule_ids: Optional[list[str]] = None
    if refs:
        rule_ids = [_guard(lambda ref=ref: store.resolve(ref)).id for ref in refs]

    settings = _guard(repository.load_settings)

    async def _run() -> list[Rule]:
        async with HttpCompletionClient(settings.api_key or "", settings.options) as client:
            orchestrator = EvaluationOrchestrator(
                store, repository, client, subject_matter=subject_matter
            )
            return await orchestrator.evaluate_many(rule_ids)

    evaluated = _guard(lambda: asyncio.run(_run()))
    ui.render_evaluation(evaluated, store.summary())


@cli.group(help="Show or change the system prompt, API key and model options.")
def config() -> None:
    pass


@config.command("show", help="Show the current settings.")
@click.pass_obj
def config_show(obj: Dict[str, Any]) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    settings = _guard(repository.load_settings)
    ui.render_settings(settings, str(repository.store.location))


@config.command("set-prompt", help="Save the system prompt.")
@click.argument("prompt", required=False)
@click.option(
    "-f",
    "--file",
    "prompt_file",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read the prompt from a file ('-' for stdin).",
)
@click.pass_obj
def config_set_prompt(
    obj: Dict[str, Any], prompt: Optional[str], prompt_file: Optional[TextIO]
) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    value = prompt_file.read() if prompt_file is not None else (prompt or "")
    _guard(lambda: repository.save_system_prompt(value))
    ui.render_saved("system prompt", "System prompt saved!")


@config.command("reset-prompt", help="Restore the default system prompt.")
@click.pass_obj
def config_reset_prompt(obj: Dict[str, Any]) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    _guard(repository.reset_system_prompt)
    ui.render_saved("system prompt", "System prompt reset to default.")


@config.command("set-key", help="Save the API key.")
@click.option("--key", prompt="API key", hide_input=True, help="API key value.")
@click.pass_obj
def config_set_key(obj: Dict[str, Any], key: str) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    _guard(lambda: repository.save_api_key(key))
    ui.render_saved("api key", "API key saved!")


@config.command("clear-key", help="Forget the stored API key.")
@click.pass_obj
def config_clear_key(obj: Dict[str, Any]) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    removed = _guard(repository.clear_api_key)
    if not removed:
        raise click.ClickException("No API key stored.")
    ui.render_saved("api key", "API key removed.")


@config.command("set-option", help="Set a completion option (endpoint, model, ...).")
@click.argument(
    "name", type=click.Choice(CompletionOptions.field_names(), case_sensitive=False)
)
@click.argument("value")
@click.pass_obj
def config_set_option(obj: Dict[str, Any], name: str, value: str) -> None:
    ui = ScreeningConsoleUI(Console())
    repository = _repository_from_obj(obj)
    updated = _guard(lambda: repository.save_completion_option(name.lower(), value))
    ui.render_saved("completion options", f"{name.lower()} = {getattr(updated, name.lower())}")


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.ClickException as exc:
        exc.show()
        return 2
    except click.exceptions.Abort:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
