"""
Command-line interface for Hisaab.

    hisaab classify "Ramesh se 500 liye udhar"
    hisaab update "iska 700 kar do"
    hisaab session < utterances.txt
    hisaab check

Records are printed as JSON on stdout. Structured logs go to stderr.
"""

import asyncio
import json
import sys
from typing import Annotated, Optional

import typer

from hisaab.audit import configure_logging
from hisaab.classifier import RuleBasedClassifier, classify_update_command, create_classifier
from hisaab.config import get_settings, validate_all_settings
from hisaab.orchestrator import create_app_components

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Turn Hinglish bookkeeping speech into transaction and query records.",
)

RULES_ONLY_OPTION = typer.Option(
    "--rules-only",
    help="Skip the Gemini classifier even when GEMINI_API_KEY is set.",
)


@app.callback()
def _setup(
    log_level: Annotated[
        Optional[str],
        typer.Option(help="Override LOG_LEVEL for this run."),
    ] = None,
) -> None:
    configure_logging(log_level or get_settings().app.log_level)


@app.command("classify")
def classify_cmd(
    utterance: Annotated[str, typer.Argument(help="What the shopkeeper said.")],
    rules_only: Annotated[bool, RULES_ONLY_OPTION] = False,
) -> None:
    """Classify one utterance and print its record."""
    settings = get_settings()
    classifier = RuleBasedClassifier(settings.classifier) if rules_only else create_classifier(settings)

    outcome = classifier.classify(utterance)

    typer.echo(outcome.to_json())
    line = f"confidence={outcome.confidence:.2f} stage={outcome.stage.value} source={outcome.source}"
    if outcome.is_low_confidence(settings.classifier.low_confidence_threshold):
        line += " (low confidence, please confirm)"
    typer.echo(line)


@app.command("update")
def update_cmd(
    command: Annotated[str, typer.Argument(help="Edit command for a selected transaction.")],
) -> None:
    """Classify an edit command (modify / delete / read aloud)."""
    parsed = classify_update_command(command)
    typer.echo(parsed.model_dump_json())


@app.command("session")
def session_cmd(
    rules_only: Annotated[bool, RULES_ONLY_OPTION] = False,
) -> None:
    """
    Read one utterance per line from stdin and keep an in-memory ledger.

    Transactions are saved, questions are answered from what was saved
    earlier in the same session.
    """
    flow = create_app_components(use_model=not rules_only)

    async def run() -> None:
        for line in sys.stdin:
            utterance = line.strip()
            if not utterance:
                continue
            response = await flow.handle_utterance(utterance)
            typer.echo(json.dumps({
                "utterance": utterance,
                "record": json.loads(response.outcome.to_json()),
                "reply": response.reply,
                "saved": response.saved,
            }, ensure_ascii=False))

    asyncio.run(run())


@app.command("check")
def check_cmd() -> None:
    """Show whether each settings section loads, and which classifier will run."""
    status = validate_all_settings()

    failed = False
    for name in ("classifier", "gemini", "app"):
        if status.get(name, False):
            typer.echo(f"{name}: ok")
        else:
            failed = True
            typer.echo(f"{name}: {status.get(f'{name}_error', 'invalid')}")

    if status.get("gemini", False) and get_settings().gemini.is_configured:
        typer.echo("classifier backend: gemini with rule fallback")
    else:
        typer.echo("classifier backend: rules only")

    if failed:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
