"""Leitner CLI: server, configuration and study commands."""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Annotated

import typer

from leitner.application.config import resolve_config
from leitner.domain.errors import LeitnerError
from leitner.interface._common import _resolve_with_overrides, format_card, open_backend

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="leitner: Leitner-box flashcard trainer.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

config_app = typer.Typer(help="Manage leitner configuration.")
app.add_typer(config_app, name="config")

OwnerOpt = Annotated[
    str | None, typer.Option("--owner", help="Card owner. Defaults to 'default_owner'.")
]
RemoteOpt = Annotated[
    bool, typer.Option("--remote", help="Talk to the server at 'api_base_url'.")
]


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for leitner."""
    ctx.ensure_object(dict)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG if verbose > 1 else logging.INFO)


def _run(coro):
    """Run a command coroutine, turning domain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except LeitnerError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e


# ---------------------------------------------------------------------------
# Server / config
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option(help="Bind port.")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on code changes.")] = False,
):
    """[bold green]Serve[/bold green] the flashcard HTTP API."""
    import uvicorn

    config = _resolve_with_overrides(host=host, port=port)
    uvicorn.run(
        "leitner.server:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=reload,
    )


@config_app.command("show")
def config_show():
    """Print the resolved configuration as JSON."""
    config = resolve_config()
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))


# ---------------------------------------------------------------------------
# Study commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    question: Annotated[str, typer.Argument(help="Question side of the card.")],
    answer: Annotated[str, typer.Argument(help="Answer side of the card.")],
    category: Annotated[str | None, typer.Option(help="Card category.")] = None,
    owner: OwnerOpt = None,
    remote: RemoteOpt = False,
):
    """Create a card in box 1, due now."""
    config = resolve_config()

    async def _add():
        async with open_backend(config, remote) as backend:
            return await backend.create_card(
                owner or config.default_owner, question, answer, category
            )

    card = _run(_add())
    typer.echo(f"Created {card.id}")


@app.command("due")
def due(owner: OwnerOpt = None, remote: RemoteOpt = False):
    """List cards due for review, lowest box first."""
    config = resolve_config()

    async def _due():
        async with open_backend(config, remote) as backend:
            return await backend.list_due(owner or config.default_owner)

    cards = _run(_due())
    if not cards:
        typer.echo("Nothing due. Well done!")
        return
    for card in cards:
        typer.echo(format_card(card))


@app.command()
def review(
    card_id: Annotated[str, typer.Argument(help="ID of the reviewed card.")],
    correct: Annotated[
        bool, typer.Option("--correct/--incorrect", help="Whether you recalled the answer.")
    ],
    owner: OwnerOpt = None,
    remote: RemoteOpt = False,
):
    """Record a review outcome and reschedule the card."""
    config = resolve_config()

    async def _review():
        async with open_backend(config, remote) as backend:
            return await backend.review_card(owner or config.default_owner, card_id, correct)

    card = _run(_review())
    typer.echo(f"Box {card.box}, next review {card.next_review.strftime('%Y-%m-%d %H:%M')}")


@app.command()
def stats(owner: OwnerOpt = None, remote: RemoteOpt = False):
    """Print the study summary as JSON."""
    config = resolve_config()

    async def _stats():
        async with open_backend(config, remote) as backend:
            return await backend.get_summary(owner or config.default_owner)

    snapshot = _run(_stats())
    typer.echo(json.dumps(asdict(snapshot), indent=2))


@app.command()
def quiz(
    size: Annotated[int | None, typer.Option(help="Number of questions.", min=1)] = None,
    owner: OwnerOpt = None,
    remote: RemoteOpt = False,
):
    """Build a multiple-choice quiz from mastered cards."""
    config = resolve_config()

    async def _quiz():
        async with open_backend(config, remote) as backend:
            return await backend.build_quiz(owner or config.default_owner, size or config.quiz_size)

    questions = _run(_quiz())
    if not questions:
        typer.echo("No mastered cards yet.")
        return
    for number, q in enumerate(questions, start=1):
        typer.echo(f"{number}. {q.question}")
        for letter, option in zip("abcd", q.options):
            typer.echo(f"   {letter}) {option}")
