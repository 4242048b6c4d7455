"""CLI commands for PathWise.

Operator tooling around the library:
- check: store and AI endpoint reachability
- questions / roadmap / lesson-content: preview AI generation
- cache: inspect or clear the local lesson content cache
- serve: run the Web API
"""

from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from pathwise.config.app_config import load_app_config
from pathwise.core.lesson_content_generator import LessonContent, generate_lesson_content
from pathwise.core.question_generator import generate_questions
from pathwise.core.roadmap_generator import generate_roadmap, lessons_from_weeks
from pathwise.db.content_cache import clear_lesson_cache, list_cache_keys
from pathwise.db.database import init_db
from pathwise.llm.client import LLMClient, LLMError
from pathwise.store.client import StoreConfigError, check_connection, create_store_client
from pathwise.store.models import Lesson

app = typer.Typer(
    name="pathwise",
    help="PathWise: AI-generated learning roadmaps backed by a hosted store.",
    no_args_is_help=True,
)

cache_app = typer.Typer(help="Manage the local lesson content cache.", no_args_is_help=True)
app.add_typer(cache_app, name="cache")

console = Console()


@app.callback()
def main(
    env_file: Path = typer.Option(Path(".env"), "--env-file", help="Environment file to load"),
) -> None:
    """Load environment variables before any command runs."""
    if env_file.exists():
        load_dotenv(env_file, override=False)


def _parse_answers(answers: list[str]) -> dict[str, str]:
    """Parse repeated ``QUESTION=ANSWER`` options."""
    parsed = {}
    for item in answers:
        if "=" not in item:
            console.print(f"[red]✗ Invalid answer '{item}', expected QUESTION=ANSWER[/red]")
            raise typer.Exit(code=1)
        question, answer = item.split("=", 1)
        parsed[question.strip()] = answer.strip()
    return parsed


# =============================================================================
# CHECK
# =============================================================================


@app.command()
def check() -> None:
    """Check that the hosted store and the AI endpoint are reachable."""
    config = load_app_config()
    ok = True

    console.print("[blue]Checking store...[/blue]")
    try:
        client = create_store_client()
        if check_connection(client):
            console.print(f"[green]✓ Store reachable[/green] [dim]{config.store.get_url()}[/dim]")
        else:
            console.print("[red]✗ Store did not answer[/red]")
            ok = False
    except StoreConfigError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        ok = False

    console.print("[blue]Checking AI endpoint...[/blue]")
    llm = LLMClient()
    if llm.is_available():
        console.print(f"[green]✓ AI endpoint reachable[/green] [dim]model={config.llm.model}[/dim]")
    else:
        console.print("[red]✗ AI endpoint not available (check GEMINI_API_KEY)[/red]")
        ok = False

    if not ok:
        raise typer.Exit(code=1)


# =============================================================================
# GENERATION PREVIEW
# =============================================================================


@app.command()
def questions(
    goal: str = typer.Argument(..., help="Learning goal, e.g. 'Learn Python for data analysis'"),
) -> None:
    """Generate clarifying questions for a goal."""
    console.print(f"[blue]Generating questions for:[/blue] {goal}")
    try:
        generated = generate_questions(goal)
    except LLMError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)

    for index, question in enumerate(generated, 1):
        console.print(f"\n[bold]{index}. {question.question}[/bold]")
        for option in question.options:
            console.print(f"   - {option}")


@app.command()
def roadmap(
    goal: str = typer.Argument(..., help="Learning goal"),
    answer: list[str] = typer.Option(
        [], "--answer", "-a", help="Clarifying answer as QUESTION=ANSWER (repeatable)"
    ),
) -> None:
    """Generate a roadmap preview (nothing is stored)."""
    answers = _parse_answers(answer)
    console.print(f"[blue]Generating roadmap for:[/blue] {goal}")
    try:
        weeks = generate_roadmap(goal, answers)
    except LLMError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Learning Roadmap: {goal}")
    table.add_column("Week", justify="right")
    table.add_column("Lesson")
    table.add_column("Objective")
    table.add_column("Time")

    for row in lessons_from_weeks("preview", weeks):
        table.add_row(
            str(row["week_number"]),
            row["title"],
            row["lesson_objective"],
            row["estimated_time"],
        )

    console.print(table)
    console.print(f"[green]✓ {len(weeks)} weeks[/green]")


@app.command(name="lesson-content")
def lesson_content(
    title: str = typer.Argument(..., help="Lesson title"),
    objective: str = typer.Option("", "--objective", "-o", help="Lesson objective"),
    time: str = typer.Option("30 minutes", "--time", "-t", help="Estimated time"),
) -> None:
    """Generate lesson content for a single topic."""
    lesson = Lesson(
        id="preview",
        roadmap_id="preview",
        week_number=1,
        title=title,
        lesson_objective=objective,
        estimated_time=time,
    )
    console.print(f"[blue]Generating lesson:[/blue] {title}")
    try:
        content = LessonContent.from_dict(generate_lesson_content(lesson))
    except LLMError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)

    console.print(f"\n[bold]{content.title}[/bold] [dim]({content.estimated_time})[/dim]")
    console.print(content.lesson_content)
    if content.key_concepts:
        console.print("\n[cyan]Key concepts:[/cyan] " + ", ".join(content.key_concepts))
    console.print(
        f"\n[dim]examples:[/dim] {len(content.example_code)}  "
        f"[dim]interactive:[/dim] {len(content.interactive_elements)}  "
        f"[dim]questions:[/dim] {len(content.assessment_questions)}"
    )


# =============================================================================
# CACHE
# =============================================================================


@cache_app.command(name="list")
def cache_list() -> None:
    """List cached lesson content keys."""
    init_db(load_app_config().cache_db_path)
    keys = list_cache_keys()
    if not keys:
        console.print("[dim]Cache is empty[/dim]")
        return
    for key in keys:
        console.print(f"  {key}")
    console.print(f"[green]{len(keys)} cached lessons[/green]")


@cache_app.command(name="clear")
def cache_clear(
    lesson_id: str | None = typer.Option(None, "--lesson", "-l", help="Only clear this lesson"),
) -> None:
    """Remove cached lesson content."""
    init_db(load_app_config().cache_db_path)
    removed = clear_lesson_cache(lesson_id)
    console.print(f"[green]✓ Removed {removed} cached lessons[/green]")


# =============================================================================
# SERVE
# =============================================================================


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
) -> None:
    """Run the Web API."""
    import uvicorn

    from pathwise.web.api import app as api_app

    console.print(f"[blue]Serving PathWise API on http://{host}:{port}[/blue]")
    uvicorn.run(api_app, host=host, port=port)


if __name__ == "__main__":
    app()
