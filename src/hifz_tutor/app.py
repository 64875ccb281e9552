"""Interactive CLI application."""
import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from hifz_tutor import guided
from hifz_tutor.config import (
    DEFAULT_EXTRAS_DIR, DEFAULT_LOCAL_STORE_PATH, get_account_id, get_chunk_size,
    get_focus_mode, parse_session_config, set_account_id, set_chunk_size, set_focus_mode,
)
from hifz_tutor.db import DEFAULT_DB_PATH, init_db
from hifz_tutor.errors import TutorError
from hifz_tutor.importer import import_document
from hifz_tutor.loaders import Extras, ExtrasLoader
from hifz_tutor.masking import render
from hifz_tutor.models import (
    FOCUS_MODES, FOCUS_TRANSLIT, HIDE_NONE, HIDE_POLICIES, MODE_DRILL, MODE_PRACTICE,
    MODE_RECALL, VerseRange,
)
from hifz_tutor.progress import build_progress, fmt_date, fmt_percent
from hifz_tutor.recorder import RecallRun, SessionRecorder, build_session_result
from hifz_tutor.seed import get_document, is_seeded, list_documents, seed_all
from hifz_tutor.store import load_history, select_store
from hifz_tutor.transliterate import transliterate

console = Console()

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the learner leaves a session from any prompt."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer is not None and answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str] | None = None, **kwargs) -> int:
    answer = session_prompt(prompt, choices=(choices + list(EXIT_WORDS)) if choices else None, **kwargs)
    return int(answer)


def show_welcome():
    console.print(Panel(
        "[bold]Hifz Tutor[/bold]\n[dim]Guided verse memorisation[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("guided", "Guided memorisation routine"),
        ("recall", "Recall test (graded)"),
        ("drill", "Drill a range (graded)"),
        ("practice", "Read through a range"),
        ("stats", "Streak, averages, progress"),
        ("documents", "List available texts"),
        ("import", "Add a text from a file"),
        ("settings", "Focus mode, chunk size, account"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def current_store(db_path: str, local_path: str = DEFAULT_LOCAL_STORE_PATH):
    return select_store(db_path, get_account_id(db_path), local_path)


def focus_line(text: str, index: int, extras: Extras, focus_mode: str) -> str:
    """The line being memorised, in the learner's chosen script."""
    if focus_mode != FOCUS_TRANSLIT:
        return text
    if index < len(extras.transliteration) and extras.transliteration[index]:
        return extras.transliteration[index]
    return transliterate(text)


def choose_session(db_path: str, mode: str | None = None):
    documents = list_documents(db_path)
    for d in documents:
        console.print(f"  [cyan]{d.slug:<14}[/cyan] {d.number}. {d.name} ({d.total_verses} verses)")
    slug = session_prompt("Document", choices=[d.slug for d in documents] + list(EXIT_WORDS))
    document = get_document(db_path, slug)
    params = {
        "slug": slug,
        "start": session_prompt("From verse", default="1"),
        "end": session_prompt("To verse", default=str(document.total_verses)),
        "mode": mode,
    }
    if mode in (MODE_RECALL, MODE_DRILL):
        params["hide"] = session_prompt("Hide", choices=list(HIDE_POLICIES) + list(EXIT_WORDS), default=HIDE_NONE)
        params["reps"] = session_prompt("Repetitions per verse", default="1")
    return document, parse_session_config(params, document.total_verses)


def show_verses(lines: list[tuple[int, str]], policy: str, revealed: bool, extras: Extras,
                focus_mode: str, range_start: int, active: int | None = None) -> None:
    for number, text in lines:
        index = number - range_start
        line = render(focus_line(text, index, extras, focus_mode), policy, revealed=revealed)
        style = "bold green" if number == active else ""
        console.print(f"  [dim]{number:>3}[/dim]  " + (f"[{style}]{line}[/{style}]" if style else line))
        if revealed and index < len(extras.translation) and extras.translation[index]:
            console.print(f"       [dim italic]{extras.translation[index]}[/dim italic]")


def run_guided_session(session: guided.GuidedSession, recorder: SessionRecorder,
                       extras: Extras, focus_mode: str) -> None:
    total = guided.total_steps(session.config)
    while not session.complete:
        headline, sub = guided.instruction(session.state, session.config)
        console.print(Panel(
            f"[bold]{headline}[/bold]\n[dim]{sub}[/dim]",
            title=guided.stage_label(session.state),
            subtitle=f"step {session.steps_taken + 1} of {total}",
            border_style="cyan",
        ))
        policy = session.hide_policy
        show_verses(session.visible_verses(), policy, False, extras, focus_mode,
                    session.range.start, session.active_verse_number())
        if policy != HIDE_NONE:
            link = session.recall_link()
            console.print(f"[dim]Tip: run 'recall' on verses {link['start']}-{link['end']} "
                          f"with hide={link['hide']}, reps={link['reps']}[/dim]")
            session_prompt("[dim]Press Enter to reveal[/dim]", default="")
            show_verses(session.visible_verses(), policy, True, extras, focus_mode,
                        session.range.start, session.active_verse_number())
        session_prompt(f"[dim]{guided.button_label(session.state, session.config)} (Enter)[/dim]", default="")
        session.advance()

    headline, sub = guided.instruction(session.state, session.config)
    console.print(f"[green]{headline}[/green] [dim]{sub}[/dim]")
    result = build_session_result(
        session.document, session.range, MODE_PRACTICE, correct=0, total=0,
        focus_mode=focus_mode,
    )
    if not recorder.record(result) and recorder.last_error:
        console.print(f"[yellow]{recorder.last_error}[/yellow]")


def run_recall_session(run: RecallRun, recorder: SessionRecorder, extras: Extras, focus_mode: str) -> None:
    console.print(f"\n[bold]{run.document.name}[/bold] {run.range.start}-{run.range.end} "
                  f"· {run.mode} · {run.total} items\n")
    while not run.finished:
        number, text = run.current()
        console.print(f"[bold]Item {run.index + 1}/{run.total}[/bold]")
        show_verses([(number, text)], run.hide_policy, False, extras, focus_mode, run.range.start)
        if run.graded:
            session_prompt("[dim]Recite, then press Enter to reveal[/dim]", default="")
            show_verses([(number, text)], run.hide_policy, True, extras, focus_mode, run.range.start)
            answer = session_prompt("Did you recall it?", choices=["y", "n"] + list(EXIT_WORDS), default="y")
            run.mark(answer == "y")
        else:
            session_prompt("[dim]Press Enter when read[/dim]", default="")
            run.mark()
        console.print()

    result = run.result()
    if run.graded:
        console.print(f"[bold]Score: {run.correct}/{run.total} ({result.percent}%)[/bold]\n")
    else:
        console.print("[green]Practice complete![/green]\n")
    if not recorder.record(result) and recorder.last_error:
        console.print(f"[yellow]{recorder.last_error}[/yellow]")


def _load_extras(loader: ExtrasLoader, slug: str, verse_range: VerseRange) -> Extras:
    return loader.load(slug, verse_range) or Extras()


def cmd_guided(db_path: str, loader: ExtrasLoader):
    console.print("\n[bold]Guided Session[/bold]")
    document, config = choose_session(db_path)
    session = guided.GuidedSession(document, config.range, chunk_size=get_chunk_size(db_path))
    extras = _load_extras(loader, document.slug, config.range)
    try:
        run_guided_session(session, SessionRecorder(current_store(db_path)), extras,
                           get_focus_mode(db_path))
    finally:
        loader.cancel()


def cmd_run(db_path: str, loader: ExtrasLoader, mode: str):
    console.print(f"\n[bold]{mode.title()} Session[/bold]")
    document, config = choose_session(db_path, mode)
    focus_mode = get_focus_mode(db_path)
    run = RecallRun(document, config.range, mode=config.mode, reps=config.reps,
                    hide_policy=config.hide, focus_mode=focus_mode)
    extras = _load_extras(loader, document.slug, config.range)
    try:
        recorder = SessionRecorder(current_store(db_path))
        run_recall_session(run, recorder, extras, focus_mode)
        while session_prompt("Go again?", choices=["y", "n"] + list(EXIT_WORDS), default="n") == "y":
            run.restart(recorder)
            run_recall_session(run, recorder, extras, focus_mode)
    finally:
        loader.cancel()


def cmd_stats(db_path: str):
    history = load_history(current_store(db_path))
    p = build_progress(history)
    console.print(Panel(
        f"Streak: [bold]{p['streak_days']}[/bold] days  |  "
        f"This week: [bold]{p['sessions_this_week']}[/bold] sessions  |  "
        f"Avg (last 10 recalls): [bold]{fmt_percent(p['average_last_n'])}[/bold]",
        title="Your Progress", border_style="blue",
    ))
    if not history:
        console.print("[yellow]No sessions yet. Start with 'guided' or 'recall'.[/yellow]")
        return

    week = " ".join(str(c) for c in p["week_summary"])
    console.print(f"\n  Last 7 days: [cyan]{week}[/cyan]")
    focus = p["focus"]["percents"]
    console.print(f"  Focus: primary {focus['primary-script']}%  "
                  f"transliteration {focus['transliteration']}%  unknown {focus['unknown']}%\n")

    table = Table(title="Per Document")
    table.add_column("Document", style="cyan")
    table.add_column("Last score", justify="right")
    table.add_column("Last practised")
    for row in p["per_document"]:
        table.add_row(f"{row['number']}. {row['name']}", fmt_percent(row["last_score"]),
                      fmt_date(row["last_practiced_at"]))
    console.print(table)

    if p["timeline"]:
        console.print("\n[bold]Recall timeline:[/bold]")
        for point in p["timeline"]:
            avg = round(point["average_percent"])
            bar = "█" * (avg // 5)
            console.print(f"  {point['day'].strftime('%b %d')}  [green]{bar}[/green] {avg}%")

    console.print("\n[bold]Recent:[/bold]")
    for s in p["recent"]:
        score = f"{s.correct_count}/{s.total_count} ({s.percent}%)" if s.total_count else "read-through"
        console.print(f"  {fmt_date(s.completed_at)}  {s.document_name} "
                      f"{s.range.start}-{s.range.end}  [dim]{s.mode}[/dim]  {score}")


def cmd_documents(db_path: str):
    table = Table(title="Documents")
    table.add_column("#", justify="right")
    table.add_column("Slug", style="cyan")
    table.add_column("Name")
    table.add_column("Verses", justify="right")
    for d in list_documents(db_path):
        table.add_row(str(d.number), d.slug, d.name, str(d.total_verses))
    console.print(table)


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_document(db_path, file_path)
    console.print(f"[green]Imported {result['name']} ({result['verses']} verses) as '{result['slug']}'[/green]")


def cmd_settings(db_path: str):
    console.print(f"  Focus mode: [cyan]{get_focus_mode(db_path)}[/cyan]")
    console.print(f"  Chunk size: [cyan]{get_chunk_size(db_path)}[/cyan]")
    console.print(f"  Account:    [cyan]{get_account_id(db_path) or '(local only)'}[/cyan]")
    set_focus_mode(db_path, Prompt.ask("Focus mode", choices=list(FOCUS_MODES), default=get_focus_mode(db_path)))
    set_chunk_size(db_path, session_int_prompt("Chunk size", choices=[str(n) for n in range(1, 11)],
                                               default=str(get_chunk_size(db_path))))
    account = Prompt.ask("Account id (blank for local only)", default=get_account_id(db_path) or "")
    set_account_id(db_path, account.strip() or None)


def setup_logging() -> None:
    level = logging.DEBUG if os.environ.get("HIFZ_TUTOR_DEBUG") == "1" else logging.WARNING
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]",
                        handlers=[RichHandler(console=console, show_path=False)])


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()
    loader = ExtrasLoader(DEFAULT_EXTRAS_DIR)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="guided").strip().lower()
        try:
            if choice == "guided":
                cmd_guided(db_path, loader)
            elif choice in (MODE_RECALL, MODE_DRILL, MODE_PRACTICE):
                cmd_run(db_path, loader, choice)
            elif choice == "stats":
                cmd_stats(db_path)
            elif choice == "documents":
                cmd_documents(db_path)
            elif choice == "import":
                cmd_import(db_path)
            elif choice == "settings":
                cmd_settings(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]May your memorisation be blessed.[/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Session ended.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except TutorError as e:
            console.print(f"[red]{e}[/red]")
    loader.close()


if __name__ == "__main__":
    main()
