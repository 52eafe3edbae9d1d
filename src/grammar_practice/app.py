"""Interactive CLI application."""
import argparse
import logging
import string

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from grammar_practice.db import DEFAULT_DB_PATH
from grammar_practice.history import (
    RETAKE, REVIEW, HistoryNotFoundError, ReplayStatus, append_record, clear_history,
    get_record, list_records, reconstruct,
)
from grammar_practice.selector import ALL, assemble, topic_questions
from grammar_practice.session import TestSession
from grammar_practice.settings import Settings, save_settings
from grammar_practice.state import AppState, create_app_state
from grammar_practice.stats import (
    accuracy_band, average_score, breakdown, paper_breakdown, record_accuracy, weak_topics,
)

console = Console()

BAND_COLORS = {"good": "green", "average": "yellow", "poor": "red"}
DIFFICULTIES = ["all", "easy", "medium", "hard"]


class SessionExitRequested(Exception):
    """Raised when the user types 'q' or 'menu' during a test."""


def session_prompt(prompt: str, default: str = "") -> str:
    value = Prompt.ask(prompt, default=default, show_default=False)
    if value.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return value


def show_welcome():
    console.print(Panel(
        "[bold]Grammar Practice[/bold]\n[dim]Topic tests, scoring and history[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("test", "Take a test (mixed or single topic)"),
        ("browse", "View all questions of a topic"),
        ("history", "Past tests and averages"),
        ("review", "Review a past test"),
        ("retake", "Retake a past test"),
        ("weak", "Topics to work on"),
        ("clear", "Clear test history"),
        ("settings", "Shuffling and display options"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_paper_breakdown(state: AppState, questions: list) -> None:
    counts = paper_breakdown(questions)
    badges = "  ".join(f"{state.catalog.topic_name(t)}: {n}" for t, n in counts.items())
    console.print(f"[dim]Question paper breakdown:[/dim] {badges}")


def ask_answer(question, number: int, total: int) -> str | None:
    letters = string.ascii_uppercase[:len(question.options)]
    meta = f"{question.marks} mark{'s' if question.marks > 1 else ''}"
    meta += f" | {question.difficulty.value if question.difficulty else 'medium'}"
    console.print(f"\n[bold]Q{number}/{total}.[/bold] {escape(question.prompt)} [dim]({meta})[/dim]")
    for letter, option in zip(letters, question.options):
        console.print(f"  [cyan]{letter}.[/cyan] {escape(option)}")
    while True:
        value = session_prompt("Your answer (Enter to skip)").strip().upper()
        if not value:
            return None
        if value in letters:
            return question.options[letters.index(value)]
        console.print(f"[red]Choose one of {', '.join(letters)}[/red]")


def run_test(state: AppState, session: TestSession) -> bool:
    """Ask every question; returns True when the test should be submitted."""
    if not session.questions:
        console.print("[yellow]No questions available![/yellow]")
        return False
    state.session = session
    show_paper_breakdown(state, session.questions)
    for i, question in enumerate(session.questions):
        answer = ask_answer(question, i + 1, len(session))
        if answer is not None:
            session.record_answer(i, answer)
        if state.settings.auto_submit and session.is_complete:
            return True
    unanswered = len(session) - session.answered_count
    if unanswered:
        return Confirm.ask(f"{unanswered} unanswered. Submit anyway?", default=True)
    return True


def show_breakdown_table(state: AppState, stats: dict) -> None:
    table = Table(title="Topic Performance")
    table.add_column("Topic", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Accuracy", justify="right")
    for topic_id, s in stats.items():
        color = BAND_COLORS[accuracy_band(s.accuracy)]
        table.add_row(
            state.catalog.topic_name(topic_id),
            f"{s.correct} / {s.total}",
            f"[{color}]{s.accuracy}%[/{color}]",
        )
    console.print(table)


def show_answers(state: AppState, questions, user_answers, correct_answers) -> None:
    for i, question in enumerate(questions):
        user = user_answers[i] if i < len(user_answers) else None
        correct = correct_answers[i] if i < len(correct_answers) else None
        is_correct = user is not None and user == correct
        color = "green" if is_correct else "red"
        console.print(f"\n[bold]Q{i + 1}:[/bold] {escape(question.prompt)}")
        console.print(f"  Your answer: [{color}]{escape(user or 'Not attempted')}[/{color}]")
        console.print(f"  Correct: [green]{escape(correct or '')}[/green]")
        if state.settings.show_explanations and question.explanation:
            console.print(f"  [dim]{escape(question.explanation)}[/dim]")


def submit_test(state: AppState, session: TestSession):
    score = session.score()
    record = session.to_record()
    append_record(state.db_path, record)
    state.session = None

    color = "green" if score.is_perfect else "magenta"
    message = f"You scored [bold {color}]{score.earned}/{score.total}[/bold {color}] ({score.percentage}%)"
    if score.is_perfect:
        message += "\n[green]Perfect Score![/green]"
    console.print(Panel(message, title="Test Results", border_style=color))
    show_breakdown_table(state, session.breakdown())
    show_answers(state, session.questions, session.answers, record.correct_answers)
    return score


def cmd_test(state: AppState):
    console.print("\n[bold]New Test[/bold]")
    for topic in state.catalog.topics:
        console.print(f"  [cyan]{topic.id}[/cyan]) {topic.name}")
    scope = Prompt.ask("Topic", choices=[ALL] + [t.id for t in state.catalog.topics], default=ALL)
    count = IntPrompt.ask("Number of questions", default=10)
    difficulty = Prompt.ask("Difficulty", choices=DIFFICULTIES, default="all")
    questions = assemble(
        state.catalog, state.store, scope, difficulty, count,
        shuffle_questions=state.settings.shuffle_questions,
        shuffle_option_order=state.settings.shuffle_options,
    )
    title = "Full Grammar Test" if scope == ALL else f"{state.catalog.topic_name(scope)} Test"
    console.print(Panel(f"{len(questions)} Questions | {difficulty.capitalize()}", title=title))
    _run_and_submit(state, TestSession.start(questions, scope=scope))


def _run_and_submit(state: AppState, session: TestSession) -> None:
    try:
        if run_test(state, session):
            submit_test(state, session)
    except SessionExitRequested:
        state.session = None
        console.print("[dim]Test abandoned.[/dim]")


def cmd_browse(state: AppState):
    topic_id = Prompt.ask("Topic", choices=[t.id for t in state.catalog.topics])
    questions = topic_questions(state.catalog, state.store, topic_id)
    if not questions:
        console.print("[yellow]No questions available for this topic.[/yellow]")
        return
    console.print(Panel("Questions with Answers & Explanations", title=f"All {state.catalog.topic_name(topic_id)} Questions"))
    for i, q in enumerate(questions, 1):
        difficulty = q.difficulty.value if q.difficulty else "-"
        console.print(
            f"\n[bold]Q{i}[/bold] [dim]Marks: {q.marks} | Type: {q.question_type or '-'} | "
            f"Difficulty: {difficulty} | Year: {q.year_asked or 'N/A'}[/dim]"
        )
        console.print(escape(q.prompt))
        for letter, option in zip(string.ascii_uppercase, q.options):
            style = "green" if option == q.correct_answer else "white"
            console.print(f"  [{style}]{letter}. {escape(option)}[/{style}]")
        if state.settings.show_explanations and q.explanation:
            console.print(f"  [dim]{escape(q.explanation)}[/dim]")


def cmd_history(state: AppState):
    records = list_records(state.db_path)
    if not records:
        console.print("[yellow]No test history available. Complete a test to see your history.[/yellow]")
        return
    console.print(f"\n  Total Tests: [bold]{len(records)}[/bold]  |  Avg Score: [bold]{average_score(records)}%[/bold]")
    table = Table(title="Test History")
    table.add_column("#", justify="right")
    table.add_column("Date / Type")
    table.add_column("Score / Breakdown")
    table.add_column("Acc.", justify="right")
    for i, record in enumerate(records):
        kind = "Mixed" if record.topic_scope == ALL else state.catalog.topic_name(record.topic_scope)
        detail = f"{record.score}/{record.total_marks}"
        if record.is_replayable:
            stats = breakdown(record.question_topics, record.user_answers, record.correct_answers)
            detail += "\n" + ", ".join(
                f"{state.catalog.topic_name(t).split(' ')[0]}: {s.correct}/{s.total}" for t, s in stats.items()
            )
        table.add_row(str(i + 1), f"{record.date}\n[dim]{kind}[/dim]", detail, f"{record_accuracy(record)}%")
    console.print(table)


def _pick_record(state: AppState):
    number = IntPrompt.ask("Test number")
    try:
        return get_record(state.db_path, number - 1)
    except HistoryNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        return None


def cmd_review(state: AppState):
    record = _pick_record(state)
    if record is None:
        return
    replay = reconstruct(record, state.store, mode=REVIEW)
    if replay.status == ReplayStatus.INCOMPATIBLE:
        console.print("[red]This test was taken with an older version and cannot be reviewed.[/red]")
        return
    console.print(Panel(f"Total Score: [bold]{record.score}/{record.total_marks}[/bold]", title=f"Test Review - {record.date}"))
    show_breakdown_table(state, breakdown(record.question_topics, record.user_answers, record.correct_answers))
    show_answers(state, replay.questions, record.user_answers, record.correct_answers)


def cmd_retake(state: AppState):
    record = _pick_record(state)
    if record is None:
        return
    replay = reconstruct(record, state.store, mode=RETAKE)
    if replay.status == ReplayStatus.INCOMPATIBLE:
        console.print("[red]This test was taken with an older version and cannot be retaken. Please take a new test.[/red]")
        return
    if not replay.is_complete:
        console.print(f"[yellow]Warning: Could only load {replay.resolved} out of {replay.expected} questions.[/yellow]")
    console.print(Panel(f"{len(replay.questions)} Questions | Based on previous test", title=f"Retake Test - {record.date}"))
    _run_and_submit(state, TestSession.start(replay.questions, scope=record.topic_scope))


def cmd_weak(state: AppState):
    weak = weak_topics(list_records(state.db_path))
    if not weak:
        console.print("[green]No weak topics detected! Keep up the good work.[/green]")
        return
    table = Table(title="Weak Topics")
    table.add_column("Topic")
    table.add_column("Accuracy", justify="right")
    table.add_column("Questions Attempted", justify="right")
    for w in weak:
        table.add_row(state.catalog.topic_name(w["topic_id"]), f"{w['accuracy']}%", str(w["total"]))
    console.print(table)


def cmd_clear(state: AppState):
    if Confirm.ask("Are you sure you want to clear all test history? This action cannot be undone.", default=False):
        clear_history(state.db_path)
        console.print("[green]Test history cleared.[/green]")


def cmd_settings(state: AppState):
    current = state.settings
    state.settings = Settings(
        shuffle_questions=Confirm.ask("Shuffle questions?", default=current.shuffle_questions),
        shuffle_options=Confirm.ask("Shuffle options?", default=current.shuffle_options),
        show_explanations=Confirm.ask("Show explanations?", default=current.show_explanations),
        auto_submit=Confirm.ask("Auto-submit when all questions are answered?", default=current.auto_submit),
    )
    save_settings(state.db_path, state.settings)
    console.print("[green]Settings saved.[/green]")


COMMANDS = {
    "test": cmd_test,
    "browse": cmd_browse,
    "history": cmd_history,
    "review": cmd_review,
    "retake": cmd_retake,
    "weak": cmd_weak,
    "clear": cmd_clear,
    "settings": cmd_settings,
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Grammar practice tests in the terminal.")
    parser.add_argument("--db", default=DEFAULT_DB_PATH, help="Path to the SQLite database")
    parser.add_argument("--content", default=None, help="Content directory or base URL (defaults to bundled content)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    state = create_app_state(args.db, args.content)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="test").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Happy practicing![/dim]")
                break
            command = COMMANDS.get(choice)
            if command is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            command(state)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
