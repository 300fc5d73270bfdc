"""CLI interface for Recallio.

Usage:
    python -m recallio learn                       Start a learning session
    python -m recallio learn --type review         Review words that are due
    python -m recallio stats                       Show your statistics
    python -m recallio due                         Show how many words are due
    python -m recallio add "Haus" "house" -s 1     Add a new word
    python -m recallio import words.csv            Import words from CSV
    python -m recallio export words.csv            Export words to CSV
    python -m recallio serve --port 8000           Run the HTTP API
"""

import argparse
import asyncio
import logging
from pathlib import Path

import uvicorn
from sqlalchemy import and_, func, select

from backend.auth import hash_password
from backend.config import settings, utcnow
from backend.database import async_session, create_tables
from backend.languages import (
    DEFAULT_DIRECTION,
    LEGACY_DIRECTIONS,
    Direction,
    parse_direction,
    prompt_and_answer,
)
from backend.models.learning_progress import LearningProgress
from backend.models.user import User
from backend.models.word import Word
from backend.srs.selector import SessionType
from backend.srs.session import NoWordsAvailableError, record_answer, start_session
from backend.words_csv import CsvImportError, export_words, parse_words_csv

LOCAL_USER_EMAIL = "local@recallio.invalid"


async def ensure_db() -> None:
    """Create tables if they don't exist."""
    await create_tables()


async def ensure_user() -> int:
    """Ensure there's a local user for the terminal and return the ID."""
    async with async_session() as db:
        stmt = select(User).where(User.email == LOCAL_USER_EMAIL)
        user = (await db.execute(stmt)).scalar_one_or_none()
        if user:
            return user.id

        # The local user never signs in over HTTP
        user = User(email=LOCAL_USER_EMAIL, name="Local", password_hash=hash_password(settings.secret_key))
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user.id


async def cmd_learn(args: argparse.Namespace) -> None:
    """Run an interactive learning session."""
    try:
        direction = parse_direction(args.direction).value
    except ValueError:
        print(f"  Unknown direction '{args.direction}'.")
        return
    if args.count < 0:
        print("  --count must be 0 (all words) or more.")
        return
    word_count = None if args.count == 0 else args.count

    await ensure_db()
    user_id = await ensure_user()

    async with async_session() as db:
        try:
            learning_session, words = await start_session(
                db,
                user_id,
                args.type,
                direction,
                sections=args.section,
                word_count=word_count,
            )
        except NoWordsAvailableError:
            print(f"\nNo words available for a {args.type} session.")
            return

        print(f"\n  {args.type.title()} Session: {len(words)} words")
        print("  Press enter to reveal, then answer y/n. Type 'q' to quit.\n")

        correct = 0
        answered = 0
        completed = False
        for i, word in enumerate(words, 1):
            shown, expected = prompt_and_answer(
                direction, word.main_word, word.translation1, word.translation2
            )
            print(f"  [{i}/{len(words)}] {shown}")
            if input("  ").strip().lower() == "q":
                print("\n  Session ended early.")
                break
            print(f"  -> {expected}")
            if word.example_sentence:
                print(f"     {word.example_sentence}")

            reply = input("  Did you know it? [y/n]: ").strip().lower()
            if reply == "q":
                print("\n  Session ended early.")
                break
            is_correct = reply.startswith("y")

            outcome = await record_answer(db, user_id, learning_session.id, word.id, is_correct)
            answered += 1
            correct += int(is_correct)
            completed = outcome.session_completed
            print(
                f"  Mastery {outcome.mastery_level}, next review in {outcome.interval_days} day(s)\n"
            )

    accuracy = correct / answered * 100 if answered else 0
    print("\n  Session Complete!" if completed else "\n  Session paused.")
    print(f"  Answered: {answered}  Correct: {correct}  Accuracy: {accuracy:.0f}%\n")


async def cmd_stats(args: argparse.Namespace) -> None:
    """Show learning statistics."""
    await ensure_db()
    user_id = await ensure_user()
    now = utcnow()

    async with async_session() as db:
        total = (
            await db.execute(select(func.count(Word.id)).where(Word.user_id == user_id))
        ).scalar() or 0

        learned = (
            await db.execute(
                select(func.count(LearningProgress.id)).where(LearningProgress.user_id == user_id)
            )
        ).scalar() or 0

        mastered = (
            await db.execute(
                select(func.count(LearningProgress.id)).where(
                    and_(
                        LearningProgress.user_id == user_id,
                        LearningProgress.mastery_level >= settings.mastered_level,
                    )
                )
            )
        ).scalar() or 0

        due = (
            await db.execute(
                select(func.count(LearningProgress.id)).where(
                    and_(LearningProgress.user_id == user_id, LearningProgress.next_review_date <= now)
                )
            )
        ).scalar() or 0

    print("\n  Recallio Statistics")
    print(f"  {'Total words:':<20} {total}")
    print(f"  {'Not yet learned:':<20} {total - learned}")
    print(f"  {'Mastered:':<20} {mastered}")
    print(f"  {'Due now:':<20} {due}")
    print()


async def cmd_add(args: argparse.Namespace) -> None:
    """Add a new word."""
    await ensure_db()
    user_id = await ensure_user()

    async with async_session() as db:
        existing = (
            await db.execute(
                select(Word).where(Word.user_id == user_id, Word.main_word == args.word)
            )
        ).scalar_one_or_none()
        if existing:
            print(f"  '{args.word}' already exists (id={existing.id}).")
            return

        word = Word(
            user_id=user_id,
            main_word=args.word,
            translation1=args.translation,
            translation2=args.translation2,
            example_sentence=args.sentence,
            section=args.section,
        )
        db.add(word)
        await db.commit()
        print(f"  Added '{args.word}' to section {args.section}.")


async def cmd_due(args: argparse.Namespace) -> None:
    """Show how many words are due."""
    await ensure_db()
    user_id = await ensure_user()

    async with async_session() as db:
        due = (
            await db.execute(
                select(func.count(LearningProgress.id)).where(
                    and_(
                        LearningProgress.user_id == user_id,
                        LearningProgress.next_review_date <= utcnow(),
                    )
                )
            )
        ).scalar() or 0

    print(f"  {due} words due for review")


async def cmd_import(args: argparse.Namespace) -> None:
    """Import words from a CSV file."""
    await ensure_db()
    user_id = await ensure_user()
    try:
        parsed = parse_words_csv(args.path.read_bytes())
    except CsvImportError as exc:
        print(f"  {exc}")
        for detail in exc.details:
            print(f"    {detail}")
        return

    async with async_session() as db:
        existing = set(
            (await db.execute(select(Word.main_word).where(Word.user_id == user_id))).scalars().all()
        )
        added = 0
        for row in parsed.rows:
            if row["main_word"] in existing:
                continue
            existing.add(row["main_word"])
            db.add(Word(user_id=user_id, **row))
            added += 1
        await db.commit()

    print(f"  Imported {added} words, skipped {len(parsed.rows) - added} duplicate(s).")


async def cmd_export(args: argparse.Namespace) -> None:
    """Export words to a CSV file."""
    await ensure_db()
    user_id = await ensure_user()

    async with async_session() as db:
        words = list(
            (
                await db.execute(
                    select(Word).where(Word.user_id == user_id).order_by(Word.created_at.asc())
                )
            ).scalars().all()
        )

    args.path.write_text(export_words(words), encoding="utf-8")
    print(f"  Exported {len(words)} words to {args.path}")


def serve(args: argparse.Namespace) -> None:
    """Run the FastAPI app under uvicorn."""
    uvicorn.run("backend.main:app", host=args.host, port=args.port, reload=args.reload)


def non_negative_int(value: str) -> int:
    count = int(value)
    if count < 0:
        raise argparse.ArgumentTypeError("must be 0 or more")
    return count


def main() -> None:
    """Entry point for the Recallio CLI application."""
    parser = argparse.ArgumentParser(
        prog="recallio",
        description="Recallio vocabulary trainer",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # learn
    learn_parser = subparsers.add_parser("learn", help="Start a learning session")
    learn_parser.add_argument(
        "--type",
        choices=[t.value for t in SessionType],
        default=SessionType.NEW.value,
        help="Which words to learn",
    )
    learn_parser.add_argument(
        "--direction",
        choices=[d.value for d in Direction] + list(LEGACY_DIRECTIONS),
        default=DEFAULT_DIRECTION.value,
        help="Which side of the word to show",
    )
    learn_parser.add_argument(
        "--section", action="append", default=[], help="Limit to a section (repeatable)"
    )
    learn_parser.add_argument(
        "--count",
        type=non_negative_int,
        default=settings.default_session_words,
        help="Max words per session (0 for all)",
    )

    # stats
    subparsers.add_parser("stats", help="Show your statistics")

    # add
    add_parser = subparsers.add_parser("add", help="Add a new word")
    add_parser.add_argument("word", help="Word in your main language")
    add_parser.add_argument("translation", help="First translation")
    add_parser.add_argument("-t2", "--translation2", default=None, help="Second translation")
    add_parser.add_argument("-e", "--sentence", default=None, help="Example sentence")
    add_parser.add_argument("-s", "--section", default="1", help="Section label")

    # due
    subparsers.add_parser("due", help="Show words due for review")

    # import / export
    import_parser = subparsers.add_parser("import", help="Import words from CSV")
    import_parser.add_argument("path", type=Path)
    export_parser = subparsers.add_parser("export", help="Export words to CSV")
    export_parser.add_argument("path", type=Path)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Restart on code changes")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return

    if args.command == "serve":
        serve(args)
        return

    cmd_map = {
        "learn": cmd_learn,
        "stats": cmd_stats,
        "add": cmd_add,
        "due": cmd_due,
        "import": cmd_import,
        "export": cmd_export,
    }

    asyncio.run(cmd_map[args.command](args))


if __name__ == "__main__":
    main()
