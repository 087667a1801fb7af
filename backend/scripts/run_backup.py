"""
scripts/run_backup.py

Database dump CLI.

Dumps the database to backups/backup-YYYY-MM-DD.sql with pg_dump, falling
back to the supabase CLI, then commits and pushes the file with git.

Prints a JSON result on stdout (exit 0) or a JSON error on stderr (exit 1).
"""
import argparse
import json
import logging
import os
import subprocess
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


class BackupCommandError(Exception):
    """Raised when no dump tool could produce the backup file."""


def setup_logging(level: str = "WARNING"):
    """Setup logging configuration"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def get_database_url() -> str:
    """Read the database URL from SUPABASE_DB_URL or DATABASE_URL."""
    db_url = os.environ.get("SUPABASE_DB_URL") or os.environ.get("DATABASE_URL")
    if not db_url:
        raise BackupCommandError("Missing SUPABASE_DB_URL or DATABASE_URL env var.")
    return db_url


def backup_filename(today: Optional[date] = None) -> str:
    return f"backup-{(today or date.today()).isoformat()}.sql"


def run_command(args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """Run a command, raising CalledProcessError on non-zero exit."""
    logger.debug(f"Running: {args[0]} {' '.join(args[1:3])}...")
    return subprocess.run(args, cwd=cwd, check=True, capture_output=True, text=True)


def dump_database(db_url: str, backup_dir: Path, today: Optional[date] = None) -> dict:
    """
    Dump the database into ``backup_dir``.

    Returns:
        dict with ``outputFile`` and ``method`` (pg_dump or supabase)

    Raises:
        BackupCommandError: if both pg_dump and the supabase CLI fail
    """
    backup_dir.mkdir(parents=True, exist_ok=True)
    output_file = backup_dir / backup_filename(today)

    try:
        run_command(["pg_dump", "--no-owner", "--no-privileges", db_url, "-f", str(output_file)])
        return {"outputFile": str(output_file), "method": "pg_dump"}
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning(f"pg_dump failed, trying supabase CLI: {e}")

    try:
        run_command(["supabase", "db", "dump", "--db-url", db_url, "--file", str(output_file)])
        return {"outputFile": str(output_file), "method": "supabase"}
    except (OSError, subprocess.CalledProcessError) as e:
        logger.error(f"supabase db dump failed: {e}")
        raise BackupCommandError("Backup failed. Ensure pg_dump or supabase CLI is installed.") from e


def git_commit_and_push(file_path: str, today: Optional[date] = None) -> dict:
    """
    Commit the backup file and push.

    Git failures are reported in the result instead of failing the backup.
    """
    try:
        run_command(["git", "add", file_path])
        status = run_command(["git", "status", "--porcelain"])
        if not status.stdout.strip():
            return {"committed": False, "pushed": False}
        message = f"backup: {(today or date.today()).isoformat()}"
        run_command(["git", "commit", "-m", message])
        run_command(["git", "push"])
        return {"committed": True, "pushed": True}
    except (OSError, subprocess.CalledProcessError) as e:
        error = getattr(e, "stderr", None) or str(e)
        logger.error(f"git commit/push failed: {error}")
        return {"committed": False, "pushed": False, "error": str(error).strip()}


def run_backup(backup_dir: Path, push: bool = True) -> dict:
    """Dump the database and optionally commit the file."""
    db_url = get_database_url()
    result = dump_database(db_url, backup_dir)
    git_result = git_commit_and_push(result["outputFile"]) if push else {
        "committed": False, "pushed": False, "skipped": True,
    }
    return {"ok": True, "outputFile": result["outputFile"], "method": result["method"], "git": git_result}


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Dump the hotel database and commit the backup file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  SUPABASE_DB_URL=postgres://... python -m scripts.run_backup
  DATABASE_URL=postgres://... python -m scripts.run_backup --no-git
        """
    )
    parser.add_argument(
        "--backup-dir",
        default="backups",
        help="Directory for dump files (default: ./backups)"
    )
    parser.add_argument(
        "--no-git",
        action="store_true",
        help="Skip git add/commit/push"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        result = run_backup(Path(args.backup_dir).resolve(), push=not args.no_git)
    except BackupCommandError as e:
        sys.stderr.write(json.dumps({"ok": False, "error": str(e)}))
        return 1

    sys.stdout.write(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
