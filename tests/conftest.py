import io
from contextlib import redirect_stderr, redirect_stdout
from dataclasses import dataclass
from datetime import date, datetime

import fncli
import pytest

import minder.dash  # noqa: F401  registers cli commands
import minder.routines  # noqa: F401
from minder import config, db
from minder.core.errors import MinderError
from minder.core.models import Completion, Routine
from minder.lib import ansi, clock
from minder.lib.dates import add_days

TODAY = "2025-06-15"


def days_back(n: int) -> str:
    return add_days(TODAY, -n)


def routine(name: str, categories=("ALL",), routine_id: str | None = None, **kw) -> Routine:
    return Routine(
        id=routine_id or name.lower().replace(" ", "-"),
        name=name,
        time_categories=tuple(categories),
        **kw,
    )


def done(r: Routine, day: str, *categories: str, completed: bool = True, at: datetime | None = None):
    cats = categories or tuple(str(c) for c in r.time_categories)
    return [
        Completion(
            id=f"{r.id}-{day}-{cat}",
            routine_id=r.id,
            date=day,
            time_category=cat,
            completed=completed,
            completed_at=at,
        )
        for cat in cats
    ]


@pytest.fixture
def frozen_today(monkeypatch):
    monkeypatch.setattr(clock, "today", lambda: date.fromisoformat(TODAY))
    monkeypatch.setattr(clock, "now", lambda: datetime.fromisoformat(f"{TODAY}T09:30:00"))
    return TODAY


@pytest.fixture
def tmp_minder_dir(tmp_path, monkeypatch, frozen_today):
    home = tmp_path / ".minder"
    monkeypatch.setattr(config, "MINDER_DIR", home)
    monkeypatch.setattr(config, "DB_PATH", home / "store.db")
    monkeypatch.setattr(config, "CONFIG_PATH", home / "config.yaml")
    monkeypatch.setattr(config, "BACKUP_DIR", home / "backups")
    monkeypatch.delenv("MINDER_LOG_LEVEL", raising=False)
    config.Config.reset()
    db.init()
    yield home
    config.Config.reset()


@dataclass
class CLIResult:
    exit_code: int
    stdout: str
    stderr: str


class FnCLIRunner:
    def invoke(self, args: list[str]) -> CLIResult:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            try:
                if args:
                    code = fncli.dispatch(["minder", *args])
                else:
                    minder.dash.dashboard()
                    code = 0
            except MinderError as e:
                err.write(f"{e}\n")
                code = 1
            except fncli.UsageError as e:
                err.write(f"{e}\n")
                code = 2
            except SystemExit as e:
                code = e.code if isinstance(e.code, int) else 1
        return CLIResult(code or 0, ansi.strip(out.getvalue()), ansi.strip(err.getvalue()))
