#!/usr/bin/env python3
# zenith_tui: Terminal task tracker with XP levels, a kanban board and a focus timer
#
# Hotkeys (normal mode)
#   Tab      cycle view: Dashboard -> Kanban -> Focus -> Analytics
#   j/k      move selection (arrows work too)
#   h/l      move kanban column focus (Kanban view)
#   n        new task
#   e        edit selected task (Dashboard)
#   Space    toggle status Todo -> Doing -> Done -> Todo (XP on Done)
#   d / Del  delete selected task (Dashboard)
#   /        live search; Enter/Esc leave search and keep the filter
#   Enter    toggle inspector (Dashboard)
#   t / r    start-pause / reset the focus timer
#   T        cycle theme preset (remembered in the DB)
#   ?        toggle help
#   q        quit (Ctrl-C / Ctrl-Q always quit)
#
# Task form (n / e)
#   Tab / Shift-Tab   next / previous field
#   Left / Right      change priority while the Priority field is active
#   Enter             save (inserts a newline in Description)
#   Esc               cancel
#
# Config (~/.zenith.yml, every key optional)
#   db_path: ~/.zenith.db
#   theme: Nord Pro
#   theme_dir: ~/.config/zenith/themes   # *.yml presets: {name, description, style}
#   focus_minutes: 25
#   confirm_quit: false
#   show_splash: true
#   log_level: ERROR

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import enum
import logging
import os
import sqlite3
import sys
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import yaml
from prompt_toolkit import Application
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.containers import ConditionalContainer, Float, FloatContainer
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.styles import DynamicStyle, Style
from prompt_toolkit.utils import get_cwidth
from prompt_toolkit.widgets import Frame


logger = logging.getLogger('zenith')

DEFAULT_DB_PATH = os.path.expanduser("~/.zenith.db")
DEFAULT_CONFIG_PATH = os.path.expanduser("~/.zenith.yml")
DEFAULT_LOG_PATH = os.path.expanduser("~/.zenith.log")
DEFAULT_FOCUS_MINUTES = 25
DEFAULT_XP_REWARD = 10
XP_REWARD_MAX = 2**31 - 1
PROFILE_ID = 1
POLL_INTERVAL = 0.25  # seconds between timer ticks
WEEKLY_STATS_DAYS = 7

Fragments = List[Tuple[str, str]]


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# -----------------------------
# Config
# -----------------------------
@dataclass
class Config:
    db_path: str = DEFAULT_DB_PATH
    theme: Optional[str] = None
    theme_dir: Optional[str] = None
    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    confirm_quit: bool = False
    show_splash: bool = True
    log_level: str = "ERROR"


def _config_bool(raw: dict, key: str, default: bool) -> bool:
    value = raw.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"Config: '{key}' must be true or false, got {value!r}.")
    return value


def load_config(path: Optional[str]) -> Config:
    """Read the optional YAML config; ``None`` yields the defaults."""
    if path is None:
        return Config()
    if not os.path.isfile(path):
        raise ValueError(f"Config: file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError("Config: top level must be a mapping.")
    cfg = Config()
    if raw.get("db_path"):
        cfg.db_path = os.path.expanduser(str(raw["db_path"]))
    if raw.get("theme"):
        cfg.theme = str(raw["theme"]).strip()
    if raw.get("theme_dir"):
        cfg.theme_dir = os.path.expanduser(str(raw["theme_dir"]))
    minutes = raw.get("focus_minutes", DEFAULT_FOCUS_MINUTES)
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise ValueError(f"Config: 'focus_minutes' must be a positive integer, got {minutes!r}.")
    cfg.focus_minutes = minutes
    cfg.confirm_quit = _config_bool(raw, "confirm_quit", cfg.confirm_quit)
    cfg.show_splash = _config_bool(raw, "show_splash", cfg.show_splash)
    if raw.get("log_level"):
        cfg.log_level = str(raw["log_level"]).upper()
    return cfg


def setup_logging(log_path: str, log_level: str = 'ERROR') -> logging.Logger:
    """Attach a rotating file handler to the ``zenith`` logger."""
    # Reset handlers so repeated calls (tests, --log-level) do not stack files.
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    # logger stays at DEBUG; the handler filters by the requested level
    logger.setLevel(logging.DEBUG)
    directory = os.path.dirname(os.path.abspath(log_path))
    if directory and not os.path.isdir(directory):
        os.makedirs(directory, exist_ok=True)
    fh = RotatingFileHandler(log_path, maxBytes=2000000, backupCount=2, encoding='utf-8')
    fh.setLevel(getattr(logging, str(log_level).upper(), logging.ERROR))
    fh.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(message)s'))
    logger.addHandler(fh)
    return logger


# -----------------------------
# Themes
# -----------------------------
@dataclass
class ThemePreset:
    name: str
    style: Dict[str, str]
    description: Optional[str] = None


BASE_THEME_STYLE: Dict[str, str] = {
    'app': 'bg:#1c1e26 #e0e0e0',
    'header.logo': 'bold bg:#e95678 #1c1e26',
    'header.tab': '#6c6f93',
    'header.tab.active': 'bold underline #fab795',
    'header.profile': 'bold #25b0bc',
    'xp.bar': '#09f7a0',
    'xp.bar.empty': '#2e303e',
    'table.header': 'bold #6c6f93',
    'row.selected': 'bold bg:#2e303e #ffffff',
    'status.todo': '#e0e0e0',
    'status.doing': '#fab795',
    'status.done': '#09f7a0',
    'title': 'bold #e0e0e0',
    'title.done': '#6c6f93 strike',
    'priority.high': 'bold #e95678',
    'priority.medium': '#fab795',
    'priority.low': '#25b0bc',
    'xp': '#b877db',
    'date.overdue': 'bold #e95678',
    'date.today': 'bold #fab795',
    'date.future': '#09f7a0',
    'dimmed': '#6c6f93',
    'accent': 'bold #25b0bc',
    'column': '#6c6f93',
    'column.focused': 'bold #fab795',
    'timer.running': 'bold #09f7a0',
    'timer.paused': '#fab795',
    'timer.finished': 'bold #e95678',
    'progress': '#25b0bc',
    'progress.empty': '#2e303e',
    'chart.bar': '#e95678',
    'chart.label': '#6c6f93',
    'statusbar': 'bg:#2e303e #e0e0e0',
    'statusbar.mode': 'bold bg:#25b0bc #1c1e26',
    'statusbar.search': 'bold #fab795',
    'statusbar.message': '#09f7a0',
    'statusbar.error': 'bold #e95678',
    'overlay': 'bg:#232530 #e0e0e0',
    'overlay.title': 'bold #fab795',
    'overlay.warning': 'bold #e95678',
    'form.label': '#6c6f93',
    'form.label.active': 'bold #fab795',
    'form.field': '#e0e0e0',
    'form.placeholder': 'italic #6c6f93',
    'form.cursor': 'reverse',
    'splash': 'bold #e95678',
}

NORD_PRO_STYLE: Dict[str, str] = dict(BASE_THEME_STYLE, **{
    'app': 'bg:#2e3440 #d8dee9',
    'header.logo': 'bold bg:#88c0d0 #2e3440',
    'header.tab': '#646e82',
    'header.tab.active': 'bold underline #88c0d0',
    'header.profile': 'bold #88c0d0',
    'xp.bar': '#a3be8c',
    'xp.bar.empty': '#3b4252',
    'table.header': 'bold #646e82',
    'row.selected': 'bold bg:#4c566a #ffffff',
    'status.todo': '#d8dee9',
    'status.doing': '#ebcb8b',
    'status.done': '#a3be8c',
    'title': 'bold #d8dee9',
    'title.done': '#646e82 strike',
    'priority.high': 'bold #bf616a',
    'priority.medium': '#ebcb8b',
    'priority.low': '#88c0d0',
    'xp': '#b48ead',
    'date.overdue': 'bold #bf616a',
    'date.today': 'bold #ebcb8b',
    'date.future': '#a3be8c',
    'dimmed': '#646e82',
    'accent': 'bold #88c0d0',
    'column': '#646e82',
    'column.focused': 'bold #88c0d0',
    'timer.running': 'bold #a3be8c',
    'timer.paused': '#ebcb8b',
    'timer.finished': 'bold #bf616a',
    'progress': '#88c0d0',
    'progress.empty': '#3b4252',
    'chart.bar': '#88c0d0',
    'chart.label': '#646e82',
    'statusbar': 'bg:#3b4252 #d8dee9',
    'statusbar.mode': 'bold bg:#88c0d0 #2e3440',
    'statusbar.search': 'bold #ebcb8b',
    'statusbar.message': '#a3be8c',
    'statusbar.error': 'bold #bf616a',
    'overlay': 'bg:#3b4252 #d8dee9',
    'overlay.title': 'bold #88c0d0',
    'overlay.warning': 'bold #bf616a',
    'form.label': '#646e82',
    'form.label.active': 'bold #88c0d0',
    'form.placeholder': 'italic #646e82',
    'splash': 'bold #88c0d0',
})

BUILTIN_THEMES: List[ThemePreset] = [
    ThemePreset(name="Horizon", style=dict(BASE_THEME_STYLE), description="Warm dark palette"),
    ThemePreset(name="Nord Pro", style=dict(NORD_PRO_STYLE), description="Arctic, north-bluish palette"),
]


def _load_theme_presets(theme_dir: Optional[Path]) -> List[ThemePreset]:
    presets: List[ThemePreset] = [replace(p, style=dict(p.style)) for p in BUILTIN_THEMES]
    seen = {p.name.lower() for p in presets}
    if theme_dir is None or not theme_dir.is_dir():
        return presets
    candidates = sorted(theme_dir.glob("*.yml")) + sorted(theme_dir.glob("*.yaml"))
    for path in candidates:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError):
            logger.warning("Failed to load theme file %s", path, exc_info=True)
            continue
        if not isinstance(data, dict):
            continue
        name = str(data.get("name") or path.stem).strip() or path.stem
        overrides = data.get("style") if isinstance(data.get("style"), dict) else {}
        style_dict = dict(BASE_THEME_STYLE)
        for key, value in overrides.items():
            if isinstance(key, str) and isinstance(value, str):
                style_dict[key] = value
        preset = ThemePreset(name=name, style=style_dict, description=data.get("description"))
        lowered = name.lower()
        if lowered in seen:
            # user files may redefine a built-in preset by name
            presets = [preset if p.name.lower() == lowered else p for p in presets]
            continue
        presets.append(preset)
        seen.add(lowered)
    return presets


# -----------------------------
# Models
# -----------------------------
class TaskStatus(enum.Enum):
    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"

    def next(self) -> TaskStatus:
        return _STATUS_CYCLE[self]


class TaskPriority(enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    def increment(self) -> TaskPriority:
        return _PRIORITY_UP[self]

    def decrement(self) -> TaskPriority:
        return _PRIORITY_DOWN[self]


_STATUS_CYCLE = {
    TaskStatus.TODO: TaskStatus.DOING,
    TaskStatus.DOING: TaskStatus.DONE,
    TaskStatus.DONE: TaskStatus.TODO,
}
# Right/increment and left/decrement walk the ring in opposite directions.
_PRIORITY_UP = {
    TaskPriority.HIGH: TaskPriority.LOW,
    TaskPriority.LOW: TaskPriority.MEDIUM,
    TaskPriority.MEDIUM: TaskPriority.HIGH,
}
_PRIORITY_DOWN = {
    TaskPriority.HIGH: TaskPriority.MEDIUM,
    TaskPriority.MEDIUM: TaskPriority.LOW,
    TaskPriority.LOW: TaskPriority.HIGH,
}

KANBAN_COLUMNS: Tuple[TaskStatus, ...] = (TaskStatus.TODO, TaskStatus.DOING, TaskStatus.DONE)


@dataclass
class Task:
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    xp_reward: int = DEFAULT_XP_REWARD
    due_date: Optional[dt.datetime] = None
    status: TaskStatus = TaskStatus.TODO
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: dt.datetime = field(default_factory=_utcnow)
    completed_at: Optional[dt.datetime] = None  # set iff status is DONE


@dataclass
class UserProfile:
    level: int = 1
    current_xp: int = 0
    next_level_xp: int = 100
    id: int = PROFILE_ID

    def with_xp(self, amount: int) -> UserProfile:
        """Return the profile after ``amount`` XP, applying every level-up it crosses."""
        if amount < 0:
            raise ValueError(f"XP award must be non-negative, got {amount}")
        level, xp, threshold = self.level, self.current_xp + amount, self.next_level_xp
        while threshold > 0 and xp >= threshold:
            xp -= threshold
            level += 1
            threshold = int(threshold * 1.5)
        return replace(self, level=level, current_xp=xp, next_level_xp=threshold)

    @property
    def progress(self) -> float:
        if self.next_level_xp <= 0:
            return 0.0
        return max(0.0, min(1.0, self.current_xp / self.next_level_xp))


WeeklyStat = Tuple[str, int]


# -----------------------------
# DB
# -----------------------------
class StoreError(RuntimeError):
    """A TaskDB operation failed; ``operation`` names the call."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


def _iso(value: Optional[dt.datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc).isoformat(timespec="microseconds")


def _parse_iso(raw: Optional[str]) -> Optional[dt.datetime]:
    if not raw:
        return None
    try:
        value = dt.datetime.fromisoformat(raw)
    except ValueError:
        logger.warning("Unparseable timestamp in DB: %r", raw)
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value


def _enum_value(enum_cls, raw: Optional[str], default):
    try:
        return enum_cls(str(raw or "").strip().upper())
    except ValueError:
        logger.warning("Unknown %s value in DB: %r", enum_cls.__name__, raw)
        return default


def _xp_value(raw) -> int:
    """Stored reward -> positive int; anything else becomes the default reward."""
    if raw is None:
        return DEFAULT_XP_REWARD
    try:
        value = int(raw)
    except (TypeError, ValueError):
        value = 0
    if value <= 0 or value > XP_REWARD_MAX:
        logger.warning("Invalid xp_reward in DB: %r; using %d", raw, DEFAULT_XP_REWARD)
        return DEFAULT_XP_REWARD
    return value


class TaskDB:
    TASK_COLUMNS = [
        "id", "title", "description", "status", "priority",
        "xp_reward", "due_date", "created_at", "completed_at",
    ]
    CREATE_TASKS_SQL = """
      CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT,
        status TEXT DEFAULT 'TODO',
        priority TEXT DEFAULT 'MEDIUM',
        xp_reward INTEGER DEFAULT 10,
        due_date TEXT,
        created_at TEXT NOT NULL,
        completed_at TEXT
      )
    """
    # columns added after the first schema; ALTERed in on open
    MIGRATED_COLUMNS = {
        "priority": "TEXT DEFAULT 'MEDIUM'",
        "due_date": "TEXT",
    }

    def __init__(self, path: str):
        try:
            if path != ':memory:':
                directory = os.path.dirname(os.path.abspath(path))
                if directory and not os.path.isdir(directory):
                    os.makedirs(directory, exist_ok=True)
            self.conn = sqlite3.connect(path)
            self.conn.execute("PRAGMA journal_mode=WAL")
            self._tx_depth = 0
            self._migrate_if_needed()
        except (OSError, sqlite3.Error) as exc:
            raise StoreError("open", exc) from exc
        self.path = path

    def close(self) -> None:
        self.conn.close()

    def _cols(self) -> List[str]:
        cur = self.conn.cursor()
        try:
            cur.execute("PRAGMA table_info(tasks)")
            return [r[1] for r in cur.fetchall()]
        except sqlite3.OperationalError:
            return []

    def _migrate_if_needed(self) -> None:
        cur = self.conn.cursor()
        cur.execute(self.CREATE_TASKS_SQL)
        cols = self._cols()
        for name, decl in self.MIGRATED_COLUMNS.items():
            if name not in cols:
                logger.info("Migrating tasks table: adding column %s", name)
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS user_profile (
                id INTEGER PRIMARY KEY DEFAULT 1,
                level INTEGER DEFAULT 1,
                current_xp INTEGER DEFAULT 0,
                next_level_xp INTEGER DEFAULT 100
            )
            """
        )
        cur.execute(
            "INSERT OR IGNORE INTO user_profile (id, level, current_xp, next_level_xp) VALUES (?, 1, 0, 100)",
            (PROFILE_ID,),
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed_at)")
        self.conn.commit()

    # --- transactions ---
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group several writes so they commit or roll back together."""
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield
            finally:
                self._tx_depth -= 1
            return
        self._tx_depth = 1
        try:
            yield
        except BaseException:
            with self._guard("rollback"):
                self.conn.rollback()
            raise
        else:
            with self._guard("commit"):
                self.conn.commit()
        finally:
            self._tx_depth = 0

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except (sqlite3.Error, ValueError, TypeError) as exc:
            # ValueError/TypeError: a row or argument that cannot be decoded
            raise StoreError(operation, exc) from exc

    # --- tasks ---
    def _row_to_task(self, row: Tuple) -> Task:
        (task_id, title, description, status, priority,
         xp_reward, due_date, created_at, completed_at) = row
        return Task(
            id=task_id,
            title=title or "",
            description=description or "",
            status=_enum_value(TaskStatus, status, TaskStatus.TODO),
            priority=_enum_value(TaskPriority, priority, TaskPriority.MEDIUM),
            xp_reward=_xp_value(xp_reward),
            due_date=_parse_iso(due_date),
            created_at=_parse_iso(created_at) or _utcnow(),
            completed_at=_parse_iso(completed_at),
        )

    def create_task(self, task: Task) -> None:
        with self._guard("create_task"), self.transaction():
            self.conn.execute(
                f"INSERT INTO tasks ({', '.join(self.TASK_COLUMNS)}) VALUES (?,?,?,?,?,?,?,?,?)",
                (
                    task.id,
                    task.title,
                    task.description,
                    task.status.value,
                    task.priority.value,
                    int(task.xp_reward),
                    _iso(task.due_date),
                    _iso(task.created_at),
                    _iso(task.completed_at),
                ),
            )
        logger.debug("Created task %s (%r)", task.id, task.title)

    def list_tasks(self) -> List[Task]:
        with self._guard("list_tasks"):
            cur = self.conn.execute(
                f"SELECT {', '.join(self.TASK_COLUMNS)} FROM tasks ORDER BY created_at DESC, rowid DESC"
            )
            return [self._row_to_task(row) for row in cur.fetchall()]

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._guard("get_task"):
            row = self.conn.execute(
                f"SELECT {', '.join(self.TASK_COLUMNS)} FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
        return self._row_to_task(row) if row else None

    def update_task_status(self, task_id: str, status: TaskStatus, now: Optional[dt.datetime] = None) -> None:
        completed_at = _iso(now or _utcnow()) if status is TaskStatus.DONE else None
        with self._guard("update_task_status"), self.transaction():
            self.conn.execute(
                "UPDATE tasks SET status = ?, completed_at = ? WHERE id = ?",
                (status.value, completed_at, task_id),
            )
        logger.debug("Task %s -> %s", task_id, status.value)

    def update_task_content(self, task_id: str, title: str, description: str,
                            priority: TaskPriority, due_date: Optional[dt.datetime]) -> None:
        with self._guard("update_task_content"), self.transaction():
            self.conn.execute(
                "UPDATE tasks SET title = ?, description = ?, priority = ?, due_date = ? WHERE id = ?",
                (title, description, priority.value, _iso(due_date), task_id),
            )

    def delete_task(self, task_id: str) -> None:
        with self._guard("delete_task"), self.transaction():
            self.conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        logger.debug("Deleted task %s", task_id)

    # --- profile ---
    def get_profile(self) -> UserProfile:
        with self._guard("get_profile"):
            row = self.conn.execute(
                "SELECT id, level, current_xp, next_level_xp FROM user_profile WHERE id = ?",
                (PROFILE_ID,),
            ).fetchone()
        if row is None:
            logger.warning("user_profile row missing; using defaults")
            return UserProfile()
        return UserProfile(id=row[0], level=row[1], current_xp=row[2], next_level_xp=row[3])

    def award_xp(self, amount: int) -> UserProfile:
        with self._guard("award_xp"), self.transaction():
            before = self.get_profile()
            after = before.with_xp(int(amount))
            self.conn.execute(
                "INSERT OR REPLACE INTO user_profile (id, level, current_xp, next_level_xp) VALUES (?,?,?,?)",
                (PROFILE_ID, after.level, after.current_xp, after.next_level_xp),
            )
        if after.level > before.level:
            logger.info("Level up: %d -> %d", before.level, after.level)
        return after

    # --- analytics ---
    def weekly_completion_stats(self, limit: int = WEEKLY_STATS_DAYS) -> List[WeeklyStat]:
        with self._guard("weekly_completion_stats"):
            cur = self.conn.execute(
                """
                SELECT substr(completed_at, 1, 10) AS day, COUNT(*)
                FROM tasks
                WHERE status = ? AND completed_at IS NOT NULL
                GROUP BY day
                ORDER BY day DESC
                LIMIT ?
                """,
                (TaskStatus.DONE.value, int(limit)),
            )
            return [(str(day), int(count)) for day, count in cur.fetchall()]

    def _completion_days(self) -> List[str]:
        with self._guard("completion_days"):
            cur = self.conn.execute(
                """
                SELECT DISTINCT substr(completed_at, 1, 10) AS day
                FROM tasks
                WHERE status = ? AND completed_at IS NOT NULL
                ORDER BY day DESC
                """,
                (TaskStatus.DONE.value,),
            )
            return [r[0] for r in cur.fetchall()]

    def current_streak(self, today: Optional[dt.date] = None) -> int:
        """Consecutive completion days ending today, or yesterday if today has none yet."""
        today = today or _utcnow().date()
        days = self._completion_days()
        if not days:
            return 0
        yesterday = today - dt.timedelta(days=1)
        if days[0] not in (today.isoformat(), yesterday.isoformat()):
            return 0
        expected = today if days[0] == today.isoformat() else yesterday
        streak = 0
        for day in days:
            if day != expected.isoformat():
                break
            streak += 1
            expected -= dt.timedelta(days=1)
        return streak

    def completed_today(self, today: Optional[dt.date] = None) -> int:
        today = today or _utcnow().date()
        with self._guard("completed_today"):
            row = self.conn.execute(
                "SELECT COUNT(*) FROM tasks WHERE status = ? AND substr(completed_at, 1, 10) = ?",
                (TaskStatus.DONE.value, today.isoformat()),
            ).fetchone()
        return int(row[0] if row else 0)

    # --- settings ---
    def get_setting(self, key: str) -> Optional[str]:
        with self._guard("get_setting"):
            row = self.conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_setting(self, key: str, value: str) -> None:
        with self._guard("set_setting"), self.transaction():
            self.conn.execute(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (key, value)
            )


# -----------------------------
# Task cache
# -----------------------------
class TaskCache:
    """In-memory mirror of the store plus the live search filter."""

    def __init__(self, store: TaskDB):
        self.store = store
        self.all_tasks: List[Task] = []
        self.tasks: List[Task] = []
        self.profile = UserProfile()
        self.stats: List[WeeklyStat] = []
        self.streak = 0
        self.completed_today = 0
        self.query = ""

    def matches(self, task: Task) -> bool:
        if not self.query:
            return True
        q = self.query.lower()
        return q in task.title.lower() or q in task.description.lower()

    def refresh(self) -> None:
        # Read everything first so a failed call leaves the previous snapshot intact.
        all_tasks = self.store.list_tasks()
        profile = self.store.get_profile()
        stats = self.store.weekly_completion_stats()
        streak = self.store.current_streak()
        today = self.store.completed_today()
        self.all_tasks = all_tasks
        self.profile = profile
        self.stats = stats
        self.streak = streak
        self.completed_today = today
        self.tasks = [t for t in all_tasks if self.matches(t)]

    def column(self, status: TaskStatus) -> List[Task]:
        return [t for t in self.tasks if t.status is status]


# -----------------------------
# Navigation
# -----------------------------
class Cursor:
    """Optional highlighted index into a list-shaped view."""

    def __init__(self, selected: Optional[int] = None):
        self._selected = selected

    def __repr__(self) -> str:
        return f"Cursor({self._selected!r})"

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    def select(self, index: Optional[int]) -> None:
        self._selected = index

    def advance(self, length: int) -> None:
        if length <= 0:
            return
        i = self._selected
        if i is None or i >= length - 1:
            self._selected = 0
        else:
            self._selected = i + 1

    def retreat(self, length: int) -> None:
        if length <= 0:
            return
        i = self._selected
        if i is None:
            self._selected = 0
        elif i == 0:
            self._selected = length - 1
        else:
            self._selected = min(i, length) - 1

    def clamp(self, length: int) -> None:
        if length <= 0:
            self._selected = None
        elif self._selected is None:
            self._selected = 0
        elif self._selected >= length:
            self._selected = length - 1


class Navigation:
    """Dashboard cursor, one cursor per kanban column and the focused column."""

    def __init__(self):
        self.dashboard = Cursor()
        self.columns: Dict[TaskStatus, Cursor] = {status: Cursor() for status in KANBAN_COLUMNS}
        self._focused_column = 0

    @property
    def focused_column(self) -> int:
        return self._focused_column

    @property
    def focused_status(self) -> TaskStatus:
        return KANBAN_COLUMNS[self._focused_column]

    def focus_next_column(self) -> None:
        self._focused_column = (self._focused_column + 1) % len(KANBAN_COLUMNS)

    def focus_previous_column(self) -> None:
        self._focused_column = (self._focused_column - 1) % len(KANBAN_COLUMNS)

    def clamp(self, cache: TaskCache) -> None:
        self.dashboard.clamp(len(cache.tasks))
        for status, cursor in self.columns.items():
            cursor.clamp(len(cache.column(status)))


# -----------------------------
# Task form
# -----------------------------
def _is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class TextField:
    """Editable text buffer with a cursor."""

    def __init__(self, text: str = "", multiline: bool = False):
        self.multiline = multiline
        self._text = ""
        self._cursor = 0
        self.set(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    def set(self, text: str) -> None:
        self._text = text
        self._cursor = len(text)

    def insert(self, chars: str) -> None:
        self._text = self._text[:self._cursor] + chars + self._text[self._cursor:]
        self._cursor += len(chars)

    def backspace(self) -> None:
        if self._cursor > 0:
            self._text = self._text[:self._cursor - 1] + self._text[self._cursor:]
            self._cursor -= 1

    def delete(self) -> None:
        self._text = self._text[:self._cursor] + self._text[self._cursor + 1:]

    def handle_key(self, key: str) -> bool:
        if key == 'left':
            self._cursor = max(0, self._cursor - 1)
        elif key == 'right':
            self._cursor = min(len(self._text), self._cursor + 1)
        elif key == 'home':
            self._cursor = 0
        elif key == 'end':
            self._cursor = len(self._text)
        elif key == 'backspace':
            self.backspace()
        elif key == 'delete':
            self.delete()
        elif key == 'enter' and self.multiline:
            self.insert("\n")
        elif _is_printable(key):
            self.insert(key)
        else:
            return False
        return True


class FormField(enum.Enum):
    TITLE = "Title"
    PRIORITY = "Priority"
    XP = "XP Reward"
    DUE_DATE = "Due Date"
    DESCRIPTION = "Description"

    def next(self) -> FormField:
        order = list(FormField)
        return order[(order.index(self) + 1) % len(order)]

    def previous(self) -> FormField:
        order = list(FormField)
        return order[(order.index(self) - 1) % len(order)]


def parse_xp_reward(text: str) -> int:
    """XP text -> reward; empty, unparsable or non-positive input means the default."""
    try:
        value = int((text or "").strip())
    except ValueError:
        return DEFAULT_XP_REWARD
    if value <= 0 or value > XP_REWARD_MAX:
        return DEFAULT_XP_REWARD
    return value


def parse_due_date(text: str) -> Optional[dt.datetime]:
    """``YYYY-MM-DD`` -> 23:59:59 UTC of that day; anything else is no due date."""
    raw = (text or "").strip()
    if not raw:
        return None
    try:
        day = dt.datetime.strptime(raw, "%Y-%m-%d")
    except ValueError:
        return None
    return day.replace(hour=23, minute=59, second=59, tzinfo=dt.timezone.utc)


@dataclass(frozen=True)
class FormPayload:
    title: str
    description: str
    priority: TaskPriority
    xp_reward: int
    due_date: Optional[dt.datetime]


class TaskForm:
    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.title = TextField()
        self.description = TextField(multiline=True)
        self.priority = TaskPriority.MEDIUM
        self.xp = TextField(str(DEFAULT_XP_REWARD))
        self.due_date = TextField()
        self.active_field = FormField.TITLE

    def load(self, task: Task) -> None:
        self.reset()
        self.title.set(task.title)
        self.description.set(task.description)
        self.priority = task.priority
        self.xp.set(str(task.xp_reward))
        self.due_date.set(task.due_date.strftime("%Y-%m-%d") if task.due_date else "")

    def next_field(self) -> None:
        self.active_field = self.active_field.next()

    def previous_field(self) -> None:
        self.active_field = self.active_field.previous()

    def buffer_for(self, form_field: FormField) -> Optional[TextField]:
        return {
            FormField.TITLE: self.title,
            FormField.XP: self.xp,
            FormField.DUE_DATE: self.due_date,
            FormField.DESCRIPTION: self.description,
        }.get(form_field)

    def handle_key(self, key: str) -> bool:
        active = self.active_field
        if active is FormField.PRIORITY:
            if key in ('left', 'h'):
                self.priority = self.priority.decrement()
            elif key in ('right', 'l'):
                self.priority = self.priority.increment()
            else:
                return False
            return True
        if active is FormField.XP:
            # digits only; other input is dropped without feedback
            if key in ('backspace', 'delete') or (len(key) == 1 and key.isdigit()):
                return self.xp.handle_key(key)
            return False
        buf = self.buffer_for(active)
        return buf.handle_key(key) if buf is not None else False

    def payload(self) -> Optional[FormPayload]:
        """Values ready to persist, or ``None`` when the title is blank."""
        raw_title = self.title.text
        if not raw_title.strip():
            return None
        return FormPayload(
            title=" ".join(raw_title.splitlines()).strip(),
            description=self.description.text.strip(),
            priority=self.priority,
            xp_reward=parse_xp_reward(self.xp.text),
            due_date=parse_due_date(self.due_date.text),
        )


# -----------------------------
# Focus timer
# -----------------------------
class FocusTimer:
    """Pomodoro countdown advanced in whole wall-clock seconds."""

    def __init__(self, duration_sec: int = DEFAULT_FOCUS_MINUTES * 60,
                 clock: Optional[Callable[[], dt.datetime]] = None):
        if duration_sec <= 0:
            raise ValueError(f"Focus duration must be positive, got {duration_sec}")
        self.duration_sec = int(duration_sec)
        self._remaining = self.duration_sec
        self._running = False
        self._last_tick: Optional[dt.datetime] = None
        self._clock = clock or _utcnow

    @property
    def remaining_sec(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_tick(self) -> Optional[dt.datetime]:
        return self._last_tick

    @property
    def progress(self) -> float:
        return 1.0 - (self._remaining / self.duration_sec)

    def toggle(self) -> bool:
        self._running = not self._running
        self._last_tick = self._clock() if self._running else None
        return self._running

    def reset(self) -> None:
        self._running = False
        self._remaining = self.duration_sec
        self._last_tick = None

    def tick(self) -> bool:
        """Advance the countdown; returns True when remaining time changed."""
        if not self._running:
            return False
        now = self._clock()
        if self._last_tick is None:
            self._last_tick = now
            return False
        elapsed = int((now - self._last_tick).total_seconds())
        if elapsed < 1:
            return False
        if elapsed >= self._remaining:
            # session over: stop at zero, no restart
            self._remaining = 0
            self._running = False
            self._last_tick = None
            logger.info("Focus session finished")
        else:
            self._remaining -= elapsed
            self._last_tick = now
        return True


# -----------------------------
# Application state machine
# -----------------------------
class InputMode(enum.Enum):
    NORMAL = "NORMAL"
    EDITING = "EDITING"
    SEARCH = "SEARCH"


class View(enum.Enum):
    SPLASH = "Splash"
    DASHBOARD = "Dashboard"
    KANBAN = "Kanban"
    FOCUS = "Focus"
    ANALYTICS = "Analytics"

    def next(self) -> View:
        return _VIEW_CYCLE[self]


_VIEW_CYCLE = {
    View.SPLASH: View.DASHBOARD,
    View.DASHBOARD: View.KANBAN,
    View.KANBAN: View.FOCUS,
    View.FOCUS: View.ANALYTICS,
    View.ANALYTICS: View.DASHBOARD,
}
TAB_VIEWS: Tuple[View, ...] = (View.DASHBOARD, View.KANBAN, View.FOCUS, View.ANALYTICS)
QUIT_KEYS = ('c-c', 'c-q')


@dataclass
class Overlays:
    show_help: bool = False
    inspecting: bool = False
    confirm_quit: bool = False


@dataclass(frozen=True)
class FormSnapshot:
    title: str
    title_cursor: int
    description: str
    description_cursor: int
    priority: TaskPriority
    xp: str
    xp_cursor: int
    due_date: str
    due_date_cursor: int
    active_field: FormField
    is_edit: bool


@dataclass(frozen=True)
class TimerSnapshot:
    remaining_sec: int
    duration_sec: int
    running: bool

    @property
    def progress(self) -> float:
        return 1.0 - (self.remaining_sec / self.duration_sec) if self.duration_sec else 0.0


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of everything the renderer draws."""
    view: View
    mode: InputMode
    tasks: Tuple[Task, ...]
    selected: Optional[int]
    kanban_selected: Tuple[Optional[int], ...]
    focused_column: int
    form: FormSnapshot
    timer: TimerSnapshot
    profile: UserProfile
    stats: Tuple[WeeklyStat, ...]
    streak: int
    completed_today: int
    search_query: str
    show_help: bool
    inspecting: bool
    confirm_quit: bool
    status_line: str
    theme_name: str
    today: dt.date

    @property
    def selected_task(self) -> Optional[Task]:
        if self.selected is None or not (0 <= self.selected < len(self.tasks)):
            return None
        return self.tasks[self.selected]

    def column(self, status: TaskStatus) -> List[Task]:
        return [t for t in self.tasks if t.status is status]


class ZenithApp:
    """Owns the session state and routes one key at a time into a transition.

    Keys are prompt_toolkit key names ('tab', 's-tab', 'enter', 'escape',
    'backspace', 'delete', 'left', 'c-c', ...) or a single printable character.
    Store failures during an action are logged, shown on the status line and
    leave mode and view untouched.
    """

    def __init__(self, store: TaskDB, *, focus_minutes: int = DEFAULT_FOCUS_MINUTES,
                 confirm_quit: bool = False, show_splash: bool = True,
                 themes: Optional[List[ThemePreset]] = None, theme_name: Optional[str] = None,
                 clock: Optional[Callable[[], dt.datetime]] = None):
        self.store = store
        self.cache = TaskCache(store)
        self.nav = Navigation()
        self.form = TaskForm()
        self.timer = FocusTimer(focus_minutes * 60, clock=clock)
        self._clock = clock or _utcnow
        self._mode = InputMode.NORMAL
        self._view = View.SPLASH if show_splash else View.DASHBOARD
        self._overlays = Overlays()
        self._confirm_quit = confirm_quit
        self._editing_task_id: Optional[str] = None
        self._status_line = ""
        self._should_exit = False
        self.themes: List[ThemePreset] = themes or [replace(p) for p in BUILTIN_THEMES]
        # Startup reads are not guarded: a broken store is fatal here.
        self._theme_index = self._theme_index_for(theme_name or store.get_setting("theme"))
        self.cache.refresh()
        self.nav.clamp(self.cache)
        self._normal_keys: Dict[str, Callable[[], None]] = {
            'q': self.request_quit,
            '?': self.toggle_help,
            'tab': self.cycle_view,
            'n': self.start_create,
            'e': self.start_edit,
            'j': self.next_item,
            'down': self.next_item,
            'k': self.previous_item,
            'up': self.previous_item,
            'l': self.next_column,
            'right': self.next_column,
            'h': self.previous_column,
            'left': self.previous_column,
            't': self.toggle_timer,
            'r': self.reset_timer,
            ' ': self.toggle_status,
            'd': self.delete_current_task,
            'delete': self.delete_current_task,
            '/': self.start_search,
            'enter': self.toggle_inspector,
            'escape': self.dismiss_overlays,
            'T': self.cycle_theme,
        }

    # --- read-only state ---
    @property
    def mode(self) -> InputMode:
        return self._mode

    @property
    def view(self) -> View:
        return self._view

    @property
    def should_exit(self) -> bool:
        return self._should_exit

    @property
    def status_line(self) -> str:
        return self._status_line

    @property
    def editing_task_id(self) -> Optional[str]:
        return self._editing_task_id

    @property
    def theme(self) -> ThemePreset:
        return self.themes[self._theme_index]

    def _theme_index_for(self, name: Optional[str]) -> int:
        if name:
            for idx, preset in enumerate(self.themes):
                if preset.name.lower() == name.strip().lower():
                    return idx
            logger.warning("Unknown theme %r; using %s", name, self.themes[0].name)
        return 0

    def selected_task(self) -> Optional[Task]:
        i = self.nav.dashboard.selected
        if i is None or not (0 <= i < len(self.cache.tasks)):
            return None
        return self.cache.tasks[i]

    def _list_for_view(self) -> Optional[List[Task]]:
        if self._view is View.DASHBOARD:
            return self.cache.tasks
        if self._view is View.KANBAN:
            return self.cache.column(self.nav.focused_status)
        return None

    def _cursor_for_view(self) -> Optional[Cursor]:
        if self._view is View.DASHBOARD:
            return self.nav.dashboard
        if self._view is View.KANBAN:
            return self.nav.columns[self.nav.focused_status]
        return None

    # --- store plumbing ---
    def _store_action(self, description: str, action: Callable[[], None]) -> bool:
        try:
            action()
        except StoreError as exc:
            logger.exception("%s failed", description)
            self._status_line = f"Error: {exc}"
            return False
        return True

    def refresh(self) -> bool:
        if not self._store_action("refresh", self.cache.refresh):
            return False
        self.nav.clamp(self.cache)
        if not self.cache.tasks:
            self._overlays.inspecting = False
        return True

    # --- dispatch ---
    def handle_key(self, key: str) -> None:
        if key in QUIT_KEYS:
            self._should_exit = True
            return
        if self._overlays.confirm_quit:
            self._handle_quit_confirm(key)
            return
        if self._view is View.SPLASH:
            if key == 'q':
                self.request_quit()
            else:
                self._view = View.DASHBOARD
            return
        if self._mode is InputMode.EDITING:
            self._handle_editing(key)
        elif self._mode is InputMode.SEARCH:
            self._handle_search(key)
        else:
            self._handle_normal(key)

    def on_tick(self) -> bool:
        return self.timer.tick()

    def _handle_normal(self, key: str) -> None:
        action = self._normal_keys.get(key)
        if action is None:
            return
        self._status_line = ""
        action()

    def _handle_editing(self, key: str) -> None:
        if key == 'escape':
            self.cancel_edit()
        elif key == 'tab':
            self.form.next_field()
        elif key == 's-tab':
            self.form.previous_field()
        elif key == 'enter' and self.form.active_field is not FormField.DESCRIPTION:
            self.save_form()
        else:
            self.form.handle_key(key)

    def _handle_search(self, key: str) -> None:
        if key in ('enter', 'escape'):
            self._mode = InputMode.NORMAL
            logger.debug("Search closed with filter %r", self.cache.query)
        elif key == 'backspace':
            if self.cache.query:
                self._set_query(self.cache.query[:-1])
        elif _is_printable(key):
            self._set_query(self.cache.query + key)

    def _handle_quit_confirm(self, key: str) -> None:
        if key in ('y', 'Y'):
            self._should_exit = True
        elif key in ('n', 'N', 'escape'):
            self._overlays.confirm_quit = False

    def _set_query(self, query: str) -> None:
        previous = self.cache.query
        self.cache.query = query
        if not self.refresh():
            self.cache.query = previous

    # --- actions ---
    def request_quit(self) -> None:
        if self._confirm_quit:
            self._overlays.confirm_quit = True
        else:
            self._should_exit = True

    def toggle_help(self) -> None:
        self._overlays.show_help = not self._overlays.show_help

    def dismiss_overlays(self) -> None:
        self._overlays.inspecting = False
        self._overlays.show_help = False

    def cycle_view(self) -> None:
        self._view = self._view.next()
        self._overlays.inspecting = False
        logger.debug("View -> %s", self._view.value)

    def next_item(self) -> None:
        cursor, items = self._cursor_for_view(), self._list_for_view()
        if cursor is not None and items is not None:
            cursor.advance(len(items))

    def previous_item(self) -> None:
        cursor, items = self._cursor_for_view(), self._list_for_view()
        if cursor is not None and items is not None:
            cursor.retreat(len(items))

    def next_column(self) -> None:
        if self._view is View.KANBAN:
            self.nav.focus_next_column()

    def previous_column(self) -> None:
        if self._view is View.KANBAN:
            self.nav.focus_previous_column()

    def toggle_timer(self) -> None:
        self.timer.toggle()

    def reset_timer(self) -> None:
        self.timer.reset()

    def start_search(self) -> None:
        self._mode = InputMode.SEARCH

    def toggle_inspector(self) -> None:
        if self._view is View.DASHBOARD and self.cache.tasks:
            self._overlays.inspecting = not self._overlays.inspecting

    def start_create(self) -> None:
        self._editing_task_id = None
        self.form.reset()
        self._overlays.inspecting = False
        self._mode = InputMode.EDITING

    def start_edit(self) -> None:
        if self._view is not View.DASHBOARD:
            return
        task = self.selected_task()
        if task is None:
            return
        self.form.load(task)
        self._editing_task_id = task.id
        self._overlays.inspecting = False
        self._mode = InputMode.EDITING

    def cancel_edit(self) -> None:
        self._editing_task_id = None
        self._mode = InputMode.NORMAL

    def save_form(self) -> bool:
        """Persist the form; a blank title keeps the form open and saves nothing."""
        payload = self.form.payload()
        if payload is None:
            return False
        target = self._editing_task_id

        def _save() -> None:
            if target is not None:
                self.store.update_task_content(
                    target, payload.title, payload.description, payload.priority, payload.due_date
                )
            else:
                self.store.create_task(Task(
                    title=payload.title,
                    description=payload.description,
                    priority=payload.priority,
                    xp_reward=payload.xp_reward,
                    due_date=payload.due_date,
                ))

        if not self._store_action("save task", _save):
            return False
        self._editing_task_id = None
        self.form.reset()
        self._mode = InputMode.NORMAL
        self.refresh()
        return True

    def toggle_status(self) -> None:
        if self._view is not View.DASHBOARD:
            return
        index = self.nav.dashboard.selected
        task = self.selected_task()
        if task is None or index is None:
            return
        new_status = task.status.next()
        awarding = new_status is TaskStatus.DONE and task.status is not TaskStatus.DONE
        level_before = self.cache.profile.level

        def _toggle() -> None:
            # status change and its XP award land together or not at all
            with self.store.transaction():
                self.store.update_task_status(task.id, new_status, now=self._clock())
                if awarding:
                    self.store.award_xp(task.xp_reward)

        if not self._store_action("toggle status", _toggle):
            return
        if self.refresh() and index < len(self.cache.tasks):
            self.nav.dashboard.select(index)
        if awarding:
            msg = f"+{task.xp_reward} XP"
            if self.cache.profile.level > level_before:
                msg += f" • Level up! Now level {self.cache.profile.level}"
            self._status_line = msg

    def delete_current_task(self) -> None:
        if self._view is not View.DASHBOARD:
            return
        task = self.selected_task()
        if task is None:
            return
        if self._store_action("delete task", lambda: self.store.delete_task(task.id)):
            self.refresh()

    def cycle_theme(self) -> None:
        index = (self._theme_index + 1) % len(self.themes)
        name = self.themes[index].name
        if self._store_action("save theme", lambda: self.store.set_setting("theme", name)):
            self._theme_index = index
            self._status_line = f"Theme: {name}"

    # --- rendering ---
    def snapshot(self) -> Snapshot:
        form = self.form
        return Snapshot(
            view=self._view,
            mode=self._mode,
            tasks=tuple(self.cache.tasks),
            selected=self.nav.dashboard.selected,
            kanban_selected=tuple(self.nav.columns[s].selected for s in KANBAN_COLUMNS),
            focused_column=self.nav.focused_column,
            form=FormSnapshot(
                title=form.title.text,
                title_cursor=form.title.cursor,
                description=form.description.text,
                description_cursor=form.description.cursor,
                priority=form.priority,
                xp=form.xp.text,
                xp_cursor=form.xp.cursor,
                due_date=form.due_date.text,
                due_date_cursor=form.due_date.cursor,
                active_field=form.active_field,
                is_edit=self._editing_task_id is not None,
            ),
            timer=TimerSnapshot(
                remaining_sec=self.timer.remaining_sec,
                duration_sec=self.timer.duration_sec,
                running=self.timer.is_running,
            ),
            profile=self.cache.profile,
            stats=tuple(self.cache.stats),
            streak=self.cache.streak,
            completed_today=self.cache.completed_today,
            search_query=self.cache.query,
            show_help=self._overlays.show_help,
            inspecting=self._overlays.inspecting,
            confirm_quit=self._overlays.confirm_quit,
            status_line=self._status_line,
            theme_name=self.theme.name,
            today=self._clock().date(),
        )


# -----------------------------
# Rendering
# -----------------------------
STATUS_ICONS = {TaskStatus.TODO: "○", TaskStatus.DOING: "◉", TaskStatus.DONE: "●"}

BIG_DIGITS: Dict[str, List[str]] = {
    "0": ["█████", "█   █", "█   █", "█   █", "█████"],
    "1": ["  █  ", " ██  ", "  █  ", "  █  ", "█████"],
    "2": ["█████", "    █", "█████", "█    ", "█████"],
    "3": ["█████", "    █", "█████", "    █", "█████"],
    "4": ["█   █", "█   █", "█████", "    █", "    █"],
    "5": ["█████", "█    ", "█████", "    █", "█████"],
    "6": ["█████", "█    ", "█████", "█   █", "█████"],
    "7": ["█████", "    █", "   █ ", "  █  ", "  █  "],
    "8": ["█████", "█   █", "█████", "█   █", "█████"],
    "9": ["█████", "█   █", "█████", "    █", "█████"],
    ":": ["     ", "  █  ", "     ", "  █  ", "     "],
}

SPLASH_ART = [
    "███████ ███████ ███    ██ ██ ████████ ██   ██",
    "   ███  ██      ████   ██ ██    ██    ██   ██",
    "  ███   █████   ██ ██  ██ ██    ██    ███████",
    " ███    ██      ██  ██ ██ ██    ██    ██   ██",
    "███████ ███████ ██   ████ ██    ██    ██   ██",
]


def _truncate(s: str, maxlen: int) -> str:
    """Truncate string to a maximum display width, preserving whole glyphs."""
    s = (s or "").replace("\n", " ").replace("\r", " ")
    if maxlen <= 0:
        return ""
    if get_cwidth(s) <= maxlen:
        return s
    out: List[str] = []
    width = 0
    for ch in s:
        ch_w = get_cwidth(ch)
        if width + ch_w + 1 > maxlen:
            break
        out.append(ch)
        width += ch_w
    return "".join(out) + "…"


def _pad_display(text: Optional[str], width: int, align: str = "left") -> str:
    """Pad/truncate text to an exact display width using spaces."""
    raw = _truncate(text or "", width)
    pad = max(0, width - get_cwidth(raw))
    if align == "right":
        return " " * pad + raw
    if align == "center":
        left = pad // 2
        return (" " * left) + raw + (" " * (pad - left))
    return raw + (" " * pad)


def fmt_mmss(seconds: int) -> str:
    s = int(max(0, seconds))
    m, s = divmod(s, 60)
    return f"{m:02d}:{s:02d}"


def _bar(fraction: float, width: int, full: str = "█", empty: str = "░") -> Tuple[str, str]:
    fraction = max(0.0, min(1.0, fraction))
    filled = int(round(fraction * width))
    return full * filled, empty * (width - filled)


def due_style(due: Optional[dt.datetime], today: dt.date, done: bool = False) -> str:
    if due is None or done:
        return "class:dimmed"
    day = due.date()
    if day < today:
        return "class:date.overdue"
    if day == today:
        return "class:date.today"
    return "class:date.future"


def _priority_style(priority: TaskPriority) -> str:
    return f"class:priority.{priority.value.lower()}"


def _status_style(status: TaskStatus) -> str:
    return f"class:status.{status.value.lower()}"


def build_header_fragments(snap: Snapshot) -> Fragments:
    frags: Fragments = [("class:header.logo", " ZENITH "), ("", "  ")]
    for view in TAB_VIEWS:
        style = "class:header.tab.active" if view is snap.view else "class:header.tab"
        frags.append((style, f" {view.value} "))
        frags.append(("class:dimmed", "│"))
    if frags[-1] == ("class:dimmed", "│"):
        frags.pop()
    p = snap.profile
    full, empty = _bar(p.progress, 12)
    frags.append(("", "   "))
    frags.append(("class:header.profile", f"LVL {p.level} "))
    frags.append(("class:xp.bar", full))
    frags.append(("class:xp.bar.empty", empty))
    frags.append(("class:dimmed", f" {p.current_xp}/{p.next_level_xp} XP"))
    return frags


def scroll_offset(selected: Optional[int], count: int, visible: int, offset: int = 0) -> int:
    """First row to draw so ``selected`` stays inside a ``visible``-row window.

    The window only moves as far as needed, starting from the previous ``offset``.
    """
    if visible <= 0 or count <= visible:
        return 0
    offset = max(0, min(offset, count - visible))
    if selected is None:
        return offset
    if selected < offset:
        return selected
    if selected >= offset + visible:
        return selected - visible + 1
    return offset


def _window_rows(key: str, selected: Optional[int], count: int, visible: Optional[int],
                 scroll: Optional[Dict[str, int]]) -> Tuple[int, int]:
    if visible is None:
        return 0, count
    previous = scroll.get(key, 0) if scroll is not None else 0
    start = scroll_offset(selected, count, visible, previous)
    if scroll is not None:
        scroll[key] = start
    return start, min(count, start + visible)


def build_dashboard_fragments(snap: Snapshot, width: int = 100, height: Optional[int] = None,
                              scroll: Optional[Dict[str, int]] = None) -> Fragments:
    if not snap.tasks:
        if snap.search_query:
            return [("class:dimmed", f"No tasks match '{snap.search_query}'.")]
        return [("class:dimmed", "No tasks found.\nPress 'n' to create one.")]
    title_w = max(10, width - 4 - 8 - 12 - 8 - 4)

    detail: Fragments = []
    task = snap.selected_task
    if task is not None:
        description = task.description
        if height is not None:
            # keep the detail block short so the list keeps most of the rows
            lines = description.splitlines()
            description = "\n".join(lines[:3]) + (" …" if len(lines) > 3 else "")
        detail.append(("class:dimmed", "─" * max(10, width - 2)))
        detail.append(("", "\n"))
        detail.append((_status_style(task.status), f" {task.status.value} "))
        detail.append(("", " "))
        detail.append(("class:title", task.title))
        detail.append(("", "\n"))
        due_text = task.due_date.date().isoformat() if task.due_date else "none"
        detail.append(("class:dimmed", f" Priority: {task.priority.value} • Reward: {task.xp_reward} XP • Due: {due_text}"))
        detail.append(("", "\n\n"))
        if description:
            detail.append(("", description))
        else:
            detail.append(("class:dimmed", " No description."))

    visible = None
    if height is not None:
        detail_lines = sum(text.count("\n") for _, text in detail) + 1 if detail else 0
        visible = max(1, height - 1 - detail_lines)
    start, stop = _window_rows("dashboard", snap.selected, len(snap.tasks), visible, scroll)

    frags: Fragments = [(
        "class:table.header",
        "    " + _pad_display("TASK", title_w) + " " + _pad_display("PRIORITY", 8)
        + " " + _pad_display("DUE", 12) + " " + _pad_display("REWARD", 8, "right"),
    ), ("", "\n")]
    for idx in range(start, stop):
        row = snap.tasks[idx]
        done = row.status is TaskStatus.DONE
        sel = " class:row.selected" if idx == snap.selected else ""
        due_text = row.due_date.date().isoformat() if row.due_date else "-"
        frags.append((_status_style(row.status) + sel, f"  {STATUS_ICONS[row.status]} "))
        frags.append(("class:title.done" + sel if done else "class:title" + sel, _pad_display(row.title, title_w)))
        frags.append((sel, " "))
        frags.append((_priority_style(row.priority) + sel, _pad_display(row.priority.value, 8)))
        frags.append((sel, " "))
        frags.append((due_style(row.due_date, snap.today, done) + sel, _pad_display(due_text, 12)))
        frags.append((sel, " "))
        frags.append(("class:xp" + sel, _pad_display(f"{row.xp_reward} XP", 8, "right")))
        frags.append(("", "\n"))
    frags.extend(detail)
    if frags and frags[-1] == ("", "\n"):
        frags.pop()
    return frags


def build_kanban_fragments(snap: Snapshot, width: int = 100, height: Optional[int] = None,
                           scroll: Optional[Dict[str, int]] = None) -> Fragments:
    col_w = max(18, (width - 6) // len(KANBAN_COLUMNS))
    visible = max(1, height - 2) if height is not None else None
    columns: List[List[Tuple[str, str]]] = []
    for idx, status in enumerate(KANBAN_COLUMNS):
        focused = idx == snap.focused_column
        tasks = snap.column(status)
        head_style = "class:column.focused" if focused else "class:column"
        cells = [(head_style, _pad_display(f"{status.value} ({len(tasks)})", col_w, "center")),
                 ("class:dimmed", "─" * col_w)]
        selected = snap.kanban_selected[idx] if idx < len(snap.kanban_selected) else None
        start, stop = _window_rows(f"kanban.{status.value}", selected, len(tasks), visible, scroll)
        for t_idx in range(start, stop):
            task = tasks[t_idx]
            marker = "▸ " if (focused and t_idx == selected) else "  "
            style = _priority_style(task.priority)
            if t_idx == selected:
                style += " class:row.selected" if focused else ""
            cells.append((style, _pad_display(marker + task.title, col_w)))
        if not tasks:
            cells.append(("class:dimmed", _pad_display("  (empty)", col_w)))
        columns.append(cells)
    rows = max(len(c) for c in columns)
    frags: Fragments = []
    for row in range(rows):
        for c_idx, cells in enumerate(columns):
            if c_idx:
                frags.append(("class:dimmed", " │ "))
            frags.append(cells[row] if row < len(cells) else ("", " " * col_w))
        frags.append(("", "\n"))
    if frags:
        frags.pop()
    return frags


def build_focus_fragments(snap: Snapshot, width: int = 100) -> Fragments:
    timer = snap.timer
    text = fmt_mmss(timer.remaining_sec)
    if timer.remaining_sec == 0:
        style, label = "class:timer.finished", "SESSION COMPLETE"
    elif timer.running:
        style, label = "class:timer.running", "FOCUSING"
    else:
        style, label = "class:timer.paused", "PAUSED"
    frags: Fragments = [("", "\n")]
    for line in range(5):
        row = "  ".join(BIG_DIGITS[ch][line] for ch in text)
        frags.append((style, _pad_display(row, width, "center")))
        frags.append(("", "\n"))
    frags.append(("", "\n"))
    frags.append((style, _pad_display(label, width, "center")))
    frags.append(("", "\n"))
    bar_w = max(10, min(60, width - 20))
    full, empty = _bar(timer.progress, bar_w)
    pad = " " * max(0, (width - bar_w - 8) // 2)
    frags.append(("", pad))
    frags.append(("class:progress", full))
    frags.append(("class:progress.empty", empty))
    frags.append(("class:dimmed", f" {int(timer.progress * 100):3d}%"))
    frags.append(("", "\n\n"))
    doing = snap.column(TaskStatus.DOING)
    if doing:
        frags.append(("class:dimmed", _pad_display("Working on", width, "center")))
        frags.append(("", "\n"))
        frags.append(("class:title", _pad_display(doing[0].title, width, "center")))
    else:
        frags.append(("class:dimmed", _pad_display("No task in progress. Move one to DOING from the dashboard.", width, "center")))
    frags.append(("", "\n\n"))
    frags.append(("class:dimmed", _pad_display(f"t start/pause • r reset • session {fmt_mmss(timer.duration_sec)}", width, "center")))
    return frags


def build_analytics_fragments(snap: Snapshot, width: int = 100) -> Fragments:
    total = sum(count for _, count in snap.stats)
    frags: Fragments = [
        ("class:accent", f" Tasks Completed (Last 7 Days): {total}"),
        ("", "\n"),
        ("class:dimmed", f" Today: {snap.completed_today} • Streak: {snap.streak} day{'s' if snap.streak != 1 else ''}"),
        ("", "\n\n"),
        ("class:overlay.title", " Velocity"),
        ("", "\n"),
    ]
    if not snap.stats:
        frags.append(("class:dimmed", " Complete a task to start the chart."))
        return frags
    peak = max(count for _, count in snap.stats) or 1
    bar_w = max(10, width - 20)
    # oldest day first reads left-to-right like a timeline
    for day, count in reversed(snap.stats):
        label = day[5:10] if len(day) >= 10 else day
        full, _ = _bar(count / peak, bar_w)
        frags.append(("class:chart.label", f" {label} "))
        frags.append(("class:chart.bar", full or "▏"))
        frags.append(("", f" {count}"))
        frags.append(("", "\n"))
    frags.pop()
    return frags


def build_splash_fragments(snap: Snapshot, width: int = 100) -> Fragments:
    frags: Fragments = [("", "\n\n")]
    for line in SPLASH_ART:
        frags.append(("class:splash", _pad_display(line, width, "center")))
        frags.append(("", "\n"))
    frags.append(("", "\n"))
    frags.append(("class:dimmed", _pad_display("level up your day, one task at a time", width, "center")))
    frags.append(("", "\n\n"))
    frags.append(("class:accent", _pad_display("press any key to start", width, "center")))
    return frags


def build_view_fragments(snap: Snapshot, width: int = 100, height: Optional[int] = None,
                         scroll: Optional[Dict[str, int]] = None) -> Fragments:
    if snap.view is View.DASHBOARD:
        return build_dashboard_fragments(snap, width, height, scroll)
    if snap.view is View.KANBAN:
        return build_kanban_fragments(snap, width, height, scroll)
    builders = {
        View.SPLASH: build_splash_fragments,
        View.FOCUS: build_focus_fragments,
        View.ANALYTICS: build_analytics_fragments,
    }
    return builders[snap.view](snap, width)


VIEW_HINTS = {
    View.DASHBOARD: "n new • e edit • space status • d delete • / search • ? help",
    View.KANBAN: "h/l column • j/k move • tab view • ? help",
    View.FOCUS: "t start/pause • r reset • tab view • ? help",
    View.ANALYTICS: "tab view • ? help",
    View.SPLASH: "any key to start",
}


def build_status_bar_fragments(snap: Snapshot) -> Fragments:
    mode_label = {InputMode.NORMAL: "NORMAL", InputMode.EDITING: "EDIT", InputMode.SEARCH: "SEARCH"}[snap.mode]
    frags: Fragments = [("class:statusbar.mode", f" {mode_label} "), ("", " ")]
    if snap.mode is InputMode.SEARCH:
        frags.append(("class:statusbar.search", f"/{snap.search_query}▏"))
        frags.append(("", "  "))
    elif snap.search_query:
        frags.append(("class:statusbar.search", f"filter: {snap.search_query}"))
        frags.append(("", "  "))
    if snap.status_line:
        style = "class:statusbar.error" if snap.status_line.startswith("Error") else "class:statusbar.message"
        frags.append((style, snap.status_line))
        frags.append(("", "  "))
    frags.append(("class:dimmed", VIEW_HINTS.get(snap.view, "")))
    return frags


def _field_fragments(text: str, cursor: int, active: bool, placeholder: str = "") -> Fragments:
    if not text and not active:
        return [("class:form.placeholder", placeholder)]
    if not active:
        return [("class:form.field", text)]
    cursor = max(0, min(cursor, len(text)))
    under = text[cursor] if cursor < len(text) else " "
    if under == "\n":
        return [("class:form.field", text[:cursor]), ("class:form.cursor", " "), ("class:form.field", text[cursor:])]
    return [
        ("class:form.field", text[:cursor]),
        ("class:form.cursor", under),
        ("class:form.field", text[cursor + 1:]),
    ]


def build_form_fragments(snap: Snapshot) -> Fragments:
    form = snap.form
    frags: Fragments = [("class:overlay.title", " EDIT TASK" if form.is_edit else " NEW TASK"), ("", "\n\n")]

    def label(f: FormField) -> None:
        style = "class:form.label.active" if form.active_field is f else "class:form.label"
        marker = "▸" if form.active_field is f else " "
        frags.append((style, f" {marker} {_pad_display(f.value, 12)} "))

    label(FormField.TITLE)
    frags.extend(_field_fragments(form.title, form.title_cursor, form.active_field is FormField.TITLE, "Task title..."))
    frags.append(("", "\n"))
    label(FormField.PRIORITY)
    frags.append(("class:dimmed", "◀ "))
    frags.append((_priority_style(form.priority), form.priority.value))
    frags.append(("class:dimmed", " ▶"))
    frags.append(("", "\n"))
    label(FormField.XP)
    frags.extend(_field_fragments(form.xp, form.xp_cursor, form.active_field is FormField.XP, str(DEFAULT_XP_REWARD)))
    frags.append(("", "\n"))
    label(FormField.DUE_DATE)
    frags.extend(_field_fragments(form.due_date, form.due_date_cursor, form.active_field is FormField.DUE_DATE, "YYYY-MM-DD"))
    frags.append(("", "\n"))
    label(FormField.DESCRIPTION)
    frags.append(("", "\n     "))
    desc = _field_fragments(form.description, form.description_cursor,
                            form.active_field is FormField.DESCRIPTION, "Detailed description...")
    for style, text in desc:
        frags.append((style, text.replace("\n", "\n     ")))
    frags.append(("", "\n\n"))
    frags.append(("class:dimmed", " Tab/Shift-Tab field • ←/→ priority • Enter save • Esc cancel"))
    return frags


HELP_ROWS: Dict[Optional[View], List[Tuple[str, str]]] = {
    None: [("Tab", "Switch view"), ("?", "Toggle help"), ("q", "Quit"), ("n", "New task"),
           ("t / r", "Start-pause / reset timer"), ("T", "Cycle theme")],
    View.DASHBOARD: [("e", "Edit selected task"), ("d", "Delete selected task"), ("Space", "Toggle status"),
                     ("/", "Search"), ("j / k", "Navigate list"), ("Enter", "Inspect task")],
    View.KANBAN: [("h / l", "Switch column"), ("j / k", "Navigate tasks")],
    View.FOCUS: [("t", "Start/Pause timer"), ("r", "Reset timer")],
    View.ANALYTICS: [],
}


def build_help_fragments(snap: Snapshot) -> Fragments:
    frags: Fragments = [("class:overlay.title", " COMMAND PALETTE"), ("", "\n\n")]
    sections = [("Global", HELP_ROWS[None])]
    if snap.view in HELP_ROWS and HELP_ROWS[snap.view]:
        sections.append((snap.view.value, HELP_ROWS[snap.view]))
    for scope, rows in sections:
        for key, desc in rows:
            frags.append(("class:dimmed", f" {_pad_display(scope, 10)}"))
            frags.append(("class:accent", _pad_display(key, 8)))
            frags.append(("", desc))
            frags.append(("", "\n"))
    frags.append(("", "\n"))
    frags.append(("class:dimmed", f" Theme: {snap.theme_name} • Esc or ? to close"))
    return frags


def build_inspector_fragments(snap: Snapshot) -> Fragments:
    task = snap.selected_task
    if task is None:
        return []
    created = task.created_at.strftime("%Y-%m-%d %H:%M")
    frags: Fragments = [
        ("class:overlay.title", f" {task.title}"),
        ("", "\n"),
        ("class:dimmed", " " + "─" * 40),
        ("", "\n"),
        ("class:dimmed", f" Status: {task.status.value} | XP Reward: {task.xp_reward} | Created: {created}"),
        ("", "\n"),
    ]
    if task.completed_at:
        frags.append(("class:dimmed", f" Completed: {task.completed_at.strftime('%Y-%m-%d %H:%M')}"))
        frags.append(("", "\n"))
    frags.append(("class:dimmed", " " + "─" * 40))
    frags.append(("", "\n"))
    frags.append(("", " " + (task.description or "No description provided.").replace("\n", "\n ")))
    return frags


def build_quit_fragments(snap: Snapshot) -> Fragments:
    return [
        ("", "\n"),
        ("class:overlay.warning", "   Are you sure you want to quit?"),
        ("", "\n\n"),
        ("class:dimmed", "     (y) Confirm    (n) Cancel"),
    ]


# -----------------------------
# TUI
# -----------------------------
# prompt_toolkit key name -> router key name
SPECIAL_KEYS: Dict[str, str] = {
    'tab': 'tab',
    's-tab': 's-tab',
    'escape': 'escape',
    'enter': 'enter',
    'backspace': 'backspace',
    'delete': 'delete',
    'left': 'left',
    'right': 'right',
    'up': 'up',
    'down': 'down',
    'home': 'home',
    'end': 'end',
    'c-c': 'c-c',
    'c-q': 'c-q',
}


def build_key_bindings(state: ZenithApp, on_change: Optional[Callable[[], None]] = None) -> KeyBindings:
    """Translate prompt_toolkit key presses into ``ZenithApp.handle_key`` calls."""
    kb = KeyBindings()

    def _dispatch(event, key: str) -> None:
        state.handle_key(key)
        if state.should_exit:
            event.app.exit()
            return
        if on_change is not None:
            on_change()

    for pt_key, name in SPECIAL_KEYS.items():
        @kb.add(pt_key)
        def _(event, name=name):
            _dispatch(event, name)

    @kb.add(Keys.Any)
    def _(event):
        data = event.data or ""
        if _is_printable(data):
            _dispatch(event, data)

    return kb


def _terminal_size(default: Tuple[int, int] = (100, 40)) -> Tuple[int, int]:
    """Usable (columns, rows) of the terminal; the default outside a running app."""
    try:
        from prompt_toolkit.application.current import get_app
        size = get_app().output.get_size()
        return max(40, size.columns - 2), size.rows
    except Exception:
        return default


def run_ui(state: ZenithApp) -> None:
    """Full-screen loop: draw from a snapshot, route keys, tick the timer every poll interval."""
    style_cache: Dict[str, Style] = {}

    def _style() -> Style:
        preset = state.theme
        if preset.name not in style_cache:
            style_cache[preset.name] = Style.from_dict(preset.style)
        return style_cache[preset.name]

    def overlay(builder, width: int, visible: Callable[[], bool], title: str = "") -> Float:
        body = Window(
            content=FormattedTextControl(lambda: builder(state.snapshot())),
            width=Dimension(preferred=width, max=width),
            wrap_lines=True,
            always_hide_cursor=True,
            style="class:overlay",
        )
        return Float(content=ConditionalContainer(Frame(body=body, title=title), filter=Condition(visible)))

    header = Window(
        height=1,
        content=FormattedTextControl(lambda: build_header_fragments(state.snapshot())),
        always_hide_cursor=True,
    )
    # first visible row per list, kept between redraws
    scroll: Dict[str, int] = {}

    def body_fragments() -> Fragments:
        columns, rows = _terminal_size()
        # header, separator and status bar take one row each
        return build_view_fragments(state.snapshot(), columns, max(3, rows - 3), scroll)

    body = Window(
        content=FormattedTextControl(body_fragments),
        wrap_lines=False,
        always_hide_cursor=True,
    )
    status_bar = Window(
        height=1,
        content=FormattedTextControl(lambda: build_status_bar_fragments(state.snapshot())),
        style="class:statusbar",
        always_hide_cursor=True,
    )
    root = HSplit([header, Window(height=1, char='─', style="class:dimmed"), body, status_bar], style="class:app")
    floats = [
        overlay(build_form_fragments, 72, lambda: state.mode is InputMode.EDITING, "Task"),
        overlay(build_inspector_fragments, 72,
                lambda: state.view is View.DASHBOARD and state.snapshot().inspecting and state.selected_task() is not None,
                "Inspector"),
        overlay(build_help_fragments, 64, lambda: state.mode is InputMode.NORMAL and state.snapshot().show_help, "Help"),
        overlay(build_quit_fragments, 40, lambda: state.snapshot().confirm_quit, "Confirm exit"),
    ]
    container = FloatContainer(content=root, floats=floats)

    app: Optional[Application] = None

    def invalidate() -> None:
        if app is not None:
            app.invalidate()

    kb = build_key_bindings(state, on_change=invalidate)
    app = Application(layout=Layout(container), key_bindings=kb, full_screen=True,
                      style=DynamicStyle(_style), mouse_support=False)
    app.ttimeoutlen = 0.05  # Esc should not wait for a possible escape sequence

    async def _ticker():
        while True:
            await asyncio.sleep(POLL_INTERVAL)
            state.on_tick()
            invalidate()

    logger.info("UI started (theme=%s)", state.theme.name)
    app.run(pre_run=lambda: app.create_background_task(_ticker()))
    logger.info("UI closed")


# -----------------------------
# CLI
# -----------------------------
def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Zenith: terminal task tracker with XP, kanban and a focus timer")
    ap.add_argument("--config", help=f"Path to YAML config (default {DEFAULT_CONFIG_PATH} when present)")
    ap.add_argument("--db", help="Path to sqlite DB (default ~/.zenith.db)")
    ap.add_argument("--theme", help="Theme preset name (overrides the remembered theme)")
    ap.add_argument("--log-level", help="File log level (DEBUG, INFO, WARNING, ERROR)")
    ap.add_argument("--log-file", default=DEFAULT_LOG_PATH, help="Path to the rotating log file")
    args = ap.parse_args(argv)

    config_path = args.config
    if config_path is None and os.path.isfile(DEFAULT_CONFIG_PATH):
        config_path = DEFAULT_CONFIG_PATH
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Failed to load config: {e}", file=sys.stderr)
        return 2
    if args.db:
        cfg.db_path = os.path.expanduser(args.db)
    if args.theme:
        cfg.theme = args.theme
    if args.log_level:
        cfg.log_level = args.log_level.upper()

    setup_logging(args.log_file, cfg.log_level)
    themes = _load_theme_presets(Path(cfg.theme_dir) if cfg.theme_dir else None)

    try:
        db = TaskDB(cfg.db_path)
    except StoreError as e:
        logger.exception("Cannot open task DB %s", cfg.db_path)
        print(f"Cannot open task database {cfg.db_path}: {e}", file=sys.stderr)
        return 1
    try:
        try:
            state = ZenithApp(
                db,
                focus_minutes=cfg.focus_minutes,
                confirm_quit=cfg.confirm_quit,
                show_splash=cfg.show_splash,
                themes=themes,
                theme_name=cfg.theme,
            )
        except StoreError as e:
            logger.exception("Initial load failed")
            print(f"Cannot read task database {cfg.db_path}: {e}", file=sys.stderr)
            return 1
        run_ui(state)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
