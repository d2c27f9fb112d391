from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from backend.schema import ENTRIES_UNIQUE_SQL, TABLE_SETUP_SQL


class JournalError(Exception):
    pass


class NotConfiguredError(JournalError):
    pass


class NotAuthenticatedError(JournalError):
    pass


class NotFoundError(JournalError):
    pass


class ValidationError(JournalError):
    pass


class NarrationError(JournalError):
    def __init__(self, report_type: str, message: str):
        super().__init__(f"Failed to generate {report_type}: {message}")
        self.report_type = report_type


class RemoteStoreError(JournalError):
    def __init__(self, operation: str, entity: str, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(f"Failed to {operation} {entity}: {message}")
        self.operation = operation
        self.entity = entity
        self.detail = message
        self.status_code = status_code
        self.code = code


class SchemaProblemKind(str, Enum):
    MISSING_TABLE = "missing_table"
    MISSING_COLUMN = "missing_column"
    COLUMN_TYPE = "column_type"
    MISSING_UNIQUE_CONSTRAINT = "missing_unique_constraint"


@dataclass(frozen=True)
class SchemaProblem:
    kind: SchemaProblemKind
    table: Optional[str] = None
    column: Optional[str] = None

    @property
    def title(self) -> str:
        table = self.table or "unknown"
        if self.kind is SchemaProblemKind.MISSING_TABLE:
            return f"Database Setup Incomplete: '{table}' table missing"
        if self.kind is SchemaProblemKind.MISSING_COLUMN:
            return f"Database Setup Incomplete: '{table}.{self.column or '?'}' column missing"
        if self.kind is SchemaProblemKind.COLUMN_TYPE:
            return f"Database Setup Incomplete: '{table}.{self.column or '?'}' has the wrong type"
        return f"Database Setup Incomplete: '{table}' is missing its unique constraint"

    @property
    def setup_sql(self) -> str:
        if self.kind is SchemaProblemKind.MISSING_UNIQUE_CONSTRAINT and self.table == "entries":
            return ENTRIES_UNIQUE_SQL.strip()
        return TABLE_SETUP_SQL.get(self.table or "", "").strip()


class SchemaMismatchError(RemoteStoreError):
    def __init__(self, operation: str, entity: str, message: str, problem: SchemaProblem, status_code: int | None = None, code: str | None = None):
        super().__init__(operation, entity, message, status_code=status_code, code=code)
        self.problem = problem

    @property
    def title(self) -> str:
        return self.problem.title

    @property
    def setup_sql(self) -> str:
        return self.problem.setup_sql


# SQLSTATE codes reported by PostgreSQL.
_CODE_KINDS = {
    "42P01": SchemaProblemKind.MISSING_TABLE,
    "42703": SchemaProblemKind.MISSING_COLUMN,
    "42804": SchemaProblemKind.COLUMN_TYPE,
    "22P02": SchemaProblemKind.COLUMN_TYPE,
    "42P10": SchemaProblemKind.MISSING_UNIQUE_CONSTRAINT,
}

# Order matters: column messages also contain the table wording.
_TEXT_RULES = [
    (re.compile(r'column "(?P<column>\w+)" of relation "(?:\w+\.)?(?P<table>\w+)" does not exist', re.I),
     SchemaProblemKind.MISSING_COLUMN),
    (re.compile(r'column (?P<table>\w+)\.(?P<column>\w+) does not exist', re.I),
     SchemaProblemKind.MISSING_COLUMN),
    (re.compile(r"could not find the '(?P<column>\w+)' column of '(?P<table>\w+)'", re.I),
     SchemaProblemKind.MISSING_COLUMN),
    (re.compile(r"table (?P<table>\w+) has no column named (?P<column>\w+)", re.I),
     SchemaProblemKind.MISSING_COLUMN),
    (re.compile(r"no such column: (?:(?P<table>\w+)\.)?(?P<column>\w+)", re.I),
     SchemaProblemKind.MISSING_COLUMN),
    (re.compile(r'column "(?P<column>\w+)" does not exist', re.I),
     SchemaProblemKind.MISSING_COLUMN),
    (re.compile(r'column "(?P<column>\w+)" is of type \w+ but expression is of type', re.I),
     SchemaProblemKind.COLUMN_TYPE),
    (re.compile(r"invalid input syntax for type (?:bigint|integer|uuid)\b", re.I),
     SchemaProblemKind.COLUMN_TYPE),
    (re.compile(r'relation "(?:\w+\.)?(?P<table>\w+)" does not exist', re.I),
     SchemaProblemKind.MISSING_TABLE),
    (re.compile(r"could not find the table '(?:\w+\.)?(?P<table>\w+)'", re.I),
     SchemaProblemKind.MISSING_TABLE),
    (re.compile(r"no such table: (?:\w+\.)?(?P<table>\w+)", re.I),
     SchemaProblemKind.MISSING_TABLE),
    (re.compile(r"no unique or exclusion constraint matching the ON CONFLICT specification", re.I),
     SchemaProblemKind.MISSING_UNIQUE_CONSTRAINT),
    (re.compile(r"ON CONFLICT clause does not match any PRIMARY KEY or UNIQUE constraint", re.I),
     SchemaProblemKind.MISSING_UNIQUE_CONSTRAINT),
]


# Profiles created with a bigint id reject the uuid user ids.
_DEFAULT_TYPE_COLUMNS = {"profiles": "id"}


def _problem_from_match(kind, match, table):
    groups = match.groupdict() if match else {}
    table = groups.get("table") or table
    column = groups.get("column")
    if kind is SchemaProblemKind.COLUMN_TYPE and column is None:
        column = _DEFAULT_TYPE_COLUMNS.get(table or "")
    return SchemaProblem(kind=kind, table=table, column=column)


def classify_backend_error(message, code=None, table=None) -> SchemaProblem | None:
    """Best-effort mapping of a backend failure onto a schema problem.

    The SQLSTATE code wins when the backend sends one; the text rules then only
    fill in table and column names. Without a code, the first matching text
    rule decides. Anything unrecognized returns None.
    """
    text = str(message or "")
    kind = _CODE_KINDS.get(str(code or "").upper())
    if kind is not None:
        for pattern, rule_kind in _TEXT_RULES:
            if rule_kind is not kind:
                continue
            match = pattern.search(text)
            if match:
                return _problem_from_match(kind, match, table)
        return _problem_from_match(kind, None, table)
    for pattern, rule_kind in _TEXT_RULES:
        match = pattern.search(text)
        if match:
            return _problem_from_match(rule_kind, match, table)
    return None
