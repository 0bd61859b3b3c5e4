# Overview: Forward/inverse change commands for in-memory records with revert on failed commit.

"""
Optimistic change commands.

A ChangeCommand captures, per field, the value before and after an edit.
execute() applies the forward values, commits, and on a failed commit rolls
the session back and re-applies the "before" values to the in-memory
object, so callers holding the record never observe a change that was not
persisted. The storage error is re-raised for the route to translate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db


@dataclass(frozen=True)
class FieldChange:
    name: str
    before: Any
    after: Any


@dataclass
class ChangeCommand:
    target: Any
    changes: list[FieldChange] = field(default_factory=list)

    @classmethod
    def for_patch(cls, target, patch: dict) -> "ChangeCommand":
        """Build a command from a cleaned patch; unchanged fields are skipped."""
        changes = []
        for name, value in patch.items():
            current = getattr(target, name)
            if current != value:
                changes.append(FieldChange(name=name, before=current, after=value))
        return cls(target=target, changes=changes)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def apply(self) -> None:
        for change in self.changes:
            setattr(self.target, change.name, change.after)

    def revert(self) -> None:
        for change in reversed(self.changes):
            setattr(self.target, change.name, change.before)

    def execute(self):
        """Apply, commit, and revert on failure. Returns the target."""
        if self.is_empty:
            return self.target
        self.apply()
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            self.revert()
            raise
        return self.target
