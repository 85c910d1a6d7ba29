"""Counting of manual retest commands posted as pull request comments."""

from __future__ import annotations

from typing import Iterable, Sequence

from .config import DEFAULT_RETEST_TRIGGERS
from .models import Comment


def count_retests(text: str, triggers: Sequence[str] = DEFAULT_RETEST_TRIGGERS) -> int:
    """Count lines of ``text`` that, once stripped, equal one of ``triggers``.

    A trigger embedded in other text on the same line does not count.
    """
    trigger_set = frozenset(triggers)
    return sum(1 for line in text.split("\n") if line.strip() in trigger_set)


def count_pr_retests(comments: Iterable[Comment], triggers: Sequence[str] = DEFAULT_RETEST_TRIGGERS) -> int:
    return sum(count_retests(comment.body, triggers) for comment in comments)
