"""
Scenario Tag Parsing.

Scenarios carry their links to Jira and Zephyr as prefixed tags::

    @Key_QA-T12      -> Zephyr test case QA-T12
    @Zephyr_QA-R3    -> Zephyr test cycle QA-R3
    @Jira_QA-45      -> Jira issue QA-45

The first tag with a matching prefix wins.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

TEST_CASE_PREFIX = "@Key_"
TEST_CYCLE_PREFIX = "@Zephyr_"
JIRA_TASK_PREFIX = "@Jira_"


def find_tag_value(tags: Iterable[str], prefix: str) -> Optional[str]:
    """
    Return the value of the first tag starting with ``prefix``.

    Args:
        tags: Scenario tags.
        prefix: Tag prefix, e.g. ``"@Key_"``.

    Returns:
        The remainder of the tag after the prefix, stripped, or None.
    """
    for tag in tags:
        if tag.startswith(prefix):
            return tag[len(prefix):].strip()
    return None


def get_test_case_key(tags: Iterable[str]) -> Optional[str]:
    """Zephyr test-case key from the ``@Key_`` tag."""
    return find_tag_value(tags, TEST_CASE_PREFIX)


def get_test_cycle_key(tags: Iterable[str]) -> Optional[str]:
    """Zephyr test-cycle key from the ``@Zephyr_`` tag."""
    return find_tag_value(tags, TEST_CYCLE_PREFIX)


def get_jira_task_tags(tags: Iterable[str]) -> List[str]:
    """All ``@Jira_`` tags, in order, with the prefix kept."""
    return [tag for tag in tags if tag.startswith(JIRA_TASK_PREFIX)]


def strip_tag_prefix(task_key: str) -> str:
    """Drop everything up to and including the first underscore."""
    return task_key.split("_", 1)[-1]
