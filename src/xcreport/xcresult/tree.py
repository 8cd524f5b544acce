"""Flattening of the legacy suite/subtest tree.

The legacy tests document nests suites arbitrarily deep. The listing is a
depth-first pre-order walk where each line records its nesting depth.
"""

from __future__ import annotations

from collections.abc import Sequence

from xcreport.xcresult.models import ListingItem, SuiteHeading, TestEntry
from xcreport.xcresult.schemas import LegacyTestNode

UNKNOWN_TEST_NAME = "Unknown Test"
UNKNOWN_STATUS = "unknown"


def flatten_tests(nodes: Sequence[LegacyTestNode]) -> list[ListingItem]:
    """Flatten a forest of test nodes into an indent-annotated listing.

    A node with ``subtests`` is a suite, even when it also carries leaf
    fields. Suites emit a heading (when named) and their children follow one
    level deeper; leaves emit a TestEntry. Source order is preserved.

    Uses an explicit stack, so deeply nested bundles cannot hit the
    recursion limit.
    """
    listing: list[ListingItem] = []
    stack: list[tuple[LegacyTestNode, int]] = [(node, 0) for node in reversed(nodes)]

    while stack:
        node, depth = stack.pop()
        if node.subtests is not None:
            if node.name is not None:
                listing.append(SuiteHeading(name=node.name.value, indent_depth=depth))
            stack.extend((child, depth + 1) for child in reversed(node.subtests))
        else:
            listing.append(_leaf_entry(node, depth))

    return listing


def _leaf_entry(node: LegacyTestNode, depth: int) -> TestEntry:
    status = node.test_status.value if node.test_status is not None else UNKNOWN_STATUS
    return TestEntry(
        name=node.name.value if node.name is not None else UNKNOWN_TEST_NAME,
        status_text=status,
        duration_seconds=node.duration.value if node.duration is not None else None,
        indent_depth=depth,
        has_failure_ref=status != "Success" and node.summary_ref is not None,
    )
