"""Pre-order walks over the suite/test forest with ancestor context.

Order, shared by every walk: a suite's own ``tests`` come before its child
``suites``, siblings in array order. Only tests are visited; a suite shows up
solely in the ``ancestors`` of the tests below it.

``ancestors`` is an immutable tuple, root-most suite first, ending with the
suite that directly owns the test. Visitors may keep it.

Root-level ``Report.tests`` are skipped unless ``include_root_tests=True``;
those tests have ``()`` as their ancestors.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping, Sequence
from typing import Any

Suite = Mapping[str, Any]
Test = Mapping[str, Any]
Ancestors = tuple[Suite, ...]

TestPredicate = Callable[[Test, Ancestors], bool]
TestVisitor = Callable[[Test, Ancestors], None]
AsyncTestVisitor = Callable[[Test, Ancestors], Awaitable[None]]


def iter_tests(
    report: Mapping[str, Any],
    *,
    include_root_tests: bool = False,
) -> Iterator[tuple[Test, Ancestors]]:
    """Yield ``(test, ancestors)`` pairs lazily, without native recursion."""

    if include_root_tests:
        for test in _children(report, "tests"):
            yield test, ()

    stack: list[tuple[Suite, Ancestors]] = [
        (suite, ()) for suite in reversed(_children(report, "suites"))
    ]
    while stack:
        suite, parents = stack.pop()
        ancestors = (*parents, suite)
        for test in _children(suite, "tests"):
            yield test, ancestors
        for child in reversed(_children(suite, "suites")):
            stack.append((child, ancestors))


def find_test(
    report: Mapping[str, Any],
    predicate: TestPredicate,
    *,
    include_root_tests: bool = False,
) -> Test | None:
    """Return the first test matching ``predicate``, or ``None``."""

    for test, ancestors in iter_tests(report, include_root_tests=include_root_tests):
        if predicate(test, ancestors):
            return test
    return None


def visit_tests(
    report: Mapping[str, Any],
    visitor: TestVisitor,
    *,
    include_root_tests: bool = False,
) -> None:
    for test, ancestors in iter_tests(report, include_root_tests=include_root_tests):
        visitor(test, ancestors)


async def visit_tests_async(
    report: Mapping[str, Any],
    visitor: AsyncTestVisitor,
    *,
    include_root_tests: bool = False,
) -> None:
    """Await ``visitor`` for each test in order; one call at a time.

    Suspension happens at every visitor call. Mutating the tree while the
    walk is suspended has undefined results. There is no built-in
    cancellation; use ``find_test`` for an early exit.
    """

    for test, ancestors in iter_tests(report, include_root_tests=include_root_tests):
        await visitor(test, ancestors)


def _children(node: Mapping[str, Any], key: str) -> Sequence[Mapping[str, Any]]:
    children = node.get(key)
    if children is None:
        return ()
    return children


__all__ = [
    "Ancestors",
    "AsyncTestVisitor",
    "TestPredicate",
    "TestVisitor",
    "find_test",
    "iter_tests",
    "visit_tests",
    "visit_tests_async",
]
