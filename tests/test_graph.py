import pytest

from twig.errors import EmptyMessageError, NoSuchCommitError
from twig.graph import CommitGraph
from twig.impl.memory import MemoryObjectStore
from twig.objects import COMMIT


@pytest.fixture
def graph() -> CommitGraph:
    return CommitGraph(MemoryObjectStore({"objects": {}}))


def make(graph: CommitGraph, message: str, *parents: str) -> str:
    return graph.create_commit(message, parents, {}).id


def test_create_commit_rejects_empty_message(graph: CommitGraph):
    root = graph.create_root().id
    with pytest.raises(EmptyMessageError):
        graph.create_commit("", [root], {})
    assert graph.store.list_ids(COMMIT) == [root]


def test_read_roundtrip(graph: CommitGraph):
    root = graph.create_root().id
    commit = graph.create_commit("one", [root], {"a.txt": "blob"})

    stored = graph.read(commit.id)
    assert stored == commit
    assert stored.manifest == {"a.txt": "blob"}

    with pytest.raises(NoSuchCommitError):
        graph.read("f" * 40)


def test_read_rejects_blob_ids(graph: CommitGraph):
    blob_id = graph.store.put(b"not a commit")
    with pytest.raises(NoSuchCommitError):
        graph.read(blob_id)


def test_ancestor_chain_follows_first_parent(graph: CommitGraph):
    root = graph.create_root().id
    a1 = make(graph, "a1", root)
    b1 = make(graph, "b1", root)
    merge = make(graph, "merge", a1, b1)
    a2 = make(graph, "a2", merge)

    assert graph.ancestor_chain(a2) == [a2, merge, a1, root]
    assert graph.ancestor_chain(root) == [root]


def test_split_point_through_merge_commit(graph: CommitGraph):
    root = graph.create_root().id
    a1 = make(graph, "a1", root)
    b1 = make(graph, "b1", root)
    merge = make(graph, "merge b into a", a1, b1)
    a2 = make(graph, "a2", merge)
    b2 = make(graph, "b2", b1)

    assert graph.find_split_point(a2, graph.ancestor_chain(b2)) == b1


def test_split_point_misses_second_parent_of_given_side(graph: CommitGraph):
    root = graph.create_root().id
    c1 = make(graph, "c1", root)
    g1 = make(graph, "g1", root)
    given = make(graph, "merge c into g", g1, c1)
    current = make(graph, "c2", c1)

    # c1 is a common ancestor but only reachable through given's second parent
    assert graph.find_split_point(current, graph.ancestor_chain(given)) == root


def test_split_point_does_not_test_start(graph: CommitGraph):
    root = graph.create_root().id
    a1 = make(graph, "a1", root)

    assert graph.find_split_point(a1, [a1]) is None
    assert graph.find_split_point(a1, [root]) == root


def test_resolve(graph: CommitGraph):
    root = graph.create_root().id
    a1 = make(graph, "a1", root)
    make(graph, "a2", a1)

    assert graph.resolve(a1) == a1
    assert graph.resolve(a1[:8]) == a1
    assert graph.resolve(a1[5:15]) == a1

    with pytest.raises(NoSuchCommitError):
        graph.resolve("not-hex")
    with pytest.raises(NoSuchCommitError):
        graph.resolve("")


def test_resolve_ambiguous_prefix_is_deterministic(graph: CommitGraph):
    root = graph.create_root().id
    previous = root
    for i in range(8):
        previous = make(graph, f"c{i}", previous)

    commit_ids = graph.store.list_ids(COMMIT)
    needle = next(
        digit
        for digit in "0123456789abcdef"
        if sum(digit in commit_id for commit_id in commit_ids) > 1
    )
    expected = min(commit_id for commit_id in commit_ids if needle in commit_id)

    assert graph.resolve(needle) == expected
    assert graph.resolve(needle) == expected


def test_iter_history_is_lazy(graph: CommitGraph):
    root = graph.create_root().id
    previous = root
    for i in range(5):
        previous = make(graph, f"c{i}", previous)

    history = graph.iter_history(previous)
    assert next(history).message == "c4"
    assert next(history).message == "c3"
    assert [c.message for c in history] == ["c2", "c1", "c0", "initial commit"]


def test_all_commits(graph: CommitGraph):
    root = graph.create_root().id
    make(graph, "a1", root)

    commits = list(graph.all_commits())
    assert sorted(c.message for c in commits) == ["a1", "initial commit"]
    assert [c.id for c in commits] == sorted(c.id for c in commits)
