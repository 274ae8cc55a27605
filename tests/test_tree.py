import pytest

from file_favorites.models import BookmarkTree, FileBookmark, Group


@pytest.fixture
def tree():
    """Work/{notes, Py/{script}} and a root-level readme."""
    tree = BookmarkTree()
    work = Group(id="work", label="Work")
    py = Group(id="py", label="Py")
    tree.insert(work)
    tree.insert(FileBookmark(id="notes", label="notes", resource_path="/notes"), work)
    tree.insert(py, work)
    tree.insert(FileBookmark(id="script", label="script", resource_path="/script.py"), py)
    tree.insert(FileBookmark(id="readme", label="readme", resource_path="/readme"))
    return tree


def assert_consistent(tree):
    for entity in tree.entries.values():
        if entity.parent_id is None:
            assert tree.root_ids.count(entity.id) == 1
        else:
            parent = tree.get(entity.parent_id)
            assert isinstance(parent, Group)
            assert parent.child_ids.count(entity.id) == 1
    assert len(list(tree)) == len(tree)


def test_insert_links_both_directions(tree):
    assert tree.get("notes").parent_id == "work"
    assert tree.get("work").child_ids == ["notes", "py"]
    assert tree.root_ids == ["work", "readme"]
    assert_consistent(tree)


def test_insert_rejects_known_id(tree):
    with pytest.raises(ValueError):
        tree.insert(FileBookmark(id="notes", label="again"))


def test_insert_rejects_non_group_parent(tree):
    with pytest.raises(ValueError):
        tree.insert(FileBookmark(label="x"), tree.get("readme"))


def test_insert_rejects_parent_outside_tree(tree):
    with pytest.raises(ValueError):
        tree.insert(FileBookmark(label="x"), Group(label="elsewhere"))


def test_contains_checks_identity(tree):
    assert tree.get("notes") in tree
    assert "notes" in tree
    assert FileBookmark(id="notes") not in tree


def test_walk_yields_ancestors(tree):
    walked = {entity.id: [group.id for group in ancestors] for entity, ancestors in tree.walk()}

    assert walked == {
        "work": [],
        "notes": ["work"],
        "py": ["work"],
        "script": ["work", "py"],
        "readme": [],
    }
    assert tree.breadcrumb(tree.get("script")) == "Work/Py"
    assert tree.breadcrumb(tree.get("readme")) is None


def test_move_between_groups(tree):
    script = tree.get("script")

    tree.move(script, tree.get("work"))

    assert script.parent_id == "work"
    assert tree.get("py").child_ids == []
    assert tree.get("work").child_ids == ["notes", "py", "script"]
    assert_consistent(tree)


def test_move_to_root(tree):
    tree.move(tree.get("py"))

    assert tree.get("py").parent_id is None
    assert tree.root_ids == ["work", "readme", "py"]
    assert tree.get("script").parent_id == "py"
    assert_consistent(tree)


def test_can_move_rejects_cycles_and_no_ops(tree):
    work, py, readme = tree.get("work"), tree.get("py"), tree.get("readme")

    assert not tree.can_move(work, py)
    assert not tree.can_move(work, work)
    assert not tree.can_move(py, work)
    assert not tree.can_move(readme, None)
    assert not tree.can_move(readme, Group(label="elsewhere"))
    assert not tree.can_move(FileBookmark(label="stray"), work)
    assert tree.can_move(readme, py)
    assert tree.can_move(py, None)


def test_rejected_move_leaves_tree_untouched(tree):
    work, py = tree.get("work"), tree.get("py")

    with pytest.raises(ValueError):
        tree.move(work, py)

    assert tree.root_ids == ["work", "readme"]
    assert work.parent_id is None
    assert py.parent_id == "work"
    assert_consistent(tree)


def test_remove_drops_descendants(tree):
    removed = tree.remove(tree.get("py"))

    assert {entity.id for entity in removed} == {"py", "script"}
    assert "script" not in tree
    assert tree.get("work").child_ids == ["notes"]
    assert_consistent(tree)


def test_remove_unknown_entity_is_noop(tree):
    assert tree.remove(FileBookmark(label="stray")) == []
    assert len(tree) == 5


def test_bookmarks_under_lists_files_before_subgroups(tree):
    labels = [bookmark.label for bookmark in tree.bookmarks_under(tree.get("work"))]
    assert labels == ["notes", "script"]


def test_removed_entities_keep_no_links(tree):
    work = tree.get("work")
    removed = tree.remove(work)

    assert all(entity.parent_id is None for entity in removed)
    assert work.child_ids == []
    assert tree.get("py") is None

    tree.insert(work)
    assert tree.root_ids == ["readme", "work"]
    assert_consistent(tree)
