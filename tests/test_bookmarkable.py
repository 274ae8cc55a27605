import itertools

import pytest

from conftest import make_file
from file_favorites.models import (
    BookmarkKind,
    BookmarkTree,
    FileBookmark,
    FolderBookmark,
    Group,
    bookmarkable_comparator,
    label_comparator,
    sort_bookmarkables,
)
from file_favorites.models.bookmarkable import OPEN_RESOURCE_COMMAND


def test_each_variant_carries_its_kind():
    assert FileBookmark().kind is BookmarkKind.FILE
    assert FolderBookmark().kind is BookmarkKind.FOLDER
    assert Group().kind is BookmarkKind.GROUP
    assert Group().is_group
    assert not FileBookmark().is_group


def test_new_entities_get_distinct_ids():
    assert FileBookmark().id != FileBookmark().id
    assert FileBookmark(id="fixed").id == "fixed"


def test_entities_compare_by_identity():
    a = FileBookmark(id="same", label="a", resource_path="/a")
    b = FileBookmark(id="same", label="a", resource_path="/a")
    assert a != b
    assert a == a


def test_groups_sort_before_favorites():
    items = [
        FileBookmark(label="apple"),
        Group(label="zoo"),
        FolderBookmark(label="banana"),
        Group(label="mango"),
    ]

    labels = [item.label for item in sort_bookmarkables(items)]
    assert labels == ["mango", "zoo", "apple", "banana"]


def test_comparator_is_antisymmetric():
    items = [
        Group(label="b"),
        Group(label="a"),
        FileBookmark(label="a"),
        FolderBookmark(label="c"),
        FileBookmark(label="b"),
    ]

    for a, b in itertools.product(items, repeat=2):
        assert bookmarkable_comparator(a, b) == -bookmarkable_comparator(b, a)
        assert a.compare_to(b) == bookmarkable_comparator(a, b)


def test_label_comparator_ignores_kind():
    group = Group(label="b")
    file = FileBookmark(label="a")

    assert label_comparator(file, group) < 0
    assert bookmarkable_comparator(file, group) > 0
    assert label_comparator(FileBookmark(label="x"), Group(label="x")) == 0


def test_file_display_item():
    file = FileBookmark(label="notes", resource_path="/home/me/notes.txt")

    item = file.to_display_item()
    assert item.label == "notes"
    assert item.target_id == file.id
    assert item.icon == "file"
    assert item.tooltip == "/home/me/notes.txt"
    assert item.command == OPEN_RESOURCE_COMMAND
    assert item.context == "file"
    assert not item.collapsible


def test_folder_display_item_shows_filter():
    folder = FolderBookmark(label="src", resource_path="/home/me/src", filter="*.py")

    item = folder.to_display_item()
    assert item.icon == "files"
    assert item.description == "[ *.py ]"
    assert item.context == "folder"
    assert item.command == OPEN_RESOURCE_COMMAND


def test_group_display_item_context_depends_on_content():
    tree = BookmarkTree()
    group = Group(label="Work")
    tree.insert(group)

    item = group.to_display_item(tree)
    assert item.collapsible
    assert item.icon == "folder"
    assert item.command is None
    assert item.context == "group-empty"

    tree.insert(FileBookmark(label="a", resource_path="/a"), group)
    assert group.to_display_item(tree).context == "group"
    assert group.to_display_item().context == "group"


def test_detail_shows_path_and_filter():
    assert FileBookmark(label="a", resource_path="/x/a").detail == "/x/a"
    assert FileBookmark(label="/x/a", resource_path="/x/a").detail is None
    assert FolderBookmark(label="src", resource_path="/src", filter="*.md").detail == "/src [ *.md ]"
    assert Group(label="g").detail is None


def test_activate_file_opens_it(tmp_path, opener, opened):
    path = make_file(tmp_path, "a.txt")

    result = FileBookmark(label="a", resource_path=path).activate(opener)
    assert result.ok
    assert result.opened == [path]
    assert opened == [path]


def test_activate_missing_file_reports_error(tmp_path, opener, opened):
    bookmark = FileBookmark(label="gone", resource_path=str(tmp_path / "gone.txt"))

    result = bookmark.activate(opener)
    assert not result.ok
    assert "gone" in result.errors[0]
    assert opened == []


def test_activate_records_opener_failures(tmp_path):
    path = make_file(tmp_path, "a.txt")

    def failing_opener(path):
        raise OSError("no application")

    result = FileBookmark(label="a", resource_path=path).activate(failing_opener)
    assert result.opened == []
    assert "no application" in result.errors[0]


def test_activate_folder_opens_matching_files(tmp_path, opener, opened):
    make_file(tmp_path, "b.py")
    make_file(tmp_path, "a.py")
    make_file(tmp_path, "c.txt")
    (tmp_path / "pkg.py").mkdir()

    folder = FolderBookmark(label="src", resource_path=str(tmp_path), filter="*.py")
    result = folder.activate(opener)

    assert result.ok
    assert opened == [str(tmp_path / "a.py"), str(tmp_path / "b.py")]


def test_activate_folder_without_matches_reports_error(tmp_path, opener, opened):
    make_file(tmp_path, "c.txt")

    folder = FolderBookmark(label="src", resource_path=str(tmp_path), filter="*.py")
    result = folder.activate(opener)

    assert opened == []
    assert len(result.errors) == 1
    assert "*.py" in result.errors[0]


def test_activate_missing_folder_reports_error(tmp_path, opener, opened):
    folder = FolderBookmark(label="src", resource_path=str(tmp_path / "missing"))

    result = folder.activate(opener)
    assert opened == []
    assert "folder not found" in result.errors[0]


def test_activate_folder_uses_given_matcher(tmp_path, opener, opened):
    calls = []

    def matcher(directory, pattern):
        calls.append((directory, pattern))
        return ["/virtual/one"]

    folder = FolderBookmark(label="src", resource_path=str(tmp_path), filter="**/*.md")
    folder.activate(opener, matcher=matcher)

    assert calls == [(str(tmp_path), "**/*.md")]
    assert opened == ["/virtual/one"]


def test_activate_group_opens_own_files_before_subgroups(tmp_path, opener, opened):
    tree = BookmarkTree()
    group = Group(label="Work")
    sub = Group(label="Sub")
    tree.insert(group)
    tree.insert(FileBookmark(label="b", resource_path=make_file(tmp_path, "b.txt")), group)
    tree.insert(sub, group)
    tree.insert(FileBookmark(label="a", resource_path=make_file(tmp_path, "a.txt")), group)
    tree.insert(FileBookmark(label="c", resource_path=make_file(tmp_path, "c.txt")), sub)

    result = group.activate(opener, tree)

    assert result.ok
    assert opened == [str(tmp_path / name) for name in ("a.txt", "b.txt", "c.txt")]


def test_group_activation_continues_past_failures(tmp_path, opener, opened):
    tree = BookmarkTree()
    group = Group(label="Work")
    tree.insert(group)
    tree.insert(FileBookmark(label="a", resource_path=str(tmp_path / "missing.txt")), group)
    tree.insert(FileBookmark(label="b", resource_path=make_file(tmp_path, "b.txt")), group)

    result = group.activate(opener, tree)

    assert len(result.errors) == 1
    assert opened == [str(tmp_path / "b.txt")]


def test_group_needs_tree(opener):
    with pytest.raises(ValueError):
        Group(label="Work").activate(opener)


def test_group_location_lists_descendant_paths():
    tree = BookmarkTree()
    group = Group(label="Work")
    sub = Group(label="Sub")
    tree.insert(group)
    tree.insert(sub, group)
    tree.insert(FolderBookmark(label="src", resource_path="/src"), sub)
    tree.insert(FileBookmark(label="notes", resource_path="/notes.txt"), group)

    assert group.location(tree) == ["/notes.txt", "/src"]
    assert FileBookmark(resource_path="/a").location() == ["/a"]


def test_default_labels():
    assert FileBookmark(resource_path="/home/me/notes.txt").default_label() == "notes.txt"
    assert FolderBookmark(resource_path="/home/me/src").default_label() == "src"
    assert FileBookmark().default_label() == "Untitled"
    assert Group().default_label() == "New group"
