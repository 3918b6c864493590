"""Tests for PageTreeService: creation, move, copy, delete, and tree views."""

import pytest

from wiki_history.exceptions import InvalidMoveError, PageNotFoundError, ValidationError
from wiki_history.models import ArchivedVersion, PageType, WikiPage
from wiki_history.services import PageTreeService
from wiki_history.services.page_tree_service import build_path
from tests.conftest import PROJECT_ID, make_directory, make_document


@pytest.fixture()
def tree(db, ids):
    return PageTreeService(db, ids)


class TestBuildPath:

    def test_root_path(self):
        assert build_path(None, "Home") == "/Home"

    def test_child_path(self):
        assert build_path("/Home/Guides", "Setup") == "/Home/Guides/Setup"


class TestCreate:

    def test_root_document_starts_at_version_one(self, tree):
        page = tree.create(PROJECT_ID, None, "Home", content="# Welcome")
        assert page.path == "/Home"
        assert page.current_version == 1
        assert page.recent_versions == []
        assert page.content == "# Welcome"
        assert page.content_hash == tree.diff_engine.content_hash("# Welcome")
        assert page.content_size == len("# Welcome")

    def test_document_without_content_gets_empty_content(self, tree):
        page = tree.create(PROJECT_ID, None, "Blank")
        assert page.content == ""
        assert page.content_hash == tree.diff_engine.content_hash("")

    def test_directory_has_no_content(self, tree):
        folder = tree.create(PROJECT_ID, None, "Docs", page_type=PageType.DIRECTORY)
        assert folder.content is None
        assert folder.content_hash is None

    def test_child_path_and_sort_order(self, tree):
        folder = tree.create(PROJECT_ID, None, "Docs", page_type=PageType.DIRECTORY)
        first = tree.create(PROJECT_ID, folder.id, "First")
        second = tree.create(PROJECT_ID, folder.id, "Second")

        assert first.path == "/Docs/First"
        assert first.sort_order == 1
        assert second.sort_order == 2

    def test_explicit_sort_order_is_kept(self, tree):
        page = tree.create(PROJECT_ID, None, "Pinned", sort_order=-5)
        assert page.sort_order == -5

    def test_summary_is_truncated(self, tree):
        page = tree.create(PROJECT_ID, None, "Long", content="x" * 500)
        assert page.content_summary == "x" * 200

    def test_parent_must_exist(self, tree):
        with pytest.raises(PageNotFoundError):
            tree.create(PROJECT_ID, 999999, "Orphan")

    def test_parent_must_be_directory(self, tree):
        doc = tree.create(PROJECT_ID, None, "Doc")
        with pytest.raises(ValidationError):
            tree.create(PROJECT_ID, doc.id, "Child")

    def test_parent_must_be_in_same_project(self, tree):
        folder = tree.create(PROJECT_ID + 1, None, "Elsewhere", page_type=PageType.DIRECTORY)
        with pytest.raises(ValidationError):
            tree.create(PROJECT_ID, folder.id, "Child")

    @pytest.mark.parametrize("title", ["", "   ", "a/b"])
    def test_invalid_titles_are_rejected(self, tree, title):
        with pytest.raises(ValidationError):
            tree.create(PROJECT_ID, None, title)


class TestMove:

    def test_move_updates_paths_of_whole_subtree(self, db, tree):
        guides = tree.create(PROJECT_ID, None, "Guides", page_type=PageType.DIRECTORY)
        setup = tree.create(PROJECT_ID, guides.id, "Setup", page_type=PageType.DIRECTORY)
        install = tree.create(PROJECT_ID, setup.id, "Install")
        archive = tree.create(PROJECT_ID, None, "Archive", page_type=PageType.DIRECTORY)

        tree.move(setup.id, archive.id)

        assert setup.parent_id == archive.id
        assert setup.path == "/Archive/Setup"
        assert install.path == "/Archive/Setup/Install"

    def test_move_to_root(self, tree):
        folder = tree.create(PROJECT_ID, None, "Folder", page_type=PageType.DIRECTORY)
        page = tree.create(PROJECT_ID, folder.id, "Page")

        tree.move(page.id, None)
        assert page.parent_id is None
        assert page.path == "/Page"

    def test_move_appends_to_new_siblings(self, tree):
        target = tree.create(PROJECT_ID, None, "Target", page_type=PageType.DIRECTORY)
        tree.create(PROJECT_ID, target.id, "Existing")
        tree.create(PROJECT_ID, target.id, "Another")
        page = tree.create(PROJECT_ID, None, "Mover")

        tree.move(page.id, target.id)
        assert page.sort_order == 3

    def test_move_keeps_history(self, db, ids, service, tree):
        folder = make_directory(service, "Folder")
        page = make_document(service, content="one")
        service.record_edit(page.id, "two")

        tree.move(page.id, folder.id)
        assert page.current_version == 2
        assert service.get_version_content(page.id, 1) == "one"

    def test_move_into_itself_is_rejected(self, tree):
        folder = tree.create(PROJECT_ID, None, "Folder", page_type=PageType.DIRECTORY)
        with pytest.raises(InvalidMoveError):
            tree.move(folder.id, folder.id)

    def test_move_into_descendant_is_rejected(self, tree):
        top = tree.create(PROJECT_ID, None, "Top", page_type=PageType.DIRECTORY)
        middle = tree.create(PROJECT_ID, top.id, "Middle", page_type=PageType.DIRECTORY)
        bottom = tree.create(PROJECT_ID, middle.id, "Bottom", page_type=PageType.DIRECTORY)

        with pytest.raises(InvalidMoveError) as exc_info:
            tree.move(top.id, bottom.id)
        assert exc_info.value.status_code == 400
        assert top.parent_id is None
        assert top.path == "/Top"

    def test_move_under_document_is_rejected(self, tree):
        doc = tree.create(PROJECT_ID, None, "Doc")
        page = tree.create(PROJECT_ID, None, "Page")
        with pytest.raises(ValidationError):
            tree.move(page.id, doc.id)


class TestRename:

    def test_rename_propagates_to_descendants(self, tree):
        folder = tree.create(PROJECT_ID, None, "Old", page_type=PageType.DIRECTORY)
        child = tree.create(PROJECT_ID, folder.id, "Child")

        tree.rename(folder.id, "New")
        assert folder.path == "/New"
        assert child.path == "/New/Child"


class TestCopy:

    def test_copy_is_deep_with_fresh_history(self, db, ids, service, tree):
        folder = make_directory(service, "Source")
        doc = make_document(service, "Doc", content="v1", parent_id=folder.id)
        service.record_edit(doc.id, "v2")
        service.record_edit(doc.id, "v3")
        target = make_directory(service, "Target")

        clone = tree.copy(folder.id, target.id)

        assert clone.id != folder.id
        assert clone.title == "Copy of Source"
        assert clone.path == "/Target/Copy of Source"
        children = tree.children(clone.id)
        assert len(children) == 1
        copied_doc = children[0]
        assert copied_doc.id != doc.id
        assert copied_doc.path == "/Target/Copy of Source/Doc"
        assert copied_doc.content == "v3"
        assert copied_doc.current_version == 1
        assert copied_doc.recent_versions == []

    def test_copy_with_new_title(self, service, tree):
        doc = make_document(service, "Doc", content="text")
        clone = tree.copy(doc.id, None, new_title="Doc (draft)")
        assert clone.title == "Doc (draft)"
        assert clone.path == "/Doc (draft)"

    def test_copy_into_own_subtree_terminates(self, db, tree):
        top = tree.create(PROJECT_ID, None, "Top", page_type=PageType.DIRECTORY)
        tree.create(PROJECT_ID, top.id, "Leaf")

        clone = tree.copy(top.id, top.id)

        assert clone.parent_id == top.id
        assert [c.title for c in tree.children(clone.id)] == ["Leaf"]
        assert db.query(WikiPage).count() == 4


class TestDeleteRecursive:

    def test_delete_removes_subtree_and_archive(self, db, service, tree):
        folder = make_directory(service, "Folder")
        doc = make_document(service, "Doc", content="0", parent_id=folder.id)
        for n in range(1, 6):
            service.record_edit(doc.id, str(n))
        other = make_document(service, "Other", content="keep")
        assert db.query(ArchivedVersion).filter(ArchivedVersion.page_id == doc.id).count() == 2

        removed = tree.delete_recursive(folder.id)

        assert removed == 2
        assert db.query(WikiPage).filter(WikiPage.id.in_([folder.id, doc.id])).count() == 0
        assert db.query(WikiPage).filter(WikiPage.id == other.id).count() == 1
        assert service.archive.versions_for(doc.id) == []

    def test_delete_missing_page_raises(self, tree):
        with pytest.raises(PageNotFoundError):
            tree.delete_recursive(424242)


class TestTreeView:

    def test_tree_is_nested_and_sorted(self, service, tree):
        docs = make_directory(service, "Docs")
        make_document(service, "B", parent_id=docs.id, sort_order=2)
        make_document(service, "A", parent_id=docs.id, sort_order=1)
        make_document(service, "Readme")

        nodes = tree.get_tree(PROJECT_ID)

        assert [n.title for n in nodes] == ["Docs", "Readme"]
        assert [c.title for c in nodes[0].children] == ["A", "B"]
        assert nodes[0].has_children
        assert not nodes[1].has_children

    def test_tree_is_scoped_to_project(self, service, tree):
        make_directory(service, "Mine")
        make_directory(service, "Theirs", project_id=PROJECT_ID + 1)
        assert [n.title for n in tree.get_tree(PROJECT_ID)] == ["Mine"]
