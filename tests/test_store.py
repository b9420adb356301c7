"""Unit tests for the per-page annotation store."""

import json

import pytest

from wikireview_core.errors import InvalidFormatError
from wikireview_core.models import Annotation
from wikireview_core.store import AnnotationStore, store_path_for


@pytest.fixture
def store():
    s = AnnotationStore("Example")
    s.create(section_path="Intro", sentence_text="first", opinion="fix", sentence_pos="1.2")
    s.create(section_path="Intro", sentence_text="zeroth", opinion="ok", sentence_pos="1.1")
    s.create(section_path="History", sentence_text="later", opinion="cite", sentence_pos="2.1")
    return s


class TestAnnotationStore:
    def test_create_assigns_ids(self, store):
        assert len(store) == 3
        assert len({a.id for a in store}) == 3
        assert all(a.id.startswith("anno-") for a in store)

    def test_add_replaces_same_id_in_place(self, store):
        first_id = store.annotations[0].id
        store.add(Annotation(id=first_id, section_path="Intro", opinion="replaced"))
        assert len(store) == 3
        assert store.annotations[0].opinion == "replaced"

    def test_update_and_resolve(self, store):
        ann_id = store.annotations[1].id
        store.update_opinion(ann_id, "changed")
        store.set_resolved(ann_id)
        assert store.get(ann_id).opinion == "changed"
        assert store.get(ann_id).resolved is True

    def test_update_unknown_id(self, store):
        with pytest.raises(KeyError):
            store.update_opinion("missing", "x")

    def test_remove_and_clear(self, store):
        ann_id = store.annotations[0].id
        assert store.remove(ann_id) is True
        assert ann_id not in store
        assert store.remove(ann_id) is False
        store.clear()
        assert len(store) == 0

    def test_groups_in_position_order(self, store):
        groups = store.groups()
        assert [g.section_path for g in groups] == ["Intro", "History"]
        assert [a.sentence_text for a in groups[0].annotations] == ["zeroth", "first"]


class TestPersistence:
    def test_save_and_load(self, store, tmp_path):
        path = store_path_for(tmp_path, "Example")
        store.save(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["pageName"] == "Example"
        assert {"id", "sectionPath", "sentencePos", "sentenceText", "opinion", "createdBy", "createdAt"} <= set(
            data["annotations"][0]
        )

        loaded = AnnotationStore.load(path, "Example")
        assert [a.id for a in loaded] == [a.id for a in store]

    def test_hand_edited_records_get_defaults(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"annotations": [{"sentenceText": "x"}, "junk"]}), encoding="utf-8")
        loaded = AnnotationStore.load(path, "Example")
        assert len(loaded) == 2
        assert loaded.page_name == "Example"
        first = loaded.annotations[0]
        assert first.id.startswith("import-")
        assert first.sentence_text == "x"
        assert first.section_path == ""

    @pytest.mark.parametrize("content", ["[1, 2]", '{"annotations": 3}', "not json"])
    def test_wrong_layout_is_invalid_format(self, tmp_path, content):
        path = tmp_path / "store.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(InvalidFormatError):
            AnnotationStore.load(path, "Example")

    def test_missing_file_gives_empty_store(self, tmp_path):
        loaded = AnnotationStore.load(tmp_path / "none.json", "Nothing")
        assert len(loaded) == 0
        assert loaded.page_name == "Nothing"

    def test_store_path_is_filesystem_safe(self, tmp_path):
        path = store_path_for(tmp_path, "Talk:Foo/Bar baz")
        assert path.parent == tmp_path / "annotations"
        assert path.name == "Talk_Foo_Bar_baz.json"
