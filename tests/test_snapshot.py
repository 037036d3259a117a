"""Tests for snapshot persistence."""

import json

import pytest

from kaa_courses.errors import LoadError
from kaa_courses.storage.models import CourseRecord, Link, Snapshot
from kaa_courses.storage.snapshot import load_snapshot, write_snapshot


@pytest.fixture
def snapshot():
    return Snapshot(
        source="https://www.kaa.org.tw/news_class_list.php",
        updated_at="2024-05-01T07:30:00.000Z",
        courses=[
            CourseRecord(
                title="結構設計實務",
                date="2024-05-10",
                deadline="2024-05-10",
                time="09:00-12:00",
                links=[Link("課程資訊", "https://www.kaa.org.tw/news_class_info.php?b=12")],
                detail_url="https://www.kaa.org.tw/news_class_info.php?b=12",
                page=1,
                credits=6,
                attachments=[Link("簡章", "https://www.kaa.org.tw/files/a.pdf")],
            ),
            CourseRecord(title="建築法規", page=2),
        ],
    )


class TestSnapshotFile:
    def test_round_trip(self, tmp_path, snapshot):
        path = write_snapshot(snapshot, tmp_path / "data" / "courses.json")

        loaded = load_snapshot(path)

        assert loaded == snapshot

    def test_json_shape(self, tmp_path, snapshot):
        path = write_snapshot(snapshot, tmp_path / "courses.json")

        payload = json.loads(path.read_text(encoding="utf-8"))

        assert list(payload) == ["source", "updatedAt", "total", "courses"]
        assert payload["total"] == 2
        assert payload["courses"][0]["detailUrl"].endswith("b=12")
        assert payload["courses"][0]["links"][0] == {
            "label": "課程資訊",
            "url": "https://www.kaa.org.tw/news_class_info.php?b=12",
        }
        assert "結構設計實務" in path.read_text(encoding="utf-8")

    def test_replaces_previous_snapshot(self, tmp_path, snapshot):
        path = tmp_path / "courses.json"
        write_snapshot(snapshot, path)

        write_snapshot(Snapshot(source=snapshot.source, updated_at="x", courses=[]), path)

        assert load_snapshot(path).courses == []
        assert not (tmp_path / "courses.json.tmp").exists()

    def test_legacy_keys(self, tmp_path):
        path = tmp_path / "legacy.json"
        path.write_text(
            json.dumps({"scrapedAt": "2023-01-01T00:00:00Z", "documents": [{"title": "舊課程"}]}),
            encoding="utf-8",
        )

        loaded = load_snapshot(path)

        assert loaded.updated_at == "2023-01-01T00:00:00Z"
        assert [course.title for course in loaded.courses] == ["舊課程"]

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"courses": [1]}'])
    def test_invalid_content(self, tmp_path, content):
        path = tmp_path / "broken.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(LoadError):
            load_snapshot(path)

    @pytest.mark.parametrize(
        "payload",
        [
            {"courses": [{"title": "結構設計實務", "date": 20240510}]},
            {"courses": [{"title": 123}]},
            {"courses": [{"title": "結構設計實務", "credits": "6"}]},
            {"courses": [{"title": "結構設計實務", "credits": True}]},
            {"courses": [{"title": "結構設計實務", "links": [{"label": "x", "url": 5}]}]},
            {"courses": {"title": "結構設計實務"}},
            {"updatedAt": 1714548600, "courses": []},
        ],
    )
    def test_wrong_field_types(self, tmp_path, payload):
        path = tmp_path / "typed.json"
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

        with pytest.raises(LoadError):
            load_snapshot(path)

    def test_decimal_credits_and_missing_fields_load(self, tmp_path):
        path = tmp_path / "courses.json"
        path.write_text(
            json.dumps({"courses": [{"title": None, "credits": 6.5, "page": 3}]}), encoding="utf-8"
        )

        (course,) = load_snapshot(path).courses

        assert course.title == ""
        assert course.credits == 6.5
        assert course.page == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            load_snapshot(tmp_path / "missing.json")

    def test_create_stamps_utc_time(self, snapshot):
        created = Snapshot.create(snapshot.source, snapshot.courses)

        assert created.updated_at.endswith("Z")
        assert created.total == 2
