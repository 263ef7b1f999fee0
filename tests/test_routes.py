"""
Tests for the notation and volume row endpoints

Uses the conftest.py `client` fixture.
"""

import pytest


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True}


class TestParseNotation:
    """POST /notation/parse"""

    def test_parse_text(self, client, sample_text):
        response = client.post("/notation/parse", json={"text": sample_text})

        assert response.status_code == 200
        data = response.json()
        exercises = data["workout"]["exercises"]
        assert [e["name"] for e in exercises] == ["Bench Press", "Run", "Plank"]
        assert data["progress"][exercises[0]["id"]] == [True, True, True, False, False]
        assert data["warnings"] == []

    def test_parse_keeps_existing_ids(self, client, sample_text, sample_workout_dict):
        response = client.post("/notation/parse", json={
            "text": sample_text,
            "workout": sample_workout_dict,
        })

        data = response.json()
        assert data["workout"]["id"] == "workout-1"
        assert [e["id"] for e in data["workout"]["exercises"]] == ["ex-bench", "ex-run", "ex-plank"]

    def test_parse_complete_all(self, client):
        response = client.post("/notation/parse", json={"text": "- Squat\n3x5", "complete_all": True})

        data = response.json()
        squat_id = data["workout"]["exercises"][0]["id"]
        assert data["progress"][squat_id] == [True, True, True]

    def test_parse_reports_warnings(self, client):
        response = client.post("/notation/parse", json={"text": "- Squat\n500x5"})

        data = response.json()
        assert len(data["warnings"]) == 1
        assert len(data["workout"]["exercises"][0]["sets"]) == 99

    def test_missing_text(self, client):
        response = client.post("/notation/parse", json={})
        assert response.status_code == 422

    def test_text_too_long(self, client):
        response = client.post("/notation/parse", json={"text": "a" * 50001})
        assert response.status_code == 422


class TestGenerateNotation:
    """POST /notation/generate"""

    def test_generate(self, client, sample_workout_dict, sample_progress):
        response = client.post("/notation/generate", json={
            "workout": sample_workout_dict,
            "progress": sample_progress,
        })

        assert response.status_code == 200
        assert response.json()["text"] == "- Bench Press\n3x10x60kg ++\n\n- Run\n5km +\n\n- Plank +"

    def test_generate_with_ids(self, client, sample_workout_dict):
        response = client.post("/notation/generate", json={
            "workout": sample_workout_dict,
            "include_ids": True,
        })

        assert response.json()["text"].startswith("- Bench Press #id:ex-bench")

    def test_accepts_camel_case_sets(self, client):
        workout = {
            "exercises": [{
                "id": "ex-1",
                "name": "Row",
                "sets": [{"volumeType": "duration", "duration": 600, "volumeRowId": "r"}],
                "checkIns": [],
            }],
            "date": "2026-01-01",
        }
        response = client.post("/notation/generate", json={"workout": workout})

        assert response.json()["text"] == "- Row\n10min"


class TestVolumeRows:
    """/volume-rows endpoints"""

    def _body(self, workout, progress, **extra):
        body = {"workout": workout, "progress": progress, "exercise_id": "ex-bench"}
        body.update(extra)
        return body

    def test_list_rows(self, client, sample_workout_dict, sample_progress):
        response = client.post("/volume-rows", json=self._body(sample_workout_dict, sample_progress))

        rows = response.json()["rows"]
        assert len(rows) == 1
        assert rows[0]["total_sets"] == 3
        assert rows[0]["weight"] == 60.0

    def test_update_row(self, client, sample_workout_dict, sample_progress):
        response = client.post("/volume-rows/update", json=self._body(
            sample_workout_dict, sample_progress, row_index=0, updates={"totalSets": 5, "reps": "8"},
        ))

        assert response.status_code == 200
        data = response.json()
        assert data["changed"] is True
        assert data["rows"][0]["total_sets"] == 5
        assert data["rows"][0]["reps"] == 8
        assert data["progress"]["ex-bench"] == [True, False, True, False, False]

    def test_update_invalid_row_index(self, client, sample_workout_dict, sample_progress):
        response = client.post("/volume-rows/update", json=self._body(
            sample_workout_dict, sample_progress, row_index=9, updates={"reps": 8},
        ))

        assert response.status_code == 200
        data = response.json()
        assert data["changed"] is False
        assert data["workout"] == sample_workout_dict

    def test_update_clamps_values(self, client, sample_workout_dict, sample_progress):
        response = client.post("/volume-rows/update", json=self._body(
            sample_workout_dict, sample_progress, row_index=0, updates={"totalSets": 99, "reps": -1},
        ))

        row = response.json()["rows"][0]
        assert row["total_sets"] == 15
        assert row["reps"] == 1

    def test_update_cannot_turn_row_into_completion(self, client, sample_workout_dict, sample_progress):
        response = client.post("/volume-rows/update", json=self._body(
            sample_workout_dict, sample_progress, row_index=0, updates={"type": "completion"},
        ))

        data = response.json()
        assert data["changed"] is False
        assert len(data["rows"]) == 1

    def test_add_row(self, client, sample_workout_dict, sample_progress):
        response = client.post("/volume-rows/add", json=self._body(sample_workout_dict, sample_progress))

        data = response.json()
        assert data["changed"] is True
        assert len(data["rows"]) == 2
        assert data["progress"]["ex-bench"] == [True, False, True, False, False, False]

    def test_remove_row(self, client, sample_workout_dict, sample_progress):
        response = client.post("/volume-rows/remove", json=self._body(
            sample_workout_dict, sample_progress, row_index=0,
        ))

        data = response.json()
        assert data["rows"] == []
        assert data["progress"]["ex-bench"] == []

    def test_normalize(self, client, sample_workout_dict, sample_progress):
        for exercise_set in sample_workout_dict["exercises"][0]["sets"]:
            exercise_set["volume_row_id"] = None

        response = client.post("/volume-rows/normalize", json=self._body(sample_workout_dict, sample_progress))

        data = response.json()
        assert data["changed"] is True
        assert len(data["rows"]) == 1
        assert data["rows"][0]["total_sets"] == 3

    def test_unknown_exercise(self, client, sample_workout_dict):
        response = client.post("/volume-rows/add", json={
            "workout": sample_workout_dict,
            "exercise_id": "ex-missing",
        })

        assert response.status_code == 400
        assert "ex-missing" in response.json()["detail"]

    @pytest.mark.parametrize("path", ["/volume-rows/update", "/volume-rows/remove"])
    def test_row_index_required(self, client, sample_workout_dict, path):
        response = client.post(path, json={"workout": sample_workout_dict, "exercise_id": "ex-bench"})
        assert response.status_code == 422
