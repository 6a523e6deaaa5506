import importlib.util
from pathlib import Path

import pytest

from factories import make_driver, make_feedback
from ridematch.repositories.sql import SqlLearningRepository
from ridematch.services.driver_directory import InMemoryDriverDirectory

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "replay_feedback.py"


@pytest.fixture
def replay_module(monkeypatch):
    spec = importlib.util.spec_from_file_location("replay_feedback", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    directory = InMemoryDriverDirectory([make_driver("driver-1", rating=4.0, seats=6)])
    monkeypatch.setattr(module, "build_driver_directory", lambda: directory)
    return module


def test_replay_counts_and_learns_from_directory(replay_module, sql_session, tmp_path):
    feedback = make_feedback("ride-1", satisfaction="satisfied")
    export = tmp_path / "feedback.jsonl"
    export.write_text(
        "\n".join([
            feedback.model_dump_json(),
            "",
            '{"ride_id": "broken"}',
            feedback.model_dump_json(),
            make_feedback("ride-2", satisfaction="satisfied").model_dump_json(),
        ]),
        encoding="utf-8",
    )

    counts = replay_module.replay(export, replay_module.build_service(sql_session))

    assert counts == {"recorded": 2, "duplicate": 1, "invalid": 1}

    profile = SqlLearningRepository(sql_session).get_profile("rider-1")
    # driver attributes came from the directory, not the feedback
    assert profile.preferred_rating_range != (4.5, 5.0)
    assert profile.preferred_car_size == 5
    assert profile.driver_loyalty == {"driver-1": 14.0}
    assert profile.feedback_count == 2
