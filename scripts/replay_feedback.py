#!/usr/bin/env python3
"""Replay ride feedback from a JSON Lines export into the learning store.

Each line is one RideFeedback payload. Rides already recorded are skipped
(ride_id is unique), so an export can be replayed safely after a partial run.

Run from the repository root:
    python scripts/replay_feedback.py exports/feedback.jsonl
Or via Docker:
    docker compose exec celery_worker python /app/scripts/replay_feedback.py /data/feedback.jsonl
"""

import sys
from pathlib import Path

# Add backend to path when running as script
backend_dir = Path(__file__).resolve().parent.parent / "backend"
if backend_dir.exists():
    sys.path.insert(0, str(backend_dir))

from collections import Counter
from datetime import datetime, timezone

from pydantic import ValidationError

from ridematch.errors import FeedbackRejectedError
from ridematch.models.base import SyncSessionLocal
from ridematch.repositories.sql import SqlLearningRepository
from ridematch.schemas.feedback import RideFeedback
from ridematch.services.driver_directory import build_driver_directory
from ridematch.services.learning_service import LearningService


def replay(path: Path, service: LearningService) -> Counter:
    counts: Counter = Counter()
    with path.open(encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                feedback = RideFeedback.model_validate_json(line)
            except ValidationError as e:
                print(f"  line {line_no}: invalid payload ({e.error_count()} errors), skipped")
                counts["invalid"] += 1
                continue

            try:
                outcome = service.record_feedback(feedback)
            except FeedbackRejectedError as e:
                print(f"  line {line_no}: {e}")
                counts["rejected"] += 1
                continue

            counts[outcome.status] += 1
            if outcome.failed_steps:
                counts["partial"] += 1
    return counts


def build_service(db) -> LearningService:
    """Same wiring as the record_ride_feedback task."""
    return LearningService(SqlLearningRepository(db), build_driver_directory())


def main(argv: list[str]) -> Counter:
    if len(argv) != 2:
        print("usage: replay_feedback.py FILE.jsonl")
        sys.exit(2)

    print("=" * 60)
    print("Ride Feedback Replay")
    print(f"Started at: {datetime.now(timezone.utc).isoformat()}")
    print("=" * 60)

    db = SyncSessionLocal()
    try:
        counts = replay(Path(argv[1]), build_service(db))
        print("\n" + "=" * 60)
        print("REPLAY COMPLETE")
        print("=" * 60)
        print(f"Results: {dict(counts)}")
        print(f"Finished at: {datetime.now(timezone.utc).isoformat()}")
        return counts
    finally:
        db.close()


if __name__ == "__main__":
    main(sys.argv)
