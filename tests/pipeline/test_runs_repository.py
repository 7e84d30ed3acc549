"""Tests for the SQLite collection run repository."""

from src.ingestion.db import CollectionRunRepository, CollectionStatus


def test_create_and_finish_run(run_repository):
    run = run_repository.create_run("CEB", "2024-02")

    assert run.id is not None
    assert run.status is CollectionStatus.IN_PROGRESS

    finished = run_repository.finish_run(
        run_id=run.id,
        status=CollectionStatus.SUCCESS,
        total_saved=174,
        total_days=29,
        total_api_calls=58,
    )

    assert finished.status is CollectionStatus.SUCCESS
    assert (finished.total_saved, finished.total_days, finished.total_api_calls) == (174, 29, 58)
    assert finished.error_message is None


def test_get_latest_is_newest_first_and_limited(run_repository):
    ids = [run_repository.create_run("CEB", f"2024-0{month}").id for month in (1, 2, 3)]

    latest = run_repository.get_latest(limit=2)

    assert [run.id for run in latest] == [ids[2], ids[1]]


def test_get_by_month(run_repository):
    run_repository.create_run("CEB", "2024-02")
    run_repository.create_run("MNL", "2024-02")
    run_repository.create_run("CEB", "2024-03")

    runs = run_repository.get_by_month("CEB", "2024-02")

    assert [(run.departure_iata, run.month) for run in runs] == [("CEB", "2024-02")]


def test_missing_run_returns_none(run_repository):
    assert run_repository.get_by_id(999) is None


def test_to_dict_uses_api_field_names(run_repository):
    run = run_repository.create_run("CEB", "2024-02")

    data = run.to_dict()

    assert data["departureIata"] == "CEB"
    assert data["status"] == "in_progress"
    assert data["totalApiCalls"] == 0
    assert "createdAt" in data


def test_database_file_is_created(tmp_path):
    db_path = tmp_path / "nested" / "runs.db"

    CollectionRunRepository(db_path=db_path)

    assert db_path.exists()
