from app.models.file import File
from app.services.files import reference_count, release_file
from tests.conftest import headers_for, make_file


def test_upload_returns_metadata_and_stores_file(client, storage, ids):
    r = client.post(
        "/files/upload",
        headers=headers_for(client, "alice"),
        files={"file": ("lab.txt", b"measurements", "text/plain")},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["name"] == "lab.txt"
    assert body["type"].startswith("text/plain")
    assert body["url"].startswith("/uploads/")
    assert body["url"].endswith("-lab.txt")
    assert storage.path_for(body["url"]).read_bytes() == b"measurements"


def test_upload_without_file_is_bad_request(client):
    r = client.post("/files/upload", headers=headers_for(client, "alice"))
    assert r.status_code == 400
    assert r.json() == {"error": "No file uploaded."}


def test_material_file_download_respects_visibility(client, storage, ids):
    teacher = headers_for(client, "teacher")
    file_id = make_file(storage, "hidden.txt", b"secret")
    client.post(
        f"/courses/{ids['course']}/materials",
        headers=teacher,
        json={"title": "Hidden", "visible": False, "file_ids": [file_id]},
    )

    staff = client.get(f"/files/download/{file_id}", headers=teacher)
    assert staff.status_code == 200
    assert staff.content == b"secret"

    student = client.get(f"/files/download/{file_id}", headers=headers_for(client, "alice"))
    assert student.status_code == 403

    outsider = client.get(f"/files/download/{file_id}", headers=headers_for(client, "outsider"))
    assert outsider.status_code == 403


def test_raport_file_download_for_members_and_staff(client, storage, ids, class_session):
    file_id = make_file(storage, "report.txt", b"data")
    client.post(
        f"/courses/{ids['course']}/class_sessions/{class_session}/submit_raport",
        headers=headers_for(client, "alice"),
        json={"description": "Solo", "user_ids": [ids["alice"]], "file_ids": [file_id]},
    )

    member = client.get(f"/files/download-raport/{file_id}", headers=headers_for(client, "alice"))
    assert member.status_code == 200
    assert member.content == b"data"

    staff = client.get(f"/files/download-raport/{file_id}", headers=headers_for(client, "head"))
    assert staff.status_code == 200

    classmate = client.get(f"/files/download-raport/{file_id}", headers=headers_for(client, "bob"))
    assert classmate.status_code == 403


def test_download_missing_on_disk_is_not_found(client, storage, ids):
    teacher = headers_for(client, "teacher")
    file_id = make_file(storage, "gone.txt")
    client.post(
        f"/courses/{ids['course']}/materials",
        headers=teacher,
        json={"title": "Gone", "file_ids": [file_id]},
    )
    (storage.root / "seed-gone.txt").unlink()

    r = client.get(f"/files/download/{file_id}", headers=teacher)
    assert r.status_code == 404


def test_release_keeps_referenced_file(client, db, storage, ids):
    teacher = headers_for(client, "teacher")
    file_id = make_file(storage)
    client.post(
        f"/courses/{ids['course']}/materials",
        headers=teacher,
        json={"title": "Notes", "file_ids": [file_id]},
    )

    assert reference_count(db, file_id) == 1
    assert release_file(db, file_id) is None
    db.rollback()
    assert db.get(File, file_id) is not None


def test_release_deletes_unreferenced_file(db, storage):
    file_id = make_file(storage)
    assert reference_count(db, file_id) == 0

    url = release_file(db, file_id)
    db.commit()
    assert url == "/uploads/seed-notes.txt"
    assert db.get(File, file_id) is None
