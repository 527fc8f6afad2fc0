from tests.conftest import headers_for, make_file


def _url(ids, class_session, tail):
    return f"/courses/{ids['course']}/class_sessions/{class_session}/{tail}"


def test_upsert_assessment_and_read_own(client, ids, class_session):
    teacher = headers_for(client, "teacher")
    r = client.put(
        _url(ids, class_session, "assessments"),
        headers=teacher,
        json={"user_id": ids["alice"], "grade": 4.5, "feedback": "Good work"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["grade"] == 4.5

    again = client.put(
        _url(ids, class_session, "assessments"),
        headers=teacher,
        json={"user_id": ids["alice"], "grade": 3},
    )
    assert again.json()["id"] == r.json()["id"]
    assert again.json()["grade"] == 3

    mine = client.get(
        f"/courses/{ids['course']}/assessments/me", headers=headers_for(client, "alice")
    )
    assert mine.status_code == 200, mine.text
    assert [a["grade"] for a in mine.json()] == [3]


def test_grade_out_of_range_is_bad_request(client, ids, class_session):
    r = client.put(
        _url(ids, class_session, "assessments"),
        headers=headers_for(client, "teacher"),
        json={"user_id": ids["alice"], "grade": 5.5},
    )
    assert r.status_code == 400
    assert r.json()["error"].startswith("Grade must be")


def test_unknown_session_is_not_found(client, ids):
    r = client.get(
        _url(ids, 9999, "assessments_and_raports"), headers=headers_for(client, "teacher")
    )
    assert r.status_code == 404


def test_pending_section_hides_raport_files(client, storage, ids, class_session):
    file_id = make_file(storage)
    submitted = client.post(
        _url(ids, class_session, "submit_raport"),
        headers=headers_for(client, "alice"),
        json={"description": "Pair", "user_ids": [ids["alice"], ids["bob"]], "file_ids": [file_id]},
    )
    assert submitted.status_code == 201, submitted.text

    teacher = headers_for(client, "teacher")
    r = client.get(_url(ids, class_session, "assessments_and_raports"), headers=teacher)
    assert r.status_code == 200, r.text
    body = r.json()
    assert len(body["assessments"]) == 3
    [section] = body["sections"]
    assert section["status"] == "Pending"
    assert section["raports"][0]["files"] is None

    bob = headers_for(client, "bob")
    [note] = client.get("/notifications/", headers=bob).json()
    client.put(f"/notifications/{note['id']}/mark_as_read", headers=bob, json={"action": "accept"})

    after = client.get(_url(ids, class_session, "assessments_and_raports"), headers=teacher)
    [section] = after.json()["sections"]
    assert section["status"] == "Active"
    assert [f["id"] for f in section["raports"][0]["files"]] == [file_id]


def test_presence_upsert_keeps_one_row(client, ids, class_session):
    teacher = headers_for(client, "teacher")
    for present in (True, False, True):
        r = client.put(
            _url(ids, class_session, "presence"),
            headers=teacher,
            json={"user_id": ids["bob"], "present": present},
        )
        assert r.status_code == 200, r.text

    rows = client.get(_url(ids, class_session, "presence"), headers=teacher).json()
    bob_rows = [row for row in rows if row["user_id"] == ids["bob"]]
    assert len(bob_rows) == 1
    assert bob_rows[0]["present"] is True

    student = client.get(_url(ids, class_session, "presence"), headers=headers_for(client, "bob"))
    assert student.status_code == 403
