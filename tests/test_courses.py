from app.models.class_session import Assessment, Presence
from app.models.notification import Notification
from app.models.user import UserCourseRole
from tests.conftest import COURSE_PASSWORD, headers_for


def test_list_courses_and_my_courses(client, ids):
    r = client.get("/courses/", headers=headers_for(client, "outsider"))
    assert r.status_code == 200, r.text
    assert [c["title"] for c in r.json()] == ["Physics"]
    assert r.json()[0]["status"] == "Active"

    mine = client.get("/courses/me", headers=headers_for(client, "teacher"))
    assert mine.status_code == 200
    assert mine.json()[0]["role"] == "teacher"

    none = client.get("/courses/me", headers=headers_for(client, "outsider"))
    assert none.json() == []


def test_enroll_with_wrong_password_creates_no_role(client, db, ids):
    r = client.post(
        f"/courses/{ids['course']}/enroll",
        headers=headers_for(client, "outsider"),
        json={"password": "wrong"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Incorrect course password."}

    rows = db.query(UserCourseRole).filter(UserCourseRole.user_id == ids["outsider"]).count()
    assert rows == 0


def test_enroll_twice_conflicts(client, ids):
    headers = headers_for(client, "outsider")
    first = client.post(
        f"/courses/{ids['course']}/enroll", headers=headers, json={"password": COURSE_PASSWORD}
    )
    assert first.status_code == 201, first.text

    second = client.post(
        f"/courses/{ids['course']}/enroll", headers=headers, json={"password": COURSE_PASSWORD}
    )
    assert second.status_code == 409


def test_enroll_unknown_course_is_not_found(client):
    r = client.post(
        "/courses/9999/enroll", headers=headers_for(client, "outsider"), json={"password": "x"}
    )
    assert r.status_code == 404


def test_enroll_backfills_records_for_existing_sessions(client, db, ids, class_session):
    r = client.post(
        f"/courses/{ids['course']}/enroll",
        headers=headers_for(client, "outsider"),
        json={"password": COURSE_PASSWORD},
    )
    assert r.status_code == 201, r.text

    assessment = (
        db.query(Assessment)
        .filter(Assessment.user_id == ids["outsider"], Assessment.class_session_id == class_session)
        .one()
    )
    assert assessment.grade is None
    presence = (
        db.query(Presence)
        .filter(Presence.user_id == ids["outsider"], Presence.class_session_id == class_session)
        .one()
    )
    assert presence.present is False


def test_course_request_approval_flow(client, db, ids):
    created = client.post(
        "/courses/requests",
        headers=headers_for(client, "teacher"),
        json={"course_title": "Chemistry", "course_description": "Acids"},
    )
    assert created.status_code == 201, created.text
    request_id = created.json()["id"]

    forbidden = client.get("/courses/requests", headers=headers_for(client, "teacher"))
    assert forbidden.status_code == 403

    admin = headers_for(client, "admin")
    listed = client.get("/courses/requests", headers=admin)
    assert [req["id"] for req in listed.json()] == [request_id]

    approved = client.post(
        f"/courses/requests/{request_id}/approve", headers=admin, json={"password": "chem"}
    )
    assert approved.status_code == 201, approved.text
    course = approved.json()
    assert course["title"] == "Chemistry"
    assert course["status"] == "Active"

    mine = client.get("/courses/me", headers=headers_for(client, "teacher"))
    roles = {c["title"]: c["role"] for c in mine.json()}
    assert roles["Chemistry"] == "headteacher"

    notes = db.query(Notification).filter(Notification.user_id == ids["teacher"]).all()
    assert [n.type for n in notes] == ["course_request_approved"]

    assert client.get("/courses/requests", headers=admin).json() == []


def test_course_request_rejection_notifies_requester(client, db, ids):
    created = client.post(
        "/courses/requests",
        headers=headers_for(client, "alice"),
        json={"course_title": "Astronomy"},
    )
    request_id = created.json()["id"]

    r = client.delete(f"/courses/requests/{request_id}", headers=headers_for(client, "admin"))
    assert r.status_code == 200, r.text

    notes = db.query(Notification).filter(Notification.user_id == ids["alice"]).all()
    assert [n.type for n in notes] == ["course_request_rejected"]

    missing = client.delete(f"/courses/requests/{request_id}", headers=headers_for(client, "admin"))
    assert missing.status_code == 404


def test_headteacher_updates_details_and_password(client, ids):
    head = headers_for(client, "head")
    r = client.put(
        f"/courses/{ids['course']}/details",
        headers=head,
        json={"title": "Physics I", "status": "Archived"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["title"] == "Physics I"
    assert r.json()["status"] == "Archived"

    empty = client.put(f"/courses/{ids['course']}/details", headers=head, json={})
    assert empty.status_code == 400

    teacher = client.put(
        f"/courses/{ids['course']}/details",
        headers=headers_for(client, "teacher"),
        json={"title": "Nope"},
    )
    assert teacher.status_code == 403

    pw = client.put(
        f"/courses/{ids['course']}/password", headers=head, json={"new_password": "fresh"}
    )
    assert pw.status_code == 200, pw.text

    enroll = client.post(
        f"/courses/{ids['course']}/enroll",
        headers=headers_for(client, "outsider"),
        json={"password": "fresh"},
    )
    assert enroll.status_code == 201, enroll.text


def test_course_users_role_change_and_removal(client, ids):
    head = headers_for(client, "head")
    users = client.get(f"/courses/{ids['course']}/users", headers=headers_for(client, "alice"))
    assert users.status_code == 200, users.text
    roles = {u["username"]: u["role"] for u in users.json()}
    assert roles == {
        "head": "headteacher",
        "teacher": "teacher",
        "alice": "student",
        "bob": "student",
        "carol": "student",
    }

    bad = client.put(
        f"/courses/{ids['course']}/users/{ids['alice']}/role",
        headers=head,
        json={"new_role": "wizard"},
    )
    assert bad.status_code == 400

    promoted = client.put(
        f"/courses/{ids['course']}/users/{ids['alice']}/role",
        headers=head,
        json={"new_role": "teacher"},
    )
    assert promoted.status_code == 200, promoted.text

    removed = client.delete(f"/courses/{ids['course']}/users/{ids['bob']}", headers=head)
    assert removed.status_code == 200

    gone = client.delete(f"/courses/{ids['course']}/users/{ids['bob']}", headers=head)
    assert gone.status_code == 404

    roles = {
        u["username"]: u["role"]
        for u in client.get(f"/courses/{ids['course']}/users", headers=head).json()
    }
    assert roles["alice"] == "teacher"
    assert "bob" not in roles
