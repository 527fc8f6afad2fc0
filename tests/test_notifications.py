from app.models.notification import Notification
from app.models.section import Section, UserSection
from tests.conftest import headers_for


def _group_raport(client, ids, class_session, members):
    r = client.post(
        f"/courses/{ids['course']}/class_sessions/{class_session}/submit_raport",
        headers=headers_for(client, "alice"),
        json={"description": "Group", "user_ids": [ids[m] for m in members]},
    )
    assert r.status_code == 201, r.text
    return r.json()["section"]["id"]


def _invitation(client, username):
    headers = headers_for(client, username)
    [note] = client.get("/notifications/", headers=headers).json()
    return headers, note


def test_last_answer_activates_section_and_clears_notifications(client, db, ids, class_session):
    section_id = _group_raport(client, ids, class_session, ["alice", "bob", "carol"])

    bob, bob_note = _invitation(client, "bob")
    r = client.put(f"/notifications/{bob_note['id']}/mark_as_read", headers=bob, json={"action": "accept"})
    assert r.status_code == 200, r.text
    assert r.json()["outcome"] == "read"
    assert r.json()["notification"]["is_read"] is True

    section = db.get(Section, section_id)
    assert section.status.name == "Pending"
    db.expire_all()

    carol, carol_note = _invitation(client, "carol")
    r = client.put(
        f"/notifications/{carol_note['id']}/mark_as_read", headers=carol, json={"action": "accept"}
    )
    assert r.status_code == 200, r.text
    assert r.json()["outcome"] == "activated"
    assert r.json()["section_id"] == section_id

    db.expire_all()
    assert db.get(Section, section_id).status.name == "Active"
    assert db.query(Notification).filter(Notification.section_id == section_id).count() == 0


def test_deny_removes_membership_but_keeps_section(client, db, ids, class_session):
    section_id = _group_raport(client, ids, class_session, ["alice", "bob", "carol"])

    bob, note = _invitation(client, "bob")
    r = client.put(f"/notifications/{note['id']}/mark_as_read", headers=bob, json={"action": "deny"})
    assert r.status_code == 200, r.text
    assert r.json()["action_performed"] == "deny"

    members = {m.user_id for m in db.query(UserSection).filter(UserSection.section_id == section_id)}
    assert members == {ids["alice"], ids["carol"]}
    assert db.get(Section, section_id) is not None
    assert db.get(Section, section_id).status.name == "Pending"


def test_section_where_everyone_denies_still_activates(client, db, ids, class_session):
    section_id = _group_raport(client, ids, class_session, ["alice", "bob"])

    bob, note = _invitation(client, "bob")
    r = client.put(f"/notifications/{note['id']}/mark_as_read", headers=bob, json={"action": "deny"})
    assert r.json()["outcome"] == "activated"

    section = db.get(Section, section_id)
    assert section.status.name == "Active"
    members = {m.user_id for m in db.query(UserSection).filter(UserSection.section_id == section_id)}
    assert members == {ids["alice"]}


def test_plain_notification_is_deleted_once_read(client, db, ids):
    note = Notification(user_id=ids["bob"], type="course_request_approved", message="Done")
    db.add(note)
    db.commit()

    bob = headers_for(client, "bob")
    r = client.put(f"/notifications/{note.id}/mark_as_read", headers=bob)
    assert r.status_code == 200, r.text
    assert r.json()["outcome"] == "deleted"
    assert client.get("/notifications/", headers=bob).json() == []


def test_someone_elses_notification_is_not_found(client, ids, class_session):
    _group_raport(client, ids, class_session, ["alice", "bob"])
    _, note = _invitation(client, "bob")

    r = client.put(
        f"/notifications/{note['id']}/mark_as_read", headers=headers_for(client, "carol"), json={}
    )
    assert r.status_code == 404


def test_filter_by_read_state(client, db, ids, class_session):
    _group_raport(client, ids, class_session, ["alice", "bob", "carol"])
    db.add(Notification(user_id=ids["bob"], type="course_request_rejected", message="No", is_read=True))
    db.commit()

    bob = headers_for(client, "bob")
    unread = client.get("/notifications/", headers=bob, params={"is_read": False}).json()
    read = client.get("/notifications/", headers=bob, params={"is_read": True}).json()
    assert [n["type"] for n in unread] == ["raport_section_addition"]
    assert [n["message"] for n in read] == ["No"]
    assert len(client.get("/notifications/", headers=bob).json()) == 2


def test_invalid_action_is_rejected(client, ids, class_session):
    _group_raport(client, ids, class_session, ["alice", "bob"])
    bob, note = _invitation(client, "bob")
    r = client.put(f"/notifications/{note['id']}/mark_as_read", headers=bob, json={"action": "maybe"})
    assert r.status_code == 422
