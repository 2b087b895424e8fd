import os

from config import settings


def upload_path(public_path):
    return os.path.join(settings.UPLOAD_DIR, public_path.rsplit("/", 1)[-1])


def add_teacher(client, headers, photo=None, **fields):
    data = {"name": "Abdul Karim", "designation": "Assistant Teacher", "subject": "Mathematics"}
    data.update(fields)
    files = {"photo": ("karim.png", photo, "image/png")} if photo else None
    response = client.post("/teachers", data=data, files=files, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["insertedId"]


def test_add_and_get_teacher(client, admin_headers):
    teacher_id = add_teacher(client, admin_headers, photo=b"png-bytes", email="karim@school.test")

    teacher = client.get(f"/teachers/{teacher_id}").json()
    assert teacher["name"] == "Abdul Karim"
    assert teacher["email"] == "karim@school.test"
    assert teacher["photo"].startswith("/uploads/")
    assert os.path.exists(upload_path(teacher["photo"]))


def test_add_teacher_without_photo(client, admin_headers):
    teacher_id = add_teacher(client, admin_headers)
    assert client.get(f"/teachers/{teacher_id}").json()["photo"] is None


def test_add_teacher_requires_token(client):
    assert client.post("/teachers", data={"name": "X"}).status_code == 401


def test_list_teachers(client, admin_headers):
    add_teacher(client, admin_headers, name="A")
    add_teacher(client, admin_headers, name="B")
    assert [t["name"] for t in client.get("/teachers").json()] == ["A", "B"]


def test_get_missing_teacher(client):
    response = client.get("/teachers/999")
    assert response.status_code == 404
    assert response.json()["message"] == "Teacher not found"


def test_update_teacher_replaces_photo(client, admin_headers):
    teacher_id = add_teacher(client, admin_headers, photo=b"old")
    old_photo = client.get(f"/teachers/{teacher_id}").json()["photo"]

    response = client.put(
        f"/teachers/{teacher_id}",
        data={"designation": "Head Teacher"},
        files={"photo": ("new.png", b"new", "image/png")},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["designation"] == "Head Teacher"
    assert data["name"] == "Abdul Karim"
    assert data["photo"] != old_photo
    assert not os.path.exists(upload_path(old_photo))
    assert os.path.exists(upload_path(data["photo"]))


def test_delete_teacher(client, admin_headers):
    teacher_id = add_teacher(client, admin_headers, photo=b"png")
    photo = client.get(f"/teachers/{teacher_id}").json()["photo"]

    response = client.delete(f"/teachers/{teacher_id}", headers=admin_headers)
    assert response.json() == {"success": True, "deletedCount": 1}
    assert not os.path.exists(upload_path(photo))
    assert client.get(f"/teachers/{teacher_id}").status_code == 404
