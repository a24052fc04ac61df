import os

from myclass.database import Course

PDF = b"%PDF-1.4\n" + b"0" * 128
MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64


def stored_files(app):
    return sorted(os.listdir(app.state.storage.root))


def create_course(client, headers, files=None, **fields):
    data = {"title": "Intro", "description": "desc"}
    data.update(fields)
    return client.post("/courses", data=data, files=files, headers=headers)


def test_create_without_file_then_attach_pdf(client, admin, db):
    _, headers = admin
    resp = create_course(client, headers)
    assert resp.status_code == 201
    course = resp.json()
    assert course["file_url"] is None
    assert course["file_type"] is None
    assert course["creator"]["first_name"] == "Admin"

    resp = client.put(
        f"/courses/{course['id']}",
        files={"course_file": ("notes.pdf", PDF, "application/pdf")},
        headers=headers,
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["file_url"].endswith(".pdf")
    assert updated["file_type"] == "pdf"
    assert updated["title"] == "Intro"
    assert updated["description"] == "desc"

    row = db.get(Course, course["id"])
    assert row.file_url == updated["file_url"]


def test_create_with_file_stores_it(app, client, admin):
    _, headers = admin
    resp = create_course(
        client, headers, files={"course_file": ("lesson.mp4", MP4, "video/mp4")}, category="math"
    )
    assert resp.status_code == 201
    course = resp.json()
    assert course["file_type"] == "video"
    assert stored_files(app) == [course["file_url"].rsplit("/", 1)[1]]
    assert client.get(course["file_url"]).content == MP4


def test_create_missing_title_leaves_no_file(app, client, admin, db):
    _, headers = admin
    resp = client.post(
        "/courses",
        data={"description": "desc"},
        files={"course_file": ("notes.pdf", PDF, "application/pdf")},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"
    assert stored_files(app) == []
    assert db.query(Course).count() == 0


def test_create_rejects_unsupported_type(app, client, admin, db):
    _, headers = admin
    resp = create_course(
        client, headers, files={"course_file": ("pic.png", b"png", "image/png")}
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "UnsupportedFileType"
    assert stored_files(app) == []
    assert db.query(Course).count() == 0


def test_create_rejects_oversized_file(app, client, admin, db):
    _, headers = admin
    too_big = b"0" * (app.state.settings.max_upload_bytes + 1)
    resp = create_course(
        client, headers, files={"course_file": ("big.pdf", too_big, "application/pdf")}
    )
    assert resp.status_code == 413
    assert resp.json()["error"] == "FileTooLarge"
    assert stored_files(app) == []
    assert db.query(Course).count() == 0


def test_replace_file_removes_old_one(app, client, admin):
    _, headers = admin
    first = create_course(
        client, headers, files={"course_file": ("a.pdf", PDF, "application/pdf")}
    ).json()
    resp = client.put(
        f"/courses/{first['id']}",
        data={"title": "Intro v2"},
        files={"course_file": ("b.mp4", MP4, "video/mp4")},
        headers=headers,
    )
    assert resp.status_code == 200
    second = resp.json()
    assert second["title"] == "Intro v2"
    assert second["file_type"] == "video"
    assert stored_files(app) == [second["file_url"].rsplit("/", 1)[1]]


def test_update_missing_course_discards_staged_file(app, client, admin, db):
    _, headers = admin
    resp = client.put(
        "/courses/999",
        files={"course_file": ("a.pdf", PDF, "application/pdf")},
        headers=headers,
    )
    assert resp.status_code == 404
    assert stored_files(app) == []
    assert db.query(Course).count() == 0


def test_update_cannot_blank_required_field(app, client, admin):
    _, headers = admin
    course = create_course(
        client, headers, files={"course_file": ("a.pdf", PDF, "application/pdf")}
    ).json()
    resp = client.put(
        f"/courses/{course['id']}",
        data={"title": "  "},
        files={"course_file": ("b.pdf", PDF, "application/pdf")},
        headers=headers,
    )
    assert resp.status_code == 400
    assert stored_files(app) == [course["file_url"].rsplit("/", 1)[1]]
    assert client.get(f"/courses/{course['id']}").json()["title"] == "Intro"


def test_delete_removes_file(app, client, admin):
    _, headers = admin
    course = create_course(
        client, headers, files={"course_file": ("a.pdf", PDF, "application/pdf")}
    ).json()
    resp = client.delete(f"/courses/{course['id']}", headers=headers)
    assert resp.status_code == 200
    assert stored_files(app) == []
    assert client.get(f"/courses/{course['id']}").status_code == 404


def test_get_unknown_course(client):
    resp = client.get("/courses/12345")
    assert resp.status_code == 404
    assert resp.json() == {"error": "NotFound", "detail": "Course not found"}


def test_list_filter_and_sort(client, admin):
    _, headers = admin
    create_course(client, headers, title="Physique", category="science")
    create_course(client, headers, title="Algebre", category="math")
    create_course(client, headers, title="Chimie", category="science")

    resp = client.get("/courses", params={"category": "science", "sort": "title", "order": "asc"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [c["title"] for c in data["items"]] == ["Chimie", "Physique"]

    newest_first = client.get("/courses").json()["items"]
    assert [c["title"] for c in newest_first] == ["Chimie", "Algebre", "Physique"]


def test_unknown_sort_column_falls_back_to_default(client, admin):
    _, headers = admin
    create_course(client, headers, title="A")
    create_course(client, headers, title="B")
    resp = client.get("/courses", params={"sort": "title; DROP TABLE courses"})
    assert resp.status_code == 200
    assert [c["title"] for c in resp.json()["items"]] == ["B", "A"]


def test_student_cannot_mutate_courses(client, admin, student):
    _, admin_headers = admin
    _, headers = student
    course = create_course(client, admin_headers).json()

    assert create_course(client, headers).status_code == 403
    assert client.put(f"/courses/{course['id']}", data={"title": "x"}, headers=headers).status_code == 403
    assert client.delete(f"/courses/{course['id']}", headers=headers).status_code == 403
    assert client.get(f"/courses/{course['id']}").json()["title"] == "Intro"


def test_course_mutation_requires_token(client):
    assert create_course(client, {}).status_code == 401
