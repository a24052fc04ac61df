import os

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def upload_dir(app):
    return app.state.storage.root


def test_get_profile(client, student):
    user_id, headers = student
    resp = client.get("/profile", headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == user_id
    assert data["country"] == "Morocco"
    assert data["profile_photo_url"] is None
    assert "password_hash" not in data
    assert "reset_token" not in data


def test_update_profile_merges_fields(client, student):
    _, headers = student
    resp = client.put("/profile", json={"city": "Rabat", "level": "2BAC"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["city"] == "Rabat"

    resp = client.put("/profile/update", json={"school": "Lycee Descartes"}, headers=headers)
    data = resp.json()
    assert data["school"] == "Lycee Descartes"
    assert data["city"] == "Rabat"
    assert data["first_name"] == "Sara"


def test_update_profile_rejects_blank_name(client, student):
    _, headers = student
    resp = client.put("/profile", json={"first_name": "   "}, headers=headers)
    assert resp.status_code == 400
    assert client.get("/profile", headers=headers).json()["first_name"] == "Sara"


def test_photo_upload_replaces_previous(app, client, student):
    _, headers = student
    first = client.post(
        "/profile/photo",
        files={"profile_photo": ("me.png", PNG, "image/png")},
        headers=headers,
    )
    assert first.status_code == 200
    first_url = first.json()["photo_url"]
    assert first_url.startswith("/uploads/profile_photo-")
    assert first_url.endswith(".png")
    assert client.get(first_url).content == PNG

    second = client.post(
        "/profile/photo",
        files={"profile_photo": ("me2.png", PNG, "image/png")},
        headers=headers,
    )
    assert second.status_code == 200
    second_url = second.json()["photo_url"]
    assert second_url != first_url
    assert os.listdir(upload_dir(app)) == [second_url.rsplit("/", 1)[1]]


def test_photo_upload_rejects_non_image(app, client, student):
    _, headers = student
    resp = client.post(
        "/profile/photo",
        files={"profile_photo": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "UnsupportedFileType"
    assert os.listdir(upload_dir(app)) == []


def test_photo_delete(app, client, student):
    _, headers = student
    url = client.post(
        "/profile/photo",
        files={"profile_photo": ("me.png", PNG, "image/png")},
        headers=headers,
    ).json()["photo_url"]

    resp = client.delete("/profile/photo", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user"]["profile_photo_url"] is None
    assert os.listdir(upload_dir(app)) == []
    assert client.get(url).status_code == 404
