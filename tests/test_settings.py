def test_defaults_created_on_first_read(client, student):
    _, headers = student
    resp = client.get("/user-settings", headers=headers)
    assert resp.status_code == 200
    settings = resp.json()["settings"]
    assert settings["language"] == "fr"
    assert settings["notifications"]["email_notifications"] is True
    assert settings["notifications"]["marketing_emails"] is False
    assert settings["appearance"] == {"theme": "light", "font_size": "medium", "reduced_motion": False}
    assert settings["privacy"]["profile_visibility"] == "public"

    assert client.get("/user-settings", headers=headers).json()["settings"] == settings


def test_replace_settings(client, student):
    _, headers = student
    body = {
        "settings": {
            "notifications": {
                "email_notifications": False,
                "course_updates": True,
                "new_announcements": False,
                "marketing_emails": True,
            },
            "appearance": {"theme": "dark", "font_size": "large", "reduced_motion": True},
            "privacy": {
                "profile_visibility": "private",
                "show_enrolled_courses": False,
                "show_activity_status": False,
            },
            "language": "en",
        }
    }
    resp = client.put("/user-settings", json=body, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["settings"] == body["settings"]
    assert client.get("/user-settings", headers=headers).json()["settings"] == body["settings"]


def test_invalid_theme_rejected(client, student):
    _, headers = student
    resp = client.put(
        "/user-settings",
        json={"settings": {"appearance": {"theme": "neon"}}},
        headers=headers,
    )
    assert resp.status_code == 400


def test_settings_require_auth(client):
    assert client.get("/user-settings").status_code == 401
