from datetime import date, timedelta

from charsheet.models import Character, PlaySession

STATS = {"str": 13, "con": 12, "pow": 13, "dex": 11, "app": 10, "siz": 12, "int": 14, "edu": 16, "luck": 55}


def _create(client, **overrides):
    body = {"name": "山田太郎", "occupation": "私立探偵", "age": 28, "stats": STATS}
    body.update(overrides)
    response = client.post("/api/v1/characters", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _session(client, character_id, **overrides):
    body = {
        "scenarioTitle": "悪霊の家",
        "playDate": date.today().isoformat(),
        "skillGrowth": [{"skillName": "spotHidden", "oldValue": 25, "newValue": 30}],
        "sanityLoss": 4,
        "insanitySymptoms": [{"type": "phobia", "name": "暗所恐怖症"}],
    }
    body.update(overrides)
    return client.post(f"/api/v1/characters/{character_id}/sessions", json=body)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["services"] == {"database": "ok", "storage": "ok"}


def test_create_computes_derived_stats_and_default_skills(client):
    created = _create(client, skills={"spotHidden": 60, "homebrewSkill": 35})

    assert created["id"].startswith("char_")
    assert created["derivedStats"] == {
        "hp": 12, "maxHp": 12, "mp": 13, "maxMp": 13,
        "san": 65, "maxSan": 65, "mov": 8, "build": -2,
    }
    assert created["skills"]["spotHidden"] == 60
    assert created["skills"]["homebrewSkill"] == 35
    assert created["skills"]["libraryUse"] == 20
    assert created["versionId"] == 1


def test_create_requires_name(client):
    response = client.post("/api/v1/characters", json={"stats": STATS})
    assert response.status_code == 422
    assert response.json()["error"] == "Request validation failed"


def test_create_rejects_skill_over_99(client):
    response = client.post("/api/v1/characters", json={"name": "x", "skills": {"dodge": 120}})
    assert response.status_code == 422


def test_get_update_delete(client, db):
    created = _create(client)
    url = f"/api/v1/characters/{created['id']}"

    fetched = client.get(url).json()
    assert fetched["name"] == "山田太郎"
    assert fetched["images"] == []

    updated = client.put(url, json={"occupation": None, "isLost": True, "stats": {**STATS, "pow": 15}})
    assert updated.status_code == 200
    body = updated.json()
    assert body["occupation"] is None
    assert body["isLost"] is True
    assert body["stats"]["pow"] == 15
    assert body["name"] == "山田太郎"
    assert body["versionId"] == 2

    assert client.delete(url).status_code == 204
    assert client.get(url).status_code == 404
    assert db.query(Character).count() == 0


def test_update_with_stale_version_is_refused(client):
    created = _create(client)
    url = f"/api/v1/characters/{created['id']}"
    client.put(url, json={"memo": "first"})

    response = client.put(url, json={"memo": "second", "versionId": created["versionId"]})

    assert response.status_code == 409
    assert "error" in response.json()
    assert client.get(url).json()["memo"] == "first"


def test_missing_character_error_body(client):
    response = client.get("/api/v1/characters/char_nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Character not found"}


def test_unknown_route_uses_error_body(client):
    response = client.get("/api/v1/nothing-here")
    assert response.status_code == 404
    assert "error" in response.json()


def test_list_status(client, db):
    fresh = _create(client, name="新人")
    active = _create(client, name="現役")
    retired = _create(client, name="引退")
    assert _session(client, active["id"]).status_code == 201
    old_date = (date.today() - timedelta(days=90)).isoformat()
    assert _session(client, retired["id"], playDate=old_date, insanitySymptoms=[]).status_code == 201

    rows = {row["name"]: row for row in client.get("/api/v1/characters").json()}

    assert rows["新人"]["status"] == "new"
    assert rows["新人"]["sessionCount"] == 0
    assert rows["新人"]["lastPlayDate"] is None
    assert rows["現役"]["status"] == "active"
    assert rows["現役"]["lastScenario"] == "悪霊の家"
    assert rows["現役"]["activeSymptoms"] == 1
    assert rows["現役"]["san"] == 61
    assert rows["引退"]["status"] == "inactive"
    assert rows["引退"]["lastPlayDate"] == old_date


def test_record_session_and_list(client):
    created = _create(client)

    response = _session(client, created["id"])

    assert response.status_code == 201
    body = response.json()
    assert body["summary"] == {"skillGrowthCount": 1, "sanityLoss": 4, "insanityCount": 1}
    assert body["character"]["skills"]["spotHidden"] == 30
    assert body["character"]["derivedStats"]["san"] == 61
    assert body["scenario"]["title"] == "悪霊の家"
    assert body["session"]["skillHistories"][0]["reason"] == "悪霊の家での成長"

    sessions = client.get(f"/api/v1/characters/{created['id']}/sessions").json()
    assert len(sessions) == 1
    assert sessions[0]["sanityHistories"][0]["newValue"] == 61
    assert sessions[0]["insanitySymptoms"][0]["symptomName"] == "暗所恐怖症"


def test_record_session_blank_title(client):
    created = _create(client)
    response = _session(client, created["id"], scenarioTitle="  ")
    assert response.status_code == 400
    assert response.json() == {"error": "Scenario title is required"}


def test_delete_session_and_recover_symptom(client, db):
    created = _create(client)
    session = _session(client, created["id"]).json()["session"]
    symptom_id = session["insanitySymptoms"][0]["id"]

    patched = client.patch(f"/api/v1/symptoms/{symptom_id}", json={"isRecovered": True})
    assert patched.status_code == 200
    assert patched.json()["isRecovered"] is True
    assert patched.json()["recoveredAt"] is not None

    assert client.delete(f"/api/v1/sessions/{session['id']}").status_code == 204
    assert db.query(PlaySession).count() == 0
    assert client.delete(f"/api/v1/sessions/{session['id']}").status_code == 404


def test_import_preview_and_create(client, iakyara_text):
    preview = client.post("/api/v1/characters/import/preview", json={"text": iakyara_text})
    assert preview.status_code == 200
    assert preview.json()["basicInfo"]["name"] == "山田太郎"
    assert preview.json()["derivedStats"]["maxSan"] == 84

    created = client.post("/api/v1/characters/import", json={"text": iakyara_text})
    assert created.status_code == 201
    body = created.json()
    assert body["name"] == "山田太郎"
    assert body["skills"]["cthulhuMythos"] == 15
    assert body["memo"].startswith("古書店")


def test_import_upload(client, iakyara_text):
    response = client.post(
        "/api/v1/characters/import/upload",
        files={"file": ("sheet.txt", iakyara_text.encode("utf-8"), "text/plain")},
    )
    assert response.status_code == 201
    assert response.json()["stats"]["str"] == 13


def test_import_without_name_is_rejected(client, db):
    response = client.post("/api/v1/characters/import", json={"text": "これは探索者ではない"})
    assert response.status_code == 400
    assert "error" in response.json()
    assert db.query(Character).count() == 0


def test_skill_growth_roll(client):
    created = _create(client, skills={"libraryUse": 90})

    response = client.post(
        f"/api/v1/characters/{created['id']}/skill-growth/roll",
        json={"skills": ["spotHidden", "libraryUse"]},
    )

    assert response.status_code == 200
    rolls = {r["skillName"]: r for r in response.json()}
    assert 25 <= rolls["spotHidden"]["newValue"] <= 35
    assert rolls["libraryUse"]["grown"] is False
    assert rolls["libraryUse"]["newValue"] == 90

    unknown = client.post(
        f"/api/v1/characters/{created['id']}/skill-growth/roll",
        json={"skills": ["flying"]},
    )
    assert unknown.status_code == 400


def test_backup_export_and_restore(client):
    created = _create(client)
    _session(client, created["id"])
    url = f"/api/v1/characters/{created['id']}/backup"

    document = client.get(url).json()
    assert document["version"] == "1.0"
    assert document["statistics"]["totalSessions"] == 1

    _session(client, created["id"], scenarioTitle="狂気山脈", sanityLoss=30)

    restored = client.post(url, json=document)
    assert restored.status_code == 200
    assert restored.json()["restoredSessions"] == 1
    assert client.get(f"/api/v1/characters/{created['id']}").json()["derivedStats"]["san"] == 61


def test_restore_invalid_document(client):
    created = _create(client)
    response = client.post(f"/api/v1/characters/{created['id']}/backup", json={"sessions": []})
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid backup data")


def test_derived_stats_endpoint(client):
    response = client.post("/api/v1/rules/derived-stats", json={"con": 13, "siz": 12, "pow": 10})
    assert response.status_code == 200
    assert response.json()["hp"] == 13
    assert response.json()["maxSan"] == 50


def test_delete_character_removes_stored_images(client, storage):
    created = _create(client)
    upload = client.post(
        f"/api/v1/characters/{created['id']}/images",
        files={"image": ("p.png", b"\x89PNG", "image/png")},
    ).json()

    assert client.delete(f"/api/v1/characters/{created['id']}").status_code == 204
    assert not storage.exists(upload["filename"])


def test_skill_catalog(client):
    response = client.get("/api/v1/rules/skills")
    assert response.status_code == 200
    catalog = {entry["key"]: entry for entry in response.json()}
    assert catalog["spotHidden"] == {"key": "spotHidden", "label": "目星", "baseValue": 25}
    assert catalog["cthulhuMythos"]["baseValue"] == 0
