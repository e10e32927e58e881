PREDICTION = {"race": "Bahrain GP", "driver": "NOR", "position": 1, "notes": "Salida limpia"}


def test_requires_login(client):
    assert client.post("/predictions", json=PREDICTION).status_code == 401
    assert client.get("/predictions/my-predictions").status_code == 401


def test_create_and_list(client, user_headers, other_user_headers):
    r = client.post("/predictions", headers=user_headers, json=PREDICTION)
    assert r.status_code == 201
    first = r.json()
    second = client.post("/predictions", headers=user_headers, json={**PREDICTION, "race": "Jeddah"}).json()
    client.post("/predictions", headers=other_user_headers, json=PREDICTION)

    mine = client.get("/predictions/my-predictions", headers=user_headers).json()

    assert [p["id"] for p in mine] == [second["id"], first["id"]]
    assert client.get(f"/predictions/{first['id']}", headers=user_headers).json()["notes"] == "Salida limpia"


def test_position_range(client, user_headers):
    for position in (0, 21):
        r = client.post("/predictions", headers=user_headers, json={**PREDICTION, "position": position})
        assert r.status_code == 422


def test_only_owner_can_touch(client, user_headers, other_user_headers):
    prediction = client.post("/predictions", headers=user_headers, json=PREDICTION).json()
    url = f"/predictions/{prediction['id']}"

    assert client.get(url, headers=other_user_headers).status_code == 403
    assert client.put(url, headers=other_user_headers, json=PREDICTION).status_code == 403
    assert client.delete(url, headers=other_user_headers).status_code == 403


def test_update_and_delete(client, user_headers):
    prediction = client.post("/predictions", headers=user_headers, json=PREDICTION).json()
    url = f"/predictions/{prediction['id']}"

    r = client.put(url, headers=user_headers, json={**PREDICTION, "position": 3, "notes": None})
    assert r.status_code == 200
    assert r.json()["position"] == 3
    assert r.json()["notes"] is None

    assert client.delete(url, headers=user_headers).status_code == 200
    assert client.get(url, headers=user_headers).status_code == 404
