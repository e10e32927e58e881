ALONSO = {
    "driver_id": 4,
    "driver_number": 14,
    "code": "alo",
    "forename": "Fernando",
    "surname": "Alonso",
    "nationality": "ESP",
}


def create_team(client, headers, name="Aston Martin"):
    r = client.post("/teams", headers=headers, json={"name": name, "base": "Silverstone"})
    assert r.status_code == 201, r.text
    return r.json()


def test_public_listing(client):
    assert client.get("/drivers").json() == []
    assert client.get("/teams").json() == []


def test_writes_require_admin(client, user_headers):
    assert client.post("/drivers", json=ALONSO).status_code == 401
    assert client.post("/drivers", headers=user_headers, json=ALONSO).status_code == 403
    assert client.post("/teams", headers=user_headers, json={"name": "Ferrari"}).status_code == 403


def test_driver_crud(client, admin_headers):
    team = create_team(client, admin_headers)

    r = client.post("/drivers", headers=admin_headers, json={**ALONSO, "team_id": team["id"]})
    assert r.status_code == 201
    driver = r.json()
    assert driver["code"] == "ALO"
    assert driver["team"]["name"] == "Aston Martin"
    assert driver["points"] == 0

    assert client.get(f"/drivers/{driver['id']}").json()["surname"] == "Alonso"
    assert client.get("/driver-stats/4").json()["id"] == driver["id"]

    r = client.put(f"/drivers/{driver['id']}", headers=admin_headers, json={"driver_number": 15, "team_id": None})
    assert r.status_code == 200
    assert r.json()["driver_number"] == 15
    assert r.json()["team"] is None
    assert r.json()["forename"] == "Fernando"

    r = client.delete(f"/drivers/{driver['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert client.get(f"/drivers/{driver['id']}").status_code == 404


def test_driver_validation(client, admin_headers):
    assert client.post("/drivers", headers=admin_headers, json=ALONSO).status_code == 201
    # driver_id duplicado
    assert client.post("/drivers", headers=admin_headers, json=ALONSO).status_code == 400
    # escudería inexistente
    r = client.post("/drivers", headers=admin_headers, json={**ALONSO, "driver_id": 5, "team_id": 999})
    assert r.status_code == 400
    r = client.post("/drivers", headers=admin_headers, json={**ALONSO, "driver_id": 6, "code": "ALONSO"})
    assert r.status_code == 422


def test_driver_not_found(client, admin_headers):
    assert client.get("/drivers/999").status_code == 404
    assert client.get("/driver-stats/999").status_code == 404
    assert client.put("/drivers/999", headers=admin_headers, json={}).status_code == 404
    assert client.delete("/drivers/999", headers=admin_headers).status_code == 404


def test_team_crud(client, admin_headers):
    team = create_team(client, admin_headers)
    r = client.post("/teams", headers=admin_headers, json={"name": "Aston Martin"})
    assert r.status_code == 400

    r = client.put(f"/teams/{team['id']}", headers=admin_headers, json={"team_principal": "Mike Krack"})
    assert r.status_code == 200
    assert r.json()["team_principal"] == "Mike Krack"
    assert r.json()["name"] == "Aston Martin"

    assert client.get(f"/teams/{team['id']}").json()["base"] == "Silverstone"


def test_delete_team_detaches_drivers(client, admin_headers):
    team = create_team(client, admin_headers)
    driver = client.post("/drivers", headers=admin_headers, json={**ALONSO, "team_id": team["id"]}).json()

    listed = client.get(f"/teams/{team['id']}").json()
    assert [d["code"] for d in listed["drivers"]] == ["ALO"]

    assert client.delete(f"/teams/{team['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/teams/{team['id']}").status_code == 404
    assert client.get(f"/drivers/{driver['id']}").json()["team_id"] is None
