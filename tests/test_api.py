# tests/test_api.py
from datetime import datetime, timezone

from conftest import auth_headers
from itsm_portal.backend.app.models import SoftwareCatalog


def _new_ticket(client, user, **overrides):
    payload = {
        "userId": user.id,
        "requestType": "Software Installation",
        "description": "Need VS Code on my laptop",
    }
    payload.update(overrides)
    return client.post("/api/tickets", json=payload, headers=auth_headers(user))


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


# Auth

def test_employee_login_returns_user_and_token(client, alice):
    response = client.post(
        "/api/auth/validate", json={"employeeId": "EMP001", "username": "alice"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == alice.id
    assert body["username"] == "alice"
    assert body["employeeId"] == "EMP001"
    assert body["isAdmin"] is False
    assert body["tokenType"] == "bearer"

    me = client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"}
    )
    assert me.json() == {"userId": alice.id, "username": "alice", "isAdmin": False}


def test_employee_login_with_wrong_pair_is_404(client, alice):
    response = client.post(
        "/api/auth/validate", json={"employeeId": "EMP002", "username": "alice"}
    )
    assert response.status_code == 404


def test_employee_login_with_bad_payload_is_400(client):
    assert client.post("/api/auth/validate", json={"username": "alice"}).status_code == 400
    assert client.post(
        "/api/auth/validate", json={"employeeId": "", "username": "alice"}
    ).status_code == 400


def test_admin_login(client, admin, alice):
    ok = client.post("/api/auth/admin", json={"username": "admin", "password": "AdminPass123!"})
    assert ok.status_code == 200
    assert ok.json()["isAdmin"] is True

    wrong = client.post("/api/auth/admin", json={"username": "admin", "password": "nope"})
    assert wrong.status_code == 404

    # employees have no password and are never admins
    employee = client.post("/api/auth/admin", json={"username": "alice", "password": "x"})
    assert employee.status_code == 404


# Tickets

def test_create_ticket_returns_201_with_identifier(client, alice):
    response = _new_ticket(client, alice)
    assert response.status_code == 201

    body = response.json()
    year = datetime.now(timezone.utc).year
    assert body["ticketId"] == f"INC-{year}-0001"
    assert body["status"] == "Start"
    assert body["userId"] == alice.id
    assert body["requestType"] == "Software Installation"
    assert body["softwareId"] is None
    assert "createdAt" in body


def test_create_ticket_validation_errors(client, admin, alice):
    assert _new_ticket(client, alice, softwareId=77).status_code == 400
    assert _new_ticket(client, alice, requestType="Pizza").status_code == 400
    assert _new_ticket(client, alice, description="").status_code == 400
    # unknown fields are rejected
    assert _new_ticket(client, alice, priority="High").status_code == 400

    unknown_user = client.post(
        "/api/tickets",
        json={"userId": 999, "requestType": "User Access", "description": "x"},
        headers=auth_headers(admin),
    )
    assert unknown_user.status_code == 400
    assert unknown_user.json()["detail"] == "Invalid user ID"


def test_create_ticket_with_software(client, db_session, alice):
    software = SoftwareCatalog(name="Zoom", version="5.15.0")
    db_session.add(software)
    db_session.commit()

    response = _new_ticket(client, alice, softwareId=software.id)
    assert response.status_code == 201
    assert response.json()["softwareId"] == software.id


def test_get_missing_ticket_is_404(client, admin):
    response = client.get("/api/tickets/4040", headers=auth_headers(admin))
    assert response.status_code == 404
    assert response.json() == {"detail": "Ticket not found"}


def test_get_ticket_by_code(client, alice):
    created = _new_ticket(client, alice).json()
    response = client.get(
        f"/api/tickets/by-code/{created['ticketId']}", headers=auth_headers(alice)
    )
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]


def test_status_update_flow_and_history(client, admin, alice):
    ticket = _new_ticket(client, alice).json()
    path = f"/api/tickets/{ticket['id']}/status"

    first = client.patch(path, json={"status": "in progress"}, headers=auth_headers(admin))
    assert first.status_code == 200
    assert first.json()["status"] == "In Progress"

    second = client.patch(
        path, json={"status": "Resolved", "note": "done"}, headers=auth_headers(admin)
    )
    assert second.json()["status"] == "Resolved"

    history = client.get(f"/api/tickets/{ticket['id']}/history", headers=auth_headers(alice))
    assert history.status_code == 200
    entries = history.json()
    assert [e["status"] for e in entries] == ["Start", "In Progress", "Resolved"]
    assert entries[0]["ticketId"] == ticket["id"]
    assert entries[-1]["notes"] == "Status updated from In Progress to Resolved: done"


def test_status_update_errors(client, admin, alice):
    ticket = _new_ticket(client, alice).json()
    path = f"/api/tickets/{ticket['id']}/status"

    assert client.patch(path, json={}, headers=auth_headers(admin)).status_code == 400
    assert client.patch(
        path, json={"status": "Archived"}, headers=auth_headers(admin)
    ).status_code == 400
    assert client.patch(
        "/api/tickets/999/status", json={"status": "Pending"}, headers=auth_headers(admin)
    ).status_code == 404


def test_history_of_missing_ticket_is_404(client, admin):
    assert client.get("/api/tickets/31337/history", headers=auth_headers(admin)).status_code == 404


def test_stats_endpoint(client, admin, alice, bob):
    for status in ["Pending", "Pending", "In Progress", "Resolved", "Urgent"]:
        ticket = _new_ticket(client, alice).json()
        client.patch(
            f"/api/tickets/{ticket['id']}/status",
            json={"status": status},
            headers=auth_headers(admin),
        )
    _new_ticket(client, bob)

    everyone = client.get("/api/stats", headers=auth_headers(admin)).json()
    assert everyone["total"] == 6
    assert everyone["start"] == 1

    mine = client.get(f"/api/stats?userId={alice.id}", headers=auth_headers(alice)).json()
    assert mine == {
        "total": 5,
        "start": 0,
        "pending": 2,
        "inProgress": 1,
        "resolved": 1,
        "urgent": 1,
        "completed": 0,
    }

    # non-admins default to their own counts and cannot peek at others
    assert client.get("/api/stats", headers=auth_headers(bob)).json()["total"] == 1
    assert client.get(
        f"/api/stats?userId={alice.id}", headers=auth_headers(bob)
    ).status_code == 403


# Software catalog

def test_list_software_sorted(client, db_session, alice):
    db_session.add_all([SoftwareCatalog(name="Zoom", version="5.15.0"), SoftwareCatalog(name="Slack")])
    db_session.commit()

    response = client.get("/api/software", headers=auth_headers(alice))
    assert response.status_code == 200
    assert [(s["name"], s["version"]) for s in response.json()] == [
        ("Slack", "Latest"),
        ("Zoom", "5.15.0"),
    ]


def test_upload_csv_file(client, admin):
    csv_bytes = b"name,version\nSlack,4.34.0\nGoogle Chrome,\n\nSlack,4.34.0\n"
    response = client.post(
        "/api/admin/software/upload-csv",
        files={"file": ("software.csv", csv_bytes, "text/csv")},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json() == {"imported": 2, "skipped": 1, "source": "csv"}

    names = {
        (s["name"], s["version"])
        for s in client.get("/api/software", headers=auth_headers(admin)).json()
    }
    assert names == {("Slack", "4.34.0"), ("Google Chrome", "Latest")}


def test_upload_json_rows_skips_existing(client, db_session, admin):
    db_session.add(SoftwareCatalog(name="Zoom", version="5.15.0"))
    db_session.commit()

    response = client.post(
        "/api/admin/software/upload-csv",
        json=[{"name": "Zoom", "version": "5.15.0"}, {"name": "AutoCAD", "version": "2024"}],
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json() == {"imported": 1, "skipped": 1, "source": "json"}


def test_upload_bad_data_is_400(client, admin):
    headers = auth_headers(admin)
    no_name_column = client.post(
        "/api/admin/software/upload-csv",
        files={"file": ("software.csv", b"title\nSlack\n", "text/csv")},
        headers=headers,
    )
    assert no_name_column.status_code == 400

    blank_name = client.post(
        "/api/admin/software/upload-csv",
        files={"file": ("software.csv", b"name,version\n,1.0\n", "text/csv")},
        headers=headers,
    )
    assert blank_name.status_code == 400

    not_utf8 = client.post(
        "/api/admin/software/upload-csv",
        files={"file": ("software.csv", "name\nCafé\n".encode("latin-1"), "text/csv")},
        headers=headers,
    )
    assert not_utf8.status_code == 400

    bad_json = client.post(
        "/api/admin/software/upload-csv", json=[{"version": "1"}], headers=headers
    )
    assert bad_json.status_code == 400

    empty = client.post("/api/admin/software/upload-csv", json=[], headers=headers)
    assert empty.status_code == 400


def test_software_admin_routes_require_admin(client, alice):
    upload = client.post(
        "/api/admin/software/upload-csv",
        json=[{"name": "Slack"}],
        headers=auth_headers(alice),
    )
    assert upload.status_code == 403
    assert client.get(
        "/api/admin/software/sample-csv", headers=auth_headers(alice)
    ).status_code == 403


def test_sample_csv_download(client, admin):
    response = client.get("/api/admin/software/sample-csv", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    lines = response.text.strip().splitlines()
    assert lines[0] == "name,version"
    assert len(lines) > 1


def test_out_of_range_ids_are_rejected_as_400(client, admin, alice):
    headers = auth_headers(admin)
    huge = "99999999999999999999"

    for method, path in [
        ("get", f"/api/tickets/{huge}"),
        ("get", f"/api/tickets/{huge}/history"),
        ("get", f"/api/tickets/{huge}/attachments"),
        ("delete", f"/api/tickets/1/attachments/{huge}"),
        ("get", f"/api/users/{huge}"),
        ("get", f"/api/tickets?userId={huge}"),
        ("get", f"/api/stats?userId={huge}"),
        ("get", "/api/tickets/0"),
    ]:
        response = client.request(method, path, headers=headers)
        assert response.status_code == 400, path
        assert response.json()["detail"] == "Invalid request data"

    patched = client.patch(
        f"/api/tickets/{huge}/status", json={"status": "Pending"}, headers=headers
    )
    assert patched.status_code == 400

    oversized_body = _new_ticket(client, alice, userId=int(huge))
    assert oversized_body.status_code == 400
    assert _new_ticket(client, alice, softwareId=int(huge)).status_code == 400
