from datetime import timedelta

from app.core.security import create_scanner_token
from app.utils.time import utcnow
from tests.conftest import ADMIN_HEADERS, scanner_headers


def registration_payload(n=1, **overrides):
    payload = {
        "fullName": f"Student {n}",
        "email": f"Student{n}@Example.com",
        "phone": f"+90 555 333 00{n:02d}",
        "country": "Turkey",
        "city": "Istanbul",
        "interestedMajor": "engineering",
        "consent": True,
        "utmSource": "flyer",
        "locale": "en",
    }
    payload.update(overrides)
    return payload


def register(client, event_id, n=1, headers=None, **overrides):
    return client.post(
        f"/api/v1/events/{event_id}/register",
        json=registration_payload(n, **overrides),
        headers=headers or {},
    )


# ---------------------------
# Public registration
# ---------------------------

def test_public_event_shows_registered_count(client, make_event):
    event = make_event(capacity=100)
    register(client, event.id)

    response = client.get(f"/api/v1/events/{event.id}/public")
    assert response.status_code == 200
    assert response.json()["registered_count"] == 1
    assert response.json()["title"] == event.title


def test_draft_event_is_not_public(client, make_event):
    event = make_event(status="DRAFT")
    response = client.get(f"/api/v1/events/{event.id}/public")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_register_returns_credential_token(client, bus, make_event):
    event = make_event()
    response = register(client, event.id)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["credentialToken"]) == 24
    assert bus.published[0].registration_id == body["registrationId"]


def test_duplicate_registration_is_409(client, make_event):
    event = make_event()
    register(client, event.id)
    response = register(client, event.id, email="student1@example.com")

    assert response.status_code == 409
    assert response.json()["message"] == "You are already registered for this event"
    assert response.json()["errorCode"] == "DUPLICATE_REGISTRATION"


def test_full_event_is_400(client, make_event):
    event = make_event(capacity=1)
    register(client, event.id, 1)
    response = register(client, event.id, 2)
    assert response.status_code == 400
    assert response.json()["errorCode"] == "CAPACITY_EXCEEDED"


def test_full_event_tells_registered_person_they_are_registered(client, make_event):
    event = make_event(capacity=1)
    assert register(client, event.id, 1).status_code == 200

    again = register(client, event.id, 1)
    assert again.status_code == 409
    assert again.json()["errorCode"] == "DUPLICATE_REGISTRATION"

    other = register(client, event.id, 2)
    assert other.status_code == 400
    assert other.json()["errorCode"] == "CAPACITY_EXCEEDED"


def test_closed_registration_is_400(client, make_event):
    event = make_event(registration_close_at=utcnow() - timedelta(hours=1))
    response = register(client, event.id)
    assert response.status_code == 400
    assert response.json()["message"] == "Registration is closed"


def test_missing_consent_is_rejected(client, make_event):
    event = make_event()
    response = register(client, event.id, consent=False)
    assert response.status_code == 400
    assert "terms and privacy policy" in response.json()["message"]


def test_invalid_email_is_rejected(client, make_event):
    event = make_event()
    response = register(client, event.id, email="not-an-email")
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "email"


def test_sixth_attempt_in_a_minute_is_rate_limited(client, make_event):
    event = make_event()
    headers = {"X-Forwarded-For": "203.0.113.10"}
    responses = [register(client, event.id, n, headers=headers) for n in range(1, 7)]

    assert [r.status_code for r in responses[:5]] == [200] * 5
    limited = responses[5]
    assert limited.status_code == 429
    assert limited.headers["Retry-After"] == "60"
    assert limited.headers["X-RateLimit-Remaining"] == "0"

    other_client = register(client, event.id, 7, headers={"X-Forwarded-For": "203.0.113.11"})
    assert other_client.status_code == 200


def test_rate_limit_window_resets(client, clock, make_event):
    event = make_event()
    headers = {"X-Forwarded-For": "203.0.113.10"}
    for n in range(1, 7):
        register(client, event.id, n, headers=headers)

    clock.advance(61)
    assert register(client, event.id, 8, headers=headers).status_code == 200


def test_recover_ticket(client, bus, make_event):
    event = make_event()
    token = register(client, event.id).json()["credentialToken"]

    response = client.post(f"/api/v1/events/{event.id}/recover-ticket", json={"emailOrPhone": "student1@example.com"})
    assert response.status_code == 200
    assert response.json()["credentialToken"] == token
    assert response.json()["studentName"] == "Student 1"

    missing = client.post(f"/api/v1/events/{event.id}/recover-ticket", json={"emailOrPhone": "nobody@example.com"})
    assert missing.status_code == 404
    assert missing.json()["message"] == "No registration found for this event."


# ---------------------------
# Credentials
# ---------------------------

def test_credential_view_is_read_only(client, make_event):
    event = make_event()
    token = register(client, event.id).json()["credentialToken"]

    first = client.get(f"/api/v1/r/{token}")
    second = client.get(f"/api/v1/r/{token}")
    assert first.status_code == 200
    assert first.json()["checkedIn"] is False
    assert second.json()["checkedIn"] is False
    assert first.json()["attendee"]["email"] == "student1@example.com"
    assert first.json()["event"]["venue"] == "Congress Center, Istanbul"
    assert first.json()["credentialUrl"].endswith(f"/r/{token}")


def test_qr_endpoint(client, make_event):
    event = make_event()
    token = register(client, event.id).json()["credentialToken"]

    response = client.get(f"/api/v1/qr/{token}")
    assert response.status_code == 200
    assert response.json()["qrDataUrl"].startswith("data:image/png;base64,")
    assert client.get("/api/v1/qr/UnknownTokenUnknownToken").status_code == 404


# ---------------------------
# Scanner sessions and check-in
# ---------------------------

def test_scanner_session_requires_admin_key(client, make_event):
    event = make_event()
    payload = {"operatorId": "gate-1", "eventId": event.id}

    assert client.post("/api/v1/scanner/sessions", json=payload).status_code == 403
    response = client.post("/api/v1/scanner/sessions", json=payload, headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["eventId"] == event.id
    assert response.json()["tokenType"] == "bearer"


def test_check_in_by_token_then_repeat(client, make_event):
    event = make_event()
    token = register(client, event.id).json()["credentialToken"]
    headers = scanner_headers(event.id)

    first = client.post("/api/v1/checkin", json={"eventId": event.id, "token": token}, headers=headers)
    assert first.status_code == 200
    assert first.json()["message"] == "Checked in successfully"
    assert first.json()["registration"]["alreadyCheckedIn"] is False

    again = client.post("/api/v1/checkin", json={"eventId": event.id, "token": token}, headers=headers)
    assert again.status_code == 200
    assert again.json()["message"].startswith("Already checked in at ")
    assert again.json()["registration"]["alreadyCheckedIn"] is True

    assert client.get(f"/api/v1/r/{token}").json()["checkedIn"] is True
    stats = client.get(f"/api/v1/checkin/events/{event.id}/stats", headers=headers).json()
    assert stats["checkInCount"] == 1
    assert stats["registrationCount"] == 1


def test_check_in_by_search(client, make_event):
    event = make_event()
    register(client, event.id)

    response = client.post(
        "/api/v1/checkin", json={"eventId": event.id, "search": "student1@"}, headers=scanner_headers(event.id)
    )
    assert response.status_code == 200
    assert response.json()["registration"]["studentName"] == "Student 1"


def test_cross_event_scan_registers_and_checks_in(client, make_event):
    first_event = make_event()
    second_event = make_event()
    token = register(client, first_event.id).json()["credentialToken"]

    response = client.post(
        "/api/v1/checkin", json={"eventId": second_event.id, "token": token}, headers=scanner_headers(second_event.id)
    )
    assert response.status_code == 200
    assert response.json()["registration"]["crossEvent"] is True
    assert response.json()["message"] == "Checked in successfully"

    again = client.post(
        "/api/v1/checkin", json={"eventId": second_event.id, "token": token}, headers=scanner_headers(second_event.id)
    )
    assert again.json()["registration"]["alreadyCheckedIn"] is True
    assert again.json()["registration"]["registrationId"] == response.json()["registration"]["registrationId"]


def test_unknown_token_is_404(client, make_event):
    event = make_event()
    response = client.post(
        "/api/v1/checkin",
        json={"eventId": event.id, "token": "NotARealTokenNotARealTok"},
        headers=scanner_headers(event.id),
    )
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_scanner_bound_to_other_event_is_403(client, make_event):
    event = make_event()
    other = make_event()
    token = register(client, event.id).json()["credentialToken"]

    response = client.post(
        "/api/v1/checkin", json={"eventId": event.id, "token": token}, headers=scanner_headers(other.id)
    )
    assert response.status_code == 403
    assert response.json()["errorCode"] == "SCANNER_EVENT_MISMATCH"


def test_check_in_requires_scanner_token(client, make_event):
    event = make_event()
    response = client.post(
        "/api/v1/checkin",
        json={"eventId": event.id, "token": "x" * 24},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


def test_expired_scanner_token_is_rejected(client, make_event):
    event = make_event()
    expired = create_scanner_token("gate-1", event.id, expires_delta=timedelta(seconds=-1))["access_token"]
    response = client.get(
        f"/api/v1/checkin/events/{event.id}/stats", headers={"Authorization": f"Bearer {expired}"}
    )
    assert response.status_code == 401


def test_check_in_needs_token_or_search(client, make_event):
    event = make_event()
    response = client.post("/api/v1/checkin", json={"eventId": event.id}, headers=scanner_headers(event.id))
    assert response.status_code == 400


# ---------------------------
# Bulk import
# ---------------------------

def test_bulk_import_endpoint(client, bus, make_event):
    event = make_event()
    payload = {
        "eventId": event.id,
        "leads": [
            {"fullName": "Lead One", "email": "one@example.com", "phone": "+905550000001"},
            {"fullName": "Lead Two", "email": "two@example.com", "phone": "+905550000002", "language": "tr"},
        ],
    }
    assert client.post("/api/v1/admin/registrations/import", json=payload).status_code == 403

    response = client.post("/api/v1/admin/registrations/import", json=payload, headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["success"] == 2
    assert len(bus.published) == 2
