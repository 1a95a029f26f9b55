import base64
import json
from datetime import datetime, timedelta

from bovann.extensions import db
from bovann.models import AccessCard, Payment, PaymentStatusEnum, ScanLog
from bovann.utils.qr import encode_payload
from bovann.utils import scanning
from bovann.utils.scanning import scan_card


def _payload(student_id, valid_from, valid_until, status="VALID", total=5000):
    return encode_payload(student_id, total, valid_from, valid_until, status)


def _scan(client, guard, auth_headers, qr_data):
    return client.post("/cards/scan", json={"qrData": qr_data}, headers=auth_headers(guard))


def test_end_to_end_payment_then_scan(client, student, pay, guard, auth_headers):
    created = pay(student.id, amount=5000).get_json()
    assert created["accessCard"]["qrData"]
    assert created["summary"]["totalAmount"] == 5000

    qr_data = created["accessCard"]["payload"]

    first = _scan(client, guard, auth_headers, qr_data)
    assert first.status_code == 200
    body = first.get_json()
    assert body["success"] is True
    assert body["status"] == "AUTHORIZED"
    assert body["student"]["name"] == student.full_name
    assert body["student"]["institution"] == "SHEKINA"
    assert body["student"]["amount"] == 5000
    assert "5 000" in body["message"]

    card = AccessCard.query.filter_by(student_id=student.id).one()
    logs = ScanLog.query.filter_by(card_id=card.id).all()
    assert len(logs) == 1
    assert logs[0].scanned_at.date() == datetime.now().date()
    assert logs[0].guardian_id == guard.id
    assert body["scanId"] == logs[0].id

    second = _scan(client, guard, auth_headers, qr_data)
    assert second.status_code == 200
    body = second.get_json()
    assert body["success"] is False
    assert "déjà utilisé" in body["message"]
    assert body["reason"] == "already_used_today"
    assert ScanLog.query.count() == 1


def test_daily_limit_resets_next_day(app, student, pay, guard):
    payload = pay(student.id).get_json()["accessCard"]["payload"]
    today = datetime.now().replace(hour=9, minute=0, second=0, microsecond=0)

    assert scan_card(payload, guard.id, now=today).authorized
    again = scan_card(payload, guard.id, now=today.replace(hour=17))
    assert not again.authorized
    assert again.reason == scanning.ALREADY_USED_TODAY

    tomorrow = scan_card(payload, guard.id, now=today + timedelta(days=1))
    assert tomorrow.authorized
    assert ScanLog.query.count() == 2


def test_window_not_yet_valid(client, student, pay, guard, auth_headers):
    pay(student.id)
    start = datetime.now() + timedelta(days=3)
    qr_data = _payload(student.id, start, start + timedelta(days=30))

    body = _scan(client, guard, auth_headers, qr_data).get_json()

    assert body["success"] is False
    assert body["reason"] == "not_yet_valid"
    assert body["message"].startswith("Accès non encore valide")
    assert ScanLog.query.count() == 0


def test_window_expired(client, student, pay, guard, auth_headers):
    pay(student.id)
    end = datetime.now() - timedelta(days=1)
    qr_data = _payload(student.id, end - timedelta(days=30), end)

    body = _scan(client, guard, auth_headers, qr_data).get_json()

    assert body["success"] is False
    assert body["reason"] == "expired"
    assert body["status"] == "EXPIRED"


def test_payload_status_must_be_valid(client, student, pay, guard, auth_headers):
    pay(student.id)
    now = datetime.now()
    qr_data = _payload(student.id, now - timedelta(days=1), now + timedelta(days=1), status="PENDING")

    body = _scan(client, guard, auth_headers, qr_data).get_json()

    assert body["reason"] == "payment_not_validated"


def test_stale_payload_after_payment_expired(client, student, pay, accountant, guard, auth_headers):
    created = pay(student.id).get_json()
    client.patch(
        f"/payments/{created['payment']['id']}/status",
        json={"status": "EXPIRED"},
        headers=auth_headers(accountant),
    )

    body = _scan(client, guard, auth_headers, created["accessCard"]["payload"]).get_json()

    assert body["success"] is False
    assert body["reason"] == "no_valid_payment"
    assert ScanLog.query.count() == 0


def test_valid_payment_without_card(client, student, guard, auth_headers):
    now = datetime.now()
    db.session.add(Payment(
        student_id=student.id, amount=100, status=PaymentStatusEnum.VALID,
        valid_from=now - timedelta(days=1), valid_until=now + timedelta(days=1),
    ))
    db.session.commit()
    qr_data = _payload(student.id, now - timedelta(days=1), now + timedelta(days=1))

    body = _scan(client, guard, auth_headers, qr_data).get_json()

    assert body["reason"] == "no_access_card"


def test_unknown_student(client, guard, auth_headers):
    now = datetime.now()
    qr_data = _payload("missing-student", now - timedelta(days=1), now + timedelta(days=1))

    response = _scan(client, guard, auth_headers, qr_data)

    assert response.status_code == 200
    assert response.get_json()["reason"] == "student_not_found"


def test_malformed_payload_is_400(client, student, pay, guard, auth_headers):
    pay(student.id)

    not_base64 = _scan(client, guard, auth_headers, "%%%not-base64%%%")
    not_json = _scan(client, guard, auth_headers, base64.b64encode(b"hello").decode())

    assert not_base64.status_code == 400
    assert not_json.status_code == 400
    assert not_json.get_json() == {"success": False, "message": "Données QR invalides"}
    assert ScanLog.query.count() == 0


def test_missing_qr_data_is_400(client, guard, auth_headers):
    response = client.post("/cards/scan", json={}, headers=auth_headers(guard))
    assert response.status_code == 400


def test_scan_requires_guard(client, student, pay, accountant, auth_headers):
    payload = pay(student.id).get_json()["accessCard"]["payload"]
    response = client.post("/cards/scan", json={"qrData": payload}, headers=auth_headers(accountant))
    assert response.status_code == 403


def test_success_message_uses_payload_amount(app, student, pay, guard):
    pay(student.id, amount=5000)
    now = datetime.now()
    forged_total = _payload(student.id, now - timedelta(hours=1), now + timedelta(hours=1), total=1234.5)

    outcome = scan_card(forged_total, guard.id, now=now)

    assert outcome.authorized
    assert "1 234.50" in outcome.message


def test_list_todays_scans(client, student, pay, guard, auth_headers):
    payload = pay(student.id).get_json()["accessCard"]["payload"]
    _scan(client, guard, auth_headers, payload)

    response = client.get("/cards/scans", headers=auth_headers(guard))

    data = response.get_json()
    assert data["total"] == 1
    assert data["scans"][0]["studentName"] == student.full_name


def test_raw_json_payload_keys(student, pay):
    payload = pay(student.id, amount=750).get_json()["accessCard"]["payload"]
    decoded = json.loads(base64.b64decode(payload))
    assert set(decoded) == {"studentId", "totalAmount", "validFrom", "validUntil", "status"}
    assert decoded["studentId"] == student.id


def test_concurrent_scan_same_day_is_rejected(app, student, pay, guard):
    payload = pay(student.id).get_json()["accessCard"]["payload"]
    card = AccessCard.query.filter_by(student_id=student.id).one()
    now = datetime.now()

    # a parallel scan already holds today's slot but falls outside the time window query
    db.session.add(ScanLog(card_id=card.id, guardian_id=guard.id,
                           scanned_at=now - timedelta(days=2), scan_date=now.date()))
    db.session.commit()

    outcome = scan_card(payload, guard.id, now=now)

    assert not outcome.authorized
    assert outcome.reason == scanning.ALREADY_USED_TODAY
    assert outcome.to_response()[1] == 200
    assert ScanLog.query.count() == 1
