from datetime import datetime, timedelta


def test_verify_requires_student_id(client):
    response = client.get("/cards/verify")
    assert response.status_code == 400


def test_verify_unknown_student(client):
    response = client.get("/cards/verify?studentId=missing")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_verify_without_payment_is_refused(client, student):
    data = client.get(f"/cards/verify?studentId={student.id}").get_json()

    assert data["success"] is False
    assert data["status"] == "REFUSED"
    assert data["studentName"] == student.full_name


def test_verify_active_payment_is_authorized(client, student, pay):
    pay(student.id, amount=3000)

    data = client.get(f"/cards/verify?studentId={student.id}").get_json()

    assert data["success"] is True
    assert data["status"] == "AUTHORIZED"
    assert data["amount"] == 3000
    assert data["institution"] == "SHEKINA"


def test_verify_lapsed_payment_is_expired(client, student, pay):
    now = datetime.now()
    pay(student.id, valid_from=now - timedelta(days=60), valid_until=now - timedelta(days=1))

    data = client.get(f"/cards/verify?studentId={student.id}").get_json()

    assert data["success"] is False
    assert data["status"] == "EXPIRED"


def test_verify_does_not_log_scans(client, student, pay):
    from bovann.models import ScanLog

    pay(student.id)
    client.get(f"/cards/verify?studentId={student.id}")
    assert ScanLog.query.count() == 0


def test_public_history(client, student, pay, accountant, auth_headers):
    first = pay(student.id, amount=1000).get_json()["payment"]
    pay(student.id, amount=2500)
    client.patch(f"/payments/{first['id']}/status", json={"status": "EXPIRED"}, headers=auth_headers(accountant))

    response = client.get(f"/public/history/{student.id}")

    data = response.get_json()
    assert response.status_code == 200
    assert len(data["payments"]) == 2
    assert data["totalAmount"] == 2500
    assert data["totalPayments"] == 1
    assert data["student"]["name"] == student.full_name


def test_public_history_unknown_student(client):
    assert client.get("/public/history/missing").status_code == 404


def test_card_lookup_by_student(client, student, pay, accountant, auth_headers):
    headers = auth_headers(accountant)
    assert client.get(f"/cards/student/{student.id}", headers=headers).status_code == 404

    pay(student.id)
    response = client.get(f"/cards/student/{student.id}", headers=headers)
    assert response.status_code == 200
    assert response.get_json()["accessCard"]["studentId"] == student.id
