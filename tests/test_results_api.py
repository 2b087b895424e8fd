from config import settings
from models.results import ResultRecord

PASS_90 = {"Bangla": {"written": 90}}
PASS_75 = {"Bangla": {"written": 75}}
PASS_75_MCQ = {"Bangla": {"written": 45, "mcq": 30}}
FAIL_MCQ = {"Bangla": {"written": 80, "mcq": 8}}


def publish(client, headers, payload):
    response = client.post("/results", json=payload, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def student_url(roll, class_name="8", exam_type="final", year=2025):
    return f"/results/student/{roll}/{class_name}/{exam_type}/{year}"


# ===========================
#   AUTH
# ===========================

def test_publish_requires_token(client, result_payload):
    response = client.post("/results", json=result_payload("1", PASS_90))
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Unauthorized: No token provided"}


def test_publish_rejects_bad_token(client, result_payload):
    response = client.post("/results", json=result_payload("1", PASS_90),
                           headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 403
    assert response.json()["message"] == "Forbidden: Invalid token"


# ===========================
#   PUBLISH
# ===========================

def test_publish_normalises_keys(client, admin_headers, result_payload):
    body = publish(client, admin_headers, result_payload(7, PASS_75_MCQ, class_name=8, year="2025"))

    assert body["success"] is True
    data = body["data"]
    assert data["id"] == body["insertedId"]
    assert data["roll"] == "7"
    assert data["class"] == "8"
    assert data["year"] == 2025
    assert data["marks"] == {"Bangla": {"written": 45, "mcq": 30}}
    assert data["createdAt"]


def test_duplicate_result_is_rejected(client, admin_headers, result_payload):
    publish(client, admin_headers, result_payload("1", PASS_90))

    response = client.post("/results", json=result_payload("1", PASS_75), headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["message"] == "Result already exists"
    assert response.json()["code"] == "DUPLICATE"

    # same roll in another exam is fine
    publish(client, admin_headers, result_payload("1", PASS_75, exam_type="half-yearly"))


def test_mark_without_written_is_invalid(client, admin_headers, result_payload):
    response = client.post("/results", json=result_payload("1", {"Math": {"mcq": 20}}), headers=admin_headers)
    assert response.status_code == 422


def test_non_finite_marks_are_invalid(client, admin_headers, result_payload):
    body = (
        '{"roll": "1", "name": "Rahim", "class": "8", "examType": "final", "year": 2025,'
        ' "marks": {"Math": {"written": Infinity}}}'
    )
    response = client.post("/results", content=body,
                           headers={**admin_headers, "Content-Type": "application/json"})
    assert response.status_code == 422
    assert response.json()["success"] is False

    response = client.post("/results", json=result_payload("2", {"Math": {"written": "nan"}}), headers=admin_headers)
    assert response.status_code == 422

    # nothing stored, listings still render
    assert client.get("/results").json() == []
    assert client.get("/results/merit-list/8/final/2025").json()["count"] == 0


def test_empty_marks_are_invalid(client, admin_headers, result_payload):
    response = client.post("/results", json=result_payload("1", {}), headers=admin_headers)
    assert response.status_code == 422


# ===========================
#   STUDENT RESULT + MERIT
# ===========================

def test_student_result_has_merit_position(client, admin_headers, result_payload):
    publish(client, admin_headers, result_payload("1", PASS_75))
    publish(client, admin_headers, result_payload("2", PASS_90))
    publish(client, admin_headers, result_payload("3", FAIL_MCQ))
    # other year, not part of the cohort
    publish(client, admin_headers, result_payload("4", {"Bangla": {"written": 99}}, year=2024))

    data = client.get(student_url("1")).json()["data"]
    assert data["roll"] == "1"
    assert data["totalMarks"] == 75
    assert data["meritPosition"] == 2

    assert client.get(student_url("2")).json()["data"]["meritPosition"] == 1


def test_failed_student_is_not_a_missing_result(client, admin_headers, result_payload):
    publish(client, admin_headers, result_payload("3", FAIL_MCQ))

    response = client.get(student_url("3"))
    assert response.status_code == 200
    assert response.json()["data"]["meritPosition"] == "Fail"
    assert response.json()["data"]["totalMarks"] == 88

    missing = client.get(student_url("404"))
    assert missing.status_code == 404
    assert missing.json()["success"] is False
    assert missing.json()["message"] == "Result not found"


def test_tie_policy_follows_settings(client, admin_headers, result_payload, monkeypatch):
    publish(client, admin_headers, result_payload("1", PASS_90))
    publish(client, admin_headers, result_payload("2", PASS_75))
    publish(client, admin_headers, result_payload("3", PASS_75_MCQ))

    ranks = [client.get(student_url(r)).json()["data"]["meritPosition"] for r in ("1", "2", "3")]
    assert ranks == [1, 2, 2]

    monkeypatch.setattr(settings, "MERIT_RANKING", "ordinal")
    ranks = [client.get(student_url(r)).json()["data"]["meritPosition"] for r in ("1", "2", "3")]
    assert ranks == [1, 2, 3]


def test_stored_malformed_mark_is_reported(client, db_session):
    db_session.add(ResultRecord(roll="9", student_name="Broken", class_name="8",
                                exam_type="final", year=2025, marks={"Math": {}}))
    db_session.commit()

    response = client.get(student_url("9"))
    assert response.status_code == 422
    assert response.json()["code"] == "MALFORMED_MARK"


def test_merit_list(client, admin_headers, result_payload):
    publish(client, admin_headers, result_payload("1", FAIL_MCQ))
    publish(client, admin_headers, result_payload("2", PASS_75))
    publish(client, admin_headers, result_payload("3", PASS_90))

    body = client.get("/results/merit-list/8/final/2025").json()
    assert body["count"] == 3
    assert [(r["roll"], r["meritPosition"]) for r in body["data"]] == [("3", 1), ("2", 2), ("1", "Fail")]


# ===========================
#   LIST / UPDATE / DELETE
# ===========================

def test_list_results_with_filters(client, admin_headers, result_payload):
    publish(client, admin_headers, result_payload("1", PASS_90))
    publish(client, admin_headers, result_payload("2", PASS_90, class_name="9"))
    publish(client, admin_headers, result_payload("3", PASS_90, year=2024))

    assert len(client.get("/results").json()) == 3
    assert [r["roll"] for r in client.get("/results", params={"class": "9"}).json()] == ["2"]
    assert [r["roll"] for r in client.get("/results", params={"year": 2024}).json()] == ["3"]
    assert client.get("/results", params={"examType": "half-yearly"}).json() == []


def test_update_marks_changes_rank(client, admin_headers, result_payload):
    publish(client, admin_headers, result_payload("1", PASS_90))
    second = publish(client, admin_headers, result_payload("2", PASS_75))

    response = client.put(f"/results/{second['insertedId']}",
                          json={"marks": {"Bangla": {"written": 95}}}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["marks"] == {"Bangla": {"written": 95}}

    assert client.get(student_url("2")).json()["data"]["meritPosition"] == 1
    assert client.get(student_url("1")).json()["data"]["meritPosition"] == 2


def test_update_into_existing_key_conflicts(client, admin_headers, result_payload):
    publish(client, admin_headers, result_payload("1", PASS_90))
    second = publish(client, admin_headers, result_payload("2", PASS_75))

    response = client.put(f"/results/{second['insertedId']}", json={"roll": 1}, headers=admin_headers)
    assert response.status_code == 409

    # nothing changed
    assert client.get(student_url("2")).status_code == 200


def test_update_cannot_blank_key_fields(client, admin_headers, result_payload):
    created = publish(client, admin_headers, result_payload("1", PASS_90))

    for change in ({"roll": ""}, {"name": ""}, {"class": " "}, {"examType": ""}):
        response = client.put(f"/results/{created['insertedId']}", json=change, headers=admin_headers)
        assert response.status_code == 422, change

    data = client.get(student_url("1")).json()["data"]
    assert data["roll"] == "1"
    assert data["name"] == created["data"]["name"]


def test_update_requires_token(client, admin_headers, result_payload):
    created = publish(client, admin_headers, result_payload("1", PASS_90))
    response = client.put(f"/results/{created['insertedId']}", json={"name": "X"})
    assert response.status_code == 401


def test_delete_result(client, admin_headers, result_payload):
    created = publish(client, admin_headers, result_payload("1", PASS_90))

    response = client.delete(f"/results/{created['insertedId']}", headers=admin_headers)
    assert response.json() == {"success": True, "deletedCount": 1}
    assert client.get(student_url("1")).status_code == 404

    again = client.delete(f"/results/{created['insertedId']}", headers=admin_headers)
    assert again.status_code == 404
