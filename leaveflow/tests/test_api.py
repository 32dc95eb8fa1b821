"""
Tests for the HTTP API and its result envelope
"""
from fastapi import status

from leaveflow.models.employee import Role
from leaveflow.models.leave import LeaveRequest, LeaveStatus
from leaveflow.models.notification import Notification


def headers(employee):
    return {"X-Employee-Id": str(employee.id)}


def apply(client, employee, **overrides):
    payload = {
        "leave_type": "CASUAL",
        "start_date": "2026-03-09",
        "end_date": "2026-03-10",
        "reason": "family function",
    }
    payload.update(overrides)
    return client.post("/api/v1/leaves", json=payload, headers=headers(employee))


class TestLeaveEndpoints:
    def test_submit_returns_created_envelope(self, client, org, balances):
        response = apply(client, org["employee"])

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["success"] is True
        assert body["data"]["leave"]["status"] == "PENDING"
        assert body["data"]["leave"]["working_days"] == 2
        assert body["data"]["approver_id"] == org["dept_head"].id
        assert "error" not in body

    def test_policy_violation_envelope(self, client, org, balances, db):
        response = apply(client, org["employee"], end_date="2026-03-12")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "policy_violation"
        details = body["error"]["details"]
        assert details["violations"][0]["code"] == "CL_MAX_CONSECUTIVE_EXCEEDED"
        assert details["suggestions"][0]["action"] == "CHANGE_TYPE"
        assert details["suggestions"][0]["leave_type"] == "EARNED"
        assert db.query(LeaveRequest).count() == 0

    def test_validate_preview(self, client, org, balances):
        response = client.post(
            "/api/v1/leaves/validate",
            json={"leave_type": "MEDICAL", "start_date": "2026-03-09", "end_date": "2026-03-13"},
            headers=headers(org["employee"]),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_valid"] is False
        assert [v["code"] for v in data["violations"]] == ["MEDICAL_CERTIFICATE_REQUIRED"]

    def test_missing_header_is_invalid_request(self, client, org):
        response = client.get("/api/v1/leaves/my")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "invalid_request"

    def test_unknown_employee_is_unauthenticated(self, client, org):
        response = client.get("/api/v1/leaves/my", headers={"X-Employee-Id": "9999"})

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": {"code": "unauthenticated", "message": "Employee not found"},
        }

    def test_list_and_detail(self, client, org, balances):
        leave_id = apply(client, org["employee"]).json()["data"]["leave"]["id"]

        listed = client.get("/api/v1/leaves/my", params={"status": "PENDING"}, headers=headers(org["employee"]))
        assert [item["id"] for item in listed.json()["data"]] == [leave_id]

        detail = client.get(f"/api/v1/leaves/{leave_id}", headers=headers(org["dept_head"]))
        assert detail.status_code == 200
        assert detail.json()["data"]["chain"] == ["DEPT_HEAD"]
        assert detail.json()["data"]["approvals"][0]["decision"] == "PENDING"

    def test_unknown_leave_is_not_found(self, client, org):
        response = client.get("/api/v1/leaves/9999", headers=headers(org["employee"]))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "leave_not_found"

    def test_cancel_by_other_user_is_forbidden(self, client, org, balances, db):
        leave_id = apply(client, org["employee"]).json()["data"]["leave"]["id"]

        response = client.post(f"/api/v1/leaves/{leave_id}/cancel", json={}, headers=headers(org["hr_head"]))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "unauthorized"
        db.expire_all()
        assert db.query(LeaveRequest).filter(LeaveRequest.id == leave_id).one().status == LeaveStatus.PENDING

    def test_bulk_cancel(self, client, org, balances):
        first = apply(client, org["employee"]).json()["data"]["leave"]["id"]
        second = apply(client, org["employee"], start_date="2026-03-23", end_date="2026-03-24").json()["data"]["leave"]["id"]

        response = client.post(
            "/api/v1/leaves/bulk-cancel",
            json={"leave_ids": [first, second, 9999], "reason": "project deadline"},
            headers=headers(org["employee"]),
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"success_count": 2, "failed_ids": [9999]}
        mine = client.get("/api/v1/leaves/my", params={"status": "CANCELLED"}, headers=headers(org["employee"]))
        assert sorted(leave["id"] for leave in mine.json()["data"]) == sorted([first, second])

    def test_backdated_casual_is_a_policy_violation(self, client, org, balances):
        response = apply(client, org["employee"], start_date="2026-02-23", end_date="2026-02-24")

        assert response.status_code == 422
        violations = response.json()["error"]["details"]["violations"]
        assert "BACKDATE_NOT_ALLOWED" in [v["code"] for v in violations]


class TestApprovalEndpoints:
    def test_approve_flow(self, client, org, balances, dispatcher):
        leave_id = apply(client, org["employee"]).json()["data"]["leave"]["id"]

        pending = client.get("/api/v1/approvals/pending", headers=headers(org["dept_head"]))
        assert [item["leave"]["id"] for item in pending.json()["data"]] == [leave_id]

        response = client.post(f"/api/v1/approvals/{leave_id}/approve", headers=headers(org["dept_head"]))
        assert response.status_code == 200
        assert response.json()["data"] == {"approved": True, "is_final": True}

        again = client.post(f"/api/v1/approvals/{leave_id}/approve", headers=headers(org["dept_head"]))
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "invalid_status"

        balances_response = client.get("/api/v1/balances/my", params={"year": 2026}, headers=headers(org["employee"]))
        casual = next(b for b in balances_response.json()["data"] if b["leave_type"] == "CASUAL")
        assert casual["used"] == 2
        assert casual["available"] == 6
        assert dispatcher.names() == ["submitted", "approved"]

    def test_reject_without_reason(self, client, org, balances):
        leave_id = apply(client, org["employee"]).json()["data"]["leave"]["id"]

        response = client.post(
            f"/api/v1/approvals/{leave_id}/reject", json={"reason": "  "}, headers=headers(org["dept_head"])
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "reason_required"

    def test_forward_and_return(self, client, org, balances):
        leave_id = apply(
            client, org["employee"], leave_type="EARNED", start_date="2026-03-16", end_date="2026-03-20"
        ).json()["data"]["leave"]["id"]

        forwarded = client.post(f"/api/v1/approvals/{leave_id}/forward", headers=headers(org["hr_admin"]))
        assert forwarded.json()["data"]["to_role"] == "DEPT_HEAD"

        returned = client.post(
            f"/api/v1/approvals/{leave_id}/return",
            json={"reason": "attach travel plan"},
            headers=headers(org["dept_head"]),
        )
        assert returned.status_code == 200

        resubmitted = client.post(
            f"/api/v1/leaves/{leave_id}/resubmit",
            json={"reason": "travel plan attached"},
            headers=headers(org["employee"]),
        )
        assert resubmitted.status_code == 200
        assert resubmitted.json()["data"]["approver_id"] == org["dept_head"].id

    def test_bulk_approve(self, client, org, balances):
        first = apply(client, org["employee"]).json()["data"]["leave"]["id"]
        second = apply(client, org["employee"], start_date="2026-03-23", end_date="2026-03-24").json()["data"]["leave"]["id"]

        response = client.post(
            "/api/v1/approvals/bulk-approve",
            json={"leave_ids": [first, second, 9999]},
            headers=headers(org["dept_head"]),
        )

        assert response.json()["data"] == {"success_count": 2, "failed_ids": [9999]}


class TestAdminEndpoints:
    def test_provision_balance_requires_hr_role(self, client, org):
        payload = {"user_id": org["employee"].id, "leave_type": "EARNED", "year": 2027, "opening": 24}

        denied = client.post("/api/v1/balances", json=payload, headers=headers(org["employee"]))
        assert denied.status_code == 403

        created = client.post("/api/v1/balances", json=payload, headers=headers(org["hr_admin"]))
        assert created.status_code == 201
        assert created.json()["data"]["available"] == 24

        duplicate = client.post("/api/v1/balances", json=payload, headers=headers(org["hr_head"]))
        assert duplicate.status_code == 409
        assert duplicate.json()["error"]["code"] == "balance_exists"

    def test_holiday_blocks_casual_leave_next_to_it(self, client, org, balances):
        created = client.post(
            "/api/v1/holidays",
            json={"year": 2026, "date": "2026-03-11", "name": "Founders Day"},
            headers=headers(org["hr_admin"]),
        )
        assert created.status_code == 201

        response = apply(client, org["employee"])

        assert response.status_code == 422
        codes = [v["code"] for v in response.json()["error"]["details"]["violations"]]
        assert codes == ["CL_HOLIDAY_ADJACENT"]

        holidays = client.get("/api/v1/holidays", params={"year": 2026})
        assert [h["name"] for h in holidays.json()["data"]] == ["Founders Day"]

    def test_notifications_inbox(self, client, org):
        response = client.get("/api/v1/notifications/my", headers=headers(org["employee"]))

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}


class TestPolicyEndpoints:
    def test_rules_catalogue(self, client):
        response = client.get("/api/v1/policy/rules")

        rule_ids = [rule["rule_id"] for rule in response.json()["data"]]
        assert "ML_001" in rule_ids
        assert rule_ids[0] in {"BAL_001", "CL_001", "DATE_001", "ML_001"}

    def test_chain_lookup(self, client):
        response = client.get("/api/v1/policy/chain", params={"leave_type": "EARNED", "requester_role": "HR_ADMIN"})

        assert response.json()["data"]["chain"] == ["DEPT_HEAD", "HR_HEAD", "CEO"]

    def test_explain(self, client, org, balances):
        response = client.post(
            "/api/v1/policy/explain",
            json={"leave_type": "CASUAL", "start_date": "2026-03-09", "end_date": "2026-03-12"},
            headers=headers(org["employee"]),
        )

        explanations = response.json()["data"]
        cl_001 = next(e for e in explanations if e["rule_id"] == "CL_001")
        assert "this request has 4" in cl_001["explanation"]

    def test_system_admin_passes_role_guards(self, client, org, make_employee):
        admin = make_employee("SYS001", "Sys Admin", Role.SYSTEM_ADMIN)
        payload = {"user_id": org["employee"].id, "leave_type": "CASUAL", "year": 2027, "opening": 8}

        response = client.post("/api/v1/balances", json=payload, headers=headers(admin))

        assert response.status_code == 201


def test_holiday_year_defaults_to_date(client, org):
    response = client.post(
        "/api/v1/holidays",
        json={"date": "2026-08-15", "name": "Independence Day"},
        headers=headers(org["hr_head"]),
    )

    assert response.status_code == 201
    assert response.json()["data"]["year"] == 2026


def test_holiday_in_wrong_year_is_rejected(client, org):
    response = client.post(
        "/api/v1/holidays",
        json={"year": 2027, "date": "2026-08-15", "name": "Independence Day"},
        headers=headers(org["hr_head"]),
    )

    assert response.json()["error"]["code"] == "invalid_holiday"


def test_mark_notification_read(client, org, db):
    note = Notification(
        recipient_id=org["employee"].id,
        event="approved",
        title="Leave approved",
        message="Approved by Dev Head",
    )
    db.add(note)
    db.commit()

    unread = client.get("/api/v1/notifications/my", params={"unread_only": True}, headers=headers(org["employee"]))
    assert [n["id"] for n in unread.json()["data"]] == [note.id]

    marked = client.post(f"/api/v1/notifications/{note.id}/read", headers=headers(org["employee"]))
    assert marked.json()["data"]["read"] is True

    others = client.post(f"/api/v1/notifications/{note.id}/read", headers=headers(org["dept_head"]))
    assert others.status_code == 404
    assert others.json()["error"]["code"] == "notification_not_found"
