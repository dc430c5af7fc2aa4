"""Tests for the JSON API views."""

import json

import pytest

from django_workorders.services import submit, transition

COMPANY = "acme-electric"


def put(client, url, data=None):
    return client.put(url, data=json.dumps(data or {}), content_type="application/json")


def post(client, url, data=None):
    return client.post(url, data=json.dumps(data or {}), content_type="application/json")


@pytest.fixture
def login(client):
    """Log an actor's user in and return the client."""
    def _login(actor):
        client.force_login(actor.user)
        return client

    return _login


@pytest.mark.django_db
class TestJobStatusView:
    """Tests for PUT jobs/<id>/status."""

    def test_transition_ok(self, login, pm, job):
        """200 with the updated job."""
        response = put(login(pm), f"/api/jobs/{job.pk}/status", {"status": "assigned_to_gf"})

        assert response.status_code == 200
        assert response.json()["status"] == "assigned_to_gf"

    def test_missing_status(self, login, pm, job):
        """400 when status is missing."""
        response = put(login(pm), f"/api/jobs/{job.pk}/status", {})

        assert response.status_code == 400

    def test_invalid_edge_is_400(self, login, pm, job):
        """Unreachable edges answer 400 on this route."""
        response = put(login(pm), f"/api/jobs/{job.pk}/status", {"status": "billed"})

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_transition"
        assert response.json()["from"] == "new"

    def test_role_forbidden(self, login, crew, job):
        """403 when the role may not use the edge."""
        response = put(login(crew), f"/api/jobs/{job.pk}/status", {"status": "assigned_to_gf"})

        assert response.status_code == 403
        job.refresh_from_db()
        assert job.status == "new"

    def test_job_not_found(self, login, pm):
        """404 for unknown jobs."""
        response = put(login(pm), "/api/jobs/999999/status", {"status": "assigned_to_gf"})

        assert response.status_code == 404

    def test_anonymous_rejected(self, client, job):
        """Requests without a user are refused."""
        response = put(client, f"/api/jobs/{job.pk}/status", {"status": "assigned_to_gf"})

        assert response.status_code == 401

    def test_wrong_method(self, login, pm, job):
        """Only PUT is accepted."""
        response = login(pm).get(f"/api/jobs/{job.pk}/status")

        assert response.status_code == 405

    def test_invalid_json(self, login, pm, job):
        """Malformed bodies are a 400."""
        response = login(pm).put(
            f"/api/jobs/{job.pk}/status", data="{not json", content_type="application/json"
        )

        assert response.status_code == 400


@pytest.mark.django_db
class TestJobAssignView:
    """Tests for PUT jobs/<id>/assign."""

    def test_assign(self, login, gf, crew, job):
        """200 with schedule fields set."""
        response = put(login(gf), f"/api/jobs/{job.pk}/assign", {
            "userId": crew.user.pk,
            "crewScheduledDate": "2025-06-01",
            "crewScheduledEndDate": "2025-06-02",
            "assignmentNotes": "Bring shoring",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["assigned_to"] == crew.user.pk
        assert body["crew_scheduled_date"] == "2025-06-01"
        assert body["assignment_notes"] == "Bring shoring"

    def test_missing_user(self, login, gf, job):
        """400 when userId is missing."""
        response = put(login(gf), f"/api/jobs/{job.pk}/assign", {"crewScheduledDate": "2025-06-01"})

        assert response.status_code == 400

    def test_bad_date(self, login, gf, crew, job):
        """Unparseable dates are a 400."""
        response = put(login(gf), f"/api/jobs/{job.pk}/assign", {
            "userId": crew.user.pk,
            "crewScheduledDate": "June first",
        })

        assert response.status_code == 400


@pytest.mark.django_db
class TestDependencyViews:
    """Tests for dependency endpoints."""

    def test_create_and_list(self, login, gf, job):
        """POST creates (201) and GET lists."""
        client = login(gf)
        response = post(client, f"/api/jobs/{job.pk}/dependencies", {
            "type": "usa", "notes": "Call 811",
        })

        assert response.status_code == 201
        assert response.json()["status"] == "required"

        listing = client.get(f"/api/jobs/{job.pk}/dependencies")
        assert [d["type"] for d in listing.json()["dependencies"]] == ["usa"]

    def test_create_unknown_type(self, login, gf, job):
        """400 for unknown types."""
        response = post(login(gf), f"/api/jobs/{job.pk}/dependencies", {"type": "moat"})

        assert response.status_code == 400

    def test_schedule_without_date(self, login, gf, job):
        """400 when scheduling without a date."""
        client = login(gf)
        dep_id = post(client, f"/api/jobs/{job.pk}/dependencies", {"type": "usa"}).json()["id"]

        response = put(client, f"/api/jobs/{job.pk}/dependencies/{dep_id}", {"status": "scheduled"})

        assert response.status_code == 400

    def test_schedule_with_date(self, login, gf, job):
        """200 with the date recorded."""
        client = login(gf)
        dep_id = post(client, f"/api/jobs/{job.pk}/dependencies", {"type": "usa"}).json()["id"]

        response = put(client, f"/api/jobs/{job.pk}/dependencies/{dep_id}", {
            "status": "scheduled", "scheduledDate": "2025-06-10",
        })

        assert response.status_code == 200
        assert response.json()["scheduled_date"] == "2025-06-10"

    def test_cycle(self, login, gf, job):
        """POST cycle advances the status."""
        client = login(gf)
        dep_id = post(client, f"/api/jobs/{job.pk}/dependencies", {"type": "civil"}).json()["id"]

        response = post(client, f"/api/jobs/{job.pk}/dependencies/{dep_id}/cycle", {
            "scheduledDate": "2025-06-10",
        })

        assert response.status_code == 200
        assert response.json()["status"] == "scheduled"

    def test_prefield_checklist(self, login, pm, gf, job):
        """The checklist creates dependencies and moves the job."""
        transition(job, "assigned_to_gf", pm)

        response = post(login(gf), f"/api/jobs/{job.pk}/prefield-checklist", {
            "decisions": {
                "usa": {"checked": True, "notes": ""},
                "civil": {"checked": False, "notes": ""},
            },
        })

        assert response.status_code == 200
        assert response.json()["status"] == "pre_fielding"
        assert len(response.json()["dependencies"]) == 1


@pytest.mark.django_db
class TestUnitViews:
    """Tests for unit entry endpoints."""

    def test_submit(self, login, crew, make_entry):
        """PUT submit answers 200 with the entry."""
        entry = make_entry()

        response = put(login(crew), f"/api/units/{entry.pk}/submit")

        assert response.status_code == 200
        assert response.json()["status"] == "submitted"
        assert response.json()["total_amount"] == "1250.00"

    def test_approve_from_submitted_is_409(self, login, crew, pm, make_entry):
        """Invalid unit transitions answer 409."""
        entry = make_entry()
        submit(entry, crew)

        response = put(login(pm), f"/api/units/{entry.pk}/approve", {"notes": "ok"})

        assert response.status_code == 409

    def test_dispute_bad_category(self, login, crew, gf, make_entry):
        """Enum violations answer 400."""
        entry = make_entry()
        submit(entry, crew)

        response = put(login(gf), f"/api/units/{entry.pk}/dispute", {
            "reason": "qty wrong", "category": "feelings",
        })

        assert response.status_code == 400
        assert response.json()["field"] == "category"

    def test_dispute_and_resolve(self, login, crew, gf, make_entry):
        """Dispute then resolve by adjusting the quantity."""
        entry = make_entry()
        submit(entry, crew)
        client = login(gf)

        put(client, f"/api/units/{entry.pk}/dispute", {"reason": "qty wrong", "category": "quantity"})
        response = put(client, f"/api/units/{entry.pk}/resolve-dispute", {
            "resolution": "Re-measured at 40",
            "action": "adjust",
            "adjustedQuantity": "40",
        })

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["total_amount"] == "1000.00"

    def test_unknown_action_404(self, login, crew, make_entry):
        """Unknown unit actions are 404."""
        entry = make_entry()

        response = put(login(crew), f"/api/units/{entry.pk}/teleport")

        assert response.status_code == 404

    def test_delete(self, login, crew, make_entry, job):
        """DELETE soft-deletes and hides the entry from listings."""
        entry = make_entry()
        client = login(crew)

        response = client.delete(
            f"/api/units/{entry.pk}",
            data=json.dumps({"reason": "Entered twice"}),
            content_type="application/json",
        )

        assert response.status_code == 200
        assert client.get(f"/api/jobs/{job.pk}/units").json()["units"] == []
        deleted = client.get(f"/api/jobs/{job.pk}/units?include_deleted=true").json()["units"]
        assert [u["id"] for u in deleted] == [entry.pk]

    def test_unbilled_and_disputed(self, login, crew, gf, make_entry):
        """Company listings use the caller's company by default."""
        entry = make_entry()
        submit(entry, crew)
        client = login(gf)
        put(client, f"/api/units/{entry.pk}/dispute", {"reason": "qty wrong", "category": "quantity"})

        disputed = client.get("/api/units/disputed").json()["units"]
        unbilled = client.get(f"/api/units/unbilled?company_id={COMPANY}").json()["units"]

        assert [u["id"] for u in disputed] == [entry.pk]
        assert unbilled == []
