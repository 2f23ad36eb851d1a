import uuid

import pytest
from sqlalchemy.exc import IntegrityError

import models
from conftest import auth
from routers import applications as applications_router
from services import find_application


@pytest.fixture
def job(recruiter, post_job):
    return post_job(recruiter)


def apply(client, user, job_id, **body):
    return client.post("/api/applications", headers=auth(user), json={"job_id": job_id, **body})


def test_application_lifecycle(client, recruiter, seeker, post_job):
    job = post_job(recruiter, title="Backend Engineer", location="Remote")

    resp = apply(client, seeker, job["id"])
    assert resp.status_code == 201
    application = resp.json()["object"]
    assert application["resume_url"] == "http://x/r.pdf"
    assert application["status"] == "pending"

    applicants = client.get(f"/api/applications/job/{job['id']}", headers=auth(recruiter)).json()["object"]["items"]
    assert [a["id"] for a in applicants] == [application["id"]]
    assert applicants[0]["status"] == "pending"
    assert applicants[0]["applicant"]["username"] == "sam"
    assert applicants[0]["applicant"]["name"] == "Sam Seeker"

    resp = client.put(f"/api/applications/{application['id']}/status", headers=auth(recruiter),
                      json={"status": "interview"})
    assert resp.status_code == 200

    mine = client.get("/api/applications/my-applications", headers=auth(seeker)).json()["object"]["items"]
    assert mine[0]["status"] == "interview"
    assert mine[0]["job"]["title"] == "Backend Engineer"
    assert mine[0]["job"]["location"] == "Remote"

    resp = client.delete(f"/api/applications/{application['id']}", headers=auth(seeker))
    assert resp.status_code == 200

    applicants = client.get(f"/api/applications/job/{job['id']}", headers=auth(recruiter)).json()["object"]
    assert applicants["items"] == []


def test_apply_accepts_camel_case_job_id_and_inline_resume(client, seeker, job):
    resp = client.post("/api/applications", headers=auth(seeker), json={
        "jobId": job["id"],
        "resume_url": "http://x/other.pdf",
        "cover_letter_text": "  Hire me  ",
    })
    assert resp.status_code == 201
    application = resp.json()["object"]
    assert application["resume_url"] == "http://x/other.pdf"
    assert application["cover_letter_text"] == "Hire me"


def test_apply_without_any_resume(client, register, job):
    nobody = register("nora")
    resp = apply(client, nobody, job["id"])
    assert resp.status_code == 201
    assert resp.json()["object"]["resume_url"] == ""


def test_recruiter_cannot_apply(client, recruiter, job):
    assert apply(client, recruiter, job["id"]).status_code == 403
    assert client.post("/api/applications", headers=auth(recruiter), json={}).status_code == 403
    assert client.get("/api/applications/my-applications", headers=auth(recruiter)).status_code == 403


def test_apply_twice_conflicts(client, seeker, job):
    assert apply(client, seeker, job["id"]).status_code == 201
    resp = apply(client, seeker, job["id"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "You have already applied for this job."


def test_apply_to_missing_job(client, seeker):
    assert apply(client, seeker, str(uuid.uuid4())).status_code == 404
    assert client.post("/api/applications", headers=auth(seeker), json={}).status_code == 400


def test_database_rejects_duplicate_application(db_session, client, seeker, job):
    for _ in range(2):
        db_session.add(models.Application(job_id=job["id"], applicant_id=seeker["id"]))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_status_update_accepts_only_enumerated_values(client, recruiter, seeker, job):
    application = apply(client, seeker, job["id"]).json()["object"]
    url = f"/api/applications/{application['id']}/status"

    resp = client.put(url, headers=auth(recruiter), json={"status": "hired"})
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("Invalid status. Must be one of: pending, reviewed")

    mine = client.get("/api/applications/my-applications", headers=auth(seeker)).json()["object"]["items"]
    assert mine[0]["status"] == "pending"

    # no transition table: any value, in any order
    for value in ["accepted", "pending", "withdrawn", "reviewed", "rejected", "interview"]:
        resp = client.put(url, headers=auth(recruiter), json={"status": value})
        assert resp.status_code == 200
        assert resp.json()["object"]["status"] == value

    assert client.put(url, headers=auth(recruiter), json={}).status_code == 400


def test_status_update_requires_job_owner(client, register, recruiter, seeker, job):
    application = apply(client, seeker, job["id"]).json()["object"]
    other = register("otto", role="recruiter")
    url = f"/api/applications/{application['id']}/status"

    assert client.put(url, headers=auth(other), json={"status": "accepted"}).status_code == 403
    assert client.put(url, headers=auth(seeker), json={"status": "accepted"}).status_code == 403
    missing = f"/api/applications/{uuid.uuid4()}/status"
    assert client.put(missing, headers=auth(recruiter), json={"status": "accepted"}).status_code == 404


def test_list_for_job_requires_owner(client, register, recruiter, seeker, job):
    other = register("otto", role="recruiter")
    assert client.get(f"/api/applications/job/{job['id']}", headers=auth(other)).status_code == 403
    assert client.get(f"/api/applications/job/{job['id']}", headers=auth(seeker)).status_code == 403
    assert client.get(f"/api/applications/job/{uuid.uuid4()}", headers=auth(recruiter)).status_code == 404


def test_withdraw_only_own_application(client, register, recruiter, seeker, job):
    application = apply(client, seeker, job["id"]).json()["object"]
    intruder = register("ian")

    assert client.delete(f"/api/applications/{application['id']}", headers=auth(intruder)).status_code == 403
    assert client.delete(f"/api/applications/{application['id']}", headers=auth(recruiter)).status_code == 403
    assert client.delete(f"/api/applications/{uuid.uuid4()}", headers=auth(seeker)).status_code == 404

    still_there = client.get(f"/api/applications/job/{job['id']}", headers=auth(recruiter)).json()["object"]
    assert still_there["total"] == 1


def test_listing_orders(client, register, recruiter, seeker, post_job):
    first_job = post_job(recruiter, title="First")
    second_job = post_job(recruiter, title="Second")
    apply(client, seeker, first_job["id"])
    apply(client, seeker, second_job["id"])

    mine = client.get("/api/applications/my-applications", headers=auth(seeker)).json()["object"]["items"]
    assert [a["job"]["title"] for a in mine] == ["Second", "First"]

    late = register("lou")
    apply(client, late, first_job["id"])
    applicants = client.get(f"/api/applications/job/{first_job['id']}", headers=auth(recruiter)).json()["object"]
    assert [a["applicant"]["username"] for a in applicants["items"]] == ["sam", "lou"]


def miss_first_lookup(monkeypatch, before_miss=None):
    """Make the duplicate pre-check see nothing once, as under a concurrent insert."""
    calls = []

    def lookup(db, job_id, applicant_id):
        calls.append(job_id)
        if len(calls) == 1:
            if before_miss:
                before_miss()
            return None
        return find_application(db, job_id, applicant_id)

    monkeypatch.setattr(applications_router, "find_application", lookup)


def test_duplicate_that_slips_past_the_check_conflicts(client, monkeypatch, db_session, seeker, job):
    db_session.add(models.Application(job_id=job["id"], applicant_id=seeker["id"]))
    db_session.commit()
    miss_first_lookup(monkeypatch)

    resp = apply(client, seeker, job["id"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "You have already applied for this job."
    assert db_session.query(models.Application).count() == 1


def test_job_deleted_while_applying_is_not_found(client, monkeypatch, db_session, seeker, job):
    def delete_job():
        db_session.delete(db_session.get(models.Job, job["id"]))
        db_session.commit()

    miss_first_lookup(monkeypatch, before_miss=delete_job)

    resp = apply(client, seeker, job["id"])
    assert resp.status_code == 404
    assert resp.json()["message"] == "Job not found."
    assert db_session.query(models.Application).count() == 0


def test_apply_with_trailing_slash(client, seeker, job):
    resp = client.post("/api/applications/", headers=auth(seeker), json={"job_id": job["id"]},
                       follow_redirects=False)
    assert resp.status_code == 201


def test_admin_cannot_apply_or_review(client, register, recruiter, seeker, job):
    admin = register("ada", role="admin")
    application = apply(client, seeker, job["id"]).json()["object"]

    assert apply(client, admin, job["id"]).status_code == 403
    assert client.get(f"/api/applications/job/{job['id']}", headers=auth(admin)).status_code == 403
    status_url = f"/api/applications/{application['id']}/status"
    assert client.put(status_url, headers=auth(admin), json={"status": "accepted"}).status_code == 403
    assert client.delete(f"/api/applications/{application['id']}", headers=auth(admin)).status_code == 403
