import json

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fixer.failures.models import FailureRecord
from fixer.projects.models import Project
from fixer.webhooks.signature import sign
from support import NO_PAYLOAD_REPLY, add_project, make_notification

WEBHOOK_URL = "/api/v1/webhooks/inngest"


async def _records(db: AsyncSession) -> list[FailureRecord]:
    result = await db.execute(select(FailureRecord).order_by(FailureRecord.created_at))
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_single_notification_creates_fixed_record(client: AsyncClient, db: AsyncSession, project: Project):
    response = await client.post(WEBHOOK_URL, json=make_notification())

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["processed"] == 1
    result = data["results"][0]
    assert result["status"] == "processed"
    assert result["has_fix"] is True
    assert result["confidence"] == "high"
    assert result["project_id"] == str(project.id)

    records = await _records(db)
    assert len(records) == 1
    record = records[0]
    assert str(record.id) == result["failure_id"]
    assert record.status == "fixed"
    assert record.project_id == project.id
    assert record.user_id == project.user_id
    assert record.event_id == "evt_001"
    assert record.function_id == "test-failing-function"
    assert record.run_id == "run_abc123"
    assert record.error_message == "Missing required field: email"
    assert record.original_payload["name"] == "test/user.created"
    assert record.fixed_payload["data"]["email"] == "john@example.com"
    assert record.fix_confidence == "high"
    assert "Root Cause:" in record.ai_analysis


@pytest.mark.asyncio
async def test_batch_with_non_failure_event(client: AsyncClient, db: AsyncSession, project: Project):
    batch = [make_notification(), make_notification(name="test/other", run_id="run_other")]

    response = await client.post(WEBHOOK_URL, json=batch)

    assert response.status_code == 200
    data = response.json()
    assert [r["status"] for r in data["results"]] == ["processed", "skipped"]
    assert data["results"][1]["reason"] == "not a failure event"
    assert len(await _records(db)) == 1


@pytest.mark.asyncio
async def test_invalid_item_does_not_abort_batch(client: AsyncClient, db: AsyncSession, project: Project):
    invalid = make_notification(run_id="")
    batch = [invalid, "not-an-object", make_notification(run_id="run_ok")]

    response = await client.post(WEBHOOK_URL, json=batch)

    assert response.status_code == 200
    results = response.json()["results"]
    assert results[0]["status"] == "skipped"
    assert "run_id" in results[0]["reason"]
    assert results[1]["status"] == "skipped"
    assert results[2]["status"] == "processed"

    records = await _records(db)
    assert [r.run_id for r in records] == ["run_ok"]


@pytest.mark.asyncio
async def test_reply_without_payload_marks_failed(client: AsyncClient, db: AsyncSession, project: Project, reasoner):
    reasoner.reply = NO_PAYLOAD_REPLY

    response = await client.post(WEBHOOK_URL, json=make_notification())

    assert response.status_code == 200
    assert response.json()["results"][0]["has_fix"] is False
    record = (await _records(db))[0]
    assert record.status == "failed"
    assert record.fixed_payload is None
    assert record.fix_confidence == "low"


@pytest.mark.asyncio
async def test_reasoning_error_marks_failed(client: AsyncClient, db: AsyncSession, project: Project, reasoner):
    reasoner.error = RuntimeError("rate limited")

    response = await client.post(WEBHOOK_URL, json=make_notification())

    assert response.status_code == 200
    assert response.json()["results"][0]["status"] == "processed"
    record = (await _records(db))[0]
    assert record.status == "failed"
    assert record.ai_analysis == "AI Analysis failed: rate limited"
    assert record.fixed_payload is None


@pytest.mark.asyncio
async def test_no_project_skips_item(client: AsyncClient, db: AsyncSession):
    response = await client.post(WEBHOOK_URL, json=make_notification())

    assert response.status_code == 200
    result = response.json()["results"][0]
    assert result["status"] == "skipped"
    assert result["reason"] == "no project available"
    assert await _records(db) == []


@pytest.mark.asyncio
async def test_unknown_project_id_skips_item(client: AsyncClient, db: AsyncSession, project: Project):
    response = await client.post(
        f"{WEBHOOK_URL}?project_id=00000000-0000-0000-0000-000000000000",
        json=make_notification(),
    )

    assert response.status_code == 200
    assert response.json()["results"][0]["reason"] == "no project available"
    assert await _records(db) == []


@pytest.mark.asyncio
async def test_explicit_project_id_pins_tenant(client: AsyncClient, db: AsyncSession, project: Project):
    newer = await add_project(db, user_id="user_2", project_name="Newer")

    response = await client.post(f"{WEBHOOK_URL}?project_id={project.id}", json=make_notification())

    assert response.json()["results"][0]["project_id"] == str(project.id)
    assert newer.id != project.id


@pytest.mark.asyncio
async def test_signed_request_accepted(client: AsyncClient, db: AsyncSession):
    signed = await add_project(db, signing_key="whsec_test")
    body = json.dumps(make_notification())

    response = await client.post(
        f"{WEBHOOK_URL}?project_id={signed.id}",
        content=body,
        headers={"content-type": "application/json", "x-inngest-signature": sign("whsec_test", body, "1760000000")},
    )

    assert response.status_code == 200
    assert response.json()["results"][0]["status"] == "processed"
    assert len(await _records(db)) == 1


@pytest.mark.asyncio
async def test_bad_signature_skips_item(client: AsyncClient, db: AsyncSession):
    signed = await add_project(db, signing_key="whsec_test")
    body = json.dumps(make_notification())

    response = await client.post(
        f"{WEBHOOK_URL}?project_id={signed.id}",
        content=body,
        headers={"content-type": "application/json", "x-inngest-signature": sign("wrong", body, "1760000000")},
    )

    assert response.status_code == 200
    result = response.json()["results"][0]
    assert result["status"] == "skipped"
    assert result["reason"] == "invalid signature"
    assert await _records(db) == []


@pytest.mark.asyncio
async def test_unsigned_request_to_signed_project_accepted(client: AsyncClient, db: AsyncSession):
    signed = await add_project(db, signing_key="whsec_test")

    response = await client.post(f"{WEBHOOK_URL}?project_id={signed.id}", json=make_notification())

    assert response.json()["results"][0]["status"] == "processed"


@pytest.mark.asyncio
async def test_duplicate_delivery_creates_second_record(client: AsyncClient, db: AsyncSession, project: Project):
    await client.post(WEBHOOK_URL, json=make_notification())
    await client.post(WEBHOOK_URL, json=make_notification())

    records = await _records(db)
    assert len(records) == 2
    assert {r.event_id for r in records} == {"evt_001"}


@pytest.mark.asyncio
async def test_missing_event_id_gets_generated(client: AsyncClient, db: AsyncSession, project: Project):
    await client.post(WEBHOOK_URL, json=make_notification(event_id=None))

    record = (await _records(db))[0]
    assert record.event_id.startswith("gen_")


@pytest.mark.asyncio
async def test_invalid_json_rejected(client: AsyncClient, db: AsyncSession, project: Project):
    response = await client.post(
        WEBHOOK_URL, content="{not json", headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert await _records(db) == []


@pytest.mark.asyncio
async def test_scalar_body_rejected(client: AsyncClient, project: Project):
    response = await client.post(WEBHOOK_URL, json="function.failed")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_empty_batch_accepted(client: AsyncClient):
    response = await client.post(WEBHOOK_URL, json=[])

    assert response.status_code == 200
    assert response.json()["results"] == []


@pytest.mark.asyncio
async def test_deeply_nested_body_rejected(client: AsyncClient, db: AsyncSession, project: Project):
    body = "[" * 200000 + "]" * 200000

    response = await client.post(WEBHOOK_URL, content=body, headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert await _records(db) == []
