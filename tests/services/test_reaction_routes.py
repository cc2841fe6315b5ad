"""Reaction routes — HTTP contract for submit, read, withdraw, and batch stats."""

import logging
from uuid import uuid4

from freecredit.config import Settings, get_settings
from freecredit.main import app
from freecredit.models import Reaction
from freecredit.services.reaction_store import SqlReactionStore
from tests.services.db_helpers import reaction_rows, stored_flag

USER = {"X-User-Id": "user_1"}


def _handler_records(caplog):
    return [r for r in caplog.records if r.name == "freecredit.api.error_handlers"]


async def _post_reaction(client, campaign_id, reaction_type, headers=USER):
    return await client.post(
        "/api/v1/reactions",
        json={"campaign_id": str(campaign_id), "type": reaction_type},
        headers=headers,
    )


async def test_submit_returns_reaction_and_stats(client, make_campaign):
    campaign = await make_campaign()
    resp = await _post_reaction(client, campaign.id, "expired")

    assert resp.status_code == 200
    body = resp.json()
    assert body["reaction"]["campaign_id"] == str(campaign.id)
    assert body["reaction"]["user_id"] == "user_1"
    assert body["reaction"]["type"] == "expired"
    assert body["stats"] == {
        "still_works": 0, "expired": 1, "info_incorrect": 0, "total": 1,
    }


async def test_submit_twice_switches_type(client, make_campaign, test_db):
    campaign = await make_campaign()
    await _post_reaction(client, campaign.id, "expired")
    resp = await _post_reaction(client, campaign.id, "still_works")

    assert resp.json()["stats"]["still_works"] == 1
    assert resp.json()["stats"]["total"] == 1
    assert await reaction_rows(test_db, campaign.id) == 1


async def test_submit_sets_verification_flag(client, make_campaign, test_db):
    campaign = await make_campaign()
    await _post_reaction(client, campaign.id, "expired")
    assert await stored_flag(test_db, campaign.id) is True


async def test_submit_requires_user(client, make_campaign):
    campaign = await make_campaign()
    resp = await _post_reaction(client, campaign.id, "expired", headers={})
    assert resp.status_code == 401


async def test_submit_unknown_type_is_400(client, make_campaign, test_db):
    campaign = await make_campaign()
    resp = await _post_reaction(client, campaign.id, "thumbs_up")

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert await reaction_rows(test_db, campaign.id) == 0


async def test_submit_malformed_campaign_id_is_400(client):
    resp = await _post_reaction(client, "not-a-uuid", "expired")
    assert resp.status_code == 400


async def test_submit_missing_campaign_is_404(client, test_db):
    missing = uuid4()
    resp = await _post_reaction(client, missing, "expired")

    assert resp.status_code == 404
    error = resp.json()["error"]
    assert error["code"] == "RESOURCE_NOT_FOUND"
    assert error["context"]["campaign_id"] == str(missing)
    assert await reaction_rows(test_db, missing) == 0


async def test_submit_deleted_campaign_is_404(client, make_campaign):
    campaign = await make_campaign(deleted=True)
    resp = await _post_reaction(client, campaign.id, "expired")
    assert resp.status_code == 404


async def test_get_reactions_anonymous(client, make_campaign):
    campaign = await make_campaign()
    await _post_reaction(client, campaign.id, "still_works")

    resp = await client.get(f"/api/v1/reactions/{campaign.id}")

    assert resp.status_code == 200
    assert resp.json()["stats"]["still_works"] == 1
    assert resp.json()["user_reaction"] is None


async def test_get_reactions_includes_callers_reaction(client, make_campaign):
    campaign = await make_campaign()
    await _post_reaction(client, campaign.id, "info_incorrect")

    resp = await client.get(f"/api/v1/reactions/{campaign.id}", headers=USER)

    assert resp.json()["user_reaction"]["type"] == "info_incorrect"


async def test_get_reactions_for_unknown_campaign_is_zero(client):
    resp = await client.get(f"/api/v1/reactions/{uuid4()}")
    assert resp.status_code == 200
    assert resp.json()["stats"]["total"] == 0


async def test_withdraw_returns_updated_stats(client, make_campaign, test_db):
    campaign = await make_campaign()
    await _post_reaction(client, campaign.id, "expired")

    resp = await client.delete(f"/api/v1/reactions/{campaign.id}", headers=USER)

    assert resp.status_code == 200
    assert resp.json()["stats"]["total"] == 0
    assert await stored_flag(test_db, campaign.id) is False


async def test_withdraw_without_reaction_is_404(client, make_campaign):
    campaign = await make_campaign()
    resp = await client.delete(f"/api/v1/reactions/{campaign.id}", headers=USER)
    assert resp.status_code == 404


async def test_withdraw_requires_user(client, make_campaign):
    campaign = await make_campaign()
    resp = await client.delete(f"/api/v1/reactions/{campaign.id}")
    assert resp.status_code == 401


async def test_batch_stats(client, make_campaign):
    first = await make_campaign()
    second = await make_campaign()
    await _post_reaction(client, first.id, "expired")

    resp = await client.post(
        "/api/v1/reactions/batch",
        json={"campaign_ids": [str(first.id), str(second.id)]},
        headers=USER,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body[str(first.id)]["stats"]["expired"] == 1
    assert body[str(first.id)]["user_reaction"] == "expired"
    assert body[str(second.id)]["stats"]["total"] == 0
    assert body[str(second.id)]["user_reaction"] is None


async def test_batch_stats_empty_request(client):
    resp = await client.post("/api/v1/reactions/batch", json={})
    assert resp.status_code == 200
    assert resp.json() == {}


async def test_batch_stats_truncates_to_limit(client):
    app.dependency_overrides[get_settings] = lambda: Settings(batch_stats_limit=2)
    ids = [str(uuid4()) for _ in range(5)]

    resp = await client.post("/api/v1/reactions/batch", json={"campaign_ids": ids})

    assert list(resp.json()) == ids[:2]


async def test_unresolved_insert_race_is_internal_error(client, make_campaign, test_db, monkeypatch):
    campaign = await make_campaign()
    cid = campaign.id
    test_db.add(Reaction(campaign_id=cid, user_id="user_1", type="still_works"))
    await test_db.commit()

    async def never_sees_row(self, campaign_id, user_id):
        return None

    monkeypatch.setattr(SqlReactionStore, "get_user_reaction", never_sees_row)

    resp = await _post_reaction(client, cid, "expired")

    assert resp.status_code == 500
    error = resp.json()["error"]
    assert error["code"] == "INTERNAL_ERROR"
    assert error["category"] == "internal"
    assert await reaction_rows(test_db, cid) == 1


async def test_unknown_type_error_lists_accepted_values_and_logs_caller(
    client, make_campaign, caplog,
):
    campaign = await make_campaign()
    with caplog.at_level(logging.WARNING, logger="freecredit.api.error_handlers"):
        resp = await _post_reaction(client, campaign.id, "thumbs_up")

    detail = resp.json()["error"]["details"][0]
    assert detail["field"] == "type"
    assert "still_works, expired, info_incorrect" in detail["message"]
    record = _handler_records(caplog)[-1]
    assert record.user_id == "user_1"
    assert record.reaction_type == "thumbs_up"


async def test_not_found_log_carries_campaign_and_caller(client, caplog):
    missing = uuid4()
    with caplog.at_level(logging.WARNING, logger="freecredit.api.error_handlers"):
        await _post_reaction(client, missing, "expired")

    record = _handler_records(caplog)[-1]
    assert record.error_code == "RESOURCE_NOT_FOUND"
    assert record.campaign_id == str(missing)
    assert record.user_id == "user_1"


async def test_reads_serialize_reactions_with_unrecognized_stored_type(
    client, make_campaign, test_db,
):
    campaign = await make_campaign()
    test_db.add(Reaction(campaign_id=campaign.id, user_id="legacy", type="thumbs_up"))
    await test_db.commit()
    headers = {"X-User-Id": "legacy"}

    resp = await client.get(f"/api/v1/reactions/{campaign.id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user_reaction"]["type"] == "thumbs_up"
    assert resp.json()["stats"]["total"] == 0

    resp = await client.post(
        "/api/v1/reactions/batch",
        json={"campaign_ids": [str(campaign.id)]},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()[str(campaign.id)]["user_reaction"] == "thumbs_up"
