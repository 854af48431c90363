"""
Override rule and announcement endpoint tests.
"""

import pytest
from httpx import AsyncClient

API = "/api/v1"


def _override(start="2026-12-24", end="2026-12-26", mode="no_attendance_required", description="Christmas"):
    return {"mode": mode, "start": start, "end": end, "description": description}


@pytest.mark.asyncio
async def test_create_and_list_overrides(async_client: AsyncClient, admin_headers, employee_headers):
    resp = await async_client.post(f"{API}/overrides", json=_override(), headers=admin_headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["mode"] == "no_attendance_required"
    assert data["start"] == "2026-12-24"
    assert data["id"]

    listing = await async_client.get(f"{API}/overrides", headers=employee_headers)
    assert listing.status_code == 200
    assert [o["id"] for o in listing.json()] == [data["id"]]


@pytest.mark.asyncio
async def test_employee_cannot_create_override(async_client: AsyncClient, employee_headers):
    resp = await async_client.post(f"{API}/overrides", json=_override(), headers=employee_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        _override(start="2026-12-27"),
        _override(start="24-12-2026"),
        _override(mode="holiday"),
    ],
)
async def test_override_validation(async_client: AsyncClient, admin_headers, body):
    resp = await async_client.post(f"{API}/overrides", json=body, headers=admin_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_override_for_date(async_client: AsyncClient, admin_headers, employee_headers):
    await async_client.post(f"{API}/overrides", json=_override(), headers=admin_headers)
    newer = await async_client.post(
        f"{API}/overrides",
        json=_override(start="2026-12-26", end="2026-12-26", mode="attendance_mandatory", description="Stocktake"),
        headers=admin_headers,
    )

    inside = await async_client.get(f"{API}/overrides/for-date", params={"date": "2026-12-25"}, headers=employee_headers)
    assert inside.json()["description"] == "Christmas"

    overlap = await async_client.get(f"{API}/overrides/for-date", params={"date": "2026-12-26"}, headers=employee_headers)
    assert overlap.json()["id"] == newer.json()["id"]

    outside = await async_client.get(f"{API}/overrides/for-date", params={"date": "2026-12-27"}, headers=employee_headers)
    assert outside.status_code == 200
    assert outside.json() is None

    bad = await async_client.get(f"{API}/overrides/for-date", params={"date": "tomorrow"}, headers=employee_headers)
    assert bad.status_code == 422


@pytest.mark.asyncio
async def test_unpadded_override_dates_are_stored_padded(async_client: AsyncClient, admin_headers, employee_headers):
    resp = await async_client.post(
        f"{API}/overrides", json=_override(start="2026-1-5", end="2026-1-9"), headers=admin_headers
    )
    assert resp.status_code == 201
    assert (resp.json()["start"], resp.json()["end"]) == ("2026-01-05", "2026-01-09")

    found = await async_client.get(f"{API}/overrides/for-date", params={"date": "2026-01-07"}, headers=employee_headers)
    assert found.json()["id"] == resp.json()["id"]

    unpadded_query = await async_client.get(
        f"{API}/overrides/for-date", params={"date": "2026-1-7"}, headers=employee_headers
    )
    assert unpadded_query.json()["id"] == resp.json()["id"]

    # "2026-1-5" > "2026-1-20" as raw strings
    wide = await async_client.post(
        f"{API}/overrides", json=_override(start="2026-1-5", end="2026-1-20"), headers=admin_headers
    )
    assert wide.status_code == 201
    assert wide.json()["end"] == "2026-01-20"


@pytest.mark.asyncio
async def test_delete_override(async_client: AsyncClient, admin_headers):
    created = await async_client.post(f"{API}/overrides", json=_override(), headers=admin_headers)
    override_id = created.json()["id"]

    resp = await async_client.delete(f"{API}/overrides/{override_id}", headers=admin_headers)
    assert resp.json() == {"success": True, "deleted_id": override_id}

    again = await async_client.delete(f"{API}/overrides/{override_id}", headers=admin_headers)
    assert again.status_code == 404


# ── Announcements ───────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_announcements_newest_first(async_client: AsyncClient, admin_headers, employee_headers):
    for date, time, text in [
        ("2026-10-14", "09:00", "Briefing"),
        ("2026-10-15", "08:00", "Stock count"),
        ("2026-10-15", "13:30", "Safety drill"),
    ]:
        resp = await async_client.post(
            f"{API}/announcements",
            json={"date": date, "time": time, "description": text},
            headers=admin_headers,
        )
        assert resp.status_code == 201

    listing = await async_client.get(f"{API}/announcements", headers=employee_headers)
    assert [a["description"] for a in listing.json()] == ["Safety drill", "Stock count", "Briefing"]

    limited = await async_client.get(f"{API}/announcements", params={"limit": 1}, headers=employee_headers)
    assert len(limited.json()) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"date": "2026-10-14", "time": "9am", "description": "x"},
        {"date": "2026-13-01", "time": "09:00", "description": "x"},
        {"date": "2026-10-14", "time": "09:00", "description": "   "},
    ],
)
async def test_announcement_validation(async_client: AsyncClient, admin_headers, body):
    resp = await async_client.post(f"{API}/announcements", json=body, headers=admin_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_delete_announcement(async_client: AsyncClient, admin_headers, employee_headers):
    created = await async_client.post(
        f"{API}/announcements",
        json={"date": "2026-10-14", "time": "09:00", "description": "Briefing"},
        headers=admin_headers,
    )
    announcement_id = created.json()["id"]

    forbidden = await async_client.delete(f"{API}/announcements/{announcement_id}", headers=employee_headers)
    assert forbidden.status_code == 403

    resp = await async_client.delete(f"{API}/announcements/{announcement_id}", headers=admin_headers)
    assert resp.status_code == 200
    listing = await async_client.get(f"{API}/announcements", headers=employee_headers)
    assert listing.json() == []
