"""
Unit tests for company management
"""
import pytest
from datetime import timedelta

from overseas_tracker.core.exceptions import DuplicateError, NotFoundError, VersionConflictError
from overseas_tracker.schemas.trip import TripPatch
from overseas_tracker.services.company_service import CompanyService

DAY = timedelta(days=1)


@pytest.mark.asyncio
async def test_names_unique_case_insensitive(db_session):
    service = CompanyService(db_session)
    company = await service.create_company("  Initech  ")

    assert company.name == "Initech"
    with pytest.raises(DuplicateError):
        await service.create_company("INITECH")
    assert (await service.find_by_name("initech")).id == company.id


@pytest.mark.asyncio
async def test_list_active_only(db_session):
    service = CompanyService(db_session)
    a = await service.create_company("Alpha")
    b = await service.create_company("Beta")
    await service.set_active(b.id, False)

    assert [c.id for c in await service.list_companies()] == [a.id, b.id]
    assert [c.id for c in await service.list_companies(active_only=True)] == [a.id]


@pytest.mark.asyncio
async def test_delete_company_detaches_trips(db_session, trip_service, make_trip, test_company, clock):
    trip = await make_trip(clock.today(), clock.today() + DAY, company_id=test_company.id)
    service = CompanyService(db_session)

    await service.delete_company(test_company.id)

    kept = await trip_service.get_trip(trip.id)
    assert kept.company_id is None
    with pytest.raises(NotFoundError):
        await service.get_company(test_company.id)


@pytest.mark.asyncio
async def test_delete_company_bumps_trip_versions(
    db_session, trip_service, make_trip, test_company, staff_user, clock
):
    """Open editors of a detached trip must see a conflict on their next save"""
    trip = await make_trip(clock.today() + DAY, clock.today() + 4 * DAY, company_id=test_company.id)
    untouched = await make_trip(clock.today() + DAY, clock.today() + 2 * DAY)
    assert trip.version == 1

    await CompanyService(db_session, clock).delete_company(test_company.id, actor_id=staff_user.id)

    detached = await trip_service.get_trip(trip.id)
    assert detached.company_id is None
    assert detached.version == 2
    assert detached.last_modified_by == staff_user.id

    with pytest.raises(VersionConflictError) as exc_info:
        await trip_service.update_trip(trip.id, 1, TripPatch(company_id=test_company.id))
    assert exc_info.value.server_copy["version"] == 2
    assert exc_info.value.server_copy["company_id"] is None

    assert (await trip_service.get_trip(untouched.id)).version == 1
