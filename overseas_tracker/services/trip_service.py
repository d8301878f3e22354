"""
Trip Service - Manages trip records, status lifecycle and versioned updates
"""
import logging
from datetime import date
from typing import Any, List, Optional

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from overseas_tracker.core.clock import Clock
from overseas_tracker.core.dates import DateInput, normalize_date, require_date
from overseas_tracker.core.db import storage_errors
from overseas_tracker.core.exceptions import (
    DateRangeError,
    InvalidVersionError,
    NotFoundError,
    VersionConflictError,
)
from overseas_tracker.models.account import Account
from overseas_tracker.models.company import Company
from overseas_tracker.models.trip import Trip, TripStatus
from overseas_tracker.schemas.trip import (
    TransitionCounts,
    TripCreate,
    TripFilter,
    TripListView,
    TripPatch,
    TripRead,
    TripView,
)
from overseas_tracker.services.status_resolver import reconcile_status, resolve_status

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("overseas_tracker.audit")

_OPEN_STATUSES = (TripStatus.UPCOMING, TripStatus.ACTIVE)


def check_date_order(departure: date, return_date: date) -> None:
    """Reject a trip that would return before it departs."""
    if departure > return_date:
        raise DateRangeError(departure, return_date)


class TripService:
    """Owns trip records: CRUD, read-time status recompute, compare-and-swap updates, batch transitions"""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock

    async def create_trip(self, trip_data: TripCreate, actor_id: Optional[int] = None) -> Trip:
        """
        Create a trip with its status derived from the submitted dates

        Args:
            trip_data: Trip creation data
            actor_id: Account performing the action

        Returns:
            Created trip at version 1

        Raises:
            TripValidationError: Dates missing, unparsable or inverted
            NotFoundError: Traveller account or company does not exist
        """
        tz = self.clock.tz
        departure = require_date(trip_data.departure_date, "departure_date", tz)
        return_date = require_date(trip_data.return_date, "return_date", tz)
        check_date_order(departure, return_date)

        async with storage_errors("create_trip"):
            await self._require_account(trip_data.traveller_id)
            if trip_data.company_id is not None:
                await self._require_company(trip_data.company_id)

            trip = Trip(
                traveller_id=trip_data.traveller_id,
                company_id=trip_data.company_id,
                name=trip_data.name,
                email=str(trip_data.email),
                notes=trip_data.notes,
                departure_date=departure,
                return_date=return_date,
                status=resolve_status(departure, return_date, self.clock.today()),
                version=1,
                last_modified_at=self.clock.now(),
                last_modified_by=actor_id,
            )
            self.db.add(trip)
            await self.db.commit()
            await self.db.refresh(trip)

        audit_logger.info(
            f"CREATE_TRIP trip={trip.id} traveller={trip.traveller_id} by={actor_id} status={trip.status.value}"
        )
        return trip

    async def get_trip(self, trip_id: int) -> Trip:
        """
        Get a trip by ID

        Raises:
            NotFoundError: No such trip
        """
        async with storage_errors("get_trip"):
            trip = await self._find(trip_id)
        if trip is None:
            raise NotFoundError("trip", trip_id)
        return trip

    async def get_trip_view(self, trip_id: int) -> TripView:
        """Get a trip with its display status recomputed for today."""
        stmt = (
            select(Trip, Company.name, Account.username)
            .outerjoin(Company, Trip.company_id == Company.id)
            .outerjoin(Account, Trip.traveller_id == Account.id)
            .where(Trip.id == trip_id)
            .execution_options(populate_existing=True)
        )
        async with storage_errors("get_trip"):
            row = (await self.db.execute(stmt)).first()
        if row is None:
            raise NotFoundError("trip", trip_id)
        trip, company_name, username = row
        return self._to_view(trip, company_name, username, self.clock.today())

    async def list_trips(self, filters: Optional[TripFilter] = None) -> List[TripView]:
        """
        List trips with the display status recomputed for today

        Args:
            filters: View (active, completed, all) plus optional company/traveller

        Returns:
            Active view ordered by departure ascending; completed and all
            views ordered by departure descending
        """
        filters = filters or TripFilter()
        today = self.clock.today()

        stmt = (
            select(Trip, Company.name, Account.username)
            .outerjoin(Company, Trip.company_id == Company.id)
            .outerjoin(Account, Trip.traveller_id == Account.id)
            .execution_options(populate_existing=True)
        )
        if filters.company_id is not None:
            stmt = stmt.where(Trip.company_id == filters.company_id)
        if filters.traveller_id is not None:
            stmt = stmt.where(Trip.traveller_id == filters.traveller_id)

        if filters.view == TripListView.ACTIVE:
            stmt = stmt.where(Trip.status.in_(_OPEN_STATUSES))
            stmt = stmt.order_by(Trip.departure_date.asc(), Trip.id.asc())
        elif filters.view == TripListView.COMPLETED:
            stmt = stmt.where(
                or_(
                    Trip.status == TripStatus.COMPLETED,
                    and_(Trip.status.in_(_OPEN_STATUSES), Trip.return_date < today),
                )
            )
            stmt = stmt.order_by(Trip.departure_date.desc(), Trip.id.desc())
        else:
            stmt = stmt.order_by(Trip.departure_date.desc(), Trip.id.desc())

        async with storage_errors("list_trips"):
            rows = (await self.db.execute(stmt)).all()

        views = [
            self._to_view(trip, company_name, username, today)
            for trip, company_name, username in rows
        ]

        if filters.view == TripListView.ACTIVE:
            return [v for v in views if v.status in _OPEN_STATUSES]
        if filters.view == TripListView.COMPLETED:
            return [v for v in views if v.status == TripStatus.COMPLETED]
        return views

    async def list_active_trips(self) -> List[TripView]:
        return await self.list_trips(TripFilter(view=TripListView.ACTIVE))

    async def list_completed_trips(self) -> List[TripView]:
        return await self.list_trips(TripFilter(view=TripListView.COMPLETED))

    async def update_trip(
        self,
        trip_id: int,
        expected_version: int,
        patch: TripPatch,
        actor_id: Optional[int] = None,
    ) -> Trip:
        """
        Apply a patch only if the trip is still at ``expected_version``

        On success the version becomes ``expected_version + 1``. The write is
        a single conditional UPDATE; when it matches nothing the row is read
        again to tell a deleted trip from a concurrent edit.

        Raises:
            NotFoundError: Trip (or a referenced company) does not exist
            VersionConflictError: Trip moved on; carries the server copy
            InvalidVersionError: ``expected_version`` is ahead of the server
            TripValidationError: Merged dates are invalid or inverted
        """
        tz = self.clock.tz
        changes = patch.model_dump(exclude_unset=True)

        async with storage_errors("update_trip"):
            current = await self.get_trip(trip_id)
            if current.version != expected_version:
                raise self._version_mismatch(current, expected_version)

            values: dict[str, Any] = {}
            for field in ("name", "email"):
                if changes.get(field) is not None:
                    values[field] = str(changes[field])
            if "notes" in changes:
                values["notes"] = changes["notes"]
            if "company_id" in changes:
                if changes["company_id"] is not None:
                    await self._require_company(changes["company_id"])
                values["company_id"] = changes["company_id"]

            departure = normalize_date(changes.get("departure_date"), tz, "departure_date") or current.departure_date
            return_date = normalize_date(changes.get("return_date"), tz, "return_date") or current.return_date
            check_date_order(departure, return_date)
            dates_changed = (departure, return_date) != (current.departure_date, current.return_date)
            if dates_changed:
                values["departure_date"] = departure
                values["return_date"] = return_date

            if changes.get("status") is not None:
                values["status"] = TripStatus(changes["status"])
            elif dates_changed and current.status != TripStatus.CANCELLED:
                values["status"] = resolve_status(departure, return_date, self.clock.today())

            stmt = (
                update(Trip)
                .where(Trip.id == trip_id, Trip.version == expected_version)
                .values(
                    **values,
                    version=Trip.version + 1,
                    last_modified_at=self.clock.now(),
                    last_modified_by=actor_id,
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)

            if result.rowcount == 0:
                await self.db.rollback()
                server_trip = await self._find(trip_id)
                if server_trip is None:
                    raise NotFoundError("trip", trip_id)
                raise self._version_mismatch(server_trip, expected_version)

            await self.db.commit()
            await self.db.refresh(current)

        audit_logger.info(
            f"UPDATE_TRIP trip={trip_id} by={actor_id} version={current.version} fields={sorted(values)}"
        )
        return current

    async def mark_returned(
        self,
        trip_id: int,
        return_date: Optional[DateInput] = None,
        actor_id: Optional[int] = None,
    ) -> Trip:
        """
        Mark a trip as returned

        Forces COMPLETED and sets the return date to the given day, or today.
        This is an explicit override, not a recompute; it still bumps the
        version so open editors see the change.

        Raises:
            NotFoundError: No such trip
            TripValidationError: Return day falls before departure
        """
        async with storage_errors("mark_returned"):
            trip = await self.get_trip(trip_id)
            day = normalize_date(return_date, self.clock.tz, "return_date") or self.clock.today()
            check_date_order(trip.departure_date, day)

            stmt = (
                update(Trip)
                .where(Trip.id == trip_id)
                .values(
                    status=TripStatus.COMPLETED,
                    return_date=day,
                    version=Trip.version + 1,
                    last_modified_at=self.clock.now(),
                    last_modified_by=actor_id,
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFoundError("trip", trip_id)
            await self.db.commit()
            await self.db.refresh(trip)

        audit_logger.info(f"MARK_RETURNED trip={trip_id} by={actor_id} return_date={day.isoformat()}")
        return trip

    async def delete_trip(self, trip_id: int, actor_id: Optional[int] = None) -> None:
        """
        Permanently delete a trip

        Raises:
            NotFoundError: No such trip
        """
        async with storage_errors("delete_trip"):
            result = await self.db.execute(
                delete(Trip)
                .where(Trip.id == trip_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFoundError("trip", trip_id)
            await self.db.commit()

        audit_logger.info(f"DELETE_TRIP trip={trip_id} by={actor_id}")

    async def run_batch_transition(self) -> TransitionCounts:
        """
        Advance stored statuses in bulk for today

        1. UPCOMING trips departing today, or earlier after a missed run,
           become ACTIVE.
        2. ACTIVE trips whose return day has passed become COMPLETED.

        Each phase is one conditional UPDATE; no per-row version check, but
        the version is still bumped. Running twice on the same day changes
        nothing the second time.

        Returns:
            Rows affected per phase
        """
        today = self.clock.today()
        now = self.clock.now()

        async with storage_errors("run_batch_transition"):
            activated = await self.db.execute(
                update(Trip)
                .where(Trip.status == TripStatus.UPCOMING, Trip.departure_date <= today)
                .values(
                    status=TripStatus.ACTIVE,
                    version=Trip.version + 1,
                    last_modified_at=now,
                    last_modified_by=None,
                )
                .execution_options(synchronize_session=False)
            )
            completed = await self.db.execute(
                update(Trip)
                .where(Trip.status == TripStatus.ACTIVE, Trip.return_date < today)
                .values(
                    status=TripStatus.COMPLETED,
                    version=Trip.version + 1,
                    last_modified_at=now,
                    last_modified_by=None,
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()

        counts = TransitionCounts(activated=activated.rowcount, completed=completed.rowcount)
        logger.info(
            f"Trip status transition for {today.isoformat()}: "
            f"{counts.activated} activated, {counts.completed} completed"
        )
        return counts

    async def _find(self, trip_id: int) -> Optional[Trip]:
        stmt = (
            select(Trip)
            .where(Trip.id == trip_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _require_account(self, account_id: int) -> Account:
        account = await self.db.get(Account, account_id)
        if account is None:
            raise NotFoundError("account", account_id)
        return account

    async def _require_company(self, company_id: int) -> Company:
        company = await self.db.get(Company, company_id)
        if company is None:
            raise NotFoundError("company", company_id)
        return company

    def _version_mismatch(self, server_trip: Trip, expected_version: int) -> Exception:
        # Only a newer server copy is a conflict; a version never issued is bad input
        if server_trip.version <= expected_version:
            return InvalidVersionError(server_trip.id, expected_version, server_trip.version)
        return self._conflict(server_trip, expected_version)

    def _conflict(self, server_trip: Trip, expected_version: int) -> VersionConflictError:
        logger.info(
            f"Version conflict on trip {server_trip.id}: expected {expected_version}, "
            f"server at {server_trip.version}"
        )
        server_copy = TripRead.model_validate(server_trip).model_dump(mode="json")
        return VersionConflictError(server_trip.id, expected_version, server_copy)

    def _to_view(self, trip: Trip, company_name: Optional[str], username: Optional[str], today: date) -> TripView:
        data = TripRead.model_validate(trip).model_dump()
        data["status"] = reconcile_status(trip.status, trip.departure_date, trip.return_date, today)
        return TripView(
            **data,
            stored_status=trip.status,
            company_name=company_name,
            traveller_username=username,
        )
