from __future__ import annotations

from merchstore.models import Location
from merchstore.schemas import LocationPayload
from merchstore.services.errors import ServiceError
from merchstore.services.session import commit


def list_locations(session) -> list[Location]:
    return session.query(Location).order_by(Location.id).all()


def get_location(session, location_id: int) -> Location:
    location = session.get(Location, location_id)
    if location is None:
        raise ServiceError.not_found("Location not found")
    return location


def create_location(session, payload: LocationPayload) -> Location:
    location = Location(name=payload.name, address=payload.address)
    session.add(location)
    commit(session, action="create location")
    return location


def update_location(session, location_id: int, payload: LocationPayload) -> Location:
    location = get_location(session, location_id)
    location.name = payload.name
    location.address = payload.address
    commit(session, action="update location")
    return location


def delete_location(session, location_id: int) -> None:
    location = get_location(session, location_id)
    session.delete(location)
    commit(session, action="delete location")
