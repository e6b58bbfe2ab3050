import base64
import json
from uuid import UUID

import pytest

from conftest import FIXED_TIME, VALID_BODY, RecordingStore
from ride_api.exceptions import MalformedRequest, StorageFailure
from ride_api.fleet import DEFAULT_FLEET
from ride_api.handler import RideRequestHandler, parse_pickup_location, to_url_string


def decode_ride_id(ride_id):
    return base64.urlsafe_b64decode(ride_id + "=" * (-len(ride_id) % 4))


async def test_example_request_assigns_roster_driver(handler, store):
    result = await handler.handle(VALID_BODY, "alice", request_id="req-1")

    assert result.status_code == 201
    assert result.headers["Access-Control-Allow-Origin"] == "*"
    assert result.body["Rider"] == "alice"
    assert result.body["Eta"] == "30 seconds"
    assert result.body["Unicorn"] in [d.to_wire() for d in DEFAULT_FLEET]
    assert set(result.body) == {"RideId", "Unicorn", "Eta", "Rider"}
    assert store.attempts == 1


async def test_ride_id_is_unpadded_url_safe_16_bytes(handler):
    result = await handler.handle(VALID_BODY, "alice")

    ride_id = result.body["RideId"]
    assert ride_id
    assert not set("+/=") & set(ride_id)
    assert len(decode_ride_id(ride_id)) == 16


def test_ride_ids_do_not_collide(handler):
    ids = {handler.new_ride_id() for _ in range(20000)}
    assert len(ids) == 20000


def test_to_url_string_replaces_unsafe_characters():
    raw = bytes([0xFB, 0xFF, 0xBF]) * 5 + b"\x00"
    encoded = to_url_string(raw)

    assert encoded == base64.b64encode(raw).decode().replace("+", "-").replace("/", "_").rstrip("=")
    assert "-" in encoded and "_" in encoded


async def test_response_matches_persisted_record(handler, store):
    result = await handler.handle(VALID_BODY, "bob")

    record = store.records[0]
    assert result.body["RideId"] == record.ride_id
    assert result.body["Unicorn"] == record.driver.to_wire()
    assert result.body["Rider"] == record.user == "bob"
    assert record.request_time == FIXED_TIME

    item = record.to_dynamodb_item()
    assert item["UnicornName"] == record.driver.name
    assert item["RequestTime"] == "2024-05-01T12:30:00+00:00"


async def test_injected_id_source_is_used(selector, store):
    handler = RideRequestHandler(selector=selector, store=store, id_source=lambda n: b"\x01" * n)

    result = await handler.handle(VALID_BODY, "alice")

    assert result.body["RideId"] == to_url_string(b"\x01" * 16)


@pytest.mark.parametrize("identity", [None, ""])
async def test_missing_authorization_is_rejected_before_anything_else(selector, store, identity):
    calls = []

    def id_source(n):
        calls.append(n)
        return b"\x00" * n

    handler = RideRequestHandler(selector=selector, store=store, id_source=id_source)
    result = await handler.handle("not even json", identity, request_id="req-42")

    assert result.status_code == 500
    assert result.body == {"Error": "Authorization not configured", "Reference": "req-42"}
    assert result.headers["Access-Control-Allow-Origin"] == "*"
    assert store.attempts == 0
    assert calls == []


@pytest.mark.parametrize("identity", [12345, ["alice"], {"name": "alice"}])
async def test_non_string_identity_is_rejected_without_write(handler, store, identity):
    result = await handler.handle(VALID_BODY, identity, request_id="req-43")

    assert result.status_code == 500
    assert result.body == {"Error": "Authorization not configured", "Reference": "req-43"}
    assert store.attempts == 0
    assert store.records == []


async def test_storage_failure_is_surfaced_without_retry(selector):
    store = RecordingStore(error=StorageFailure("Rate exceeded"))
    handler = RideRequestHandler(selector=selector, store=store)

    result = await handler.handle(VALID_BODY, "alice", request_id="req-7")

    assert result.status_code == 500
    assert result.body == {"Error": "Rate exceeded", "Reference": "req-7"}
    assert store.attempts == 1
    assert store.records == []


async def test_unexpected_error_becomes_500_envelope(store):
    class BrokenSelector:
        def select_driver(self, pickup_location):
            raise RuntimeError("directory unavailable")

    handler = RideRequestHandler(selector=BrokenSelector(), store=store)
    result = await handler.handle(VALID_BODY, "alice", request_id="req-9")

    assert result.status_code == 500
    assert result.body == {"Error": "directory unavailable", "Reference": "req-9"}
    assert store.attempts == 0


@pytest.mark.parametrize(
    "body",
    [
        None,
        "",
        "{not json",
        "[1, 2]",
        "{}",
        '{"PickupLocation": {"Latitude": 47.61}}',
        '{"PickupLocation": {"Latitude": "north", "Longitude": 1}}',
    ],
)
async def test_malformed_body_is_rejected_without_write(handler, store, body):
    result = await handler.handle(body, "alice", request_id="req-3")

    assert result.status_code == 400
    assert result.body["Reference"] == "req-3"
    assert result.body["Error"]
    assert store.attempts == 0


async def test_reference_is_generated_when_not_supplied(handler):
    result = await handler.handle(VALID_BODY, None)

    UUID(result.body["Reference"])


def test_parse_pickup_location_accepts_bytes_and_boundaries():
    location = parse_pickup_location(json.dumps({"PickupLocation": {"Latitude": -90, "Longitude": 180}}).encode())

    assert location.latitude == -90
    assert location.longitude == 180


async def test_out_of_range_coordinates_are_accepted(handler, store):
    body = '{"PickupLocation": {"Latitude": 91, "Longitude": -180.5}}'

    result = await handler.handle(body, "alice")

    assert result.status_code == 201
    assert store.attempts == 1


def test_parse_pickup_location_reports_field():
    with pytest.raises(MalformedRequest) as exc_info:
        parse_pickup_location('{"PickupLocation": {"Longitude": 1}}')

    assert "Latitude" in exc_info.value.message
    assert exc_info.value.status_code == 400
