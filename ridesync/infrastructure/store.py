"""
Redis-backed remote ride store.

Layout
------
* ``<ns>:<id>``  -- hash, one per ride; each value is the JSON encoding of
  the record field so numbers survive the round trip.
* ``<ns>``       -- set of ride ids (the namespace index).
* ``<ns>:events`` -- pub/sub channel carrying one ``ChangeEvent`` per write.

Writes run as Lua scripts so the mutation, the optional status
compare-and-swap and the change publication happen atomically; two
clients racing to accept the same ride cannot both win.

Subscribers receive a full snapshot on subscribe, then for every event the
per-record change followed by a fresh snapshot.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ridesync.domain.enums import ChangeKind, RideStatus
from ridesync.domain.errors import ConflictError, NotFoundError, PersistenceError
from ridesync.domain.ports import (
    ChangeEvent,
    ChangeHandler,
    RawRecord,
    SnapshotHandler,
)

logger = logging.getLogger(__name__)

# KEYS[1] record hash, KEYS[2] index set, KEYS[3] events channel; ARGV[1] ride id
_PUBLISH = """
local function publish(kind)
    local flat = redis.call("hgetall", KEYS[1])
    local parts = {}
    for i = 1, #flat, 2 do
        parts[#parts + 1] = cjson.encode(flat[i]) .. ":" .. flat[i + 1]
    end
    redis.call("publish", KEYS[3], '{"kind":"' .. kind .. '","id":'
        .. cjson.encode(ARGV[1]) .. ',"record":{' .. table.concat(parts, ",") .. '}}')
end
"""

# ARGV[2..] field/value pairs
_CREATE_SCRIPT = _PUBLISH + """
local existed = redis.call("exists", KEYS[1])
redis.call("del", KEYS[1])
redis.call("hset", KEYS[1], unpack(ARGV, 2))
redis.call("sadd", KEYS[2], ARGV[1])
if existed == 1 then publish("changed") else publish("added") end
return 1
"""

# ARGV[2] expected encoded status or "", ARGV[3..] field/value pairs
_UPDATE_SCRIPT = _PUBLISH + """
if redis.call("exists", KEYS[1]) == 0 then
    return -1
end
if ARGV[2] ~= "" and redis.call("hget", KEYS[1], "status") ~= ARGV[2] then
    return 0
end
redis.call("hset", KEYS[1], unpack(ARGV, 3))
publish("changed")
return 1
"""


def _loads(value: str) -> Any:
    try:
        return json.loads(value)
    except ValueError:
        return value


class RedisSubscription:
    """Handle for a live store subscription; ``close`` stops the listener."""

    def __init__(self, pubsub, task: asyncio.Task):
        self._pubsub = pubsub
        self._task = task

    async def close(self) -> None:
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        await self._pubsub.unsubscribe()
        await self._pubsub.aclose()


class RedisRideStore:
    def __init__(self, client: aioredis.Redis, namespace: str = "rideRequests"):
        self.redis = client
        self.namespace = namespace
        self.channel = f"{namespace}:events"

    def _record_key(self, ride_id: str) -> str:
        return f"{self.namespace}:{ride_id}"

    def _keys(self, ride_id: str) -> tuple[str, str, str]:
        return self._record_key(ride_id), self.namespace, self.channel

    @staticmethod
    def _pairs(fields: RawRecord) -> list[str]:
        if not fields:
            raise ValueError("at least one field is required")
        args: list[str] = []
        for name, value in fields.items():
            args.extend((name, json.dumps(value)))
        return args

    async def _eval(self, script: str, ride_id: str, *args: str) -> Any:
        try:
            return await self.redis.eval(script, 3, *self._keys(ride_id), ride_id, *args)
        except RedisError as exc:
            raise PersistenceError(f"Write to ride {ride_id} failed: {exc}") from exc

    # ── Reads ─────────────────────────────────────────────────────────

    async def snapshot(self) -> dict[str, Any]:
        """Return every record in the namespace, ordered by ride id."""
        try:
            ids = sorted(await self.redis.smembers(self.namespace))
            if not ids:
                return {}
            async with self.redis.pipeline(transaction=False) as pipe:
                for ride_id in ids:
                    pipe.hgetall(self._record_key(ride_id))
                rows = await pipe.execute()
        except RedisError as exc:
            raise PersistenceError(f"Snapshot of {self.namespace} failed: {exc}") from exc
        return {
            ride_id: {name: _loads(value) for name, value in row.items()}
            for ride_id, row in zip(ids, rows)
        }

    # ── Writes ────────────────────────────────────────────────────────

    async def create(self, ride_id: str, record: RawRecord) -> None:
        """Create or replace the record stored under *ride_id*."""
        await self._eval(_CREATE_SCRIPT, ride_id, *self._pairs(record))

    async def update_fields(
        self,
        ride_id: str,
        fields: RawRecord,
        expected_status: Optional[RideStatus] = None,
    ) -> None:
        """Partially update *ride_id*; when *expected_status* is given, CAS on it."""
        expected = json.dumps(expected_status.value) if expected_status else ""
        result = await self._eval(_UPDATE_SCRIPT, ride_id, expected, *self._pairs(fields))
        if result == -1:
            raise NotFoundError(f"Ride {ride_id} does not exist in the store")
        if result == 0:
            raise ConflictError(
                f"Ride {ride_id} is no longer {expected_status.value}"
            )

    async def update_status(
        self,
        ride_id: str,
        status: RideStatus,
        expected: Optional[RideStatus] = None,
    ) -> None:
        await self.update_fields(ride_id, {"status": status.value}, expected)

    # ── Subscription ──────────────────────────────────────────────────

    async def subscribe(
        self, on_snapshot: SnapshotHandler, on_change: ChangeHandler
    ) -> RedisSubscription:
        pubsub = self.redis.pubsub()
        # Listen before reading so no write slips between snapshot and events
        await pubsub.subscribe(self.channel)
        await on_snapshot(await self.snapshot())
        task = asyncio.create_task(self._listen(pubsub, on_snapshot, on_change))
        logger.info("Subscribed to ride store channel %s", self.channel)
        return RedisSubscription(pubsub, task)

    async def _listen(
        self, pubsub, on_snapshot: SnapshotHandler, on_change: ChangeHandler
    ) -> None:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                event = parse_event(message["data"])
                if event is not None:
                    await on_change(event)
                await on_snapshot(await self.snapshot())
            except Exception:
                logger.exception("Error handling ride store event")


def parse_event(data: Any) -> Optional[ChangeEvent]:
    """Parse a published change message; malformed messages yield ``None``."""
    try:
        payload = json.loads(data)
        return ChangeEvent(
            kind=ChangeKind(payload["kind"]),
            ride_id=str(payload["id"]),
            record=payload.get("record", {}),
        )
    except (ValueError, TypeError, KeyError) as exc:
        logger.warning("Ignoring malformed ride store event %r: %s", data, exc)
        return None
