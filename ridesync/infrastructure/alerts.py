"""
Alert sinks used by the notification dispatcher.

``RedisAlertSink`` fans an alert out on ``<prefix>:<recipient>`` so every
client session of that user can surface it.
"""

from __future__ import annotations

import json
import logging

import redis.asyncio as aioredis

from ridesync.domain.ports import Alert

logger = logging.getLogger(__name__)


class RedisAlertSink:
    def __init__(self, client: aioredis.Redis, prefix: str = "alerts"):
        self.redis = client
        self.prefix = prefix

    def channel_for(self, recipient: str) -> str:
        return f"{self.prefix}:{recipient}"

    async def deliver(self, alert: Alert) -> None:
        payload = json.dumps({"recipient": alert.recipient, "message": alert.message})
        await self.redis.publish(self.channel_for(alert.recipient), payload)


class LoggingAlertSink:
    async def deliver(self, alert: Alert) -> None:
        logger.info("Alert to %s: %s", alert.recipient, alert.message)


def build_alert_sink(kind: str, client: aioredis.Redis, prefix: str = "alerts"):
    if kind == "redis":
        return RedisAlertSink(client, prefix)
    if kind == "log":
        return LoggingAlertSink()
    raise ValueError(f"Unknown alert sink {kind!r}; expected 'redis' or 'log'")
