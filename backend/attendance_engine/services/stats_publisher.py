# backend/attendance_engine/services/stats_publisher.py
"""Optional push channel for live session stats."""
import json
import logging
from typing import Dict, Optional

import redis
from flask import current_app

logger = logging.getLogger(__name__)

class StatsPublisher:
    """Publishes committed session stats on Redis pub/sub.

    Dashboards may subscribe to ``<STATS_CHANNEL_PREFIX><session_id>``
    instead of polling. Only called after commit, so subscribers never see
    uncommitted counts.
    """

    @staticmethod
    def _client() -> Optional[redis.Redis]:
        url = current_app.config.get('REDIS_URL')
        if not url:
            return None

        client = current_app.extensions.get('stats_redis')
        if client is None:
            client = redis.Redis.from_url(url, decode_responses=True, socket_timeout=1)
            current_app.extensions['stats_redis'] = client
        return client

    @staticmethod
    def channel_for(session_id: int) -> str:
        return f"{current_app.config['STATS_CHANNEL_PREFIX']}{session_id}"

    @staticmethod
    def publish(session_id: int, event: str, stats: Dict) -> bool:
        """Publish an event; returns False when the channel is off or down."""
        client = StatsPublisher._client()
        if client is None:
            return False

        message = json.dumps({'event': event, 'session_id': session_id, 'stats': stats})
        try:
            client.publish(StatsPublisher.channel_for(session_id), message)
        except redis.RedisError as e:
            # Dashboards fall back to polling
            logger.warning("Stats publish failed for session %s: %s", session_id, e)
            return False
        return True
