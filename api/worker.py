"""
Event worker process for the Redis transport.

Consumes trigger events from the stream, runs them through the
orchestrator and publishes the schedule timer ticks.
"""
import asyncio
import logging
import signal

from api import dependencies
from core.infrastructure.bus import RedisStreamConsumer, start_event_worker
from orchestration.worker import CronTimer


logger = logging.getLogger(__name__)


async def run_worker() -> None:
    settings = dependencies.get_settings()
    if settings.orchestration.record_store == "database":
        from core.infrastructure.database.config import close_database, init_database

        await init_database(settings.database)

    orchestrator = dependencies.get_orchestrator()
    consumer = RedisStreamConsumer(
        redis_url=settings.redis.url,
        stream_name=settings.redis.stream_name,
        consumer_group=settings.redis.consumer_group,
        consumer_name=settings.redis.consumer_name,
        claim_idle_ms=settings.redis.claim_idle_ms,
        recover_interval_seconds=settings.redis.recover_interval_seconds,
    )

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    timer = CronTimer(dependencies.get_event_bus(), settings.orchestration.cron_interval_seconds)
    timer_task = asyncio.create_task(timer.run(stop))
    try:
        await start_event_worker(orchestrator, consumer, stop)
    finally:
        timer_task.cancel()
        if settings.orchestration.record_store == "database":
            await close_database()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
