"""Main application entry point."""

import asyncio
import logging
import signal

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

from sentinel.bot_config import BotConfig, load_bot_config
from sentinel.clients import BinanceRestClient, TelegramClient
from sentinel.config import Settings, get_settings
from sentinel.services import (
    DeliveryService,
    MarketCollector,
    ReportService,
    Schedule,
    Scheduler,
)
from sentinel_core.report import ReportRenderer
from sentinel_core.signal_engine import SignalEngine

logger = logging.getLogger(__name__)


def build_services(
    settings: Settings,
    config: BotConfig,
    telegram: TelegramClient,
    binance: BinanceRestClient,
) -> tuple[ReportService, DeliveryService]:
    """Wire collector, engine, renderer and delivery together."""
    delivery = DeliveryService(
        client=telegram,
        chat_id=config.telegram.chat_id,
        command=config.telegram.command,
        ack_text=config.telegram.ack_text,
        max_attempts=config.delivery.max_attempts,
        poll_timeout=config.delivery.poll_timeout,
        retry_delay=config.delivery.retry_delay,
    )
    report_service = ReportService(
        collector=MarketCollector(binance, config.collector),
        engine=SignalEngine(config.strategy),
        renderer=ReportRenderer(config.strategy),
        delivery=delivery,
        leverage=settings.leverage,
    )
    return report_service, delivery


async def run(
    settings: Settings | None = None,
    config: BotConfig | None = None,
    stop: asyncio.Event | None = None,
) -> None:
    """Run the scheduler and the command poll loop until `stop` is set.

    SIGINT/SIGTERM set `stop`. Running cycles and the in-flight poll
    request are allowed to finish before the clients are closed.
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    config = config or load_bot_config(settings.config_path)
    stop = stop or asyncio.Event()

    logger.info("Crypto Sentinel starting...")
    proxy = settings.proxy_url
    if proxy:
        logger.info("Using proxy: %s", proxy)
    logger.info("Account leverage: %.2fx", settings.leverage)

    telegram = TelegramClient(config.telegram.bot_token, proxy=proxy)
    binance = BinanceRestClient(proxy=proxy)
    report_service, delivery = build_services(settings, config, telegram, binance)
    scheduler = Scheduler(Schedule.from_config(config.schedule), report_service.run_cycle)

    loop = asyncio.get_running_loop()
    handled_signals = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
            handled_signals.append(sig)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform or outside the main thread
            pass

    def _on_task_done(task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("Task %s crashed: %s", task.get_name(), task.exception())
            stop.set()

    tasks = [
        asyncio.create_task(scheduler.run(stop), name="scheduler"),
        asyncio.create_task(delivery.listen(stop, report_service.run_cycle), name="telegram-poll"),
    ]
    for task in tasks:
        task.add_done_callback(_on_task_done)

    try:
        if settings.run_on_start:
            logger.info("Running one cycle at startup...")
            await report_service.run_cycle()

        await stop.wait()
        logger.info("Shutting down, waiting for running tasks...")
        await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        for sig in handled_signals:
            loop.remove_signal_handler(sig)
        await telegram.close()
        await binance.close()

    logger.info("Crypto Sentinel stopped")


def main():
    """Run the bot."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
