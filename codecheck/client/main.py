"""CodeCheck client - process bootstrap."""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from codecheck.client.client import CodeCheckClient
from codecheck.client.state import Store
from codecheck.shared.core.configuration import LoggingConfig, SystemConfig, get_config
from codecheck.shared.core.event_bus import EventBus
from codecheck.shared.core.service_registry import (
    register_cleanup_handler,
    set_client,
    unregister_cleanup_handler,
)
from codecheck.shared.infrastructure.crypto.http_crypto_service import HttpCryptoService
from codecheck.shared.infrastructure.ledger.jsonrpc_ledger import JsonRpcLedgerContract

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(config: LoggingConfig, project_root: Optional[Path] = None) -> Path:
    """Configure root logging: rotating file for everything, console for warnings.

    Returns:
        Path of the log file
    """
    root = project_root or Path.cwd()
    logs_dir = Path(config.log_dir)
    if not logs_dir.is_absolute():
        logs_dir = root / logs_dir
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file_path = logs_dir / "codecheck.log"

    file_log_level = LOG_LEVELS.get(config.level.upper(), logging.DEBUG)
    console_log_level = LOG_LEVELS.get(config.console_level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(file_log_level, console_log_level))
    root_logger.handlers.clear()

    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(file_log_level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    root_logger.addHandler(file_handler)

    console_handler = RichHandler(rich_tracebacks=True, show_path=False)
    console_handler.setLevel(console_log_level)
    root_logger.addHandler(console_handler)

    # Suppress verbose third-party library logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info(f"Logging configured: file={log_file_path}, console={config.console_level}+")
    return log_file_path


async def init_client(store: Store, config: SystemConfig) -> CodeCheckClient:
    """Build adapters and the client around the store's application state."""
    await store.app.initialize()

    ledger = JsonRpcLedgerContract.from_config(config.ledger)
    crypto = HttpCryptoService.from_config(config.crypto)
    client = CodeCheckClient.create(ledger, crypto, config=config, app_state=store.app)

    set_client(client)
    register_cleanup_handler(ledger.aclose)
    register_cleanup_handler(crypto.aclose)
    logger.info(f"Client ready (ledger={config.ledger.rpc_url}, crypto={config.crypto.service_url})")
    return client


async def run(account: Optional[str] = None) -> None:
    """Connect, report availability and record figures, then shut down."""
    config = get_config()
    store = Store.initialize(EventBus())
    client = await init_client(store, config)
    try:
        if account:
            await client.connect(account)
            stats = client.stats()
            Console().print(
                f"{stats.total} records, {stats.verified} verified, "
                f"average {stats.average_value:.1f}%, {stats.high_value_count} high similarity"
            )
        await client.check_availability()
    finally:
        await client.aclose()
        unregister_cleanup_handler(client.ledger.aclose)
        unregister_cleanup_handler(client.crypto.aclose)
        await store.bus.wait_until_idle()
        set_client(None)
        Store.reset()


def main() -> None:
    env_path = Path.cwd() / ".env"
    load_dotenv(dotenv_path=env_path)
    configure_logging(get_config().logging)
    asyncio.run(run(os.getenv("WALLET_ACCOUNT")))


if __name__ == "__main__":
    main()
