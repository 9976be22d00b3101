# pricing/main.py
import asyncio, signal
from typing import Optional
import uvicorn
from pricing.settings import Settings, build_settings
from pricing.observability.health import create_app
from pricing.observability.logging_setup import setup_logging, get_logger
from pricing.adapters.storage.sqlite_catalog import SQLiteCatalog

async def start_http(settings: Settings, catalog: Optional[SQLiteCatalog] = None) -> Optional[asyncio.Task]:
    if not settings.observability.metrics_enabled: return None
    app = create_app(settings, readiness=catalog.ping if catalog is not None else None)
    return asyncio.create_task(uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=settings.observability.http_port, log_level="info")
    ).serve())

async def open_catalog(settings: Settings) -> SQLiteCatalog:
    """SQLite 카탈로그를 열고 스키마를 준비합니다."""
    catalog = SQLiteCatalog(
        settings.storage.sqlite_path,
        max_retries=settings.storage.max_retries,
        backoff_initial_sec=settings.storage.backoff_initial_sec,
        backoff_max_sec=settings.storage.backoff_max_sec,
    )
    await catalog.init()
    return catalog

async def main():
    s = build_settings()
    setup_logging(s.observability.log_level, s.observability.log_format)
    log = get_logger("pricing.main")
    log.info("설정 로드 완료")

    catalog = await open_catalog(s)
    log.info(f"카탈로그 준비 완료 db:{s.storage.sqlite_path}")

    http_task = await start_http(s, catalog)
    if http_task:
        log.info("HTTP 서버 시작됨")

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    await stop
    log.info("종료 신호 수신")
    if http_task: http_task.cancel()

if __name__ == "__main__":
    asyncio.run(main())
