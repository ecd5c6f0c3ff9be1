import argparse

import uvicorn

from saunaflow.adapters.clock_adapters.system_clock import SystemClock
from saunaflow.adapters.fastapi_adapters.app_factory import Args, create_app
from saunaflow.adapters.llm_adapters.ollama_suggestion_adapter import OllamaSuggestionAdapter
from saunaflow.adapters.storage_adapters.sqlite_storage_adapter import SqliteStorageAdapter
from saunaflow.utils.config import load_settings
from saunaflow.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


def run_app(args: Args) -> None:
    settings = load_settings()
    storage = SqliteStorageAdapter(args.db_path or settings.db_path)
    suggestions = None
    if not args.no_ai:
        suggestions = OllamaSuggestionAdapter(
            model=settings.ollama_model,
            base_url=settings.ollama_base_url,
            timeout=settings.ollama_timeout,
        )
    app = create_app(args, storage=storage, clock=SystemClock(), suggestions=suggestions)
    try:
        uvicorn.run(app, host=args.host, port=args.port)
    except Exception as e:
        logger.error(f"error in run_app: {e}")
    finally:
        storage.close()


def main() -> None:
    settings = load_settings()
    default_args = Args(tick_interval=settings.tick_interval)
    parser = argparse.ArgumentParser(description="SaunaFlow session server.")
    parser.add_argument("--host", type=str, default=default_args.host)
    parser.add_argument("--port", type=int, default=default_args.port)
    parser.add_argument("--db-path", type=str, default=default_args.db_path)
    parser.add_argument("--no-ai", action="store_true", help="Disable the Ollama ritual suggestions.")
    parser.add_argument("--tick-interval", type=float, default=default_args.tick_interval)
    parsed_args = parser.parse_args()
    run_app(Args(**vars(parsed_args)))


if __name__ == "__main__":
    logger.info("=" * 50)
    main()
