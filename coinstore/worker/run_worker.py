"""Run ARQ worker. Usage: python -m coinstore.worker.run_worker"""

from arq import run_worker
from arq.cron import cron

from coinstore.core.config import get_settings
from coinstore.core.logging import configure_logging
from coinstore.worker.tasks import get_redis_settings, reconcile_game_balances, shutdown, startup


def main():
    settings = get_settings()
    configure_logging(debug=settings.debug)
    run_worker(
        {
            "redis_settings": get_redis_settings(),
            "functions": [reconcile_game_balances],
            "cron_jobs": [
                # hourly at the configured minute
                cron(reconcile_game_balances, minute=settings.reconcile_cron_minute, second=0),
            ],
            "on_startup": startup,
            "on_shutdown": shutdown,
        }
    )


if __name__ == "__main__":
    main()
