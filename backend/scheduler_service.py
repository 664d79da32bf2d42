"""
Scheduler pour les tâches automatiques PRINT CRM
- Remise à zéro des compteurs quotidiens de leads des commerciaux (minuit)
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from config import SCHEDULER_TIMEZONE
from services.sales_allocation import reset_daily_counts

logger = logging.getLogger("scheduler")


class TaskScheduler:
    """Gestionnaire de tâches planifiées"""

    def __init__(self, timezone: str = SCHEDULER_TIMEZONE):
        self.scheduler = AsyncIOScheduler(timezone=timezone)

    def start(self):
        """Démarre le scheduler avec toutes les tâches"""
        # Reset des compteurs à minuit (heure locale)
        self.scheduler.add_job(
            self.reset_sales_daily_counts,
            CronTrigger(hour=0, minute=0),
            id="reset_sales_daily_counts",
            name="Reset compteurs leads quotidiens",
            replace_existing=True
        )

        self.scheduler.start()
        logger.info("Scheduler démarré avec succès")

    def stop(self):
        """Arrête le scheduler"""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler arrêté")

    # ==================== TÂCHES PLANIFIÉES ====================

    async def reset_sales_daily_counts(self):
        try:
            updated = await reset_daily_counts()
            logger.info(f"Compteurs quotidiens remis à zéro ({updated} commerciaux)")
        except Exception as e:
            logger.error(f"Erreur reset compteurs quotidiens: {str(e)}")


task_scheduler = TaskScheduler()
