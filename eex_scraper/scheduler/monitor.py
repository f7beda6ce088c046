import logging
import time
import schedule
from typing import Dict, Any, Optional
import threading
import signal

from eex_scraper.scraper.eex_scraper import EEXAuctionScraper
from eex_scraper.config.settings import SCHEDULE_CONFIG

logger = logging.getLogger(__name__)


class AuctionMonitor:
    """Runs the EEX scraper once a day and serves manual triggers"""

    def __init__(self, config: Dict[str, Any] = None,
                 scraper: Optional[EEXAuctionScraper] = None,
                 handle_signals: bool = True):
        """Initialize the monitor"""
        self.config = config or SCHEDULE_CONFIG
        self.scraper = scraper or EEXAuctionScraper()
        self.scheduler = schedule.Scheduler()
        self.running = False
        self.monitor_thread = None
        self.last_result: Optional[Dict[str, Any]] = None
        self._stop_event = threading.Event()

        # Setup signal handlers for graceful shutdown
        if handle_signals:
            signal.signal(signal.SIGINT, self.signal_handler)
            signal.signal(signal.SIGTERM, self.signal_handler)

    def signal_handler(self, signum, frame):
        """Handle shutdown signals"""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.stop()

    def start_monitoring(self):
        """Start the scheduled scraping process"""
        if self.running:
            logger.warning("Monitor is already running")
            return

        self.running = True
        self._stop_event.clear()
        logger.info("Starting auction monitor...")

        self.setup_schedules()

        self.monitor_thread = threading.Thread(target=self.run_scheduler, daemon=True)
        self.monitor_thread.start()

        logger.info("Auction monitor started successfully")
        logger.info(f"  - Daily scrape at {self.config.get('daily_run_time', '23:00')}")

    def setup_schedules(self):
        """Setup scraping schedules"""
        run_time = self.config.get('daily_run_time', '23:00')
        self.scheduler.every().day.at(run_time).do(self.run_scheduled_scrape)

    def run_scheduler(self):
        """Run the scheduled tasks until stopped"""
        poll_interval = self.config.get('poll_interval', 60)
        if self.config.get('run_on_start', False):
            self.initial_scrape()

        while self.running:
            try:
                self.scheduler.run_pending()
            except Exception as e:
                logger.error(f"Scheduler error: {e}")
            # Continue monitoring even if one task fails
            if self._stop_event.wait(poll_interval):
                break

    def initial_scrape(self):
        """Run one scrape right after startup"""
        logger.info("Running initial scrape...")
        self.run_scheduled_scrape()

    def run_scheduled_scrape(self):
        """Run a scheduled scraping session"""
        try:
            logger.info("Starting scheduled EEX scrape...")
            self.last_result = self.scraper.run()
            self._log_result(self.last_result)
        except Exception as e:
            logger.error(f"Error during scheduled scrape: {e}")

    def run_manual_scrape(self) -> Dict[str, Any]:
        """Run a scrape now and return its outcome"""
        self.last_result = self.scraper.run_once()
        self._log_result(self.last_result)
        return self.last_result

    def _log_result(self, result: Dict[str, Any]):
        if result['status'] == 'failed':
            logger.error(f"Scrape failed: {result['error']}")
        else:
            logger.info(f"Scrape finished ({result['status']}): "
                        f"{result['region_count']} regions, "
                        f"{result['technology_count']} technologies")

    def stop(self):
        """Stop the monitoring process"""
        if not self.running:
            return

        logger.info("Stopping auction monitor...")
        self.running = False
        self._stop_event.set()
        self.scraper.interrupt()

        if self.monitor_thread and self.monitor_thread.is_alive() \
                and self.monitor_thread is not threading.current_thread():
            self.monitor_thread.join(timeout=5)

        self.scheduler.clear()

        logger.info("Auction monitor stopped")

    def status(self):
        """Get monitor status"""
        return {
            'running': self.running,
            'scheduled_jobs': len(self.scheduler.jobs),
            'next_run': str(self.scheduler.next_run) if self.scheduler.jobs else None,
            'last_result': self.last_result,
            'config': self.config
        }


def run_monitor_service():
    """Run the monitor as a service"""
    monitor = AuctionMonitor()

    try:
        monitor.start_monitoring()

        print("EEX Auction Monitor Started!")
        print("=" * 50)
        print(f"Scraping daily at {monitor.config.get('daily_run_time')}.")
        print("Press Ctrl+C to stop the monitor.")
        print("=" * 50)

        # Keep the main thread alive
        while monitor.running:
            time.sleep(1)

    except KeyboardInterrupt:
        print("\nShutting down monitor...")
    except Exception as e:
        logger.error(f"Monitor service error: {e}")
    finally:
        monitor.stop()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    run_monitor_service()
