import time

from eex_scraper.scheduler.monitor import AuctionMonitor

CONFIG = {
    'daily_run_time': '23:00',
    'run_on_start': False,
    'poll_interval': 1,
}


class FakeScraper:
    """Scraper stand-in counting calls"""

    def __init__(self, status='saved'):
        self.status = status
        self.runs = 0
        self.manual_runs = 0
        self.interrupted = False

    def _result(self):
        return {
            'status': self.status,
            'saved': self.status == 'saved',
            'region_count': 3,
            'technology_count': 2,
            'error': 'boom' if self.status == 'failed' else None,
        }

    def run(self):
        self.runs += 1
        return self._result()

    def run_once(self):
        self.manual_runs += 1
        return self._result()

    def interrupt(self):
        self.interrupted = True


class TestAuctionMonitor:
    """Test the scheduling service"""

    def test_daily_schedule(self):
        monitor = AuctionMonitor(CONFIG, scraper=FakeScraper(), handle_signals=False)
        monitor.setup_schedules()

        assert len(monitor.scheduler.jobs) == 1
        job = monitor.scheduler.jobs[0]
        assert job.unit == 'days'
        assert str(job.at_time) == '23:00:00'

    def test_run_on_start_scrapes_before_first_poll(self):
        """The startup scrape does not wait out the poll interval"""
        config = dict(CONFIG, run_on_start=True, poll_interval=60)
        scraper = FakeScraper()
        monitor = AuctionMonitor(config, scraper=scraper, handle_signals=False)

        monitor.start_monitoring()
        deadline = time.monotonic() + 5
        while scraper.runs == 0 and time.monotonic() < deadline:
            time.sleep(0.05)
        monitor.stop()

        assert scraper.runs == 1
        assert monitor.last_result['status'] == 'saved'
        assert not monitor.monitor_thread.is_alive()

    def test_manual_scrape_returns_result(self):
        scraper = FakeScraper()
        monitor = AuctionMonitor(CONFIG, scraper=scraper, handle_signals=False)

        result = monitor.run_manual_scrape()

        assert result['saved'] is True
        assert scraper.manual_runs == 1
        assert monitor.status()['last_result'] == result

    def test_scheduled_scrape_failure_does_not_raise(self):
        scraper = FakeScraper(status='failed')
        monitor = AuctionMonitor(CONFIG, scraper=scraper, handle_signals=False)

        monitor.run_scheduled_scrape()

        assert scraper.runs == 1
        assert monitor.last_result['status'] == 'failed'

    def test_start_and_stop(self):
        scraper = FakeScraper()
        monitor = AuctionMonitor(CONFIG, scraper=scraper, handle_signals=False)

        monitor.start_monitoring()
        assert monitor.status()['running'] is True
        assert monitor.status()['scheduled_jobs'] == 1

        monitor.stop()
        assert monitor.running is False
        assert scraper.interrupted is True
        assert monitor.status()['scheduled_jobs'] == 0
        assert not monitor.monitor_thread.is_alive()
