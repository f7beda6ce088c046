import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base paths
BASE_DIR = Path(__file__).parent.parent.parent
DATA_DIR = BASE_DIR / "data"
LOG_DIR = BASE_DIR / "logs"

# Create directories if they don't exist
DATA_DIR.mkdir(exist_ok=True)
LOG_DIR.mkdir(exist_ok=True)

# EEX results page and fetch behaviour
EEX_CONFIG = {
    "url": os.getenv(
        "EEX_URL",
        "https://www.eex.com/en/markets/energy-certificates/french-auctions-power",
    ),
    "timeout": float(os.getenv("REQUEST_TIMEOUT", "75")),  # seconds
    "max_retries": int(os.getenv("MAX_RETRIES", "5")),
    "backoff_base": float(os.getenv("BACKOFF_BASE", "30")),  # seconds, doubled per attempt
    "user_agent": os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    ),
    "user_agent_rotation": os.getenv("USER_AGENT_ROTATION", "False").lower() == "true",
    # Markup hints for this page family
    "results_layout_class": os.getenv("RESULTS_LAYOUT_CLASS", "col-xl-8 offset-xl-2"),
    "header_marker": "p",
    "default_reserve_price": os.getenv("DEFAULT_RESERVE_PRICE", "0.15"),  # €/MWh
    "recent_month_window": int(os.getenv("RECENT_MONTH_WINDOW", "3")),  # months back
}

# Database configuration
DATABASE_CONFIG = {
    "url": os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'auctions.db'}"),
    "echo": False,  # Set to True for SQL debugging
}

# Scheduler configuration
SCHEDULE_CONFIG = {
    "daily_run_time": os.getenv("DAILY_RUN_TIME", "23:00"),  # host local time
    "run_on_start": os.getenv("RUN_ON_START", "False").lower() == "true",
    "poll_interval": int(os.getenv("SCHEDULER_POLL_INTERVAL", "60")),  # seconds
}

# Logging configuration
LOGGING_CONFIG = {
    "level": os.getenv("LOG_LEVEL", "INFO"),
    "file": os.getenv("LOG_FILE", str(LOG_DIR / "scraper.log")),
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
