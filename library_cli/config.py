import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Application settings
    app_name: str = os.getenv("APP_NAME", "Library CLI")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()

    # Storage settings
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "library.json")

    # Borrowing rules
    borrow_limit: int = int(os.getenv("LIBRARY_BORROW_LIMIT", "3"))
    borrow_days: int = int(os.getenv("LIBRARY_BORROW_DAYS", "5"))
    late_fee_per_day: float = float(os.getenv("LIBRARY_LATE_FEE_PER_DAY", "1.0"))

    # Interactive selector settings
    viewport_height: int = int(os.getenv("LIBRARY_VIEWPORT_HEIGHT", "10"))
    highlight_style: str = os.getenv("LIBRARY_HIGHLIGHT_STYLE", "bold blue")


settings = Settings()
