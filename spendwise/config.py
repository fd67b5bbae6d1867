import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    """Application settings, read from the environment (or a local .env file)."""

    APP_NAME: str = "Spendwise"

    # Exchange-rate provider
    RATES_API_KEY: str = os.getenv("RATES_API_KEY", "")
    RATES_API_URL: str = os.getenv("RATES_API_URL", "https://v6.exchangerate-api.com/v6")
    FLAG_URL_TEMPLATE: str = os.getenv("FLAG_URL_TEMPLATE", "https://flagsapi.com/{code}/flat/64.png")
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "8"))

    DEFAULT_FROM_CURRENCY: str = os.getenv("DEFAULT_FROM_CURRENCY", "USD")
    DEFAULT_TO_CURRENCY: str = os.getenv("DEFAULT_TO_CURRENCY", "INR")

    # Expense tracker
    DATA_FILE: str = os.getenv("DATA_FILE", "data/spendwise.json")
    BUDGET_RATIO: float = float(os.getenv("BUDGET_RATIO", "0.8"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
