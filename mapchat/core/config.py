import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Logging
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    TRACE_LOG_FILENAME = os.getenv("TRACE_LOG_FILENAME", "query_trace.log")
    TRACE_LOG_PATH = os.path.join(LOG_DIR, TRACE_LOG_FILENAME)

    # Geometry
    EARTH_RADIUS_MILES = float(os.getenv("EARTH_RADIUS_MILES", "3958.8"))

    # Radius handling (miles)
    DEFAULT_RADIUS_MILES = float(os.getenv("DEFAULT_RADIUS_MILES", "5.0"))
    MIN_RADIUS_MILES = float(os.getenv("MIN_RADIUS_MILES", "1.0"))

    # Suggestions
    SUGGESTION_COUNT = int(os.getenv("SUGGESTION_COUNT", "6"))
    SUGGESTION_HISTORY_WINDOW = int(os.getenv("SUGGESTION_HISTORY_WINDOW", "4"))
    SUGGESTION_RADIUS_STEP = int(os.getenv("SUGGESTION_RADIUS_STEP", "2"))
    SUGGESTION_RADIUS_CAP = int(os.getenv("SUGGESTION_RADIUS_CAP", "10"))
    SUGGESTION_COMPARE_CAP = int(os.getenv("SUGGESTION_COMPARE_CAP", "5"))
    SUGGESTION_MAX_TEMPLATE_RADIUS = int(
        os.getenv("SUGGESTION_MAX_TEMPLATE_RADIUS", "5")
    )


settings = Settings()
