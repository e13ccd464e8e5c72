import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

class Config:
    """
    Configuration class for the NextBus agency client.
    This class loads configuration values from environment variables or uses default values.
    """
    # General configuration
    DEBUG = os.environ.get('DEBUG', 'False') == 'True'

    BASE_URL = os.environ.get('NEXTBUS_BASE_URL', 'http://webservices.nextbus.com/service/publicXMLFeed')
    AGENCY = os.environ.get('NEXTBUS_AGENCY', 'rutgers')
    USER_AGENT = os.environ.get('NEXTBUS_USER_AGENT', 'nextbus-agency/0.1.0')
    REQUEST_TIMEOUT = float(os.environ.get('NEXTBUS_TIMEOUT', 30))

    # Latitude window used when caching the agency and probing vehicles
    LAT_LOWER_BOUND = float(os.environ.get('NEXTBUS_LAT_LOWER', -90))
    LAT_UPPER_BOUND = float(os.environ.get('NEXTBUS_LAT_UPPER', 90))

    # Seconds before an active-subset snapshot stops being used
    ACTIVE_EXPIRE_SECONDS = float(os.environ.get('NEXTBUS_ACTIVE_EXPIRE', 600))

    GEOHASH_PRECISION = int(os.environ.get('NEXTBUS_GEOHASH_PRECISION', 8))
