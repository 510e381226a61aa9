#Purpose: Environment configuration for the intake service.
#Reads provider URLs, API keys and timeouts from the environment (.env supported).
#Clients take explicit arguments and only default to these values,
#so tests never need a .env file.
#
#Example .env:
#ORS_BASE_URL=https://api.openrouteservice.org
#ORS_API_KEY=your-key
#FORM_SUBMIT_URL=https://formsubmit.co/ajax/orders@example.com

import os

from dotenv import load_dotenv

load_dotenv()

# routing provider (OpenRouteService directions)
ORS_BASE_URL = os.getenv("ORS_BASE_URL", "https://api.openrouteservice.org")
ORS_API_KEY = os.getenv("ORS_API_KEY", "")
ORS_TIMEOUT = float(os.getenv("ORS_TIMEOUT", "15"))

# reverse geocoding provider
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
NOMINATIM_TIMEOUT = float(os.getenv("NOMINATIM_TIMEOUT", "10"))

# form submission target, empty means submissions are only logged
FORM_SUBMIT_URL = os.getenv("FORM_SUBMIT_URL", "")
FORM_SUBMIT_TIMEOUT = float(os.getenv("FORM_SUBMIT_TIMEOUT", "15"))

WHATSAPP_NUMBER = os.getenv("WHATSAPP_NUMBER", "256757268074")

# Nominatim usage policy requires an identifying agent
HTTP_USER_AGENT = os.getenv("HTTP_USER_AGENT", "quickdeliver-intake/0.1")

DEVICE_LOCATION_TIMEOUT_S = float(os.getenv("DEVICE_LOCATION_TIMEOUT_S", "10"))

EXPECTED_COUNTRY = os.getenv("EXPECTED_COUNTRY", "Uganda")
