import logging
from enum import Enum

# Unlikely that the modem cares but it's easy enough to pretend to be a browser just in case
REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64; rv:123.4) Gecko/20100101 Firefox/123.4",
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "X-Requested-With": "XMLHttpRequest",
    "Pragma": "no-cache",
    "Cache-Control": "no-cache",
}

# Every cable modem answers on this address from the LAN side, regardless of ISP
MODEM_HOST = "192.168.100.1"

# Identification pages are small; anything past this is a misbehaving endpoint.
ID_PAGE_READ_LIMIT = 1 << 20

# The HNAP endpoint needs the trailing slash or auth fails.
HNAP_PATH = "/HNAP1/"
HNAP_NAMESPACE = "http://purenetworks.com/HNAP1"
# Login response body contains this on success
HNAP_LOGIN_OK = "OK"


class LogLevel(Enum):
    """Simple enum of supported log levels for easy validation"""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL
