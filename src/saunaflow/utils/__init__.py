import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

from saunaflow.utils.logging_handler import setup_logger  # noqa: E402
from saunaflow.utils.event import Event  # noqa: E402
