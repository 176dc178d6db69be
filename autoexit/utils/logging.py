# autoexit/utils/logging.py

import logging

from colorama import init

# Initialize colorama so colored exit messages render on every terminal
init()


def setup_logging():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()  # This will output logs to the console
        ]
    )
    return logging.getLogger(__name__)
