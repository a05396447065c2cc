"""Application configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .core import Core
from .storage import Storage
from .embed import Embed

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_RAW_CONFIG = load_raw_config()

core = Core(_RAW_CONFIG)
storage = Storage(_RAW_CONFIG)
embed = Embed(_RAW_CONFIG)

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=core.LOG_LEVEL)
logging.getLogger("discord.http").setLevel(logging.WARNING)


class Config:
    core = core
    storage = storage
    embed = embed


__all__ = ["core", "storage", "embed", "Config"]
