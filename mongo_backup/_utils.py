import logging

logger = logging.getLogger("mongo-backup")
