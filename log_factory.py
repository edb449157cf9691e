import logging


class LoggerFactory:

    LOG_FORMAT = "%(name)s [%(levelname)s] %(asctime)s %(funcName)s:%(lineno)d - %(message)s"
    DATE_FORMAT = "%H:%M:%S"
    LEVEL = logging.WARNING

    @staticmethod
    def get_handler():
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LoggerFactory.LOG_FORMAT,
                                               datefmt=LoggerFactory.DATE_FORMAT))
        return handler

    # Level follows LEVEL on every call, the stderr handler is attached once
    @staticmethod
    def get_logger(name):
        logger = logging.getLogger(name)
        logger.setLevel(LoggerFactory.LEVEL)
        if not logger.handlers:
            logger.addHandler(LoggerFactory.get_handler())
        return logger
